# portal_jai1/api/v1/profiles.py
from fastapi import APIRouter, Depends, status
from typing import Optional
import uuid

from portal_jai1.api.dependencies import get_acting_user_id, get_profile_service
from portal_jai1.schemas.profile import ProfileCreate, ProfileDetail, ProfileSummary, ProfileUpdate
from portal_jai1.services.profile_service import ProfileService

router = APIRouter()


@router.post("", response_model=ProfileSummary, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: ProfileCreate,
    service: ProfileService = Depends(get_profile_service),
    user_id: Optional[str] = Depends(get_acting_user_id),
):
    """Create a client profile; sensitive fields are encrypted before storage"""
    return await service.create_profile(payload, user_id=user_id)


@router.get("/{profile_id}", response_model=ProfileSummary)
async def get_profile(
    profile_id: uuid.UUID,
    service: ProfileService = Depends(get_profile_service),
):
    """Profile with SSN, bank numbers and TurboTax email masked"""
    return await service.get_profile_summary(profile_id)


@router.get("/{profile_id}/edit", response_model=ProfileDetail)
async def get_profile_for_edit(
    profile_id: uuid.UUID,
    service: ProfileService = Depends(get_profile_service),
):
    return await service.get_profile_for_edit(profile_id)


@router.patch("/{profile_id}", response_model=ProfileSummary)
async def update_profile(
    profile_id: uuid.UUID,
    payload: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service),
    user_id: Optional[str] = Depends(get_acting_user_id),
):
    return await service.update_profile(profile_id, payload, user_id=user_id)
