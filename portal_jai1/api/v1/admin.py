# portal_jai1/api/v1/admin.py
from fastapi import APIRouter, Depends, Query, Request
from typing import Any, Optional
import uuid

from portal_jai1.api.dependencies import get_profile_service, require_admin
from portal_jai1.schemas.profile import CredentialsPage, CredentialsReveal
from portal_jai1.services.profile_service import ProfileService

CREDENTIALS_PAGE_DEFAULT = 20
CREDENTIALS_PAGE_MAX = 100

# Every route here exposes credentials; admins only
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/credentials", response_model=CredentialsPage)
async def list_credentials(
    limit: int = Query(CREDENTIALS_PAGE_DEFAULT, ge=1, le=CREDENTIALS_PAGE_MAX),
    cursor: Optional[uuid.UUID] = None,
    service: ProfileService = Depends(get_profile_service),
):
    """Third-party portal accounts for all clients; passwords masked"""
    return await service.list_credentials(limit=limit, cursor=cursor)


@router.post("/profiles/{profile_id}/credentials/reveal", response_model=CredentialsReveal)
async def reveal_credentials(
    profile_id: uuid.UUID,
    request: Request,
    service: ProfileService = Depends(get_profile_service),
    admin: Any = Depends(require_admin),
):
    """Unmasked credentials for one client. Audited."""
    return await service.reveal_credentials(
        profile_id,
        admin_user_id=str(admin.id),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
