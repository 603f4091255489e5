# portal_jai1/api/dependencies.py
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Optional

from portal_jai1.core.encryption import FieldCipher
from portal_jai1.db.database import get_db
from portal_jai1.services.profile_service import ProfileService

ADMIN_ROLE = "admin"


def get_field_cipher(request: Request) -> FieldCipher:
    """The cipher built once in the application lifespan"""
    return request.app.state.field_cipher


def get_profile_service(
    db: AsyncSession = Depends(get_db),
    cipher: FieldCipher = Depends(get_field_cipher),
) -> ProfileService:
    return ProfileService(db, cipher)


def get_acting_user_id(request: Request) -> Optional[str]:
    """Id of the user an upstream auth layer attached to the request, if any"""
    user = getattr(request.state, "user", None)
    return str(user.id) if user is not None else None


def get_current_user(request: Request) -> Any:
    """
    User attached to the request by the authentication layer.

    Token verification happens upstream; this only refuses requests that
    arrive without an identity.
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(current_user: Any = Depends(get_current_user)) -> Any:
    """Dependency restricting a route to admin users"""
    if getattr(current_user, "role", None) != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Requires {ADMIN_ROLE} role",
        )
    return current_user
