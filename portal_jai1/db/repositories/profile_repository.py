# portal_jai1/db/repositories/profile_repository.py
from typing import List, Optional, Sequence
import uuid
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_jai1.db.models.client_profile import ClientProfile
from portal_jai1.db.repositories.base import BaseRepository


class ClientProfileRepository(BaseRepository[ClientProfile]):
    """Repository for ClientProfile operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(ClientProfile, session)

    async def get_by_email(self, email: str) -> Optional[ClientProfile]:
        """Get profile by the owning user's email"""
        result = await self.session.execute(
            select(ClientProfile).where(ClientProfile.user_email == email)
        )
        return result.scalar_one_or_none()

    async def list_page(self, limit: int, cursor: Optional[uuid.UUID] = None) -> List[ClientProfile]:
        """Keyset page ordered by id; fetches limit + 1 rows so callers can tell if more exist"""
        query = select(ClientProfile).order_by(ClientProfile.id)
        if cursor is not None:
            query = query.where(ClientProfile.id > cursor)
        result = await self.session.execute(query.limit(limit + 1))
        return list(result.scalars().all())

    async def list_columns(self, *columns: str) -> Sequence:
        """Rows of (id, *columns) for every profile, without loading full entities"""
        result = await self.session.execute(
            select(ClientProfile.id, *(getattr(ClientProfile, c) for c in columns))
            .order_by(ClientProfile.id)
        )
        return result.all()
