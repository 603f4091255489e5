# portal_jai1/db/repositories/audit_log_repository.py
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal_jai1.db.models.audit_log import AuditLog
from portal_jai1.db.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Repository for AuditLog operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(AuditLog, session)

    async def list_for_resource(self, resource_type: str, resource_id: str) -> List[AuditLog]:
        result = await self.session.execute(
            select(AuditLog)
            .where(AuditLog.resource_type == resource_type)
            .where(AuditLog.resource_id == resource_id)
            .order_by(AuditLog.created_at)
        )
        return list(result.scalars().all())
