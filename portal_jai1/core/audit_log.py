# portal_jai1/core/audit_log.py
"""
Audit logging for sensitive actions.
Entries are written to the audit_logs table and mirrored to the JSON log.
"""
from enum import Enum
from typing import Optional, Dict, Any
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from portal_jai1.db.models.audit_log import AuditLog
from portal_jai1.db.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditEventType(str, Enum):
    CREDENTIALS_ACCESS = "credentials_access"
    PROFILE_CREATED = "profile_created"
    PROFILE_UPDATED = "profile_updated"


class AuditLogger:
    """Writes audit entries through the current database session"""

    def __init__(self, session: AsyncSession):
        self.repo = AuditLogRepository(session)

    async def log_event(
        self,
        *,
        event_type: AuditEventType,
        user_id: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        entry = await self.repo.create({
            "action": event_type.value,
            "user_id": user_id,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "details": details or {},
            "ip_address": ip_address,
            "user_agent": user_agent,
        })
        logger.info(
            "Audit event recorded",
            extra={
                "action": event_type.value,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "user_id": user_id,
            },
        )
        return entry
