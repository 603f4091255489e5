# portal_jai1/db/models/audit_log.py
from sqlalchemy import Column, String, JSON, Text, Uuid
import uuid
from portal_jai1.db.base import BaseModel


class AuditLog(BaseModel):
    """Audit log for tracking sensitive actions"""
    __tablename__ = "audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(String(100), nullable=True, index=True)  # acting admin

    # Action details
    action = Column(String(100), nullable=False, index=True)  # credentials_access, etc.
    resource_type = Column(String(50), nullable=True)
    resource_id = Column(String(100), nullable=True)

    # Request details
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    # Additional details; never holds decrypted values
    details = Column(JSON, default=dict)
