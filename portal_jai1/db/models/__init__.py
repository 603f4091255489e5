# portal_jai1/db/models/__init__.py
from portal_jai1.db.models.client_profile import ClientProfile
from portal_jai1.db.models.audit_log import AuditLog

__all__ = ["ClientProfile", "AuditLog"]
