# portal_jai1/services/profile_service.py
"""
Client profile reads and writes.

Sensitive values are encrypted before they reach the repository and are only
decrypted on the way out: masked for summaries, in full for the edit form,
and through safe_decrypt for admin credential reveals.
"""
from datetime import datetime, timezone
from typing import Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from portal_jai1.core.audit_log import AuditEventType, AuditLogger
from portal_jai1.core.encryption import FieldCipher, SENSITIVE_PROFILE_FIELDS
from portal_jai1.core.exceptions import ProfileNotFoundError
from portal_jai1.db.models.client_profile import ClientProfile
from portal_jai1.db.repositories.profile_repository import ClientProfileRepository
from portal_jai1.schemas.profile import (
    CredentialsListItem,
    CredentialsPage,
    CredentialsReveal,
    ProfileCreate,
    ProfileDetail,
    ProfileSummary,
    ProfileUpdate,
    RevealedCredentials,
)

logger = logging.getLogger(__name__)

PASSWORD_MASK = "••••••••"
DECRYPTION_FAILED = "Decryption failed"

CREDENTIAL_FIELDS = (
    "turbotax_email",
    "turbotax_password",
    "irs_username",
    "irs_password",
    "state_username",
    "state_password",
)


class ProfileService:
    """Profile use cases on top of ClientProfileRepository and FieldCipher"""

    def __init__(self, session: AsyncSession, cipher: FieldCipher):
        self.session = session
        self.cipher = cipher
        self.repo = ClientProfileRepository(session)
        self.audit = AuditLogger(session)

    async def create_profile(self, data: ProfileCreate, user_id: Optional[str] = None) -> ProfileSummary:
        values = data.model_dump(exclude=set(SENSITIVE_PROFILE_FIELDS))
        encrypted = self.cipher.encrypt_profile_data(data.model_dump())
        values.update(encrypted)

        profile = await self.repo.create(values)
        logger.info("Client profile created", extra={"profile_id": str(profile.id)})

        await self.audit.log_event(
            event_type=AuditEventType.PROFILE_CREATED,
            user_id=user_id,
            resource_type="client_profile",
            resource_id=str(profile.id),
            details={"sensitive_fields": sorted(encrypted)},
        )
        return self._to_summary(profile)

    async def update_profile(
        self,
        profile_id: uuid.UUID,
        data: ProfileUpdate,
        user_id: Optional[str] = None,
    ) -> ProfileSummary:
        await self._get_or_raise(profile_id)

        submitted = data.model_dump(exclude_unset=True)
        values = {k: v for k, v in submitted.items() if k not in SENSITIVE_PROFILE_FIELDS}
        encrypted = self.cipher.encrypt_profile_data(submitted)
        for field in SENSITIVE_PROFILE_FIELDS:
            if field in submitted:
                # Explicit null or "" clears the column
                values[field] = encrypted.get(field)

        if not values:
            return await self.get_profile_summary(profile_id)

        profile = await self.repo.update(profile_id, values)

        changed_sensitive = sorted(f for f in SENSITIVE_PROFILE_FIELDS if f in submitted)
        if changed_sensitive:
            await self.audit.log_event(
                event_type=AuditEventType.PROFILE_UPDATED,
                user_id=user_id,
                resource_type="client_profile",
                resource_id=str(profile_id),
                details={"changed_fields": changed_sensitive},
            )
        return self._to_summary(profile)

    async def get_profile_summary(self, profile_id: uuid.UUID) -> ProfileSummary:
        profile = await self._get_or_raise(profile_id)
        return self._to_summary(profile)

    async def get_profile_for_edit(self, profile_id: uuid.UUID) -> ProfileDetail:
        profile = await self._get_or_raise(profile_id)
        stored = {field: getattr(profile, field) for field in SENSITIVE_PROFILE_FIELDS}
        return ProfileDetail(
            id=profile.id,
            user_email=profile.user_email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            address_city=profile.address_city,
            address_state=profile.address_state,
            address_zip=profile.address_zip,
            **self.cipher.decrypt_profile_data(stored),
        )

    async def list_credentials(self, limit: int = 20, cursor: Optional[uuid.UUID] = None) -> CredentialsPage:
        """Admin listing: usernames decrypted, passwords never leave the database"""
        rows = await self.repo.list_page(limit, cursor)
        has_more = len(rows) > limit
        rows = rows[:limit]

        accounts = [
            CredentialsListItem(
                id=p.id,
                name=p.full_name,
                email=p.user_email,
                turbotax_email=self.cipher.decrypt(p.turbotax_email) if p.turbotax_email else None,
                turbotax_password=PASSWORD_MASK if p.turbotax_password else None,
                irs_username=self.cipher.decrypt(p.irs_username) if p.irs_username else None,
                irs_password=PASSWORD_MASK if p.irs_password else None,
                state_username=self.cipher.decrypt(p.state_username) if p.state_username else None,
                state_password=PASSWORD_MASK if p.state_password else None,
            )
            for p in rows
        ]
        return CredentialsPage(
            accounts=accounts,
            next_cursor=rows[-1].id if has_more and rows else None,
            has_more=has_more,
        )

    async def reveal_credentials(
        self,
        profile_id: uuid.UUID,
        admin_user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> CredentialsReveal:
        """Unmasked credentials for one client; every call leaves an audit entry"""
        profile = await self._get_or_raise(profile_id)

        await self.audit.log_event(
            event_type=AuditEventType.CREDENTIALS_ACCESS,
            user_id=admin_user_id,
            resource_type="client_profile",
            resource_id=str(profile.id),
            details={
                "client_name": profile.full_name,
                "accessed_fields": {
                    "turbotax": bool(profile.turbotax_email or profile.turbotax_password),
                    "irs": bool(profile.irs_username or profile.irs_password),
                    "state": bool(profile.state_username or profile.state_password),
                },
            },
            ip_address=ip_address,
            user_agent=user_agent,
        )

        credentials = {}
        errors = {}
        for field in CREDENTIAL_FIELDS:
            stored = getattr(profile, field)
            credentials[field] = self.cipher.safe_decrypt(stored, field)
            errors[field] = DECRYPTION_FAILED if stored and credentials[field] is None else None

        return CredentialsReveal(
            revealed_at=datetime.now(timezone.utc),
            revealed_by=admin_user_id,
            client_id=profile.id,
            client_name=profile.full_name,
            client_email=profile.user_email,
            credentials=RevealedCredentials(**credentials),
            errors=errors,
        )

    async def _get_or_raise(self, profile_id: uuid.UUID) -> ClientProfile:
        profile = await self.repo.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def _to_summary(self, profile: ClientProfile) -> ProfileSummary:
        cipher = self.cipher
        return ProfileSummary(
            id=profile.id,
            user_email=profile.user_email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            ssn=cipher.mask_ssn(profile.ssn),
            address_street=cipher.decrypt(profile.address_street) if profile.address_street else None,
            address_city=profile.address_city,
            address_state=profile.address_state,
            address_zip=profile.address_zip,
            bank_routing_number=cipher.mask_routing_number(profile.bank_routing_number),
            bank_account_number=cipher.mask_bank_account(profile.bank_account_number),
            turbotax_email=(
                cipher.mask_email(cipher.decrypt(profile.turbotax_email))
                if profile.turbotax_email else None
            ),
            has_turbotax_password=bool(profile.turbotax_password),
            has_irs_credentials=bool(profile.irs_username or profile.irs_password),
            has_state_credentials=bool(profile.state_username or profile.state_password),
            created_at=profile.created_at,
        )
