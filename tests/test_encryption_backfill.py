# tests/test_encryption_backfill.py
"""
Backfill migration tests
Tests: legacy plaintext encryption, idempotence, per-record error isolation
"""

import pytest
from sqlalchemy import select

from portal_jai1.core.encryption import is_encrypted
from portal_jai1.db.models.client_profile import ClientProfile
from portal_jai1.db.repositories.profile_repository import ClientProfileRepository
from portal_jai1.services.encryption_backfill import backfill_sensitive_fields


async def _load(db_session, profile_id) -> ClientProfile:
    db_session.expire_all()
    result = await db_session.execute(select(ClientProfile).where(ClientProfile.id == profile_id))
    return result.scalar_one()


@pytest.mark.asyncio
class TestEncryptionBackfill:
    """One-time encryption of plaintext bank data and TurboTax emails"""

    async def test_encrypts_plaintext_fields(self, db_session, cipher, plaintext_profile):
        stats = await backfill_sensitive_fields(db_session, cipher)

        assert (stats.total, stats.updated, stats.skipped, stats.errors) == (1, 1, 0, 0)

        profile = await _load(db_session, plaintext_profile.id)
        assert is_encrypted(profile.bank_routing_number)
        assert is_encrypted(profile.bank_account_number)
        assert is_encrypted(profile.turbotax_email)
        assert cipher.decrypt(profile.bank_routing_number) == "021000021"
        assert cipher.decrypt(profile.bank_account_number) == "123456789012"
        assert cipher.decrypt(profile.turbotax_email) == "legacy.client@gmail.com"

    async def test_second_run_changes_nothing(self, db_session, cipher, plaintext_profile):
        await backfill_sensitive_fields(db_session, cipher)
        first_pass = await _load(db_session, plaintext_profile.id)
        stored = (first_pass.bank_routing_number, first_pass.bank_account_number, first_pass.turbotax_email)

        stats = await backfill_sensitive_fields(db_session, cipher)

        assert stats.updated == 0
        assert stats.skipped == 1
        second_pass = await _load(db_session, plaintext_profile.id)
        assert (second_pass.bank_routing_number, second_pass.bank_account_number, second_pass.turbotax_email) == stored

    async def test_only_plaintext_fields_are_touched(self, db_session, cipher):
        already = cipher.encrypt("021000021")
        profile = ClientProfile(
            user_email="mixed@example.com",
            bank_routing_number=already,
            bank_account_number="555566667777",
            ssn="123456789",
        )
        db_session.add(profile)
        await db_session.commit()

        stats = await backfill_sensitive_fields(db_session, cipher)

        assert stats.updated == 1
        reloaded = await _load(db_session, profile.id)
        assert reloaded.bank_routing_number == already
        assert cipher.decrypt(reloaded.bank_account_number) == "555566667777"
        assert reloaded.turbotax_email is None
        # ssn is outside the backfill's field set
        assert reloaded.ssn == "123456789"

    async def test_empty_profiles_are_skipped(self, db_session, cipher):
        db_session.add(ClientProfile(user_email="empty@example.com"))
        await db_session.commit()

        stats = await backfill_sensitive_fields(db_session, cipher)

        assert (stats.total, stats.updated, stats.skipped) == (1, 0, 1)

    async def test_failed_update_does_not_stop_the_run(self, db_session, cipher, monkeypatch):
        for i in range(3):
            db_session.add(ClientProfile(user_email=f"client{i}@example.com", bank_account_number=f"10000000{i}"))
        await db_session.commit()

        rows = await ClientProfileRepository(db_session).list_columns("user_email")
        failing_id, failing_email = rows[1][0], rows[1][1]
        original_update = ClientProfileRepository.update

        async def flaky_update(self, id, obj_in):
            if id == failing_id:
                raise RuntimeError("connection reset")
            return await original_update(self, id, obj_in)

        monkeypatch.setattr(ClientProfileRepository, "update", flaky_update)

        stats = await backfill_sensitive_fields(db_session, cipher)

        assert (stats.total, stats.updated, stats.errors) == (3, 2, 1)
        failed = await _load(db_session, failing_id)
        index = failing_email[len("client"):failing_email.index("@")]
        assert failed.bank_account_number == f"10000000{index}"
