# portal_jai1/services/encryption_backfill.py
"""
Encrypt sensitive values that were stored before field encryption existed.

Only bank_routing_number, bank_account_number and turbotax_email were ever
written in plaintext. Values that already have the encoded shape are left
alone, so the backfill can be re-run safely.
"""
from dataclasses import dataclass
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from portal_jai1.core.encryption import FieldCipher, is_encrypted
from portal_jai1.core.metrics import backfill_records_total
from portal_jai1.db.repositories.profile_repository import ClientProfileRepository

logger = logging.getLogger(__name__)

LEGACY_PLAINTEXT_FIELDS = ("bank_routing_number", "bank_account_number", "turbotax_email")


@dataclass
class BackfillStats:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


async def backfill_sensitive_fields(session: AsyncSession, cipher: FieldCipher) -> BackfillStats:
    """Encrypt legacy plaintext values profile by profile.

    Each profile is committed on its own. A failing profile is rolled back,
    counted and logged; the remaining profiles are still processed.
    """
    repo = ClientProfileRepository(session)
    rows = await repo.list_columns(*LEGACY_PLAINTEXT_FIELDS)
    stats = BackfillStats(total=len(rows))
    logger.info("Checking client profiles for plaintext fields", extra={"profiles": stats.total})

    for row in rows:
        profile_id, stored = row[0], dict(zip(LEGACY_PLAINTEXT_FIELDS, row[1:]))
        updates = {
            field: cipher.encrypt(value)
            for field, value in stored.items()
            if value and not is_encrypted(value)
        }

        if not updates:
            stats.skipped += 1
            backfill_records_total.labels(result="skipped").inc()
            continue

        try:
            await repo.update(profile_id, updates)
        except Exception:
            await session.rollback()
            logger.exception("Failed to encrypt profile fields", extra={"profile_id": str(profile_id)})
            stats.errors += 1
            backfill_records_total.labels(result="error").inc()
            continue

        # Field names only; values never reach the log
        logger.info(
            "Encrypted profile fields",
            extra={"profile_id": str(profile_id), "fields": sorted(updates)},
        )
        stats.updated += 1
        backfill_records_total.labels(result="updated").inc()

    return stats
