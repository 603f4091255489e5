"""
Migration: encrypt sensitive data stored before encryption was implemented.

Fields: bank_routing_number, bank_account_number, turbotax_email

Run with: python scripts/migrate_encrypt_sensitive_data.py

Back up the database first. Safe to re-run: already encrypted values are
skipped. Needs ENCRYPTION_KEY and DATABASE_URL in the environment or .env.
"""
import asyncio
import sys

from pydantic import ValidationError

from portal_jai1.core.config import get_settings
from portal_jai1.core.encryption import FieldCipher
from portal_jai1.core.exceptions import EncryptionConfigError
from portal_jai1.services.encryption_backfill import BackfillStats, backfill_sensitive_fields


def print_report(stats: BackfillStats) -> None:
    print("")
    print("=" * 60)
    print("Migration Complete")
    print("=" * 60)
    print(f"  Checked:  {stats.total} profiles")
    print(f"  Updated:  {stats.updated} profiles")
    print(f"  Skipped:  {stats.skipped} profiles (already encrypted or empty)")
    print(f"  Errors:   {stats.errors} profiles")
    print("")

    if stats.errors:
        print("Some profiles failed to update. Check the log output above.")
    elif stats.updated:
        print("All sensitive data has been encrypted.")
    else:
        print("No profiles needed encryption updates.")


async def migrate_encryption() -> int:
    try:
        settings = get_settings()
        cipher = FieldCipher(settings.ENCRYPTION_KEY)
    except (ValidationError, EncryptionConfigError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    from portal_jai1.db.database import async_session_local, close_db

    print("=" * 60)
    print("Migration: Encrypt Sensitive Data")
    print("=" * 60)

    try:
        async with async_session_local() as session:
            stats = await backfill_sensitive_fields(session, cipher)
    finally:
        await close_db()

    print_report(stats)
    return 1 if stats.errors else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(migrate_encryption()))
