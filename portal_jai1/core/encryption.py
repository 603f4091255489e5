# portal_jai1/core/encryption.py
"""
Database field-level encryption for sensitive profile data
Implements AES-256-GCM encryption

Stored format: base64(iv):base64(authTag):base64(ciphertext)

The working key is the first 32 characters of ENCRYPTION_KEY encoded as
UTF-8. That is a truncation, not a KDF. Rows already encrypted depend on it,
so changing the derivation needs a versioned key scheme first.
"""

import base64
import binascii
import logging
import os
import re
from typing import Dict, Mapping, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from portal_jai1.core.exceptions import EncryptionConfigError
from portal_jai1.core.metrics import field_encrypt_total, record_decrypt

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16
SEPARATOR = ":"

SSN_MASK_PREFIX = "***-**-"
SSN_FULL_MASK = "***-**-****"
BANK_MASK = "****"
EMAIL_LOCAL_MASK = "****"
EMAIL_FULL_MASK = "****@****.***"

# Columns of client_profiles holding sensitive values
SENSITIVE_PROFILE_FIELDS = (
    "ssn",
    "address_street",
    "turbotax_email",
    "turbotax_password",
    "bank_routing_number",
    "bank_account_number",
    "irs_username",
    "irs_password",
    "state_username",
    "state_password",
)

ENCODED_SEGMENT = re.compile(r"[A-Za-z0-9+/]+=*")


class _MalformedValue(ValueError):
    """Value does not have the iv:tag:ciphertext shape"""


class FieldCipher:
    """Encrypt, decrypt and mask sensitive database fields"""

    def __init__(self, passphrase: Optional[str]):
        if not passphrase or len(passphrase) < KEY_LENGTH:
            raise EncryptionConfigError(
                f"ENCRYPTION_KEY must be at least {KEY_LENGTH} characters"
            )

        key = passphrase[:KEY_LENGTH].encode("utf-8")
        if len(key) != KEY_LENGTH:
            raise EncryptionConfigError(
                f"The first {KEY_LENGTH} characters of ENCRYPTION_KEY must encode to "
                f"{KEY_LENGTH} bytes"
            )
        self._aesgcm = AESGCM(key)

    def __repr__(self) -> str:
        return "FieldCipher(aes-256-gcm)"

    def encrypt(self, text: Optional[str]) -> Optional[str]:
        """Encrypt a string. Empty values are returned unchanged."""
        if not text:
            return text

        iv = os.urandom(IV_LENGTH)
        sealed = self._aesgcm.encrypt(iv, text.encode("utf-8"), None)
        ciphertext, auth_tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        field_encrypt_total.inc()

        return SEPARATOR.join(
            base64.b64encode(part).decode("ascii") for part in (iv, auth_tag, ciphertext)
        )

    def decrypt(self, encrypted_text: Optional[str]) -> Optional[str]:
        """
        Decrypt a value produced by encrypt().

        Never raises. Legacy plaintext and values that fail to decrypt are
        returned as they were given.
        """
        if not encrypted_text:
            return encrypted_text

        try:
            plaintext = self._open(encrypted_text)
        except _MalformedValue:
            logger.warning(
                "Invalid encrypted format: expected 3 parts separated by ':'",
                extra={
                    "parts_count": encrypted_text.count(SEPARATOR) + 1,
                    "text_length": len(encrypted_text),
                    "has_separator": SEPARATOR in encrypted_text,
                },
            )
            record_decrypt("decrypt", "malformed")
            return encrypted_text
        except (ValueError, InvalidTag) as e:
            logger.error(
                "Decryption failed",
                extra={
                    "error": type(e).__name__,
                    "encrypted_text_length": len(encrypted_text),
                    "parts_count": encrypted_text.count(SEPARATOR) + 1,
                    "has_separator": SEPARATOR in encrypted_text,
                },
            )
            record_decrypt("decrypt", "failed")
            return encrypted_text

        record_decrypt("decrypt", "ok")
        return plaintext

    def safe_decrypt(self, encrypted_text: Optional[str], field_name: Optional[str] = None) -> Optional[str]:
        """
        Decrypt, returning None on any failure instead of the stored value.

        Use for credential reveals, where showing raw ciphertext is worse
        than showing nothing.
        """
        if not encrypted_text:
            return None

        field = field_name or "field"
        try:
            plaintext = self._open(encrypted_text)
        except _MalformedValue:
            logger.warning(
                f"Safe decrypt: invalid format for {field}",
                extra={
                    "parts_count": encrypted_text.count(SEPARATOR) + 1,
                    "text_length": len(encrypted_text),
                },
            )
            record_decrypt("safe_decrypt", "malformed")
            return None
        except (ValueError, InvalidTag) as e:
            logger.error(
                f"Safe decrypt failed for {field}",
                extra={
                    "error": type(e).__name__,
                    "encrypted_text_length": len(encrypted_text),
                },
            )
            record_decrypt("safe_decrypt", "failed")
            return None

        record_decrypt("safe_decrypt", "ok")
        return plaintext

    def _open(self, encrypted_text: str) -> str:
        parts = encrypted_text.split(SEPARATOR)
        if len(parts) != 3:
            raise _MalformedValue(len(parts))

        iv, auth_tag, ciphertext = (_b64decode(part) for part in parts)
        if len(auth_tag) != TAG_LENGTH:
            raise ValueError("Authentication tag must be 16 bytes")

        return self._aesgcm.decrypt(iv, ciphertext + auth_tag, None).decode("utf-8")

    def mask_ssn(self, ssn: Optional[str]) -> Optional[str]:
        """Masks SSN for display: 123-45-6789 -> ***-**-6789"""
        if not ssn:
            return None
        decrypted = self.decrypt(ssn)
        if len(decrypted) >= 4:
            return f"{SSN_MASK_PREFIX}{decrypted[-4:]}"
        return SSN_FULL_MASK

    def mask_bank_account(self, account_number: Optional[str]) -> Optional[str]:
        """Masks bank account number for display: 123456789 -> ****6789"""
        return self._mask_last_four(account_number)

    def mask_routing_number(self, routing_number: Optional[str]) -> Optional[str]:
        """Masks routing number for display: 021000021 -> ****0021"""
        return self._mask_last_four(routing_number)

    def _mask_last_four(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        decrypted = self.decrypt(value)
        if len(decrypted) >= 4:
            return f"{BANK_MASK}{decrypted[-4:]}"
        return BANK_MASK

    @staticmethod
    def mask_email(email: Optional[str]) -> Optional[str]:
        """
        Masks email for display: john.doe@example.com -> jo****@example.com

        Works on plaintext only; decrypt first if the value is stored encrypted.
        """
        if not email:
            return None
        at_index = email.find("@")
        if at_index <= 0:
            return EMAIL_FULL_MASK
        local_part, domain = email[:at_index], email[at_index:]
        return f"{local_part[:2]}{EMAIL_LOCAL_MASK}{domain}"

    def encrypt_profile_data(self, data: Mapping[str, Optional[str]]) -> Dict[str, str]:
        """
        Encrypt the sensitive profile fields present in data.

        Fields that are missing or empty are left out of the result, so the
        result can be passed straight to an UPDATE without clearing columns.
        """
        return {
            field: self.encrypt(data[field])
            for field in SENSITIVE_PROFILE_FIELDS
            if data.get(field)
        }

    def decrypt_profile_data(self, data: Mapping[str, Optional[str]]) -> Dict[str, str]:
        """Decrypt the sensitive profile fields present in data"""
        return {
            field: self.decrypt(data[field])
            for field in SENSITIVE_PROFILE_FIELDS
            if data.get(field)
        }


def is_encrypted(value: Optional[str]) -> bool:
    """True when value already has the iv:tag:ciphertext shape"""
    if not value:
        return False

    parts = value.split(SEPARATOR)
    if len(parts) != 3:
        return False

    return all(ENCODED_SEGMENT.fullmatch(part) for part in parts)


def _b64decode(segment: str) -> bytes:
    # Accept base64url and missing padding as well as standard base64
    normalized = segment.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except binascii.Error as e:
        raise ValueError("Invalid base64 segment") from e
