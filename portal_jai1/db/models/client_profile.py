# portal_jai1/db/models/client_profile.py
from sqlalchemy import Column, String, Text, Uuid
import uuid
from portal_jai1.db.base import BaseModel


class ClientProfile(BaseModel):
    """Client onboarding profile.

    Sensitive columns hold either a FieldCipher encoded value or, for rows
    written before encryption existed, plaintext. Write them only through
    FieldCipher.encrypt_profile_data.
    """
    __tablename__ = "client_profiles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Sensitive (encrypted at rest)
    ssn = Column(Text, nullable=True)
    address_street = Column(Text, nullable=True)
    bank_routing_number = Column(Text, nullable=True)
    bank_account_number = Column(Text, nullable=True)
    turbotax_email = Column(Text, nullable=True)
    turbotax_password = Column(Text, nullable=True)
    irs_username = Column(Text, nullable=True)
    irs_password = Column(Text, nullable=True)
    state_username = Column(Text, nullable=True)
    state_password = Column(Text, nullable=True)

    # Address (plaintext)
    address_city = Column(String(100), nullable=True)
    address_state = Column(String(50), nullable=True)
    address_zip = Column(String(20), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
