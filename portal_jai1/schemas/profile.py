# portal_jai1/schemas/profile.py
from pydantic import BaseModel, EmailStr, Field, UUID4, field_validator
from typing import Dict, List, Optional
from datetime import datetime

SSN_PATTERN = r"^(\d{9}|\d{3}-\d{2}-\d{4})$"
ROUTING_PATTERN = r"^\d{9}$"
ACCOUNT_PATTERN = r"^\d{4,17}$"
ZIP_PATTERN = r"^\d{5}(-\d{4})?$"


class SensitiveFields(BaseModel):
    """Plaintext sensitive values as submitted by the client"""
    ssn: Optional[str] = Field(None, pattern=SSN_PATTERN)
    address_street: Optional[str] = Field(None, max_length=255)
    bank_routing_number: Optional[str] = Field(None, pattern=ROUTING_PATTERN)
    bank_account_number: Optional[str] = Field(None, pattern=ACCOUNT_PATTERN)
    turbotax_email: Optional[str] = Field(None, max_length=255)
    turbotax_password: Optional[str] = Field(None, max_length=255)
    irs_username: Optional[str] = Field(None, max_length=255)
    irs_password: Optional[str] = Field(None, max_length=255)
    state_username: Optional[str] = Field(None, max_length=255)
    state_password: Optional[str] = Field(None, max_length=255)

    @field_validator("ssn")
    @classmethod
    def normalize_ssn(cls, v: Optional[str]) -> Optional[str]:
        # Stored without dashes
        return v.replace("-", "") if v else v


class ProfileCreate(SensitiveFields):
    user_email: EmailStr
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    address_city: Optional[str] = Field(None, max_length=100)
    address_state: Optional[str] = Field(None, max_length=50)
    address_zip: Optional[str] = Field(None, pattern=ZIP_PATTERN)


class ProfileUpdate(SensitiveFields):
    """Only fields present in the request body are changed; null or "" clears a field"""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    address_city: Optional[str] = Field(None, max_length=100)
    address_state: Optional[str] = Field(None, max_length=50)
    address_zip: Optional[str] = Field(None, pattern=ZIP_PATTERN)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        # Runs before the format patterns so "" is not rejected as a bad SSN
        return None if v == "" else v


class ProfileSummary(BaseModel):
    """Profile as shown in lists and the client dashboard; sensitive values masked"""
    id: UUID4
    user_email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    ssn: Optional[str] = None
    address_street: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zip: Optional[str] = None
    bank_routing_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    turbotax_email: Optional[str] = None
    has_turbotax_password: bool = False
    has_irs_credentials: bool = False
    has_state_credentials: bool = False
    created_at: datetime


class ProfileDetail(BaseModel):
    """Fully decrypted profile for the edit form"""
    id: UUID4
    user_email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    ssn: Optional[str] = None
    address_street: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zip: Optional[str] = None
    bank_routing_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    turbotax_email: Optional[str] = None
    turbotax_password: Optional[str] = None
    irs_username: Optional[str] = None
    irs_password: Optional[str] = None
    state_username: Optional[str] = None
    state_password: Optional[str] = None


class CredentialsListItem(BaseModel):
    id: UUID4
    name: str
    email: str
    turbotax_email: Optional[str] = None
    turbotax_password: Optional[str] = None
    irs_username: Optional[str] = None
    irs_password: Optional[str] = None
    state_username: Optional[str] = None
    state_password: Optional[str] = None


class CredentialsPage(BaseModel):
    accounts: List[CredentialsListItem]
    next_cursor: Optional[UUID4] = None
    has_more: bool


class RevealedCredentials(BaseModel):
    turbotax_email: Optional[str] = None
    turbotax_password: Optional[str] = None
    irs_username: Optional[str] = None
    irs_password: Optional[str] = None
    state_username: Optional[str] = None
    state_password: Optional[str] = None


class CredentialsReveal(BaseModel):
    revealed_at: datetime
    revealed_by: Optional[str] = None
    client_id: UUID4
    client_name: str
    client_email: str
    credentials: RevealedCredentials
    errors: Dict[str, Optional[str]]
