from pydantic import EmailStr, Field

from coretax.core.schema import CamelModel, OptionalIdentifier
from coretax.domain.enums import CompanyType, ProfileStatus, TaxType


class ProfileCreate(CamelModel):
    tax_type: TaxType
    company_name: str | None = Field(default=None, max_length=255)
    company_type: CompanyType | None = None
    npwp: OptionalIdentifier = None
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    province: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=10)
    country: str = Field(default="Indonesia", max_length=100)
    phone_number: str | None = Field(default=None, max_length=32)
    email: EmailStr | None = None
    website: str | None = Field(default=None, max_length=255)
    business_field: str | None = Field(default=None, max_length=255)
    notes: str | None = None


class ProfileUpdate(CamelModel):
    company_name: str | None = Field(default=None, max_length=255)
    company_type: CompanyType | None = None
    npwp: OptionalIdentifier = None
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    province: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=10)
    country: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=32)
    email: EmailStr | None = None
    website: str | None = Field(default=None, max_length=255)
    business_field: str | None = Field(default=None, max_length=255)
    status: ProfileStatus | None = None
    notes: str | None = None


class ProfileVerifyRequest(CamelModel):
    profile_id: int
    action: str = Field(..., min_length=1, examples=["verify", "reject"])
    notes: str | None = None
