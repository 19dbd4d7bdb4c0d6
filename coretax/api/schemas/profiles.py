from datetime import datetime

from coretax.api.schemas.common import RecordOut, UserSummary
from coretax.domain.enums import CompanyType, ProfileStatus, TaxType


class ProfileOut(RecordOut):
    user_id: int
    tax_type: TaxType
    tax_id: str
    company_name: str | None
    company_type: CompanyType | None
    npwp: str | None
    address: str | None
    city: str | None
    province: str | None
    postal_code: str | None
    country: str
    phone_number: str | None
    email: str | None
    website: str | None
    business_field: str | None
    status: ProfileStatus
    is_verified: bool
    verified_at: datetime | None
    notes: str | None
    user: UserSummary
