from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import BankAccountType, BankStatus


class BankIntegrationCreate(CamelModel):
    bank_name: str = Field(..., min_length=1, max_length=255)
    account_number: str = Field(..., min_length=1, max_length=64)
    account_name: str = Field(..., min_length=1, max_length=255)
    account_type: BankAccountType
    bank_code: str | None = Field(default=None, max_length=16)
    branch: str | None = Field(default=None, max_length=255)
    currency: str = Field(default="IDR", min_length=3, max_length=3)
    notes: str | None = None


class BankIntegrationUpdate(CamelModel):
    bank_name: str | None = Field(default=None, min_length=1, max_length=255)
    account_number: str | None = Field(default=None, min_length=1, max_length=64)
    account_name: str | None = Field(default=None, min_length=1, max_length=255)
    account_type: BankAccountType | None = None
    bank_code: str | None = None
    branch: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    status: BankStatus | None = None
    is_active: bool | None = None
    is_primary: bool | None = None
    webhook_url: str | None = None
    notes: str | None = None


class SyncRequest(CamelModel):
    integration_id: int
    action: str = Field(..., min_length=1, examples=["SYNC_BALANCE"])
    webhook_url: str | None = None
