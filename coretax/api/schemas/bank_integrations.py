from datetime import datetime

from coretax.api.schemas.common import CamelModel, MoneyValue, RecordOut, UserSummary
from coretax.domain.enums import BankAccountType, BankStatus, SyncStatus


class BankIntegrationOut(RecordOut):
    user_id: int
    bank_name: str
    account_number: str
    account_name: str
    bank_code: str | None
    branch: str | None
    account_type: BankAccountType
    currency: str
    balance: MoneyValue | None
    status: BankStatus
    is_active: bool
    is_primary: bool
    sync_status: SyncStatus
    last_sync_at: datetime | None
    webhook_url: str | None
    notes: str | None
    user: UserSummary


class SyncResponse(CamelModel):
    message: str
    sync_status: SyncStatus | None = None
    webhook_url: str | None = None
