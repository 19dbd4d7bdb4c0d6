from datetime import datetime

from coretax.api.schemas.common import CamelModel, RecordOut
from coretax.domain.enums import Role


class UserOut(RecordOut):
    email: str
    name: str
    role: Role
    npwp: str | None = None
    nik: str | None = None
    phone_number: str | None = None
    address: str | None = None
    company: str | None = None
    is_active: bool
    email_verified: bool


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


class DemoAccountOut(CamelModel):
    email: str
    name: str
    role: Role
    password: str
