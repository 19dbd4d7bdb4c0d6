from pydantic import EmailStr, Field

from coretax.core.schema import CamelModel, OptionalIdentifier


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    name: str = Field(..., min_length=1, max_length=255)
    npwp: OptionalIdentifier = None
    nik: OptionalIdentifier = None
    phone_number: str | None = Field(default=None, max_length=32)
    address: str | None = None
    company: str | None = Field(default=None, max_length=255)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class DemoLoginRequest(CamelModel):
    email: EmailStr
