"""Registration, login and the demo accounts."""

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.config import AuthConfig
from coretax.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from coretax.core.security import create_access_token, hash_password, verify_password
from coretax.domain.enums import Role
from coretax.infrastructure.database.models import User
from coretax.infrastructure.repositories import UserRepository
from coretax.services.inputs.auth import RegisterRequest


@dataclass(frozen=True, slots=True)
class DemoAccount:
    email: str
    password: str
    name: str
    role: Role


DEMO_ACCOUNTS: Final = (
    DemoAccount("admin@coretax.id", "admin123", "Administrator", Role.ADMIN),
    DemoAccount("wajibpajak1@coretax.id", "wajib123", "Budi Santoso", Role.WAJIB_PAJAK),
    DemoAccount("wajibpajak2@coretax.id", "wajib123", "Siti Rahayu", Role.WAJIB_PAJAK),
    DemoAccount("petugas@coretax.id", "petugas123", "Ahmad Wijaya", Role.TAX_OFFICER),
    DemoAccount("konsultan@coretax.id", "konsultan123", "Dewi Lestari", Role.CONSULTANT),
)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    access_token: str
    expires_at: datetime
    user: User


class AuthService:
    def __init__(self, session: AsyncSession, config: AuthConfig) -> None:
        self.config = config
        self.users = UserRepository(session)

    async def register(self, data: RegisterRequest) -> User:
        """Create a taxpayer account.

        Raises:
            ConflictError: If the email, NPWP or NIK is already registered.
        """
        email = data.email.strip().lower()
        taken = await self.users.identity_taken(email=email, npwp=data.npwp, nik=data.nik)
        if taken is not None:
            raise ConflictError(
                f"User with this {taken} already exists", context={"field": taken}
            )

        user = await self.users.create(
            User(
                email=email,
                password_hash=hash_password(data.password, self.config.bcrypt_rounds),
                name=data.name,
                role=Role.WAJIB_PAJAK,
                npwp=data.npwp,
                nik=data.nik,
                phone_number=data.phone_number,
                address=data.address,
                company=data.company,
                is_active=True,
                email_verified=False,
            )
        )
        logger.info("Registered user {}", user.id)
        return user

    async def login(self, email: str, password: str) -> IssuedToken:
        """Verify credentials and issue an access token.

        Unknown emails, wrong passwords and inactive accounts all raise the
        same ``AuthenticationError`` so callers cannot probe for accounts.
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Invalid credentials", context={"inactive": True})
        return self.issue(user)

    def issue(self, user: User) -> IssuedToken:
        token, expires_at = create_access_token(user.id, user.role, self.config)
        return IssuedToken(access_token=token, expires_at=expires_at, user=user)

    async def demo_login(self, email: str) -> IssuedToken:
        """Log in as a demo account, creating it on first use."""
        account = next((a for a in DEMO_ACCOUNTS if a.email == email.lower()), None)
        if account is None:
            raise NotFoundError("Demo account not found", context={"email": email})

        user = await self.users.get_by_email(account.email)
        if user is None:
            user = await self.users.create(
                User(
                    email=account.email,
                    password_hash=hash_password(account.password, self.config.bcrypt_rounds),
                    name=account.name,
                    role=account.role,
                    is_active=True,
                    email_verified=True,
                )
            )
            logger.info("Created demo account {} ({})", account.email, account.role)
        return self.issue(user)

    async def current_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
