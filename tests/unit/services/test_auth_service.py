"""Service tests for registration and login."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.config import AuthConfig
from coretax.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from coretax.core.security import decode_access_token
from coretax.domain.enums import Role
from coretax.services.auth import AuthService
from coretax.services.inputs.auth import RegisterRequest
from tests.support import UserFactory


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(secret_key="k" * 48, bcrypt_rounds=4)


@pytest.fixture
def service(db_session: AsyncSession, auth_config: AuthConfig) -> AuthService:
    return AuthService(db_session, auth_config)


def registration(**fields: str) -> RegisterRequest:
    data = {"email": "Budi@CoreTax.id", "password": "rahasia1", "name": "Budi"}
    return RegisterRequest.model_validate(data | fields)


@pytest.mark.unit
class TestRegister:
    async def test_register_creates_taxpayer(self, service: AuthService) -> None:
        user = await service.register(registration(npwp="123"))

        assert user.email == "budi@coretax.id"
        assert user.role == Role.WAJIB_PAJAK
        assert user.password_hash != "rahasia1"
        assert user.email_verified is False

    @pytest.mark.parametrize(
        ("second", "field"),
        [
            ({"email": "budi@coretax.id"}, "email"),
            ({"email": "other@coretax.id", "npwp": "123"}, "npwp"),
            ({"email": "other@coretax.id", "nik": "3201"}, "nik"),
        ],
    )
    async def test_identity_must_be_unique(
        self, service: AuthService, second: dict[str, str], field: str
    ) -> None:
        await service.register(registration(npwp="123", nik="3201"))

        with pytest.raises(ConflictError) as exc_info:
            await service.register(registration(**second))

        assert exc_info.value.message == f"User with this {field} already exists"


@pytest.mark.unit
class TestLogin:
    async def test_login_issues_token(
        self, service: AuthService, auth_config: AuthConfig
    ) -> None:
        user = await service.register(registration())

        issued = await service.login("BUDI@coretax.id", "rahasia1")

        claims = decode_access_token(issued.access_token, auth_config)
        assert claims.user_id == user.id
        assert claims.role == Role.WAJIB_PAJAK
        assert issued.user.id == user.id

    @pytest.mark.parametrize(
        ("email", "password"),
        [("budi@coretax.id", "wrong-pass"), ("nobody@coretax.id", "rahasia1")],
    )
    async def test_bad_credentials(self, service: AuthService, email: str, password: str) -> None:
        await service.register(registration())

        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await service.login(email, password)

    async def test_inactive_account(
        self, service: AuthService, db_session: AsyncSession
    ) -> None:
        user = await service.register(registration())
        user.is_active = False
        await db_session.flush()

        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await service.login("budi@coretax.id", "rahasia1")

    async def test_malformed_stored_hash(
        self, service: AuthService, make_user: UserFactory
    ) -> None:
        await make_user(email="legacy@coretax.id")

        with pytest.raises(AuthenticationError):
            await service.login("legacy@coretax.id", "anything")


@pytest.mark.unit
class TestDemoLogin:
    async def test_creates_account_once(self, service: AuthService) -> None:
        first = await service.demo_login("petugas@coretax.id")
        second = await service.demo_login("PETUGAS@coretax.id")

        assert first.user.id == second.user.id
        assert first.user.role == Role.TAX_OFFICER
        assert first.user.email_verified is True

    async def test_unknown_demo_account(self, service: AuthService) -> None:
        with pytest.raises(NotFoundError):
            await service.demo_login("someone@coretax.id")
