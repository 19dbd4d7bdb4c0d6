"""Registration, login, the current user and demo accounts."""

from http import HTTPStatus

from fastapi import APIRouter

from coretax.api.dependencies import AppSettings, Auth, CurrentActor
from coretax.api.schemas.auth import DemoAccountOut, TokenResponse, UserOut
from coretax.core.exceptions import NotFoundError
from coretax.services.auth import DEMO_ACCOUNTS, IssuedToken
from coretax.services.inputs.auth import DemoLoginRequest, LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(issued: IssuedToken) -> TokenResponse:
    return TokenResponse(
        access_token=issued.access_token,
        expires_at=issued.expires_at,
        user=UserOut.model_validate(issued.user),
    )


def _require_demo(settings: AppSettings) -> None:
    if not settings.auth_config.enable_demo_users:
        raise NotFoundError("Demo accounts are disabled")


@router.post("/register", response_model=UserOut, status_code=HTTPStatus.CREATED)
async def register(body: RegisterRequest, service: Auth) -> UserOut:
    return UserOut.model_validate(await service.register(body))


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, service: Auth) -> TokenResponse:
    return _token_response(await service.login(body.email, body.password))


@router.get("/me", response_model=UserOut)
async def me(actor: CurrentActor, service: Auth) -> UserOut:
    return UserOut.model_validate(await service.current_user(actor.id))


@router.get("/demo", response_model=list[DemoAccountOut])
async def demo_accounts(settings: AppSettings) -> list[DemoAccountOut]:
    """Credentials of the built-in demo accounts."""
    _require_demo(settings)
    return [DemoAccountOut.model_validate(account) for account in DEMO_ACCOUNTS]


@router.post("/demo", response_model=TokenResponse)
async def demo_login(
    body: DemoLoginRequest, service: Auth, settings: AppSettings
) -> TokenResponse:
    _require_demo(settings)
    return _token_response(await service.demo_login(body.email))
