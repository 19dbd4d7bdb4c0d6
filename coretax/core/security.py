"""Password hashing and signed access tokens.

Access tokens are JWTs signed with ``auth_config.secret_key``. The subject is
the user id and the ``role`` claim records the role at issue time; callers
still reload the user on every request, so a deactivated account or a
changed role takes effect immediately.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from coretax.core.config import AuthConfig
from coretax.core.exceptions import AuthenticationError, ValidationError

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72
TOKEN_TYPE = "access"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified contents of an access token."""

    user_id: int
    role: str
    expires_at: datetime


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt.

    Raises:
        ValidationError: If the password is empty or longer than bcrypt accepts.
    """
    encoded = password.encode("utf-8")
    if not encoded:
        raise ValidationError("Password cannot be empty")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password exceeds maximum length of {MAX_PASSWORD_BYTES} bytes"
        )
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check ``password`` against a bcrypt hash; malformed hashes never match."""
    encoded = password.encode("utf-8")
    if not encoded or len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    user_id: int,
    role: str,
    config: AuthConfig,
    *,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Issue an access token for a user.

    Returns:
        tuple[str, datetime]: The encoded token and its expiry time.
    """
    issued_at = now or datetime.now(UTC)
    expires_at = issued_at + timedelta(minutes=config.access_token_ttl_minutes)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, config.secret_key, algorithm=config.algorithm)
    return token, expires_at


def decode_access_token(token: str, config: AuthConfig) -> TokenClaims:
    """Verify signature, expiry and shape of an access token.

    Raises:
        AuthenticationError: If the token is expired, tampered with or malformed.
    """
    try:
        payload = jwt.decode(
            token,
            config.secret_key,
            algorithms=[config.algorithm],
            options={"require": ["sub", "exp", "role"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired", cause=e) from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token", cause=e) from e

    if payload.get("type") != TOKEN_TYPE:
        raise AuthenticationError("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token", cause=e) from e

    return TokenClaims(
        user_id=user_id,
        role=str(payload["role"]),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
