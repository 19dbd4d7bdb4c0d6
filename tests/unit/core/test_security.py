"""Unit tests for password hashing and access tokens."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from coretax.core.config import AuthConfig
from coretax.core.exceptions import AuthenticationError, ValidationError
from coretax.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(
        secret_key="unit-test-secret-key-with-enough-length-0123456789",
        access_token_ttl_minutes=15,
        bcrypt_rounds=4,
    )


@pytest.mark.unit
class TestPasswords:
    def test_hash_then_verify(self) -> None:
        hashed = hash_password("wajib123", rounds=4)

        assert hashed != "wajib123"
        assert verify_password("wajib123", hashed)
        assert not verify_password("wrong", hashed)

    @pytest.mark.parametrize("password", ["", "x" * 73])
    def test_rejects_unusable_passwords(self, password: str) -> None:
        with pytest.raises(ValidationError):
            hash_password(password, rounds=4)

    def test_malformed_hash_never_matches(self) -> None:
        assert not verify_password("secret", "not-a-bcrypt-hash")

    def test_overlong_password_never_matches(self) -> None:
        hashed = hash_password("x" * 72, rounds=4)
        assert not verify_password("x" * 73, hashed)


@pytest.mark.unit
class TestAccessTokens:
    def test_round_trip_claims(self, auth_config: AuthConfig) -> None:
        now = datetime.now(UTC)
        token, expires_at = create_access_token(42, "ADMIN", auth_config, now=now)

        claims = decode_access_token(token, auth_config)

        assert claims.user_id == 42
        assert claims.role == "ADMIN"
        assert expires_at == now + timedelta(minutes=15)
        assert abs((claims.expires_at - expires_at).total_seconds()) < 1

    def test_expired_token(self, auth_config: AuthConfig) -> None:
        issued = datetime.now(UTC) - timedelta(hours=1)
        token, _ = create_access_token(1, "ADMIN", auth_config, now=issued)

        with pytest.raises(AuthenticationError, match="Token expired"):
            decode_access_token(token, auth_config)

    def test_wrong_signature(self, auth_config: AuthConfig) -> None:
        other = auth_config.model_copy(
            update={"secret_key": "another-secret-key-that-is-long-enough-000000"}
        )
        token, _ = create_access_token(1, "ADMIN", other)

        with pytest.raises(AuthenticationError, match="Invalid token") as exc_info:
            decode_access_token(token, auth_config)
        assert isinstance(exc_info.value.cause, jwt.InvalidSignatureError)

    def test_garbage_token(self, auth_config: AuthConfig) -> None:
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.token", auth_config)

    def test_token_of_another_type_is_rejected(self, auth_config: AuthConfig) -> None:
        payload = {
            "sub": "1",
            "role": "ADMIN",
            "type": "refresh",
            "exp": datetime.now(UTC) + timedelta(minutes=5),
        }
        token = jwt.encode(payload, auth_config.secret_key, algorithm=auth_config.algorithm)

        with pytest.raises(AuthenticationError):
            decode_access_token(token, auth_config)

    def test_non_numeric_subject_is_rejected(self, auth_config: AuthConfig) -> None:
        payload = {
            "sub": "abc",
            "role": "ADMIN",
            "type": "access",
            "exp": datetime.now(UTC) + timedelta(minutes=5),
        }
        token = jwt.encode(payload, auth_config.secret_key, algorithm=auth_config.algorithm)

        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_access_token(token, auth_config)
