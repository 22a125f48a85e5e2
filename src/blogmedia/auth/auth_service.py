"""Blog administrator authentication and JWT issuance."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
import structlog
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from ..config import AppConfig

logger = structlog.get_logger(__name__)

ADMIN_SCOPE = "admin"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def hash_password(value: str) -> str:
    """Return hex sha256 hash for the provided password."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class AdminCredential:
    username: str
    password_hash: str
    scope: str = ADMIN_SCOPE

    def verify(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return hmac.compare_digest(self.password_hash, hash_password(password))


@dataclass(slots=True)
class FailedLoginState:
    """Tracks consecutive failures and throttle window per username."""

    failures: int = 0
    blocked_until: datetime | None = None


class AuthError(Exception):
    """Base class for auth failures."""


class InvalidCredentialsError(AuthError):
    """Raised when username/password mismatch."""


class LoginThrottledError(AuthError):
    """Raised when user hit throttle limit."""


class InvalidTokenError(AuthError):
    """Raised when token cannot be decoded."""


class TokenExpiredError(AuthError):
    """Raised when token is expired."""


class InsufficientScopeError(AuthError):
    """Raised when token scope does not match requirement."""


@dataclass(slots=True)
class AuthService:
    """Authenticate the blog owner and issue JWT bearer tokens."""

    credentials: dict[str, AdminCredential]
    signing_key: str
    token_ttl: timedelta
    max_failures: int = 10
    block_duration: timedelta = timedelta(minutes=15)
    _failed_logins: dict[str, FailedLoginState] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: AppConfig) -> "AuthService":
        if not config.jwt_signing_key.strip():
            raise RuntimeError("BLOGMEDIA_JWT_SIGNING_KEY is not configured")
        credential = AdminCredential(
            username=config.admin_username,
            password_hash=config.admin_password_hash.strip().lower(),
        )
        if not credential.password_hash:
            logger.warning("auth.admin.password_not_configured", username=credential.username)
        return cls(
            credentials={credential.username: credential},
            signing_key=config.jwt_signing_key,
            token_ttl=timedelta(hours=config.jwt_ttl_hours),
        )

    def authenticate(
        self, username: str, password: str, client_ip: str | None = None
    ) -> tuple[str, int]:
        """Validate credentials and return JWT token + ttl seconds."""
        now = _utcnow()
        state = self._failed_logins.get(username)
        if state and state.blocked_until and now < state.blocked_until:
            logger.warning(
                "auth.login.failure",
                username=username,
                reason="throttled",
                blocked_until=state.blocked_until.isoformat(),
                client_ip=client_ip,
            )
            raise LoginThrottledError("Too many attempts, try later")

        credential = self.credentials.get(username)
        if not credential or not credential.verify(password):
            self._register_failure(username, now)
            logger.warning(
                "auth.login.failure",
                username=username,
                reason="invalid_credentials",
                client_ip=client_ip,
            )
            raise InvalidCredentialsError("Invalid username or password")

        self._failed_logins.pop(username, None)
        token = self._issue_token(username, now, credential.scope)
        expires_in = int(self.token_ttl.total_seconds())
        logger.info(
            "auth.login.success",
            username=username,
            client_ip=client_ip,
            expires_in=expires_in,
        )
        return token, expires_in

    def _register_failure(self, username: str, now: datetime) -> None:
        state = self._failed_logins.setdefault(username, FailedLoginState())
        state.failures += 1
        if state.failures >= self.max_failures:
            state.failures = 0
            state.blocked_until = now + self.block_duration
        else:
            state.blocked_until = None

    def _issue_token(self, username: str, issued_at: datetime, scope: str) -> str:
        payload: dict[str, Any] = {
            "sub": username,
            "scope": scope,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.token_ttl).timestamp()),
        }
        return jwt.encode(payload, self.signing_key, algorithm="HS256")

    def validate_token(
        self, token: str, required_scope: str | None = None
    ) -> dict[str, Any]:
        """Decode JWT and ensure scope matches requirement."""
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.signing_key,
                algorithms=["HS256"],
                options={"require": ["exp", "iat", "sub", "scope"]},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except PyJWTInvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc

        if required_scope and payload.get("scope") != required_scope:
            raise InsufficientScopeError("Insufficient scope")
        return payload


__all__ = [
    "ADMIN_SCOPE",
    "AdminCredential",
    "AuthService",
    "AuthError",
    "InvalidCredentialsError",
    "LoginThrottledError",
    "InvalidTokenError",
    "TokenExpiredError",
    "InsufficientScopeError",
    "hash_password",
]
