"""Bearer-token guard for owner-only routes."""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth_service import (
    ADMIN_SCOPE,
    AuthError,
    AuthService,
    InsufficientScopeError,
    InvalidTokenError,
    TokenExpiredError,
)

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_REJECTIONS: dict[type[AuthError], tuple[int, str]] = {
    TokenExpiredError: (status.HTTP_401_UNAUTHORIZED, "token_expired"),
    InvalidTokenError: (status.HTTP_401_UNAUTHORIZED, "bad_token"),
    InsufficientScopeError: (status.HTTP_403_FORBIDDEN, "owner_only"),
}


def auth_failure(status_code: int, reason: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"status": "error", "failure_reason": reason})


def get_auth_service(request: Request) -> AuthService:
    try:
        return request.app.state.auth_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("AuthService is not configured") from exc


def require_blog_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Return the token claims of the signed-in owner or reject the request."""
    if credentials is None:
        raise auth_failure(status.HTTP_401_UNAUTHORIZED, "sign_in_required")

    try:
        return service.validate_token(credentials.credentials, required_scope=ADMIN_SCOPE)
    except (TokenExpiredError, InvalidTokenError, InsufficientScopeError) as exc:
        status_code, reason = _REJECTIONS[type(exc)]
        logger.info("auth.guard.rejected", reason=reason)
        raise auth_failure(status_code, reason) from exc


__all__ = ["auth_failure", "bearer_scheme", "get_auth_service", "require_blog_owner"]
