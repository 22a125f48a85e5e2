"""Owner sign-in endpoint issuing bearer tokens for uploads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel

from .auth_dependencies import auth_failure, get_auth_service
from .auth_service import AuthService, InvalidCredentialsError, LoginThrottledError

router = APIRouter(prefix="/api", tags=["auth"])


class OwnerCredentials(BaseModel):
    username: str
    password: str


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


@router.post("/login", response_model=AccessToken)
def sign_in(
    payload: OwnerCredentials,
    request: Request,
    service: AuthService = Depends(get_auth_service),
) -> AccessToken:
    client_ip = request.client.host if request.client else None
    try:
        token, expires_in = service.authenticate(payload.username, payload.password, client_ip=client_ip)
    except LoginThrottledError as exc:
        raise auth_failure(status.HTTP_429_TOO_MANY_REQUESTS, "too_many_attempts") from exc
    except InvalidCredentialsError as exc:
        raise auth_failure(status.HTTP_401_UNAUTHORIZED, "bad_credentials") from exc
    return AccessToken(access_token=token, expires_in=expires_in)


__all__ = ["router", "sign_in"]
