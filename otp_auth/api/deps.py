"""Shared API dependencies."""

from fastapi import Depends, Header, Request

from otp_auth.errors import Unauthenticated
from otp_auth.schemas.auth import IdentityRead
from otp_auth.services.auth import AuthService


def get_auth_service(request: Request) -> AuthService:
    """The AuthService instance wired up at startup."""
    return request.app.state.auth_service


def get_current_identity(
    authorization: str | None = Header(default=None),
    service: AuthService = Depends(get_auth_service),
) -> IdentityRead:
    """Resolve the raw token (or ``Bearer <token>``) in the Authorization header."""
    if not authorization:
        raise Unauthenticated("Missing Authorization header")
    token = authorization.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return service.resolve_identity(token)
