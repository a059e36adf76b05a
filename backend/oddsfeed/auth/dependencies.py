"""FastAPI dependencies that gate routes on a bearer token."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..errors import ApiError
from .service import AuthService, Identity


def create_identity_dependency(auth: AuthService) -> Callable[..., Identity]:
    """Dependency returning the caller's Identity, or raising 401/403.

    A missing header is a 401; a token that is malformed, expired or revoked
    is a 403.
    """
    bearer = HTTPBearer(auto_error=False)

    def require_identity(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    ) -> Identity:
        if credentials is None:
            raise ApiError(401, "Access token required")
        identity = auth.verify(credentials.credentials)
        if identity is None:
            raise ApiError(403, "Invalid or expired token")
        return identity

    return require_identity


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
