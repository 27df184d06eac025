"""
FastAPI dependencies for authentication.

Provides ``get_auth_service`` and ``get_current_user`` dependencies used by
the auth routes and any protected route, plus the single mapping from
auth error kinds to HTTP status codes.
"""

from __future__ import annotations

from typing import Dict, NoReturn, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.errors import AuthError, AuthErrorKind
from auth.service import AuthService, PublicUser
from utils.result import Failure

_bearer_scheme = HTTPBearer(auto_error=False)

_STATUS_BY_KIND = {
    AuthErrorKind.MISSING_FIELD: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    AuthErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_error(error: AuthError, headers: Optional[Dict[str, str]] = None) -> NoReturn:
    """Translate an ``AuthError`` into the matching ``HTTPException``."""
    detail = {"error": error.kind.value, "message": error.message}
    if error.kind is AuthErrorKind.WEAK_PASSWORD:
        detail["missing"] = [req.value for req in error.missing]
    raise HTTPException(
        status_code=_STATUS_BY_KIND[error.kind],
        detail=detail,
        headers=headers,
    )


def get_auth_service(request: Request) -> AuthService:
    """The service built at startup and stored on ``app.state``."""
    return request.app.state.auth_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """
    Verify the Bearer token and return the user it belongs to.

    Raises ``HTTPException(401)`` for a missing, invalid or expired token.
    """
    token = credentials.credentials if credentials else None
    result = await service.authenticate(token)
    if isinstance(result, Failure):
        raise_for_error(result.error, headers={"WWW-Authenticate": "Bearer"})
    return result.value
