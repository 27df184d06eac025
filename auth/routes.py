"""
Auth API routes — register, login, me.

Route prefix: /api
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import get_auth_service, get_current_user, raise_for_error
from auth.service import AuthService, AuthSession, PublicUser
from utils.result import Failure

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────
# Fields are optional so absent credentials reach the service and come back
# as ``missing_field`` (400) instead of a validation error (422).


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class MeResponse(BaseModel):
    user: PublicUser


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=AuthSession)
async def register(
    req: Optional[RegisterRequest] = None,
    service: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """Register a new user."""
    req = req or RegisterRequest()
    result = await service.register(req.name, req.email, req.password)
    if isinstance(result, Failure):
        raise_for_error(result.error)
    return result.value


@router.post("/login", response_model=AuthSession)
async def login(
    req: Optional[LoginRequest] = None,
    service: AuthService = Depends(get_auth_service),
) -> AuthSession:
    """Login with email + password."""
    req = req or LoginRequest()
    result = await service.login(req.email, req.password)
    if isinstance(result, Failure):
        raise_for_error(result.error)
    return result.value


@router.get("/me", response_model=MeResponse)
async def me(user: PublicUser = Depends(get_current_user)) -> MeResponse:
    """The user identified by the Bearer token."""
    return MeResponse(user=user)
