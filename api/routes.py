"""
Operational routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from auth.dependencies import get_auth_service
from auth.service import AuthService

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Liveness probe: is the server up and the database reachable?"""
    if await service.health():
        return JSONResponse({"status": "ok", "database": "connected"})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "error", "database": "disconnected"},
    )
