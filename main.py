"""
Authentication service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from api.routes import router as system_router
from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService, UserStoreProtocol
from config.settings import Settings, config
from database.session import build_engine, build_session_factory
from database.user_store import UserStore

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[UserStoreProtocol] = None,
) -> FastAPI:
    """
    Build the application.

    When ``store`` is omitted, a database engine is opened at startup from
    ``settings.database_url`` and disposed at shutdown.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        user_store = store
        if user_store is None:
            engine = build_engine(settings)
            db_store = UserStore(build_session_factory(engine))
            await db_store.create_schema(engine)
            user_store = db_store

        app.state.auth_service = AuthService(
            store=user_store,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            issuer=TokenIssuer(settings.jwt_secret, settings.jwt_expiry_seconds),
        )
        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            if engine is not None:
                await engine.dispose()
                logger.info("Database connections closed")

    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="Registration, login and JWT issuance.",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app, request_timeout=settings.request_timeout_seconds)

    # Routes
    app.include_router(auth_router, prefix="/api")
    app.include_router(system_router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
