"""
User store — persistence for user records.

The ``users.email`` UNIQUE constraint is the only uniqueness guard: a
duplicate insert surfaces as :class:`DuplicateEmailError`, translated from
the database's own integrity error rather than from any application-level
pre-check.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from database.models import Base, User

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
_UNIQUE_VIOLATION = "23505"


class StoreError(Exception):
    """The store could not complete an operation."""


class DuplicateEmailError(StoreError):
    """An insert violated the unique constraint on ``users.email``."""

    def __init__(self, email: str) -> None:
        super().__init__(f"email already exists: {email}")
        self.email = email


class UserRecord(BaseModel):
    """A stored user, including the password digest."""

    id: int
    name: Optional[str] = None
    email: str
    password_hash: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _UNIQUE_VIOLATION:
        return True
    # SQLite reports constraint failures by message only
    return "UNIQUE constraint failed" in str(orig)


class UserStore:
    """Async user store backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create_schema(self, engine: AsyncEngine) -> None:
        """Create the ``users`` table if it does not exist."""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def create_user(
        self,
        name: Optional[str],
        email: str,
        password_hash: str,
    ) -> UserRecord:
        """
        Insert a new user and return the stored record.

        Raises ``DuplicateEmailError`` when the email is already taken and
        ``StoreError`` for any other database failure.
        """
        async with self._session_factory() as session:
            row = User(name=name, email=email, password_hash=password_hash)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if _is_unique_violation(exc):
                    raise DuplicateEmailError(email) from exc
                raise StoreError(f"integrity error creating user: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(f"failed to create user: {exc}") from exc
            return UserRecord.model_validate(row)

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Exact-match lookup by email; ``None`` when absent."""
        return await self._find_one(select(User).where(User.email == email))

    async def find_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        return await self._find_one(select(User).where(User.id == user_id))

    async def _find_one(self, stmt) -> Optional[UserRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"user lookup failed: {exc}") from exc
        if row is None:
            return None
        return UserRecord.model_validate(row)

    async def ping(self, timeout: float = 5.0) -> bool:
        """Run ``SELECT 1``; ``False`` if the database is unreachable."""
        try:
            async with self._session_factory() as session:
                await asyncio.wait_for(session.execute(text("SELECT 1")), timeout=timeout)
            return True
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.warning("Database ping failed: %s", exc)
            return False
