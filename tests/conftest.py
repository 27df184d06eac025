"""
Shared fixtures: an in-memory user store and a fast auth service.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional

import pytest

from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from auth.service import AuthService
from database.user_store import DuplicateEmailError, UserRecord

# HS256 keys shorter than 32 bytes trigger PyJWT warnings
TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeUserStore:
    """Dict-backed store; the email check and insert happen in one loop step."""

    def __init__(self) -> None:
        self.users: Dict[str, UserRecord] = {}
        self._next_id = 1
        self.fail_with: Optional[Exception] = None
        self.ping_ok = True
        self.create_calls = 0

    async def create_user(self, name, email, password_hash) -> UserRecord:
        self.create_calls += 1
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        if email in self.users:
            raise DuplicateEmailError(email)
        record = UserRecord(
            id=self._next_id,
            name=name,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._next_id += 1
        self.users[email] = record
        return record

    async def find_user_by_email(self, email) -> Optional[UserRecord]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.users.get(email)

    async def find_user_by_id(self, user_id) -> Optional[UserRecord]:
        if self.fail_with is not None:
            raise self.fail_with
        return next((u for u in self.users.values() if u.id == user_id), None)

    async def ping(self) -> bool:
        return self.ping_ok


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    # minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2030, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def issuer(clock) -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, expiry_seconds=7 * 24 * 3600, clock=clock)


@pytest.fixture
def service(store, hasher, issuer) -> AuthService:
    return AuthService(store=store, hasher=hasher, issuer=issuer)
