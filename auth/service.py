"""
Auth service — registration, login and token authentication.

Every operation returns a :data:`utils.result.Result`; expected failures
come back as ``Failure(AuthError)`` and never as exceptions.  The HTTP layer
alone decides which status code each :class:`auth.errors.AuthErrorKind`
becomes.

Validation (missing fields, weak password) happens before any hashing or
store work.  Duplicate emails are detected only from the store's unique
constraint.  Unknown email and wrong password produce the same
``INVALID_CREDENTIALS`` error.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel

from auth.errors import AuthError
from auth.jwt import TokenError, TokenIssuer
from auth.password import PasswordHasher
from auth.password_policy import evaluate
from database.user_store import DuplicateEmailError, UserRecord
from utils.result import Failure, Result, Success

logger = logging.getLogger(__name__)


class UserStoreProtocol(Protocol):
    async def create_user(self, name: Optional[str], email: str, password_hash: str) -> UserRecord: ...

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    async def find_user_by_id(self, user_id: int) -> Optional[UserRecord]: ...

    async def ping(self) -> bool: ...


class PublicUser(BaseModel):
    """User as returned to callers (no password digest)."""

    id: int
    name: Optional[str] = None
    email: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "PublicUser":
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            created_at=record.created_at,
        )


class AuthSession(BaseModel):
    user: PublicUser
    token: str


class AuthService:
    """Orchestrates the password policy, hasher, token issuer and user store."""

    def __init__(
        self,
        store: UserStoreProtocol,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self._dummy_hash: Optional[str] = None

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Result[AuthSession, AuthError]:
        """Create a user and return it with a fresh token."""
        if not email or not password:
            return Failure(AuthError.missing_field())

        policy = evaluate(password)
        if not policy.accepted:
            return Failure(AuthError.weak_password(policy.missing_requirements))

        try:
            digest = await self._hasher.hash_async(password)
            record = await self._store.create_user(name or None, email, digest)
            token = self._issuer.issue(record.id, record.email)
        except DuplicateEmailError:
            logger.info("Registration rejected: email already exists")
            return Failure(AuthError.duplicate_email())
        except Exception:
            logger.exception("Registration failed")
            return Failure(AuthError.internal())

        logger.info("Registered user %s", record.id)
        return Success(AuthSession(user=PublicUser.from_record(record), token=token))

    async def login(
        self,
        email: Optional[str],
        password: Optional[str],
    ) -> Result[AuthSession, AuthError]:
        """Check credentials and return the user with a fresh token."""
        if not email or not password:
            return Failure(AuthError.missing_field())

        try:
            record = await self._store.find_user_by_email(email)
            if record is None:
                # same bcrypt cost as a wrong password
                await self._hasher.verify_async(password, await self._get_dummy_hash())
                return Failure(AuthError.invalid_credentials())
            if not await self._hasher.verify_async(password, record.password_hash):
                return Failure(AuthError.invalid_credentials())
            token = self._issuer.issue(record.id, record.email)
        except Exception:
            logger.exception("Login failed")
            return Failure(AuthError.internal())

        logger.info("Login: user %s", record.id)
        return Success(AuthSession(user=PublicUser.from_record(record), token=token))

    async def authenticate(self, token: Optional[str]) -> Result[PublicUser, AuthError]:
        """Resolve a bearer token to the user it names."""
        if not token:
            return Failure(AuthError.invalid_credentials())
        try:
            claims = self._issuer.verify(token)
        except TokenError as exc:
            logger.debug("Token rejected (%s): %s", type(exc).__name__, exc)
            return Failure(AuthError.invalid_credentials())

        try:
            record = await self._store.find_user_by_id(claims.user_id)
        except Exception:
            logger.exception("User lookup failed for token subject %s", claims.user_id)
            return Failure(AuthError.internal())
        if record is None:
            return Failure(AuthError.invalid_credentials())
        return Success(PublicUser.from_record(record))

    async def health(self) -> bool:
        """Whether the user store answers a ping."""
        try:
            return await self._store.ping()
        except Exception:
            logger.exception("Health check failed")
            return False

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self._hasher.hash_async("dummy-password")
        return self._dummy_hash
