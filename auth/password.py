"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio

import bcrypt

# bcrypt only consumes the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class HashingError(Exception):
    """Hashing or verification failed for a reason other than a mismatch."""


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """bcrypt hash / verify with a fixed work factor."""

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password (auto-salted)."""
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_encode(password), salt).decode("ascii")
        except (ValueError, TypeError) as exc:
            raise HashingError(f"password hashing failed: {exc}") from exc

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Constant-time comparison against a bcrypt hash.

        A malformed ``password_hash`` raises ``HashingError`` instead of
        reading as a mismatch.
        """
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
        except (ValueError, TypeError) as exc:
            raise HashingError(f"password verification failed: {exc}") from exc

    async def hash_async(self, password: str) -> str:
        """``hash`` on a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
