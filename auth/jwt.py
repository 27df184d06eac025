"""
JWT creation and verification.

Tokens are standard HS256 JWTs signed with ``config.jwt_secret``
(env var: ``JWT_SECRET``), so any service holding the secret can verify
them.  Claims::

    {"sub": "<id>", "id": <id>, "email": "...", "iat": <unix>, "exp": <unix>}
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import BaseModel

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["sub", "id", "email", "iat", "exp"]

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Token could not be accepted."""


class TokenExpiredError(TokenError):
    """Signature is valid but ``exp`` has passed."""


class TokenSignatureError(TokenError):
    """Malformed token, bad signature or missing claims."""


class TokenClaims(BaseModel):
    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Signs and verifies identity tokens with a shared secret."""

    def __init__(
        self,
        secret: str,
        expiry_seconds: int = 604800,
        clock: Optional[Clock] = None,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._expiry = timedelta(seconds=expiry_seconds)
        self._clock = clock or _utcnow

    def issue(self, user_id: int, email: str) -> str:
        """Create a signed token for ``user_id`` expiring after the configured period."""
        now = self._clock()
        payload = {
            "sub": str(user_id),
            "id": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int((now + self._expiry).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``TokenSignatureError`` when the token is malformed or its
        signature does not match, ``TokenExpiredError`` when it has expired.
        Expiry is checked against the issuer's clock, not PyJWT's.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except InvalidTokenError as exc:
            raise TokenSignatureError(str(exc)) from exc

        try:
            claims = TokenClaims(
                user_id=int(payload["id"]),
                email=str(payload["email"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (TypeError, ValueError) as exc:
            raise TokenSignatureError(f"malformed claims: {exc}") from exc

        if self._clock() >= claims.expires_at:
            raise TokenExpiredError(f"token expired at {claims.expires_at.isoformat()}")
        return claims
