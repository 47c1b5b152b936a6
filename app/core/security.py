"""
Security helpers.

- Password hashing and verification (bcrypt, fixed work factor)
- Signed, expiring access tokens (JWT, HMAC-signed with a server secret)
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

from app.core.config import settings


# ---------------------------------------------------------------------------
# PASSWORD HASHING
# ---------------------------------------------------------------------------

def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password for storage. Salt and cost are embedded in the result."""
    salt = bcrypt.gensalt(rounds=rounds or settings.PASSWORD_BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Return True if the plain password matches the hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Malformed stored hash
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    # Compared against when no account matches, so unknown emails cost the same
    return get_password_hash("not-a-real-password")


# ---------------------------------------------------------------------------
# ACCESS TOKENS
# ---------------------------------------------------------------------------

class InvalidTokenError(Exception):
    """Raised for any token that fails decoding, signature or expiry checks."""


class CredentialCodec:
    """
    Issues and verifies signed bearer tokens.

    The payload carries ``sub`` (account id), the supplied claims, ``iat`` and
    ``exp``. Verification never distinguishes why a token was rejected.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("A token signing secret is required")
        self._secret = secret
        self._algorithm = algorithm

    def issue(
        self,
        subject_id: str,
        claims: Optional[Dict[str, Any]] = None,
        expires_in: timedelta = timedelta(minutes=15),
        now: Optional[datetime] = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = dict(claims or {})
        payload.update({
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + expires_in,
        })
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except PyJWTError as exc:
            raise InvalidTokenError("Invalid or expired token") from exc
        if not isinstance(payload.get("sub"), str):
            raise InvalidTokenError("Invalid or expired token")
        return payload


@lru_cache(maxsize=1)
def get_credential_codec() -> CredentialCodec:
    return CredentialCodec(settings.JWT_SECRET, settings.JWT_ALGORITHM)
