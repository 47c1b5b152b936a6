import hashlib
import hmac
import secrets
import string
from functools import lru_cache

from app.core.config import settings


class OtpHasher:
    """Generates numeric one-time codes and keys them with HMAC-SHA256 for storage."""

    def __init__(self, key: str, length: int = 6):
        if not key:
            raise ValueError("An OTP keying secret is required")
        self._key = key.encode("utf-8")
        self.length = length

    def generate_code(self) -> str:
        return "".join(secrets.choice(string.digits) for _ in range(self.length))

    def hash(self, code: str) -> str:
        return hmac.new(self._key, code.encode("utf-8"), hashlib.sha256).hexdigest()

    def matches(self, code: str, stored_hash: str) -> bool:
        return hmac.compare_digest(self.hash(code), stored_hash)


@lru_cache(maxsize=1)
def get_otp_hasher() -> OtpHasher:
    return OtpHasher(settings.OTP_HMAC_KEY, settings.OTP_LENGTH)
