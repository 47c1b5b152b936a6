from app.core.config import settings
from app.core.logger import logger

class SmsSender:
    """Delivers an OTP to a phone number. Subclass for a real SMS provider."""

    async def send_otp(self, phone: str, code: str) -> None:
        raise NotImplementedError

class LoggingSmsSender(SmsSender):
    async def send_otp(self, phone: str, code: str) -> None:
        if settings.DEBUG:
            logger.debug(f"OTP for {phone}: {code}")
        logger.info(f"OTP dispatched to {phone}")
