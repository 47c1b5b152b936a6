from datetime import timedelta

from app.core.config import settings
from app.core.exceptions import LockedError, NotFoundError, ValidationError
from app.core.logger import logger
from app.core.otp import OtpHasher
from app.core.security import CredentialCodec
from app.core.utils import normalize_mobile, utcnow
from app.db.models import Role
from app.db.repository import AccountRepository, UpsertStatus
from app.schemas.account import AccountInfo, AuthContext
from app.schemas.auth import (
    SendOtpRequest,
    SignupRequest,
    SignupResponse,
    SuccessResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.services.sms_service import SmsSender

class OtpService:
    """Send/verify/lockout lifecycle of phone one-time codes."""

    def __init__(
        self,
        repository: AccountRepository,
        hasher: OtpHasher,
        codec: CredentialCodec,
        sms_sender: SmsSender,
    ):
        self.repository = repository
        self.hasher = hasher
        self.codec = codec
        self.sms_sender = sms_sender

    async def send_otp(self, data: SendOtpRequest) -> SuccessResponse:
        phone = normalize_mobile(data.mobile)

        existing = await self.repository.find_by_phone(phone)
        if existing and existing.locked:
            raise LockedError()

        code = self.hasher.generate_code()
        otp_values = {
            "otp_hash": self.hasher.hash(code),
            "otp_expires_at": utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES),
            "otp_attempts": 0,
            "locked": False,
        }
        outcome = await self.repository.upsert_by_phone(
            phone,
            create={"role": Role.USER, "profile_complete": False},
            update_values=otp_values,
        )
        if outcome.status is UpsertStatus.CREATED:
            logger.info(f"Account created for {phone}")
        else:
            logger.info(f"OTP reissued for {phone}")

        await self.sms_sender.send_otp(phone, code)
        return SuccessResponse()

    async def verify_otp(self, data: VerifyOtpRequest) -> VerifyOtpResponse:
        phone = normalize_mobile(data.mobile)

        account = await self.repository.find_by_phone(phone)
        if not account:
            raise NotFoundError("User not found")
        if account.locked:
            raise LockedError()
        if not account.otp_hash or not account.otp_expires_at:
            raise ValidationError("No OTP requested")

        now = utcnow()
        if account.otp_expires_at < now:
            raise ValidationError("OTP expired")

        if not self.hasher.matches(data.otp, account.otp_hash):
            attempts = await self.repository.record_failed_attempt(
                account.id, account.otp_hash, settings.OTP_MAX_ATTEMPTS
            )
            if attempts is not None and attempts >= settings.OTP_MAX_ATTEMPTS:
                logger.warning(f"Account {account.id} locked after {attempts} failed OTP attempts")
            else:
                logger.info(f"Failed OTP attempt for account {account.id}")
            # Same answer on the locking attempt as on any other wrong code
            raise ValidationError("Invalid OTP")

        consumed = await self.repository.conditional_clear_otp(phone, account.otp_hash, now)
        if not consumed:
            logger.warning(f"OTP for account {account.id} was consumed by a concurrent request")
            raise ValidationError("No OTP requested")

        token = self.codec.issue(
            str(account.id),
            {"role": account.role.value, "purpose": "access"},
            timedelta(days=settings.USER_TOKEN_EXPIRE_DAYS),
        )
        return VerifyOtpResponse(is_new=not account.profile_complete, token=token)

    async def complete_signup(self, context: AuthContext, data: SignupRequest) -> SignupResponse:
        if data.dob > utcnow().date():
            raise ValidationError("Date of birth cannot be in the future")

        account = await self.repository.update_fields(
            context.account,
            name=data.name.strip(),
            date_of_birth=data.dob,
            profile_complete=True,
        )
        # Completing the profile does not rotate the token
        return SignupResponse(token=context.token, user=AccountInfo.from_account(account))
