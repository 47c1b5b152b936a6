from datetime import timedelta

from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import AuthError, ConflictError, NotFoundError
from app.core.logger import logger
from app.core.security import CredentialCodec, dummy_password_hash, get_password_hash, verify_password
from app.core.utils import normalize_mobile
from app.db.models import Role
from app.db.repository import AccountRepository
from app.schemas.account import AdminInfo
from app.schemas.auth import (
    AdminCreateRequest,
    AdminCreateResponse,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminUnlockRequest,
    SuccessResponse,
)

class AuthService:
    def __init__(self, repository: AccountRepository, codec: CredentialCodec):
        self.repository = repository
        self.codec = codec

    async def login(self, login_data: AdminLoginRequest) -> AdminLoginResponse:
        # 1. Find admin by email
        admin = await self.repository.find_by_email(login_data.email, role=Role.ADMIN)
        stored_hash = admin.password_hash if admin else None

        # 2. Verify password, against a dummy hash when there is no admin
        password_ok = await run_in_threadpool(
            verify_password, login_data.password, stored_hash or dummy_password_hash()
        )
        if not admin or not stored_hash or not password_ok:
            logger.warning(f"Failed admin login for {login_data.email}")
            raise AuthError("Invalid credentials")

        # 3. Generate token
        access_token = self.codec.issue(
            str(admin.id),
            {"role": Role.ADMIN.value, "purpose": "access"},
            timedelta(hours=settings.ADMIN_TOKEN_EXPIRE_HOURS),
        )
        logger.info(f"Admin {admin.id} logged in")

        return AdminLoginResponse(token=access_token, admin=AdminInfo.from_account(admin))

    async def create_admin(self, data: AdminCreateRequest) -> AdminCreateResponse:
        phone = normalize_mobile(data.mobile)

        if await self.repository.find_by_email(data.email):
            raise ConflictError("Email already exists")
        if await self.repository.find_by_phone(phone):
            raise ConflictError("Mobile already registered")

        password_hash = await run_in_threadpool(get_password_hash, data.password)
        admin = await self.repository.create_admin(
            phone=phone,
            email=data.email,
            name=data.name.strip(),
            password_hash=password_hash,
        )
        logger.info(f"Admin {admin.id} created")
        return AdminCreateResponse(admin=AdminInfo.from_account(admin))

    async def unlock(self, data: AdminUnlockRequest) -> SuccessResponse:
        phone = normalize_mobile(data.mobile)
        if not await self.repository.unlock(phone):
            raise NotFoundError("User not found")
        logger.info(f"Account {phone} unlocked by administrator")
        return SuccessResponse()
