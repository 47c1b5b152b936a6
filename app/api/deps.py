from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthError, ForbiddenError, NotFoundError
from app.core.otp import OtpHasher, get_otp_hasher
from app.core.rate_limit import InMemoryRateLimiter, RedisRateLimiter
from app.core.redis import redis_client
from app.core.security import CredentialCodec, InvalidTokenError, get_credential_codec
from app.db.models import Role
from app.db.repository import AccountRepository
from app.db.session import get_session
from app.schemas.account import AuthContext
from app.services.auth_service import AuthService
from app.services.otp_service import OtpService
from app.services.sms_service import LoggingSmsSender, SmsSender

bearer_scheme = HTTPBearer(auto_error=False)

async def get_repository(session: AsyncSession = Depends(get_session)) -> AccountRepository:
    return AccountRepository(session)

def get_codec() -> CredentialCodec:
    return get_credential_codec()

def get_hasher() -> OtpHasher:
    return get_otp_hasher()

@lru_cache(maxsize=1)
def get_sms_sender() -> SmsSender:
    return LoggingSmsSender()

@lru_cache(maxsize=1)
def get_send_rate_limiter():
    if redis_client is not None:
        return RedisRateLimiter(
            redis_client,
            settings.SEND_OTP_RATE_LIMIT,
            settings.SEND_OTP_RATE_WINDOW_SECONDS,
        )
    return InMemoryRateLimiter(settings.SEND_OTP_RATE_LIMIT, settings.SEND_OTP_RATE_WINDOW_SECONDS)

async def enforce_send_otp_rate_limit(
    request: Request,
    limiter=Depends(get_send_rate_limiter),
) -> None:
    client_host = request.client.host if request.client else "unknown"
    await limiter.check(f"send-otp:{client_host}")

async def get_otp_service(
    repository: AccountRepository = Depends(get_repository),
    hasher: OtpHasher = Depends(get_hasher),
    codec: CredentialCodec = Depends(get_codec),
    sms_sender: SmsSender = Depends(get_sms_sender),
) -> OtpService:
    return OtpService(repository, hasher, codec, sms_sender)

async def get_auth_service(
    repository: AccountRepository = Depends(get_repository),
    codec: CredentialCodec = Depends(get_codec),
) -> AuthService:
    return AuthService(repository, codec)

def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # Authorization header first, then the browser session cookie
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME) or None

async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repository: AccountRepository = Depends(get_repository),
    codec: CredentialCodec = Depends(get_codec),
) -> AuthContext:
    token = _extract_token(request, credentials)
    if not token:
        raise AuthError("Unauthorized: Missing token")

    try:
        claims = codec.verify(token)
        if claims.get("purpose") != "access":
            raise InvalidTokenError("Unexpected token purpose")
        account_id = UUID(claims["sub"])
    except (InvalidTokenError, ValueError):
        raise AuthError("Invalid or expired token")

    # Deleted accounts invalidate their tokens
    account = await repository.find_by_id(account_id)
    if account is None:
        raise NotFoundError("User not found")

    context = AuthContext(account=account, token=token, claims=claims)
    request.state.auth = context
    return context

def require_roles(*roles: Role):
    """Dependency factory: authenticate, then require one of ``roles`` (any role if empty)."""
    async def dependency(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if roles and context.account.role not in roles:
            raise ForbiddenError()
        return context
    return dependency
