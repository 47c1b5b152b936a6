import os

# Settings are read at import time
os.environ["JWT_SECRET"] = "test-jwt-secret-0123456789abcdef0123456789"
os.environ["OTP_HMAC_KEY"] = "test-otp-hmac-key-0123456789abcdef012345"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_COOKIE_SECURE"] = "false"
os.environ.pop("REDIS_URL", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.api.deps import get_send_rate_limiter, get_sms_sender
from app.core.rate_limit import InMemoryRateLimiter
from app.core.security import get_password_hash
from app.db.repository import AccountRepository
from app.db.session import get_session
from app.main import app
from app.services.sms_service import SmsSender

API = "/api/auth"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


class CapturingSmsSender(SmsSender):
    def __init__(self):
        self.sent = []

    async def send_otp(self, phone: str, code: str) -> None:
        self.sent.append((phone, code))

    def last_code(self, phone: str) -> str:
        codes = [code for sent_to, code in self.sent if sent_to == phone]
        assert codes, f"no OTP sent to {phone}"
        return codes[-1]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def sms_sender():
    return CapturingSmsSender()


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(limit=3, window=3600)


@pytest_asyncio.fixture
async def client(session_factory, sms_sender, rate_limiter):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_sms_sender] = lambda: sms_sender
    app.dependency_overrides[get_send_rate_limiter] = lambda: rate_limiter
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_account(session_factory):
    async with session_factory() as session:
        return await AccountRepository(session).create_admin(
            phone="+9779800000001",
            email=ADMIN_EMAIL,
            name="Super Admin",
            password_hash=get_password_hash(ADMIN_PASSWORD),
        )


@pytest.fixture
def login_user(client, sms_sender):
    """Run send-otp + verify-otp and return the verify response body."""
    async def _login(mobile="9812345678"):
        res = await client.post(f"{API}/send-otp", json={"mobile": mobile})
        assert res.status_code == 200
        phone = sms_sender.sent[-1][0]
        res = await client.post(
            f"{API}/verify-otp",
            json={"mobile": mobile, "otp": sms_sender.last_code(phone)},
        )
        assert res.status_code == 200
        return res.json()
    return _login
