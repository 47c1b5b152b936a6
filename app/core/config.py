from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "PhoneAuth"
    API_PREFIX: str = "/api/auth"
    DEBUG: bool = False

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "phoneauth"
    DATABASE_URL: Optional[str] = None
    REDIS_URL: Optional[str] = None

    # Both secrets are required; a missing value fails start-up.
    JWT_SECRET: str
    OTP_HMAC_KEY: str
    JWT_ALGORITHM: str = "HS256"

    OTP_LENGTH: int = 6
    OTP_TTL_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 5
    USER_TOKEN_EXPIRE_DAYS: int = 30
    ADMIN_TOKEN_EXPIRE_HOURS: int = 12
    PASSWORD_BCRYPT_ROUNDS: int = 12

    DEFAULT_COUNTRY_CODE: str = "977"
    DOMESTIC_MOBILE_PREFIXES: List[str] = ["97", "98"]

    SEND_OTP_RATE_LIMIT: int = 5
    SEND_OTP_RATE_WINDOW_SECONDS: int = 3600

    AUTH_COOKIE_NAME: str = "access_token"
    AUTH_COOKIE_SECURE: bool = True
    AUTH_COOKIE_SAMESITE: str = "strict"
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        case_sensitive = True
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

settings = Settings()
