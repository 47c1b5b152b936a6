from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from app.core.utils import utcnow

class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class Account(SQLModel, table=True):
    __tablename__ = "accounts"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    phone: str = Field(index=True, unique=True)
    email: Optional[str] = Field(default=None, index=True, unique=True)
    password_hash: Optional[str] = None
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    role: Role = Field(default=Role.USER)
    profile_complete: bool = Field(default=False)

    # Outstanding OTP: hash and expiry are set and cleared together
    otp_hash: Optional[str] = None
    otp_expires_at: Optional[datetime] = None
    otp_attempts: int = Field(default=0)
    locked: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
