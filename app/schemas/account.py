from dataclasses import dataclass, field
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional
from uuid import UUID
from datetime import date

from app.db.models import Account, Role

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True

class AccountInfo(CamelModel):
    id: UUID
    mobile: str
    name: Optional[str] = None
    dob: Optional[date] = None
    profile_complete: bool
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "AccountInfo":
        return cls(
            id=account.id,
            mobile=account.phone,
            name=account.name,
            dob=account.date_of_birth,
            profile_complete=account.profile_complete,
            role=account.role,
        )

class AdminInfo(CamelModel):
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "AdminInfo":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            mobile=account.phone,
            role=account.role,
        )

class CurrentAccountResponse(CamelModel):
    user: AccountInfo

@dataclass
class AuthContext:
    """Identity attached to a request once its token has been verified."""
    account: Account
    token: str
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def info(self) -> AccountInfo:
        return AccountInfo.from_account(self.account)
