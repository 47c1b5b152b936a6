from sqlmodel import SQLModel
from .account import Account, Role

__all__ = [
    "SQLModel",
    "Account",
    "Role",
]
