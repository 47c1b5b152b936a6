"""
Account persistence.

All writes that guard the OTP state machine are single conditional UPDATE
statements, so two requests racing on the same account cannot both act on
the same outstanding code.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import ConflictError, LockedError
from app.core.utils import utcnow
from app.db.models import Account, Role


class UpsertStatus(str, Enum):
    CREATED = "created"
    FOUND = "found"


@dataclass
class UpsertOutcome:
    status: UpsertStatus
    account: Account

    @property
    def created(self) -> bool:
        return self.status is UpsertStatus.CREATED


class AccountRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_phone(self, phone: str) -> Optional[Account]:
        stmt = select(Account).where(Account.phone == phone).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find_by_id(self, account_id: UUID) -> Optional[Account]:
        return await self.session.get(Account, account_id, populate_existing=True)

    async def find_by_email(self, email: str, role: Optional[Role] = None) -> Optional[Account]:
        stmt = select(Account).where(Account.email == email.strip().lower())
        if role is not None:
            stmt = stmt.where(Account.role == role)
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().first()

    async def upsert_by_phone(
        self,
        phone: str,
        create: Dict[str, Any],
        update_values: Dict[str, Any],
    ) -> UpsertOutcome:
        """
        Create the account for ``phone`` or apply ``update_values`` to it.

        Updates only apply to unlocked accounts; an account locked in the
        meantime raises ``LockedError``.
        """
        existing = await self.find_by_phone(phone)
        if existing is None:
            account = Account(phone=phone, **create, **update_values)
            self.session.add(account)
            try:
                await self.session.commit()
            except IntegrityError:
                # Another request created it first
                await self.session.rollback()
            else:
                await self.session.refresh(account)
                return UpsertOutcome(UpsertStatus.CREATED, account)

        stmt = (
            update(Account)
            .where(Account.phone == phone, Account.locked == False)  # noqa: E712
            .values(**update_values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        if result.rowcount == 0:
            raise LockedError()

        account = await self.find_by_phone(phone)
        return UpsertOutcome(UpsertStatus.FOUND, account)

    async def create_admin(
        self,
        *,
        phone: str,
        email: str,
        name: str,
        password_hash: str,
    ) -> Account:
        admin = Account(
            phone=phone,
            email=email.strip().lower(),
            name=name,
            password_hash=password_hash,
            role=Role.ADMIN,
            profile_complete=True,
        )
        self.session.add(admin)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Email or mobile already registered")
        await self.session.refresh(admin)
        return admin

    async def update_fields(self, account: Account, **fields: Any) -> Account:
        for key, value in fields.items():
            setattr(account, key, value)
        account.updated_at = utcnow()
        self.session.add(account)
        await self.session.commit()
        await self.session.refresh(account)
        return account

    async def conditional_clear_otp(
        self,
        phone: str,
        expected_hash: str,
        not_expired_before: datetime,
    ) -> bool:
        """
        Consume the outstanding OTP if it is still ``expected_hash`` and unexpired.

        Returns False when another request already consumed or replaced it.
        """
        stmt = (
            update(Account)
            .where(
                Account.phone == phone,
                Account.otp_hash == expected_hash,
                Account.otp_expires_at >= not_expired_before,
                Account.locked == False,  # noqa: E712
            )
            .values(
                otp_hash=None,
                otp_expires_at=None,
                otp_attempts=0,
                locked=False,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def record_failed_attempt(
        self,
        account_id: UUID,
        expected_hash: str,
        max_attempts: int,
    ) -> Optional[int]:
        """
        Atomically count a wrong code against the outstanding OTP.

        Sets ``locked`` in the same statement once ``max_attempts`` is reached.
        Returns the new attempt count, or None if the OTP was replaced,
        consumed or the account locked by a concurrent request.
        """
        next_attempts = Account.otp_attempts + 1
        stmt = (
            update(Account)
            .where(
                Account.id == account_id,
                Account.otp_hash == expected_hash,
                Account.locked == False,  # noqa: E712
            )
            .values(
                otp_attempts=next_attempts,
                locked=case((next_attempts >= max_attempts, True), else_=False),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        if result.rowcount == 0:
            return None

        attempts = await self.session.execute(
            select(Account.otp_attempts).where(Account.id == account_id)
        )
        return attempts.scalar_one()

    async def unlock(self, phone: str) -> bool:
        stmt = (
            update(Account)
            .where(Account.phone == phone)
            .values(
                locked=False,
                otp_attempts=0,
                otp_hash=None,
                otp_expires_at=None,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1
