# instant_transfer/db/crud.py
"""
Data-access operations used by the transfer handler and the settlement worker.

Every function runs on the caller's AsyncSession and never commits; callers
own the transaction boundary (``async with db.begin()``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from instant_transfer.db.models import (
    Account,
    BACKEND_PENDING,
    BACKEND_SETTLED,
    PartnerBank,
    PrefundedAccount,
    Transaction,
    TransferLog,
    User,
)
from instant_transfer.utils import new_id, utcnow


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    q = select(User).where(User.user_id == user_id)
    res = await db.execute(q)
    return res.scalars().first()


async def get_account(db: AsyncSession, account_id: str, for_update: bool = False) -> Optional[Account]:
    q = select(Account).where(Account.account_id == account_id)
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().first()


async def lock_accounts(db: AsyncSession, *account_ids: str) -> Dict[str, Account]:
    """
    Lock the given account rows FOR UPDATE, always in account_id order, so two
    transfers touching the same pair of accounts cannot deadlock. Missing ids
    are absent from the result.
    """
    locked = {}
    for account_id in sorted(set(account_ids)):
        account = await get_account(db, account_id, for_update=True)
        if account is not None:
            locked[account_id] = account
    return locked


async def get_account_by_number(db: AsyncSession, account_number: str) -> Optional[Account]:
    q = select(Account).where(Account.account_number == account_number)
    res = await db.execute(q)
    return res.scalars().first()


async def find_user_by_account_number(db: AsyncSession, account_number: str) -> Optional[User]:
    q = (
        select(User)
        .join(Account, User.account_id == Account.account_id)
        .where(Account.account_number == account_number)
    )
    res = await db.execute(q)
    return res.scalars().first()


async def get_partner_bank(db: AsyncSession, name: str) -> Optional[PartnerBank]:
    q = select(PartnerBank).where(PartnerBank.name == name)
    res = await db.execute(q)
    return res.scalars().first()


async def list_partner_banks(db: AsyncSession) -> List[PartnerBank]:
    q = select(PartnerBank).order_by(PartnerBank.name)
    res = await db.execute(q)
    return res.scalars().all()


async def get_all_prefunded_accounts(db: AsyncSession) -> List[PrefundedAccount]:
    q = select(PrefundedAccount).order_by(PrefundedAccount.prefunded_account_id)
    res = await db.execute(q)
    return res.scalars().all()


async def get_prefunded_accounts_for_bank(
    db: AsyncSession, bank_id: str, for_update: bool = False
) -> List[PrefundedAccount]:
    # Only this bank's pools are locked; transfers to other banks proceed in parallel
    q = (
        select(PrefundedAccount)
        .where(PrefundedAccount.bank_id == bank_id)
        .order_by(PrefundedAccount.prefunded_account_id)
    )
    if for_update:
        q = q.with_for_update()
    res = await db.execute(q)
    return res.scalars().all()


async def update_prefunded_account_balance(db: AsyncSession, prefunded_account_id: str, new_balance: Decimal) -> None:
    await db.execute(
        update(PrefundedAccount)
        .where(PrefundedAccount.prefunded_account_id == prefunded_account_id)
        .values(balance=new_balance, updated_at=utcnow())
    )


async def update_account_balance(db: AsyncSession, account_id: str, new_balance: Decimal) -> None:
    await db.execute(
        update(Account)
        .where(Account.account_id == account_id)
        .values(balance=new_balance, updated_at=utcnow())
    )


async def create_transaction(db: AsyncSession, **fields) -> Transaction:
    fields.setdefault("transaction_id", new_id())
    fields.setdefault("created_at", utcnow())
    tx = Transaction(**fields)
    db.add(tx)
    await db.flush()
    return tx


async def get_transactions_for_user(db: AsyncSession, user_id: str, limit: int = 20) -> List[Transaction]:
    q = (
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at.desc(), Transaction.transaction_id.desc())
        .limit(limit)
    )
    res = await db.execute(q)
    return res.scalars().all()


async def create_transfer_log(db: AsyncSession, **fields) -> TransferLog:
    now = utcnow()
    fields.setdefault("transfer_log_id", new_id())
    fields.setdefault("created_at", now)
    fields.setdefault("updated_at", now)
    log = TransferLog(**fields)
    db.add(log)
    await db.flush()
    return log


async def get_transfer_log(db: AsyncSession, transfer_log_id: str) -> Optional[TransferLog]:
    q = select(TransferLog).where(TransferLog.transfer_log_id == transfer_log_id)
    res = await db.execute(q)
    return res.scalars().first()


async def update_transfer_log_backend_status(
    db: AsyncSession, transfer_log_id: str, status: str, settlement_ref: Optional[str] = None
) -> None:
    now = utcnow()
    values = {"backend_status": status, "settlement_ref": settlement_ref, "updated_at": now}
    if status == BACKEND_SETTLED:
        values["settled_at"] = now
    await db.execute(
        update(TransferLog)
        .where(TransferLog.transfer_log_id == transfer_log_id)
        .values(**values)
    )


async def get_due_settlements(db: AsyncSession, now: datetime, limit: int = 100) -> List[TransferLog]:
    q = (
        select(TransferLog)
        .where(
            TransferLog.backend_status == BACKEND_PENDING,
            TransferLog.settlement_due_at.is_not(None),
            TransferLog.settlement_due_at <= now,
        )
        .order_by(TransferLog.settlement_due_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )
    res = await db.execute(q)
    return res.scalars().all()
