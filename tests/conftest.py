import os
import tempfile
from decimal import Decimal

# Must be set before the app (and its engine/logging) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="instant-transfer-logs-"))
os.environ.setdefault("SETTLEMENT_WORKER_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from instant_transfer.api.deps import get_db
from instant_transfer.app import app
from instant_transfer.db.models import (
    Account,
    BANK_DOWN,
    BANK_SLOW,
    BANK_UP,
    PartnerBank,
    PrefundedAccount,
    User,
)
from instant_transfer.db.session import Base

ALICE_ACCOUNT = "0000000001"
BOB_ACCOUNT = "0000000002"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(anyio_backend):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield factory
    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def add_customer(db, user_id, name, account_number=None, balance="0"):
    account_id = None
    if account_number is not None:
        account_id = f"acct-{user_id}"
        db.add(Account(account_id=account_id, account_number=account_number, balance=Decimal(balance)))
        await db.flush()
    db.add(User(user_id=user_id, name=name, account_id=account_id))
    await db.flush()


async def add_partner_bank(db, bank_id, name, status, prefunded=None):
    db.add(PartnerBank(bank_id=bank_id, name=name, status=status))
    await db.flush()
    if prefunded is not None:
        db.add(PrefundedAccount(prefunded_account_id=f"PF-{bank_id}", bank_id=bank_id, balance=Decimal(prefunded)))
        await db.flush()


@pytest.fixture
async def seeded(session_factory):
    """
    alice (5000) and bob (1000) bank with us; carol has no account.
    Partner banks: Access (UP, 10000), First (DOWN, 10000),
    Zenith (SLOW, 100), Union (no status, 10000).
    """
    async with session_factory() as db:
        async with db.begin():
            await add_customer(db, "alice", "Alice Ade", ALICE_ACCOUNT, "5000")
            await add_customer(db, "bob", "Bob Bello", BOB_ACCOUNT, "1000")
            await add_customer(db, "carol", "Carol Chukwu")
            await add_partner_bank(db, "ACCESS", "Access Bank", BANK_UP, "10000")
            await add_partner_bank(db, "FIRST", "First Bank", BANK_DOWN, "10000")
            await add_partner_bank(db, "ZENITH", "Zenith Bank", BANK_SLOW, "100")
            await add_partner_bank(db, "UNION", "Union Bank", None, "10000")


async def balance_of(session_factory, model, pk):
    async with session_factory() as db:
        row = await db.get(model, pk)
        return Decimal(row.balance)


async def count_rows(session_factory, model):
    async with session_factory() as db:
        res = await db.execute(select(func.count()).select_from(model))
        return res.scalar_one()
