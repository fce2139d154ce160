from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException

from instant_transfer import config
from instant_transfer.db.models import (
    Account,
    BANK_DOWN,
    BANK_SLOW,
    BANK_UP,
    PartnerBank,
    PrefundedAccount,
    User,
)
from instant_transfer.logging_config import get_logger
from instant_transfer.utils import utcnow
from .deps import get_db
from .schemas import SeedIn, SeedOut

logger = get_logger("instant_transfer.api.admin")

router = APIRouter(tags=["admin"])

SAMPLE_USERS = [
    {"user_id": "user-001", "name": "Adaeze Okafor", "account_number": "0123456789", "balance": "50000.00"},
    {"user_id": "user-002", "name": "Tunde Bakare", "account_number": "0234567891", "balance": "25000.00"},
    {"user_id": "user-003", "name": "Chioma Eze", "account_number": "0345678912", "balance": "12000.00"},
    {"user_id": "user-004", "name": "Ibrahim Musa", "account_number": "0456789123", "balance": "5000.00"},
]

SAMPLE_BANKS = [
    {"bank_id": "ACCESS", "name": "Access Bank", "status": BANK_UP, "prefunded": "1000000.00"},
    {"bank_id": "GTB", "name": "GTBank", "status": BANK_UP, "prefunded": "750000.00"},
    {"bank_id": "ZENITH", "name": "Zenith Bank", "status": BANK_SLOW, "prefunded": "500000.00"},
    {"bank_id": "FIRST", "name": "First Bank", "status": BANK_DOWN, "prefunded": "250000.00"},
]


@router.post("/admin/seed", response_model=SeedOut)
async def seed_demo(payload: SeedIn, db=Depends(get_db)):
    """
    Simple idempotent seeding of demo users, accounts, partner banks and prefunded pools.
    Protected by SIMPLE_ADMIN_TOKEN in environment.
    """
    if payload.token != config.SIMPLE_ADMIN_TOKEN:
        logger.warning("Admin seed unauthorized attempt")
        raise HTTPException(status_code=401, detail="Unauthorized")

    users_created = 0
    banks_created = 0
    now = utcnow()
    async with db.begin():
        for su in SAMPLE_USERS:
            if await db.get(User, su["user_id"]) is not None:
                continue
            account_id = f"acct-{su['user_id']}"
            db.add(
                Account(
                    account_id=account_id,
                    account_number=su["account_number"],
                    balance=Decimal(su["balance"]),
                    created_at=now,
                    updated_at=now,
                )
            )
            await db.flush()
            db.add(User(user_id=su["user_id"], name=su["name"], account_id=account_id, created_at=now))
            users_created += 1

        for sb in SAMPLE_BANKS:
            if await db.get(PartnerBank, sb["bank_id"]) is not None:
                continue
            db.add(PartnerBank(bank_id=sb["bank_id"], name=sb["name"], status=sb["status"], updated_at=now))
            await db.flush()
            db.add(
                PrefundedAccount(
                    prefunded_account_id=f"PF-{sb['bank_id']}",
                    bank_id=sb["bank_id"],
                    balance=Decimal(sb["prefunded"]),
                    updated_at=now,
                )
            )
            banks_created += 1

    logger.info("Admin seed complete; created=%s users, %s partner banks", users_created, banks_created)
    return {"seeded_users_created": users_created, "seeded_banks_created": banks_created}
