from typing import List

from fastapi import APIRouter, Depends, HTTPException

from instant_transfer.db import crud
from instant_transfer.logging_config import get_logger
from .deps import get_db
from .schemas import AccountOut, TransactionOut, UserOut
from .serializers import serialize_account, serialize_tx, serialize_user

logger = get_logger("instant_transfer.api.accounts")

router = APIRouter(tags=["accounts"])


@router.get("/users/{user_id}", response_model=UserOut)
async def get_user(user_id: str, db=Depends(get_db)):
    """
    Fetch a single user by id, with the linked account number when present.
    """
    logger.info("Fetching user user_id=%s", user_id)
    u = await crud.get_user(db, user_id)
    if not u:
        logger.warning("User not found user_id=%s", user_id)
        raise HTTPException(status_code=404, detail="User not found")
    account = await crud.get_account(db, u.account_id) if u.account_id else None
    return serialize_user(u, account)


@router.get("/accounts/{account_number}", response_model=AccountOut)
async def get_account(account_number: str, db=Depends(get_db)):
    """
    Fetch a single account by account_number.
    """
    acct_num = account_number.strip()
    logger.info("Lookup account_number=%s", acct_num)
    a = await crud.get_account_by_number(db, acct_num)
    if not a:
        logger.warning("Account not found: %s", acct_num)
        raise HTTPException(status_code=404, detail="Account not found")
    return serialize_account(a)


@router.get("/accounts/{account_number}/transactions", response_model=List[TransactionOut])
async def get_account_transactions(account_number: str, limit: int = 20, db=Depends(get_db)):
    """
    Return recent transactions of the account's owner, newest first.
    """
    logger.info("Fetching transactions for account_number=%s limit=%s", account_number, limit)
    owner = await crud.find_user_by_account_number(db, account_number.strip())
    if not owner:
        logger.warning("Account not found for transactions account_number=%s", account_number)
        raise HTTPException(status_code=404, detail="Account not found")
    txs = await crud.get_transactions_for_user(db, owner.user_id, limit=limit)
    return [serialize_tx(t) for t in txs]
