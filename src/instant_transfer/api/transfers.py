from datetime import timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from instant_transfer import config
from instant_transfer.db import crud
from instant_transfer.db.models import (
    BACKEND_PENDING,
    BACKEND_UNRESOLVED,
    BANK_UP,
    ENTRY_CREDIT,
    ENTRY_DEBIT,
    INSTANT_CREDITED,
    PROBLEMATIC_BANK_STATUSES,
    TRANSFER_INTER_BANK,
    TRANSFER_INTRA_BANK,
)
from instant_transfer.logging_config import get_logger
from instant_transfer.utils import new_transfer_ref, utcnow
from .deps import get_db
from .schemas import TransferIn, TransferLogOut, TransferOut
from .serializers import serialize_transfer_log, serialize_transfer_log_summary, serialize_tx

logger = get_logger("instant_transfer.api.transfers")

router = APIRouter(tags=["transfers"])

CENTS = Decimal("0.01")


def display_amount(amount: Decimal) -> str:
    """
    Grouped thousands, trailing zero cents dropped: 2000.00 -> "2,000", 1500.50 -> "1,500.5".
    """
    text = f"{amount.quantize(CENTS):,}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@router.post("/transfer", response_model=TransferOut)
async def transfer_funds(payload: TransferIn, db=Depends(get_db)):
    """
    Instant transfer from a user's account to any account number.

    The recipient is credited immediately. When ``fromBank`` names a partner
    bank the amount is also taken from that bank's prefunded pool, and the
    transfer log tracks settlement with the partner separately. Every
    mutation happens inside a single DB transaction.
    """
    amount = Decimal(payload.amount)
    logger.info(
        "Transfer request from_user=%s to_account=%s amount=%s bank=%s",
        payload.from_user_id,
        payload.to_account_number,
        amount,
        payload.from_bank,
    )

    try:
        async with db.begin():
            sender = await crud.get_user(db, payload.from_user_id)
            if not sender or not sender.account_id:
                raise HTTPException(status_code=404, detail="Sender account not found")
            recipient = await crud.find_user_by_account_number(db, payload.to_account_number)

            # Both rows locked together in a fixed order before any balance is read
            account_ids = [sender.account_id]
            if recipient and recipient.account_id:
                account_ids.append(recipient.account_id)
            locked = await crud.lock_accounts(db, *account_ids)

            sender_account = locked.get(sender.account_id)
            if not sender_account:
                raise HTTPException(status_code=404, detail="Sender account not found")
            if not recipient or not recipient.account_id:
                raise HTTPException(status_code=404, detail="Recipient account not found")
            recipient_account = locked.get(recipient.account_id)
            if not recipient_account:
                raise HTTPException(status_code=404, detail="Recipient account not found")

            if Decimal(sender_account.balance) < amount:
                logger.warning(
                    "Transfer failed - insufficient funds user=%s balance=%s amount=%s",
                    sender.user_id,
                    sender_account.balance,
                    amount,
                )
                raise HTTPException(status_code=400, detail="Insufficient balance")

            txn_ref = new_transfer_ref()

            # No partner bank by that name: the recipient banks with us
            bank = await crud.get_partner_bank(db, payload.from_bank)
            is_intra_bank = bank is None
            recipient_bank_id = bank.bank_id if bank else config.HOME_BANK_NAME
            bank_status = (bank.status if bank else None) or BANK_UP
            is_problematic_bank = bank_status in PROBLEMATIC_BANK_STATUSES

            prefunded_account_used = None
            prefunded_account_balance = None
            if not is_intra_bank:
                prefunded_accounts = await crud.get_prefunded_accounts_for_bank(
                    db, recipient_bank_id, for_update=True
                )
                available = next(
                    (p for p in prefunded_accounts if Decimal(p.balance) >= amount),
                    None,
                )
                if available is None:
                    logger.warning(
                        "Transfer failed - prefunded pool exhausted bank=%s amount=%s",
                        recipient_bank_id,
                        amount,
                    )
                    raise HTTPException(status_code=400, detail="Insufficient prefunded account balance")

                # Drawn even for SLOW/DOWN banks; the partner is reconciled later
                prefunded_account_balance = (Decimal(available.balance) - amount).quantize(CENTS)
                await crud.update_prefunded_account_balance(
                    db, available.prefunded_account_id, prefunded_account_balance
                )
                prefunded_account_used = available.prefunded_account_id

            debit_tx = await crud.create_transaction(
                db,
                user_id=sender.user_id,
                txn_ref=txn_ref,
                type=ENTRY_DEBIT,
                amount=amount,
                to_account=payload.to_account_number,
                from_bank=config.HOME_BANK_NAME,
                note=payload.note or f"Transfer to {payload.to_account_number}",
                status="success",
            )
            credit_tx = await crud.create_transaction(
                db,
                user_id=recipient.user_id,
                txn_ref=txn_ref,
                type=ENTRY_CREDIT,
                amount=amount,
                from_bank=config.HOME_BANK_NAME,
                note=payload.note or f"Transfer from {sender_account.account_number}",
                status="success",
            )

            new_sender_balance = (Decimal(sender_account.balance) - amount).quantize(CENTS)
            await crud.update_account_balance(db, sender_account.account_id, new_sender_balance)
            # Read after the debit so a transfer to one's own account nets to zero
            new_recipient_balance = (Decimal(recipient_account.balance) + amount).quantize(CENTS)
            await crud.update_account_balance(db, recipient_account.account_id, new_recipient_balance)

            now = utcnow()
            if is_intra_bank:
                notes = "Instant transfer - Internal ledger"
            else:
                notes = f"Instant transfer - Prefunded account used (Bank: {bank_status})"
            transfer_log = await crud.create_transfer_log(
                db,
                transaction_id=txn_ref,
                sender_user_id=sender.user_id,
                sender_name=sender.name,
                sender_account=sender_account.account_number,
                recipient_user_id=recipient.user_id,
                recipient_name=recipient.name,
                recipient_account=recipient_account.account_number,
                recipient_bank=config.HOME_BANK_NAME if is_intra_bank else recipient_bank_id,
                amount=amount,
                transfer_type=TRANSFER_INTRA_BANK if is_intra_bank else TRANSFER_INTER_BANK,
                instant_status=INSTANT_CREDITED,
                backend_status=BACKEND_UNRESOLVED if is_problematic_bank else BACKEND_PENDING,
                settlement_due_at=(
                    None
                    if is_problematic_bank
                    else now + timedelta(seconds=config.SETTLEMENT_DELAY_SECONDS)
                ),
                prefunded_account_used=prefunded_account_used,
                prefunded_account_balance=prefunded_account_balance,
                notes=notes,
                created_at=now,
                updated_at=now,
            )

        logger.info("Instant transfer %s -> %s: %s", sender.name, recipient.name, amount)
        logger.info(
            "Balance update %s: %s, %s: %s",
            sender.name,
            new_sender_balance,
            recipient.name,
            new_recipient_balance,
        )
        logger.info(
            "Transfer log created id=%s status=%s/%s",
            transfer_log.transfer_log_id,
            transfer_log.instant_status,
            transfer_log.backend_status,
        )
        if is_problematic_bank:
            logger.warning(
                "Transfer %s marked %s due to %s bank status", txn_ref, BACKEND_UNRESOLVED, bank_status
            )

        return {
            "success": True,
            "message": f"Transfer of {config.CURRENCY_SYMBOL}{display_amount(amount)} successful",
            "debit_transaction": serialize_tx(debit_tx),
            "credit_transaction": serialize_tx(credit_tx),
            "transfer_log": serialize_transfer_log_summary(transfer_log),
            "new_balances": {
                "sender": {"id": sender_account.account_id, "balance": float(new_sender_balance)},
                "recipient": {"id": recipient_account.account_id, "balance": float(new_recipient_balance)},
            },
        }

    except HTTPException:
        raise
    except SQLAlchemyError as e:
        logger.exception("Transfer failed (DB error): %s", e)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
    except Exception as e:
        logger.exception("Transfer failed: %s", e)
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@router.get("/transfer-logs/{transfer_log_id}", response_model=TransferLogOut)
async def get_transfer_log(transfer_log_id: str, db=Depends(get_db)):
    """
    Fetch a transfer log, including its backend settlement status.
    """
    log = await crud.get_transfer_log(db, transfer_log_id)
    if not log:
        logger.warning("Transfer log not found id=%s", transfer_log_id)
        raise HTTPException(status_code=404, detail="Transfer log not found")
    return serialize_transfer_log(log)
