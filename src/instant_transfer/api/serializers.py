from typing import Any, Dict, Optional

from instant_transfer.db.models import Account, BANK_UP, PartnerBank, Transaction, TransferLog, User


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_user(u: User, account: Optional[Account] = None) -> Dict[str, Any]:
    return {
        "user_id": u.user_id,
        "name": u.name,
        "account_id": u.account_id,
        "account_number": account.account_number if account is not None else None,
        "created_at": _iso(getattr(u, "created_at", None)),
    }


def serialize_account(a: Account) -> Dict[str, Any]:
    return {
        "account_id": a.account_id,
        "account_number": a.account_number,
        "balance": float(a.balance) if a.balance is not None else 0.0,
        "created_at": _iso(getattr(a, "created_at", None)),
        "updated_at": _iso(getattr(a, "updated_at", None)),
    }


def serialize_tx(t: Transaction) -> Dict[str, Any]:
    return {
        "transaction_id": t.transaction_id,
        "user_id": t.user_id,
        "txn_ref": t.txn_ref,
        "type": t.type,
        "amount": _money(t.amount),
        "to_account": t.to_account,
        "from_bank": t.from_bank,
        "note": t.note,
        "status": t.status,
        "created_at": _iso(t.created_at),
    }


def serialize_partner_bank(b: PartnerBank, prefunded_balance=None) -> Dict[str, Any]:
    return {
        "bank_id": b.bank_id,
        "name": b.name,
        "status": b.status or BANK_UP,
        "prefunded_balance": _money(prefunded_balance),
    }


def serialize_transfer_log(log: TransferLog) -> Dict[str, Any]:
    return {
        "transfer_log_id": log.transfer_log_id,
        "transaction_id": log.transaction_id,
        "sender_user_id": log.sender_user_id,
        "sender_name": log.sender_name,
        "sender_account": log.sender_account,
        "recipient_user_id": log.recipient_user_id,
        "recipient_name": log.recipient_name,
        "recipient_account": log.recipient_account,
        "recipient_bank": log.recipient_bank,
        "amount": _money(log.amount),
        "transfer_type": log.transfer_type,
        "instant_status": log.instant_status,
        "backend_status": log.backend_status,
        "settlement_ref": log.settlement_ref,
        "settlement_due_at": _iso(log.settlement_due_at),
        "settled_at": _iso(log.settled_at),
        "prefunded_account_used": log.prefunded_account_used,
        "prefunded_account_balance": _money(log.prefunded_account_balance),
        "notes": log.notes,
        "created_at": _iso(log.created_at),
        "updated_at": _iso(log.updated_at),
    }


def serialize_transfer_log_summary(log: TransferLog) -> Dict[str, Any]:
    return {
        "id": log.transfer_log_id,
        "instant_status": log.instant_status,
        "backend_status": log.backend_status,
        "transfer_type": log.transfer_type,
    }
