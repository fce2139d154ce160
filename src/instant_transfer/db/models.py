# instant_transfer/db/models.py
from sqlalchemy import Column, String, TIMESTAMP, DECIMAL, ForeignKey

from instant_transfer.db.session import Base

# Partner bank operational status
BANK_UP = "UP"
BANK_SLOW = "SLOW"
BANK_DOWN = "DOWN"
PROBLEMATIC_BANK_STATUSES = (BANK_SLOW, BANK_DOWN)

TRANSFER_INTRA_BANK = "INTRA_BANK"
TRANSFER_INTER_BANK = "INTER_BANK"

INSTANT_CREDITED = "CREDITED"

BACKEND_PENDING = "PENDING"
BACKEND_UNRESOLVED = "UNRESOLVED"
BACKEND_SETTLED = "SETTLED"

ENTRY_DEBIT = "debit"
ENTRY_CREDIT = "credit"


class Account(Base):
    __tablename__ = "accounts"

    account_id = Column(String(64), primary_key=True)
    account_number = Column(String(10), unique=True, nullable=False)
    balance = Column(DECIMAL(15, 2), nullable=False, default=0)
    created_at = Column(TIMESTAMP)
    updated_at = Column(TIMESTAMP)


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    # A user without a linked account can neither send nor receive
    account_id = Column(String(64), ForeignKey("accounts.account_id"), nullable=True)
    created_at = Column(TIMESTAMP)


class PartnerBank(Base):
    __tablename__ = "partner_banks"

    bank_id = Column(String(64), primary_key=True)
    name = Column(String(255), unique=True, nullable=False)
    # NULL is treated as UP
    status = Column(String(10), nullable=True)
    updated_at = Column(TIMESTAMP)


class PrefundedAccount(Base):
    __tablename__ = "prefunded_accounts"

    prefunded_account_id = Column(String(64), primary_key=True)
    bank_id = Column(String(64), ForeignKey("partner_banks.bank_id"), nullable=False)
    balance = Column(DECIMAL(15, 2), nullable=False, default=0)
    updated_at = Column(TIMESTAMP)


class Transaction(Base):
    __tablename__ = "transactions"

    transaction_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.user_id"), nullable=False)
    txn_ref = Column(String(50), nullable=False, index=True)
    type = Column(String(10), nullable=False)
    amount = Column(DECIMAL(15, 2), nullable=False)
    to_account = Column(String(20), nullable=True)
    from_bank = Column(String(255))
    note = Column(String)
    status = Column(String(20))
    created_at = Column(TIMESTAMP)


class TransferLog(Base):
    __tablename__ = "transfer_logs"

    transfer_log_id = Column(String(64), primary_key=True)
    transaction_id = Column(String(50), nullable=False, index=True)
    sender_user_id = Column(String(64), nullable=False)
    sender_name = Column(String(255))
    sender_account = Column(String(10))
    recipient_user_id = Column(String(64), nullable=False)
    recipient_name = Column(String(255))
    recipient_account = Column(String(10))
    recipient_bank = Column(String(255))
    amount = Column(DECIMAL(15, 2), nullable=False)
    transfer_type = Column(String(20), nullable=False)
    instant_status = Column(String(20), nullable=False)
    backend_status = Column(String(20), nullable=False, index=True)
    settlement_ref = Column(String(50), nullable=True)
    # Set only for logs that will settle; the worker picks them up once due
    settlement_due_at = Column(TIMESTAMP, nullable=True)
    settled_at = Column(TIMESTAMP, nullable=True)
    prefunded_account_used = Column(String(64), nullable=True)
    prefunded_account_balance = Column(DECIMAL(15, 2), nullable=True)
    notes = Column(String)
    created_at = Column(TIMESTAMP)
    updated_at = Column(TIMESTAMP)
