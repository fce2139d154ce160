from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # Wire names are camelCase; Python attributes stay snake_case
    model_config = ConfigDict(populate_by_name=True)


class UserOut(BaseModel):
    user_id: str
    name: str
    account_id: Optional[str] = None
    account_number: Optional[str] = None
    created_at: Optional[str] = None


class AccountOut(BaseModel):
    account_id: str
    account_number: str
    balance: float
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TransactionOut(BaseModel):
    transaction_id: str
    user_id: str
    txn_ref: str
    type: str
    amount: float
    to_account: Optional[str] = None
    from_bank: Optional[str] = None
    note: Optional[str] = None
    status: str
    created_at: Optional[str] = None


class PartnerBankOut(BaseModel):
    bank_id: str
    name: str
    status: str
    prefunded_balance: Optional[float] = None


class TransferLogOut(BaseModel):
    transfer_log_id: str
    transaction_id: str
    sender_user_id: str
    sender_name: Optional[str] = None
    sender_account: Optional[str] = None
    recipient_user_id: str
    recipient_name: Optional[str] = None
    recipient_account: Optional[str] = None
    recipient_bank: Optional[str] = None
    amount: float
    transfer_type: str
    instant_status: str
    backend_status: str
    settlement_ref: Optional[str] = None
    settlement_due_at: Optional[str] = None
    settled_at: Optional[str] = None
    prefunded_account_used: Optional[str] = None
    prefunded_account_balance: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TransferIn(CamelModel):
    from_user_id: str = Field(..., alias="fromUserId", min_length=1, examples=["user-001"])
    to_account_number: str = Field(
        ..., alias="toAccountNumber", min_length=10, max_length=10, examples=["0123456789"]
    )
    # Whole cents only, so debit and credit round identically
    amount: Decimal = Field(..., gt=0, decimal_places=2, examples=[2000])
    # Destination bank; a name outside the partner registry means an internal transfer
    from_bank: str = Field(..., alias="fromBank", min_length=1, examples=["Access Bank"])
    note: Optional[str] = None


class TransferLogSummary(CamelModel):
    id: str
    instant_status: str = Field(..., alias="instantStatus")
    backend_status: str = Field(..., alias="backendStatus")
    transfer_type: str = Field(..., alias="transferType")


class BalanceOut(BaseModel):
    id: str
    balance: float


class NewBalances(BaseModel):
    sender: BalanceOut
    recipient: BalanceOut


class TransferOut(CamelModel):
    success: bool
    message: str
    debit_transaction: TransactionOut = Field(..., alias="debitTransaction")
    credit_transaction: TransactionOut = Field(..., alias="creditTransaction")
    transfer_log: TransferLogSummary = Field(..., alias="transferLog")
    new_balances: NewBalances = Field(..., alias="newBalances")


class SeedIn(BaseModel):
    token: str


class SeedOut(BaseModel):
    seeded_users_created: int
    seeded_banks_created: int
