
from decimal import Decimal
import logging
from fastapi import APIRouter, Depends, HTTPException, Path, Response
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictFloat, field_validator
from typing import Union

from .domain import MAX_BALANCE, BankAccount
from .repo import AccountRegistry, get_registry

log = logging.getLogger("api")
router = APIRouter()
accounts = APIRouter(prefix="/api/BankAccount", tags=["accounts"])

AccountID = Path(..., ge=1, description="Account id (positive integer)")

MIN_TRANSFER = Decimal("0.01")

Number = Union[StrictInt, StrictFloat]


def as_decimal(v: Number) -> Decimal:
    return Decimal(str(v))


def checked(v: Number, minimum: Decimal, inclusive: bool, message: str) -> Number:
    d = as_decimal(v)
    if not d.is_finite():
        raise ValueError("must be a finite number")
    if d < minimum or (d == minimum and not inclusive):
        raise ValueError(message)
    if d > MAX_BALANCE:
        raise ValueError(f"must not exceed {MAX_BALANCE}")
    return v


class AccountBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: StrictInt = Field(..., ge=1)
    account_number: str = Field(..., alias="accountNumber", min_length=1, max_length=64)
    holder_name: str = Field(..., alias="holderName", min_length=1, max_length=100)
    balance: Number = 0

    @field_validator("balance")
    @classmethod
    def non_negative(cls, v):
        return checked(v, Decimal("0"), True, "balance must be >= 0")

    def to_account(self) -> BankAccount:
        return BankAccount(self.id, self.account_number, self.holder_name, as_decimal(self.balance))


class TransferRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_account_id: StrictInt = Field(..., alias="fromAccountId", ge=1)
    to_account_id: StrictInt = Field(..., alias="toAccountId", ge=1)
    amount: Number

    @field_validator("amount")
    @classmethod
    def at_least_one_cent(cls, v):
        return checked(v, MIN_TRANSFER, True, "amount must be greater than zero")


class DepositBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Number
    transaction_type: str = Field("Credit", alias="transactionType", max_length=64)

    @field_validator("amount")
    @classmethod
    def positive(cls, v):
        return checked(v, Decimal("0"), False, "amount must be > 0")


class WithdrawBody(DepositBody):
    transaction_type: str = Field("Debit", alias="transactionType", max_length=64)


@router.get("/")
def root():
    return {"status": "ok", "message": "Welcome to the Bank Account API", "docs": "/docs"}


@router.get("/health")
def health():
    return {"status": "ok"}


@accounts.get("")
def get_all_accounts(registry: AccountRegistry = Depends(get_registry)):
    return [a.to_dict() for a in registry.get_all()]


@accounts.get("/{account_id}")
def get_account_by_id(account_id: int = AccountID, registry: AccountRegistry = Depends(get_registry)):
    # AccountNotFound -> 404 in the app-level handler
    return registry.get_by_id(account_id).to_dict()


@accounts.post("", status_code=201)
def create_account(body: AccountBody, response: Response, registry: AccountRegistry = Depends(get_registry)):
    created = registry.create(body.to_account())
    response.headers["Location"] = f"{accounts.prefix}/{created.id}"
    log.info("create account id=%s", created.id)
    return created.to_dict()


@accounts.put("/{account_id}", status_code=204)
def update_account(body: AccountBody, account_id: int = AccountID,
                   registry: AccountRegistry = Depends(get_registry)):
    if account_id != body.id:
        raise HTTPException(status_code=400, detail="Account id in path does not match body.")
    registry.update(body.to_account())
    return Response(status_code=204)


@accounts.delete("/{account_id}", status_code=204)
def delete_account(account_id: int = AccountID, registry: AccountRegistry = Depends(get_registry)):
    registry.delete(account_id)
    return Response(status_code=204)


@accounts.post("/transfer")
def transfer(body: TransferRequest, registry: AccountRegistry = Depends(get_registry)):
    if body.from_account_id == body.to_account_id:
        raise HTTPException(status_code=400, detail="Cannot transfer to the same account.")
    source, target = registry.transfer_funds(body.from_account_id, body.to_account_id, as_decimal(body.amount))
    return {"message": "Transfer successful.", "from": source.to_dict(), "to": target.to_dict()}


@accounts.post("/{account_id}/deposit")
def deposit(body: DepositBody, account_id: int = AccountID, registry: AccountRegistry = Depends(get_registry)):
    acct = registry.deposit(account_id, as_decimal(body.amount), body.transaction_type)
    return acct.to_dict()


@accounts.post("/{account_id}/withdraw")
def withdraw(body: WithdrawBody, account_id: int = AccountID, registry: AccountRegistry = Depends(get_registry)):
    # InsufficientFunds -> 400 "Insufficient funds."
    acct = registry.withdraw(account_id, as_decimal(body.amount), body.transaction_type)
    return acct.to_dict()


router.include_router(accounts)
