import logging
import threading
from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_UP,
    localcontext,
)
from typing import Union

from .errors import InsufficientFunds, InvalidAmount, InvalidTransactionType

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]

CREDIT = "credit"
DEBIT = "debit"

# Largest balance (and single amount) the ledger accepts.
MAX_BALANCE = Decimal("1000000000000000000")

# Ledger arithmetic either is exact or raises; it never rounds.
LEDGER_CONTEXT = Context(prec=60, traps=[InvalidOperation, Inexact, Overflow, DivisionByZero])


def q2(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        if x.is_finite():
            ctx.prec = max(ctx.prec, x.adjusted() + 4)
        return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def as_number(x: Decimal) -> float:
    if not x.is_finite():
        return float(x)
    return float(q2(x))

def to_decimal(value: Amount, message: str) -> Decimal:
    """Convert through str() so 0.1 stays 0.1; raise InvalidAmount for junk."""
    if isinstance(value, bool):
        raise InvalidAmount(message)
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidAmount(message) from e
    if not d.is_finite():
        raise InvalidAmount(message)
    return d

def check_balance(value: Amount) -> Decimal:
    bal = to_decimal(value, "Balance must be a number.")
    if bal < 0:
        raise InvalidAmount("Balance cannot be negative.")
    if bal > MAX_BALANCE:
        raise InvalidAmount(f"Balance cannot exceed {MAX_BALANCE}.")
    return bal

def _positive(value: Amount, message: str) -> Decimal:
    d = to_decimal(value, message)
    if d <= 0:
        raise InvalidAmount(message)
    if d > MAX_BALANCE:
        raise InvalidAmount(f"Amount cannot exceed {MAX_BALANCE}.")
    return d

def _add(a: Decimal, b: Decimal, subtract: bool = False) -> Decimal:
    with localcontext(LEDGER_CONTEXT):
        try:
            result = a - b if subtract else a + b
        except (Inexact, Overflow) as e:
            raise InvalidAmount("Amount cannot be represented exactly.") from e
    if result > MAX_BALANCE:
        raise InvalidAmount(f"Balance cannot exceed {MAX_BALANCE}.")
    return result

def _is_kind(transaction_type: str | None, kind: str) -> bool:
    # "ATM Credit", "Cheque Credit", "credit" ... all count as credit
    if not isinstance(transaction_type, str):
        return False
    return transaction_type.strip().lower().endswith(kind)


class BankAccount:
    """A single account and the rules that move money in and out of it.

    Every balance mutation runs under the account's own lock. A transfer takes
    both accounts' locks in ascending id order, so two transfers running in
    opposite directions cannot deadlock. New balances are computed before
    anything is assigned, so a rejected operation changes nothing.
    """

    def __init__(self, id: int, account_number: str = "", holder_name: str = "",
                 balance: Amount = Decimal("0")):
        bal = check_balance(balance)
        self.id = id
        self.account_number = account_number
        self.holder_name = holder_name
        self.balance = bal
        self._lock = threading.RLock()

    def __repr__(self):
        return (f"BankAccount(id={self.id!r}, account_number={self.account_number!r}, "
                f"holder_name={self.holder_name!r}, balance={self.balance!r})")

    def deposit(self, amount: Amount, transaction_type: str) -> Decimal:
        if not _is_kind(transaction_type, CREDIT):
            raise InvalidTransactionType("Transaction type must be Credit.")
        amt = _positive(amount, "Deposit amount must be positive.")
        with self._lock:
            self.balance = _add(self.balance, amt)
            logger.debug("deposit id=%s amount=%s new=%s", self.id, amt, self.balance)
            return self.balance

    def withdraw(self, amount: Amount, transaction_type: str) -> Decimal:
        if not _is_kind(transaction_type, DEBIT):
            raise InvalidTransactionType("Transaction type must be Debit.")
        amt = _positive(amount, "Withdrawal amount must be positive.")
        with self._lock:
            if amt > self.balance:
                raise InsufficientFunds()
            # withdrawing the exact balance empties the account
            self.balance = _add(self.balance, amt, subtract=True)
            logger.debug("withdraw id=%s amount=%s new=%s", self.id, amt, self.balance)
            return self.balance

    def transfer(self, target: "BankAccount", amount: Amount) -> None:
        amt = _positive(amount, "Transfer amount must be positive.")
        first, second = sorted((self, target), key=lambda a: (a.id, id(a)))
        with first._lock, second._lock:
            if amt > self.balance:
                raise InsufficientFunds()
            source_after = _add(self.balance, amt, subtract=True)
            # on a self-transfer the credit leg applies to the debited balance
            target_after = _add(source_after if target is self else target.balance, amt)
            self.balance = source_after
            target.balance = target_after
        logger.debug("transfer from=%s to=%s amount=%s", self.id, target.id, amt)

    def overwrite(self, account_number: str, holder_name: str, balance: Decimal) -> None:
        """Replace display fields and balance in place; the id never changes."""
        with self._lock:
            self.account_number = account_number
            self.holder_name = holder_name
            self.balance = balance

    def snapshot(self) -> "BankAccount":
        """Independent copy taken under the account lock."""
        with self._lock:
            return BankAccount(self.id, self.account_number, self.holder_name, self.balance)

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "id": self.id,
                "accountNumber": self.account_number,
                "holderName": self.holder_name,
                "balance": as_number(self.balance),
            }
