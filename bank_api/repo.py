import logging
import threading
from typing import Iterable

from .domain import Amount, BankAccount, check_balance, to_decimal
from .errors import AccountNotFound, DuplicateAccount, InvalidAmount

log = logging.getLogger("repo")


class AccountRegistry:
    """In-memory accounts keyed by id.

    One re-entrant lock guards the mapping; every operation, reads included,
    runs under it and reads hand out snapshots. Lock order is always
    registry first, then account locks in ascending id order.
    """

    def __init__(self, accounts: Iterable[BankAccount] = ()):
        self._lock = threading.RLock()
        self._accounts: dict[int, BankAccount] = {}
        if accounts:
            self.initialize_all(accounts)

    def _get(self, account_id: int) -> BankAccount:
        acct = self._accounts.get(account_id)
        if acct is None:
            log.info("account %s not found", account_id)
            raise AccountNotFound(f"Account with id {account_id} not found.")
        return acct

    def count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def get_all(self) -> list[BankAccount]:
        with self._lock:
            return [a.snapshot() for a in self._accounts.values()]

    def get_by_id(self, account_id: int) -> BankAccount:
        with self._lock:
            return self._get(account_id).snapshot()

    def create(self, account: BankAccount) -> BankAccount:
        with self._lock:
            if account.id in self._accounts:
                log.info("create conflict id=%s", account.id)
                raise DuplicateAccount(f"Account with id {account.id} already exists.")
            stored = account.snapshot()
            self._accounts[stored.id] = stored
            log.info("create id=%s number=%s balance=%s", stored.id, stored.account_number, stored.balance)
            return stored.snapshot()

    def update(self, account: BankAccount) -> BankAccount:
        with self._lock:
            existing = self._get(account.id)
            new_balance = check_balance(account.balance)
            existing.overwrite(account.account_number, account.holder_name, new_balance)
            log.info("update id=%s number=%s balance=%s", existing.id, existing.account_number, new_balance)
            return existing.snapshot()

    def delete(self, account_id: int) -> None:
        with self._lock:
            self._get(account_id)
            del self._accounts[account_id]
            log.info("delete id=%s", account_id)

    def initialize_all(self, accounts: Iterable[BankAccount]) -> None:
        """Replace the whole registry. Used for startup seeding and test resets."""
        fresh = {a.id: a.snapshot() for a in accounts}
        with self._lock:
            self._accounts = fresh
        log.info("registry initialized with %d accounts", len(fresh))

    def deposit(self, account_id: int, amount: Amount, transaction_type: str = "Credit") -> BankAccount:
        with self._lock:
            acct = self._get(account_id)
            new_bal = acct.deposit(amount, transaction_type)
            log.info("deposit id=%s amount=%s type=%s new_balance=%s", account_id, amount, transaction_type, new_bal)
            return acct.snapshot()

    def withdraw(self, account_id: int, amount: Amount, transaction_type: str = "Debit") -> BankAccount:
        with self._lock:
            acct = self._get(account_id)
            new_bal = acct.withdraw(amount, transaction_type)
            log.info("withdraw id=%s amount=%s type=%s new_balance=%s", account_id, amount, transaction_type, new_bal)
            return acct.snapshot()

    def transfer_funds(self, from_id: int, to_id: int, amount: Amount) -> tuple[BankAccount, BankAccount]:
        """Move funds between two accounts; returns (source, target) snapshots of the result."""
        with self._lock:
            source = self._get(from_id)
            target = self._get(to_id)
            amt = to_decimal(amount, "Transfer amount must be positive.")
            if amt <= 0:
                raise InvalidAmount("Transfer amount must be positive.")
            source.transfer(target, amt)
            log.info("transfer from=%s to=%s amount=%s", from_id, to_id, amt)
            return source.snapshot(), target.snapshot()


_registry = AccountRegistry()

def get_registry() -> AccountRegistry:
    """Process-wide registry used by the HTTP layer."""
    return _registry
