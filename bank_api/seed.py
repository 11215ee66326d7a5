import logging
from decimal import Decimal

from .domain import BankAccount
from .errors import LedgerError
from .repo import AccountRegistry

log = logging.getLogger("seed")

DEMO_ACCOUNTS = [
    (1, "123456", "John Doe", "1000.00"),
    (2, "654321", "Jane Doe", "500.00"),
    (3, "777001", "Alice Smith", "12015.00"),
    (4, "100007", "Bob Brown", "47000.00"),
]


def demo_accounts() -> list[BankAccount]:
    return [BankAccount(i, num, name, Decimal(bal)) for i, num, name, bal in DEMO_ACCOUNTS]


def seed_if_empty(registry: AccountRegistry) -> None:
    """Insert demo accounts if the registry is empty (used for local dev/demo).

    Failures are logged and swallowed; the API still starts with whatever
    the registry holds.
    """
    if registry.count():
        return
    try:
        registry.initialize_all(demo_accounts())
    except LedgerError as e:
        log.error("seeding failed: %s", e.message)
        return
    log.info("seed inserted %d demo accounts", len(DEMO_ACCOUNTS))
