class LedgerError(Exception):
    """Base class for account ledger failures. Always recoverable by the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountNotFound(LedgerError):
    """No account with the requested id is in the registry."""


class DuplicateAccount(LedgerError):
    """An account with the same id is already registered."""


class InvalidAmount(LedgerError):
    """Amount is zero, negative, or not a finite number."""


class InvalidTransactionType(LedgerError):
    """Transaction type does not match the operation (Credit/Debit)."""


class InsufficientFunds(LedgerError):
    def __init__(self, message: str = "Insufficient funds."):
        super().__init__(message)
