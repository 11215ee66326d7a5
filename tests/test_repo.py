from decimal import Decimal

import pytest

from bank_api.domain import MAX_BALANCE, BankAccount
from bank_api.errors import (
    AccountNotFound,
    DuplicateAccount,
    InsufficientFunds,
    InvalidAmount,
    InvalidTransactionType,
)
from bank_api.repo import AccountRegistry


def test_empty_registry_returns_empty_list():
    assert AccountRegistry().get_all() == []


def test_get_all_returns_accounts_in_insertion_order(registry):
    for i in (3, 1, 2):
        registry.create(BankAccount(i, f"n{i}", f"holder {i}", i * 100))
    assert [a.id for a in registry.get_all()] == [3, 1, 2]


def test_get_by_id(two_accounts):
    acct = two_accounts.get_by_id(1)
    assert acct.account_number == "123456"
    assert acct.balance == Decimal("1000.00")


def test_get_by_id_missing_raises(registry):
    with pytest.raises(AccountNotFound, match="42"):
        registry.get_by_id(42)


def test_create_stores_a_copy(registry):
    acct = BankAccount(1, "123456", "John Doe", 100)
    registry.create(acct)
    acct.deposit(50, "Credit")
    assert registry.get_by_id(1).balance == Decimal("100")


def test_reads_are_snapshots(two_accounts):
    snap = two_accounts.get_by_id(1)
    snap.withdraw(1000, "Debit")
    assert two_accounts.get_by_id(1).balance == Decimal("1000.00")


def test_create_duplicate_id_rejected(two_accounts):
    with pytest.raises(DuplicateAccount):
        two_accounts.create(BankAccount(1, "999", "Someone Else", 0))
    assert two_accounts.get_by_id(1).holder_name == "John Doe"


def test_create_allows_duplicate_account_number(two_accounts):
    two_accounts.create(BankAccount(3, "123456", "Other Holder", 0))
    assert two_accounts.count() == 3


def test_update_overwrites_fields_in_place(two_accounts):
    updated = two_accounts.update(BankAccount(1, "111111", "John Q. Doe", Decimal("2000")))
    assert updated.id == 1
    acct = two_accounts.get_by_id(1)
    assert (acct.account_number, acct.holder_name, acct.balance) == ("111111", "John Q. Doe", Decimal("2000"))
    assert [a.id for a in two_accounts.get_all()] == [1, 2]


def test_update_missing_raises(two_accounts):
    with pytest.raises(AccountNotFound):
        two_accounts.update(BankAccount(99, "x", "y", 0))


def test_delete_removes_account(two_accounts):
    two_accounts.delete(1)
    with pytest.raises(AccountNotFound):
        two_accounts.get_by_id(1)
    assert [a.id for a in two_accounts.get_all()] == [2]


def test_delete_missing_raises(registry):
    with pytest.raises(AccountNotFound):
        registry.delete(7)


def test_initialize_all_replaces_contents(two_accounts):
    two_accounts.initialize_all([BankAccount(10, "a", "b", 5)])
    assert [a.id for a in two_accounts.get_all()] == [10]
    two_accounts.initialize_all([])
    assert two_accounts.get_all() == []


def test_constructor_seeds_accounts():
    reg = AccountRegistry([BankAccount(5, "n", "h", 1)])
    assert reg.get_by_id(5).balance == Decimal("1")


# ---------- transfer_funds ----------

def test_transfer_funds_updates_both(two_accounts):
    source, target = two_accounts.transfer_funds(1, 2, Decimal("300"))
    assert (source.id, source.balance) == (1, Decimal("700.00"))
    assert (target.id, target.balance) == (2, Decimal("800.00"))
    assert two_accounts.get_by_id(1).balance == Decimal("700.00")
    assert two_accounts.get_by_id(2).balance == Decimal("800.00")


def test_transfer_funds_insufficient(two_accounts):
    with pytest.raises(InsufficientFunds):
        two_accounts.transfer_funds(1, 2, Decimal("1500"))
    assert two_accounts.get_by_id(1).balance == Decimal("1000.00")
    assert two_accounts.get_by_id(2).balance == Decimal("500.00")


@pytest.mark.parametrize("from_id, to_id", [(999, 2), (1, 999)])
def test_transfer_funds_missing_account(two_accounts, from_id, to_id):
    with pytest.raises(AccountNotFound):
        two_accounts.transfer_funds(from_id, to_id, 100)


def test_transfer_funds_negative_amount_changes_nothing(two_accounts):
    with pytest.raises(InvalidAmount):
        two_accounts.transfer_funds(1, 2, -50)
    assert two_accounts.get_by_id(1).balance == Decimal("1000.00")
    assert two_accounts.get_by_id(2).balance == Decimal("500.00")


def test_transfer_funds_same_account_is_noop(two_accounts):
    two_accounts.transfer_funds(1, 1, 250)
    assert two_accounts.get_by_id(1).balance == Decimal("1000.00")


# ---------- deposit / withdraw by id ----------

def test_deposit_and_withdraw_by_id(two_accounts):
    assert two_accounts.deposit(2, 50).balance == Decimal("550.00")
    assert two_accounts.withdraw(2, 550, "ATM Debit").balance == Decimal("0")


def test_withdraw_by_id_passes_through_entity_errors(two_accounts):
    with pytest.raises(InsufficientFunds):
        two_accounts.withdraw(2, 501)
    with pytest.raises(InvalidTransactionType):
        two_accounts.deposit(2, 10, "Debit")
    with pytest.raises(AccountNotFound):
        two_accounts.deposit(3, 10)


def test_transfer_funds_returns_snapshots(two_accounts):
    source, _ = two_accounts.transfer_funds(1, 2, 100)
    source.deposit(5000, "Credit")
    assert two_accounts.get_by_id(1).balance == Decimal("900.00")


def test_update_above_ceiling_rejected(two_accounts):
    acct = two_accounts.get_by_id(1)
    acct.balance = MAX_BALANCE + 1
    with pytest.raises(InvalidAmount):
        two_accounts.update(acct)
    assert two_accounts.get_by_id(1).balance == Decimal("1000.00")
