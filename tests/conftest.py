# tests/conftest.py
import os
from decimal import Decimal

import pytest
from starlette.testclient import TestClient

os.environ.setdefault("BANK_DISABLE_SEED", "1")  # pristine registry for every test

from bank_api.app import create_app
from bank_api.domain import BankAccount
from bank_api.repo import get_registry

@pytest.fixture(scope="session")
def app():
    return create_app()

@pytest.fixture(autouse=True)
def clean_registry():
    get_registry().initialize_all([])   # isolation between tests
    yield
    get_registry().initialize_all([])

@pytest.fixture()
def registry():
    return get_registry()

@pytest.fixture()
def two_accounts(registry):
    registry.initialize_all([
        BankAccount(1, "123456", "John Doe", Decimal("1000.00")),
        BankAccount(2, "654321", "Jane Doe", Decimal("500.00")),
    ])
    return registry

@pytest.fixture()
def client(app):
    return TestClient(app)
