from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from api_client import FinanceApiClient
from categories import CategoryRegistry
from config import Settings
from mock_api import create_app
from models import Expense, Income
from records import RecordStore

DEMO_USER = "demo@example.com"
DEMO_PASSWORD = "demo123"


@pytest.fixture
def registry():
    return CategoryRegistry()


@pytest.fixture
def store(registry):
    """The June 2024 sample month plus one expense and income from other periods."""
    food = registry.find_by_label("Food").id
    transport = registry.find_by_label("Transport").id
    rent = registry.find_by_label("Rent").id
    utilities = registry.find_by_label("Utilities").id
    entertainment = registry.find_by_label("Entertainment").id
    expenses = [
        Expense("1", "Groceries", food, Decimal("75.50"), date(2024, 6, 2)),
        Expense("2", "Gas", transport, Decimal("40.00"), date(2024, 6, 5)),
        Expense("3", "Monthly rent", rent, Decimal("1200.00"), date(2024, 6, 1)),
        Expense("4", "Electricity bill", utilities, Decimal("65.20"), date(2024, 6, 10)),
        Expense("5", "Movie tickets", entertainment, Decimal("25.00"), date(2024, 6, 12)),
        Expense("6", "Dinner out", food, Decimal("55.00"), date(2024, 6, 15)),
        Expense("7", "Internet bill", utilities, Decimal("50.00"), date(2024, 6, 20)),
        Expense("8", "New year dinner", food, Decimal("80.00"), date(2023, 12, 31)),
    ]
    incomes = [
        Income("income-1", "Salary", Decimal("5000"), date(2024, 6, 1)),
        Income("income-2", "Freelance", Decimal("750"), date(2024, 5, 15)),
    ]
    return RecordStore(expenses, incomes)


@pytest.fixture
def dev_app():
    return create_app(users={DEMO_USER: DEMO_PASSWORD})


@pytest.fixture
def api(dev_app):
    settings = Settings(api_base_url="http://testserver", flows_base_url="http://testserver")
    return FinanceApiClient(settings, session=TestClient(dev_app))
