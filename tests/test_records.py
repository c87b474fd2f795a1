"""Tests for the session record store and the dashboard table frames."""

from datetime import date
from decimal import Decimal

from dashboard import cat_spend, distribution_frame, expenses_frame, incomes_frame, to_csv_bytes
from aggregation import distribution
from models import Expense
from records import RecordStore, to_decimal
from schemas import ExpenseRecord, IncomeForm


class TestRecordStore:
    def test_new_expense_becomes_head(self, store):
        new = Expense("9", "Taxi", 2, Decimal("12"), date(2024, 7, 1))
        store.add_expense(new)
        assert store.expenses[0] is new

    def test_registered_expense_from_echo(self):
        store = RecordStore()
        record = ExpenseRecord.model_validate(
            {"id": "srv-1", "name": "Gas", "categoryId": 2, "amount": 40.0, "date": "2024-06-05"}
        )
        expense = store.add_registered_expense(record)
        assert expense == Expense("srv-1", "Gas", 2, Decimal("40.0"), date(2024, 6, 5))

    def test_income_gets_local_id(self):
        store = RecordStore()
        a = store.add_income(IncomeForm(source="Salary", amount="5000", date=date(2024, 6, 1)))
        b = store.add_income(IncomeForm(source="Bonus", amount="250", date=date(2024, 6, 2)))
        assert a.id and b.id and a.id != b.id
        assert store.incomes == [b, a]

    def test_lists_are_copies(self, store):
        store.expenses.clear()
        assert len(store.expenses) == 8

    def test_to_decimal(self):
        assert to_decimal(75.5) == Decimal("75.5")
        assert str(to_decimal(0.1)) == "0.1"
        d = Decimal("1.23")
        assert to_decimal(d) is d


class TestFrames:
    def test_expenses_frame_uses_labels(self, store, registry):
        df = expenses_frame(store.expenses, registry)
        assert list(df.columns) == ["Date", "Name", "Category", "Amount"]
        assert df.iloc[0]["Category"] == "Food"
        assert df.iloc[0]["Amount"] == 75.5

    def test_empty_frames_keep_columns(self, registry):
        assert list(expenses_frame([], registry).columns) == ["Date", "Name", "Category", "Amount"]
        assert list(incomes_frame([]).columns) == ["Date", "Source", "Amount"]

    def test_csv_export(self, store, registry):
        csv = to_csv_bytes(expenses_frame(store.expenses[:1], registry)).decode("utf-8")
        assert csv.splitlines() == ["Date,Name,Category,Amount", "2024-06-02,Groceries,Food,75.5"]

    def test_chart_gets_only_non_empty_slices(self, store, registry):
        dist = distribution(store.expenses, registry.list_all())
        frame = distribution_frame(dist)
        assert "Other" not in frame["Category"].tolist()
        fig = cat_spend(dist)
        assert list(fig.data[0].labels) == frame["Category"].tolist()
