import logging
import uuid
from decimal import Decimal
from typing import List

from models import Expense, Income
from schemas import ExpenseRecord, IncomeForm

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Expenses and incomes recorded during the current session.

    Newest records sit at the head of each list. Records are never edited
    or removed; the store goes away with the session.
    """

    def __init__(self, expenses=None, incomes=None):
        self._expenses: List[Expense] = list(expenses or [])
        self._incomes: List[Income] = list(incomes or [])

    @property
    def expenses(self) -> List[Expense]:
        return list(self._expenses)

    @property
    def incomes(self) -> List[Income]:
        return list(self._incomes)

    def add_expense(self, expense: Expense) -> Expense:
        self._expenses.insert(0, expense)
        return expense

    def add_registered_expense(self, record: ExpenseRecord) -> Expense:
        """Stores the server's echo of a registered expense."""
        expense = Expense(
            id=record.id,
            name=record.name,
            category=record.category,
            amount=to_decimal(record.amount),
            date=record.date,
        )
        logger.debug("Registered expense %s stored locally", expense.id)
        return self.add_expense(expense)

    def add_income(self, form: IncomeForm) -> Income:
        income = Income(
            id=uuid.uuid4().hex,
            source=form.source,
            amount=form.amount,
            date=form.date,
        )
        self._incomes.insert(0, income)
        return income


def to_decimal(value):
    # str() first so 75.5 becomes Decimal("75.5"), not its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))
