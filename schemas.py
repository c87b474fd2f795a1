"""
Pydantic schemas for form input and for the remote JSON contracts.

Form schemas carry the validation rules shown inline on the dashboard
forms. Wire schemas use the camelCase field names of the remote services
through aliases; amounts travel as JSON numbers.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

EARLIEST_DATE = date(1900, 1, 1)


def _check_date(value: date) -> date:
    if value > date.today():
        raise ValueError("Date cannot be in the future.")
    if value < EARLIEST_DATE:
        raise ValueError("Date cannot be before 1900-01-01.")
    return value


# --- Forms ---

class ExpenseForm(BaseModel):
    name: str = Field(min_length=2, description="What the money was spent on")
    category: int
    amount: Decimal = Field(gt=0)
    date: date

    @field_validator("date")
    @classmethod
    def _date_in_range(cls, value: date) -> date:
        return _check_date(value)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters.")
        return value


class IncomeForm(BaseModel):
    source: str = Field(min_length=2)
    amount: Decimal = Field(gt=0)
    date: date

    @field_validator("date")
    @classmethod
    def _date_in_range(cls, value: date) -> date:
        return _check_date(value)


class CategoryForm(BaseModel):
    label: str = Field(min_length=2)
    icon: str

    @field_validator("label")
    @classmethod
    def _strip_label(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters.")
        return value


# --- Wire contracts ---

class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(_Wire):
    username: str
    password: str


class LoginResponse(_Wire):
    token: str = Field(min_length=1)


class RegisterExpenseRequest(_Wire):
    name: str
    category_id: int = Field(alias="categoryId")
    amount: float = Field(gt=0)
    date: date


class ExpenseRecord(_Wire):
    id: str
    name: str
    category: int = Field(validation_alias=AliasChoices("category", "categoryId"))
    amount: float = Field(gt=0)
    date: date

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        # Servers may hand back numeric ids; the app treats them as opaque strings
        return str(value)


class CategorizeRequest(_Wire):
    description: str = Field(min_length=1)


class CategorizeResponse(_Wire):
    category: str
    confidence: float = Field(ge=0, le=1)


class RecommendationExpense(_Wire):
    name: str
    category: str
    amount: float
    date: date


class RecommendationRequest(_Wire):
    monthly_income: float = Field(alias="monthlyIncome")
    expenses: List[RecommendationExpense]
    financial_goals: Optional[str] = Field(default=None, alias="financialGoals")


class RecommendationItem(_Wire):
    category: str
    recommendation: str
    potential_savings: Optional[float] = Field(default=None, alias="potentialSavings")


class RecommendationResponse(_Wire):
    recommendations: List[RecommendationItem]
    summary: str
