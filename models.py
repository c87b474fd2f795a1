from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

# Categories are keyed by int across the whole app
CategoryId = int


@dataclass(frozen=True)
class Category:
    id: CategoryId
    label: str
    icon: str = "circle-dollar-sign"


@dataclass(frozen=True)
class Expense:
    id: str
    name: str
    category: CategoryId
    amount: Decimal
    date: date


@dataclass(frozen=True)
class Income:
    id: str
    source: str
    amount: Decimal
    date: date


@dataclass(frozen=True)
class CategorizationSuggestion:
    """Raw classifier output: a free-text label and a confidence in [0, 1]."""

    category: str
    confidence: float


@dataclass(frozen=True)
class Reconciliation:
    category_id: Optional[CategoryId]
    confidence_percent: int
    matched: bool
    suggested_label: str = ""


@dataclass(frozen=True)
class Recommendation:
    category: str
    recommendation: str
    potential_savings: Optional[Decimal] = None


@dataclass(frozen=True)
class RecommendationReport:
    recommendations: List[Recommendation]
    summary: str
