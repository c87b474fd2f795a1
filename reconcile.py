"""Reconciling classifier suggestions with the category registry, and the pending expense draft."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from categories import CategoryRegistry
from models import CategorizationSuggestion, CategoryId, Reconciliation

logger = logging.getLogger(__name__)


def reconcile(suggestion: CategorizationSuggestion, registry: CategoryRegistry) -> Reconciliation:
    """
    Maps a classifier's free-text label onto a registered category.

    An exact, case-insensitive label match wins. Anything else falls back to
    the "Other" category (or to no selection if the registry has none), and
    ``matched`` is False so the caller can show what the classifier said.
    """
    # Halves round up, so 0.125 shows as 13%
    percent = int(math.floor(suggestion.confidence * 100 + 0.5))
    match = registry.find_by_label(suggestion.category)
    if match is not None:
        return Reconciliation(match.id, percent, True, suggestion.category)

    other = registry.other
    logger.info(
        "No category matches suggestion %r; falling back to %r",
        suggestion.category,
        other.label if other else None,
    )
    return Reconciliation(other.id if other else None, percent, False, suggestion.category)


@dataclass
class ExpenseDraft:
    """
    The unsaved expense form.

    Attach it to a registry and it drops its category selection as soon as
    that category stops being part of the registry.
    """

    name: str = ""
    category: Optional[CategoryId] = None
    amount: Optional[Decimal] = None
    date: date = field(default_factory=date.today)

    def attach(self, registry: CategoryRegistry):
        registry.subscribe(self.revalidate)
        self.revalidate(registry)

    def detach(self, registry: CategoryRegistry):
        registry.unsubscribe(self.revalidate)

    def revalidate(self, registry: CategoryRegistry):
        if self.category is not None and self.category not in registry:
            logger.debug("Clearing draft category %s, no longer registered", self.category)
            self.category = None

    def apply(self, result: Reconciliation):
        # An unmatched suggestion with no "Other" category leaves the selection alone
        if result.category_id is not None:
            self.category = result.category_id

    def as_form_data(self) -> dict:
        return {"name": self.name, "category": self.category, "amount": self.amount, "date": self.date}

    def reset(self):
        self.name = ""
        self.category = None
        self.amount = None
        self.date = date.today()
