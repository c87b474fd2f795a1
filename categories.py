"""
categories.py
-------------

Append-only registry of spending categories for one session.

Labels are unique ignoring case. Ids are ints handed out in increasing
order, so a newly created category never reuses an existing id. Anything
that holds a category id (a half-filled expense form, for example) can
subscribe to be told when the membership changes.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from errors import DuplicateCategoryError
from models import Category, CategoryId

logger = logging.getLogger(__name__)

DEFAULT_ICON = "circle-dollar-sign"

# (label, icon) pairs the registry is seeded with. "Other" is the sentinel.
DEFAULT_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("Food", "utensils"),
    ("Transport", "car"),
    ("Rent", "home"),
    ("Utilities", "bolt"),
    ("Entertainment", "film"),
    ("Other", DEFAULT_ICON),
)

# icon name -> label shown in the icon picker
AVAILABLE_ICONS = {
    "utensils": "🍔 Food",
    "car": "🚗 Transport",
    "home": "🏠 Home",
    "bolt": "⚡ Utilities",
    "film": "🎬 Entertainment",
    "shopping-bag": "🛍️ Shopping",
    "gift": "🎁 Gifts",
    "heart": "❤️ Health",
    "book-open": "📖 Education",
    "graduation-cap": "🎓 Studies",
    "briefcase": "💼 Work",
    "plane": "✈️ Travel",
    "coffee": "☕ Coffee & drinks",
    "smartphone": "📱 Technology",
    "paw-print": "🐾 Pets",
    "music": "🎵 Music",
    DEFAULT_ICON: "💲 Other",
}

Listener = Callable[["CategoryRegistry"], None]


class CategoryRegistry:
    def __init__(
        self,
        categories: Iterable[Tuple[str, str]] = DEFAULT_CATEGORIES,
        other_label: str = "Other",
    ):
        self.other_label = other_label
        self._categories: List[Category] = []
        self._listeners: List[Listener] = []
        for label, icon in categories:
            self._append(label, icon)

    def __iter__(self) -> Iterator[Category]:
        return iter(list(self._categories))

    def __len__(self):
        return len(self._categories)

    def __contains__(self, category_id) -> bool:
        return any(c.id == category_id for c in self._categories)

    def _next_id(self) -> CategoryId:
        return max((c.id for c in self._categories), default=0) + 1

    def _append(self, label: str, icon: str) -> Category:
        label = label.strip()
        if self.find_by_label(label) is not None:
            raise DuplicateCategoryError(label)
        if icon not in AVAILABLE_ICONS:
            icon = DEFAULT_ICON
        category = Category(id=self._next_id(), label=label, icon=icon)
        self._categories.append(category)
        return category

    def create(self, label: str, icon: str = DEFAULT_ICON) -> Category:
        """
        Adds a category at the end of the registry and notifies listeners.

        Raises DuplicateCategoryError (leaving the registry untouched) when
        the label matches an existing one ignoring case.
        """
        category = self._append(label, icon)
        logger.info("Created category %r with id %s", category.label, category.id)
        self._notify()
        return category

    def list_all(self) -> List[Category]:
        return list(self._categories)

    def find(self, predicate: Callable[[Category], bool]) -> Optional[Category]:
        return next((c for c in self._categories if predicate(c)), None)

    def find_by_label(self, label: str) -> Optional[Category]:
        wanted = label.strip().lower()
        return self.find(lambda c: c.label.lower() == wanted)

    def get(self, category_id) -> Optional[Category]:
        return self.find(lambda c: c.id == category_id)

    def label_for(self, category_id, default: str = "Uncategorized") -> str:
        category = self.get(category_id)
        return category.label if category else default

    @property
    def other(self) -> Optional[Category]:
        return self.find_by_label(self.other_label)

    # --- Subscriptions ---

    def subscribe(self, listener: Listener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)
