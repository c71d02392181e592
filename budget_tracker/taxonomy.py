"""Expense categories, recurrence frequencies and their display metadata.

Every icon/color mapping lives in the lookup tables below; callers should
use :func:`category_display` and :func:`frequency_display` instead of
keeping their own per-category switches.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from .settings import get_config_value


class ExpenseCategory(str, Enum):
    FOOD = 'Food'
    ENTERTAINMENT = 'Entertainment'
    TRANSPORT = 'Transport'
    SHOPPING = 'Shopping'
    BILLS = 'Bills'
    PETS = 'Pets'
    KIDS = 'Kids'
    OTHER = 'Other'


class RecurrenceFrequency(str, Enum):
    WEEKLY = 'Weekly'
    BIWEEKLY = 'Bi-weekly'
    MONTHLY = 'Monthly'


CATEGORY_DISPLAY: Dict[ExpenseCategory, Dict[str, str]] = {
    ExpenseCategory.FOOD: {'icon': 'fork.knife', 'color': 'orange'},
    ExpenseCategory.ENTERTAINMENT: {'icon': 'sparkles', 'color': 'purple'},
    ExpenseCategory.TRANSPORT: {'icon': 'car.fill', 'color': 'blue'},
    ExpenseCategory.SHOPPING: {'icon': 'bag.fill', 'color': 'pink'},
    ExpenseCategory.BILLS: {'icon': 'doc.text.fill', 'color': 'red'},
    ExpenseCategory.PETS: {'icon': 'pawprint.fill', 'color': 'brown'},
    ExpenseCategory.KIDS: {'icon': 'figure.2.and.child.holdinghands', 'color': 'green'},
    ExpenseCategory.OTHER: {'icon': 'ellipsis.circle.fill', 'color': 'gray'},
}

# Budget-only rows that have no expense category of their own
SAVINGS_DISPLAY = {'icon': 'banknote.fill', 'color': 'green'}
BUFFER_DISPLAY = {'icon': 'shield.fill', 'color': 'blue'}

# Calendar step per frequency: ('days', n) or ('months', n)
FREQUENCY_RULES: Dict[RecurrenceFrequency, Dict[str, Any]] = {
    RecurrenceFrequency.WEEKLY: {'unit': 'days', 'step': 7, 'icon': 'calendar.badge.clock'},
    RecurrenceFrequency.BIWEEKLY: {'unit': 'days', 'step': 14, 'icon': 'calendar.badge.exclamationmark'},
    RecurrenceFrequency.MONTHLY: {'unit': 'months', 'step': 1, 'icon': 'calendar'},
}

# Choices offered for user-defined categories
AVAILABLE_COLORS = [
    'orange', 'purple', 'blue', 'pink', 'red', 'brown', 'green',
    'yellow', 'teal', 'indigo', 'cyan', 'mint',
]
POPULAR_ICONS = [
    'cup.and.saucer.fill',
    'gamecontroller.fill',
    'dumbbell.fill',
    'book.fill',
    'graduationcap.fill',
    'cross.case.fill',
    'airplane',
    'gift.fill',
    'paintbrush.fill',
    'house.fill',
    'wrench.and.screwdriver.fill',
    'cart.fill',
    'film.fill',
    'music.note',
    'leaf.fill',
]
DEFAULT_CUSTOM_DISPLAY = {'icon': 'tag.fill', 'color': 'gray'}


def parse_category(value: Any) -> Optional[ExpenseCategory]:
    """Return the built-in category for ``value`` or ``None`` if unrecognised.

    Matching is on the stored value ("Food") or the member name ("FOOD"),
    ignoring case and surrounding whitespace.
    """
    if isinstance(value, ExpenseCategory):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    for member in ExpenseCategory:
        if text in {member.value.lower(), member.name.lower()}:
            return member
    return None


def parse_frequency(value: Any) -> Optional[RecurrenceFrequency]:
    """Return the recurrence frequency for ``value`` or ``None``.

    Accepts "Bi-weekly", "biweekly" and "BIWEEKLY" alike.
    """
    if isinstance(value, RecurrenceFrequency):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower().replace('-', '').replace('_', '')
    for member in RecurrenceFrequency:
        if text in {member.value.lower().replace('-', ''), member.name.lower()}:
            return member
    return None


def category_display(category: Any) -> Dict[str, str]:
    """Icon and color for a built-in category, falling back to the custom default."""
    member = parse_category(category)
    if member is None:
        return dict(DEFAULT_CUSTOM_DISPLAY)
    return dict(CATEGORY_DISPLAY[member])


def frequency_display(frequency: Any) -> Optional[str]:
    member = parse_frequency(frequency)
    if member is None:
        return None
    return FREQUENCY_RULES[member]['icon']


def status_color(percentage: float) -> str:
    """Progress band for a percentage of budget used."""
    bands = get_config_value('rules', 'evaluator', 'status_bands', default=[])
    for band in bands:
        if percentage < band['below']:
            return band['color']
    return get_config_value('rules', 'evaluator', 'status_fallback_color', default='red')
