"""Plain data records exchanged with persistence and the budget service.

The records are dataclasses so they can be handed to storage as dicts
(:meth:`to_dict`) and rebuilt from stored rows (:meth:`from_dict`).
Unknown category or frequency strings are preserved as raw strings so a
malformed record survives a round trip; the aggregator decides what to
do with them.
"""

from __future__ import annotations

import calendar
import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .taxonomy import (
    ExpenseCategory,
    RecurrenceFrequency,
    parse_category,
    parse_frequency,
)

CategoryValue = Union[ExpenseCategory, str, None]
FrequencyValue = Union[RecurrenceFrequency, str, None]


def new_id() -> str:
    return str(uuid.uuid4())


def coerce_date(value: Any) -> Optional[date]:
    """Convert datetimes, pandas timestamps and ISO strings to a ``date``."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return ts.date()


def _enum_or_raw(value: Any, parser) -> Any:
    if value is None or value == '':
        return None
    parsed = parser(value)
    return parsed if parsed is not None else value


def _raw_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if hasattr(value, 'value') else str(value)


@dataclass(frozen=True)
class ExpenseRecord:
    amount: float
    category: CategoryValue
    description: str
    date: date
    user_id: str
    is_recurring: bool = False
    frequency: FrequencyValue = None
    id: str = field(default_factory=new_id)

    @property
    def category_key(self) -> Optional[str]:
        return _raw_value(self.category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'category': _raw_value(self.category),
            'description': self.description,
            'date': self.date.isoformat(),
            'userId': self.user_id,
            'isRecurring': self.is_recurring,
            'recurringFrequency': _raw_value(self.frequency) or '',
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExpenseRecord':
        return cls(
            id=data.get('id') or new_id(),
            amount=data.get('amount', 0.0),
            category=_enum_or_raw(data.get('category'), parse_category),
            description=data.get('description') or '',
            date=coerce_date(data.get('date')),
            user_id=data.get('userId') or data.get('user_id') or '',
            is_recurring=bool(data.get('isRecurring', data.get('is_recurring', False))),
            frequency=_enum_or_raw(
                data.get('recurringFrequency', data.get('frequency')), parse_frequency
            ),
        )


@dataclass(frozen=True)
class CategoryBudget:
    name: str
    monthly_budget: float
    icon: str
    color: str
    category: str = ''
    is_custom: bool = False
    user_id: str = ''
    id: str = field(default_factory=new_id)

    @property
    def key(self) -> str:
        """Category key spending is matched against."""
        return self.category or self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.key,
            'icon': self.icon,
            'monthlyBudget': self.monthly_budget,
            'color': self.color,
            'isCustom': self.is_custom,
            'userId': self.user_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryBudget':
        return cls(
            id=data.get('id') or new_id(),
            name=data['name'],
            monthly_budget=float(data.get('monthlyBudget', 0.0) or 0.0),
            icon=data.get('icon') or '',
            color=data.get('color') or '',
            category=data.get('category') or data['name'],
            is_custom=bool(data.get('isCustom', False)),
            user_id=data.get('userId') or '',
        )


@dataclass(frozen=True)
class BudgetRecommendation:
    monthly_food: float
    monthly_miscellaneous: float
    monthly_savings: float
    remaining_money: float
    savings_percentage: float
    personalized_advice: str = ''
    breakdown: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthlyFood': self.monthly_food,
            'monthlyMiscellaneous': self.monthly_miscellaneous,
            'monthlySavings': self.monthly_savings,
            'remainingMoney': self.remaining_money,
            'savingsPercentage': self.savings_percentage,
            'personalizedAdvice': self.personalized_advice,
            'breakdown': self.breakdown,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BudgetRecommendation':
        return cls(
            monthly_food=float(data.get('monthlyFood', 0.0)),
            monthly_miscellaneous=float(data.get('monthlyMiscellaneous', 0.0)),
            monthly_savings=float(data.get('monthlySavings', 0.0)),
            remaining_money=float(data.get('remainingMoney', 0.0)),
            savings_percentage=float(data.get('savingsPercentage', 0.0)),
            personalized_advice=data.get('personalizedAdvice') or '',
            breakdown=data.get('breakdown') or '',
        )


@dataclass(frozen=True)
class CategorySummary:
    name: str
    budgeted: float
    spent: float
    percentage_used: float
    icon: str = ''
    color: str = ''

    @property
    def was_over_budget(self) -> bool:
        return self.spent > self.budgeted

    @property
    def saved_amount(self) -> float:
        return max(self.budgeted - self.spent, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'budgeted': self.budgeted,
            'spent': self.spent,
            'percentageUsed': self.percentage_used,
            'icon': self.icon,
            'color': self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategorySummary':
        return cls(
            name=data['name'],
            budgeted=float(data.get('budgeted', 0.0)),
            spent=float(data.get('spent', 0.0)),
            percentage_used=float(data.get('percentageUsed', 0.0)),
            icon=data.get('icon') or '',
            color=data.get('color') or '',
        )


@dataclass
class MonthlySummary:
    """Point-in-time report for one user and month.

    ``total_saved`` is actual savings (income minus spend), which is then
    compared against the planned savings target to set ``savings_goal_met``.
    """

    user_id: str
    month: int
    year: int
    total_income: float
    total_spent: float
    total_saved: float
    savings_goal_met: bool
    budget_categories: List[CategorySummary] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)
    insights: List[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month] if 1 <= self.month <= 12 else ''

    @property
    def savings_percentage(self) -> float:
        if self.total_income <= 0:
            return 0.0
        return self.total_saved / self.total_income * 100

    @property
    def spent_percentage(self) -> float:
        if self.total_income <= 0:
            return 0.0
        return self.total_spent / self.total_income * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'month': self.month,
            'year': self.year,
            'totalIncome': self.total_income,
            'totalSpent': self.total_spent,
            'totalSaved': self.total_saved,
            'savingsGoalMet': self.savings_goal_met,
            'budgetCategories': [c.to_dict() for c in self.budget_categories],
            'achievements': list(self.achievements),
            'insights': list(self.insights),
            'createdAt': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonthlySummary':
        created = pd.to_datetime(data.get('createdAt'), errors='coerce')
        return cls(
            id=data.get('id') or new_id(),
            user_id=data.get('userId') or '',
            month=int(data['month']),
            year=int(data['year']),
            total_income=float(data.get('totalIncome', 0.0)),
            total_spent=float(data.get('totalSpent', 0.0)),
            total_saved=float(data.get('totalSaved', 0.0)),
            savings_goal_met=bool(data.get('savingsGoalMet', False)),
            budget_categories=[
                CategorySummary.from_dict(c) for c in data.get('budgetCategories') or []
            ],
            achievements=list(data.get('achievements') or []),
            insights=list(data.get('insights') or []),
            created_at=datetime.now() if pd.isna(created) else created.to_pydatetime(),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> 'MonthlySummary':
        return cls.from_dict(json.loads(text))
