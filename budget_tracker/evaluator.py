"""Budget evaluation: percentage used, remaining and warning triggers.

None of these functions raise on odd numeric input.  A zero budget reports
0% used so progress displays stay stable, and negative budgets simply
produce negative remaining amounts.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from . import config
from .models import CategoryBudget, coerce_date
from .taxonomy import parse_category, status_color

SEVERITY_OK = 'ok'
SEVERITY_WARNING = 'warning'
SEVERITY_OVER = 'over'


@dataclass(frozen=True)
class BudgetStatus:
    """Evaluation of one category against its cap.

    ``percentage_used`` is unclamped so true overage stays visible;
    ``display_percentage`` is capped at 100 for progress bars.
    """

    name: str
    budgeted: float
    spent: float
    percentage_used: float
    display_percentage: float
    remaining: float
    is_over_budget: bool
    warning: bool
    severity: str
    status_color: str


@dataclass(frozen=True)
class BudgetBalance:
    income: float
    fixed_expenses: float
    allocated: float
    unallocated: float
    is_balanced: bool


def percentage_used(spent: float, budgeted: float, clamp: bool = False) -> float:
    if budgeted == 0:
        return 0.0
    percent = spent / budgeted * 100
    return min(percent, 100.0) if clamp else percent


def remaining(spent: float, budgeted: float) -> float:
    return budgeted - spent


def evaluate_category(
    name: str,
    spent: float,
    budgeted: float,
    threshold: Optional[float] = None,
) -> BudgetStatus:
    """Evaluate spend against a budgeted cap.

    Args:
        name: Display name of the category
        spent: Amount spent this period
        budgeted: Monthly cap
        threshold: Warning percentage (defaults to ``config.WARNING_THRESHOLD``)

    Returns:
        BudgetStatus. ``severity`` is ``'over'`` at or above 100% used,
        ``'warning'`` at or above the threshold, otherwise ``'ok'``.
    """
    limit = config.WARNING_THRESHOLD if threshold is None else threshold
    percent = percentage_used(spent, budgeted)
    warning = percent >= limit
    if percent >= config.OVER_BUDGET_THRESHOLD:
        severity = SEVERITY_OVER
    elif warning:
        severity = SEVERITY_WARNING
    else:
        severity = SEVERITY_OK
    display = percentage_used(spent, budgeted, clamp=True)
    return BudgetStatus(
        name=name,
        budgeted=budgeted,
        spent=spent,
        percentage_used=percent,
        display_percentage=display,
        remaining=remaining(spent, budgeted),
        is_over_budget=spent > budgeted,
        warning=warning,
        severity=severity,
        status_color=status_color(display),
    )


def evaluate_budgets(
    budgets: Iterable[CategoryBudget],
    spending: Mapping,
    threshold: Optional[float] = None,
) -> List[BudgetStatus]:
    """Evaluate every budget against the month's category spending.

    ``spending`` is keyed the way :func:`ledger.spending_by_category`
    returns it: built-in categories by enum, custom categories by name.
    """
    return [
        evaluate_category(b.name, spent_for(b, spending), b.monthly_budget, threshold)
        for b in budgets
    ]


def spent_for(budget: CategoryBudget, spending: Mapping) -> float:
    member = parse_category(budget.key)
    if member is not None and member in spending:
        return float(spending[member])
    return float(spending.get(budget.key, 0.0))


def budget_snapshot(statuses: Iterable[BudgetStatus]) -> pd.DataFrame:
    """Tabular view of evaluated budgets.

    Returns:
        DataFrame columns: Category, Budget, Spent, Remaining, Percent Used,
        Display Percent, Status, Warning
    """
    rows = [
        {
            'Category': s.name,
            'Budget': s.budgeted,
            'Spent': s.spent,
            'Remaining': s.remaining,
            'Percent Used': s.percentage_used,
            'Display Percent': s.display_percentage,
            'Status': 'Over' if s.is_over_budget else 'Under',
            'Warning': s.warning,
        }
        for s in statuses
    ]
    columns = [
        'Category', 'Budget', 'Spent', 'Remaining',
        'Percent Used', 'Display Percent', 'Status', 'Warning',
    ]
    return pd.DataFrame(rows, columns=columns)


def budget_warnings(statuses: Iterable[BudgetStatus]) -> List[str]:
    """Active warning messages for categories at or past the threshold."""
    warnings: List[str] = []
    for status in statuses:
        if not status.warning:
            continue
        if status.remaining > 0:
            warnings.append(f"{status.name} budget: Only ${int(status.remaining)} left")
        else:
            warnings.append(f"{status.name} budget: ${int(abs(status.remaining))} over budget")
    return warnings


def expense_warning(
    category: str,
    spent: float,
    amount: float,
    budgeted: float,
    threshold: Optional[float] = None,
) -> Optional[str]:
    """Warning to show before logging a new expense, or ``None``.

    Args:
        category: Display name of the category
        spent: Amount already spent in the category this month
        amount: The expense about to be added
        budgeted: Monthly cap (a zero cap never warns)
        threshold: Warning percentage (defaults to ``config.WARNING_THRESHOLD``)

    Example:
        >>> expense_warning('Food', 400.0, 60.0, 450.0)
        '⚠️ This will put you $10 OVER your Food budget!'
    """
    limit = config.WARNING_THRESHOLD if threshold is None else threshold
    new_total = spent + amount
    percent = percentage_used(new_total, budgeted)
    if percent < limit:
        return None
    left = remaining(new_total, budgeted)
    if percent >= config.OVER_BUDGET_THRESHOLD:
        return f"⚠️ This will put you ${int(abs(left))} OVER your {category} budget!"
    return (
        f"⚠️ Warning: This will use {int(percent)}% of your {category} budget. "
        f"You'll only have ${int(left)} left."
    )


def overall_progress(total_spent: float, total_budget: float) -> float:
    """Share of the whole monthly budget already spent, in percent."""
    if total_budget <= 0:
        return 0.0
    return total_spent / total_budget * 100


def days_left_in_month(reference=None) -> int:
    ref = coerce_date(reference) or date.today()
    return calendar.monthrange(ref.year, ref.month)[1] - ref.day


def budget_balance(
    income: float,
    fixed_expenses: float,
    budgets: Iterable[CategoryBudget],
) -> BudgetBalance:
    """Check caps plus fixed expenses against income.

    The result only reports whether the allocation fits; nothing is enforced.
    """
    caps = np.array([b.monthly_budget for b in budgets], dtype=float)
    allocated = float(caps.sum()) + fixed_expenses
    unallocated = income - allocated
    return BudgetBalance(
        income=income,
        fixed_expenses=fixed_expenses,
        allocated=allocated,
        unallocated=unallocated,
        is_balanced=unallocated >= 0,
    )


def severity_counts(statuses: Iterable[BudgetStatus]) -> Dict[str, int]:
    counts = {SEVERITY_OK: 0, SEVERITY_WARNING: 0, SEVERITY_OVER: 0}
    for status in statuses:
        counts[status.severity] += 1
    return counts
