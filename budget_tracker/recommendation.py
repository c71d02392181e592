"""Budget recommendation snapshot handling.

The recommendation itself comes from an external budget-generation
service as a small JSON document.  This module validates that payload,
derives the remaining money and savings rate, and turns the snapshot into
the built-in category budgets the evaluator works with.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .models import BudgetRecommendation, CategoryBudget
from .taxonomy import BUFFER_DISPLAY, SAVINGS_DISPLAY, ExpenseCategory, category_display

REQUIRED_NUMBERS = ('food', 'miscellaneous', 'savings')
REQUIRED_TEXT = ('advice', 'breakdown')


class RecommendationError(ValueError):
    """Raised when a recommendation payload cannot be used."""


@dataclass(frozen=True)
class SavingsProgress:
    monthly_savings: float
    goal: float
    months_to_goal: int
    progress_percentage: float


def parse_amount(value: Any) -> Optional[float]:
    """Parse a user-entered amount such as ``"1,200"`` or ``"$45.50"``."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip().replace('$', '').replace(',', '')
        if not value:
            return None
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number):
        return None
    return float(number)


def fixed_expense_total(*amounts: Any) -> float:
    """Sum fixed monthly costs, ignoring blank or unparseable entries."""
    total = 0.0
    for amount in amounts:
        parsed = parse_amount(amount)
        if parsed is not None:
            total += parsed
    return total


def build_recommendation(
    income: float,
    fixed_expenses: float,
    food: float,
    miscellaneous: float,
    savings: float,
    advice: str = '',
    breakdown: str = '',
) -> BudgetRecommendation:
    """Derive remaining money and savings rate for a set of allocations."""
    remaining = income - fixed_expenses - food - miscellaneous - savings
    savings_percentage = (savings / income * 100) if income > 0 else 0.0
    return BudgetRecommendation(
        monthly_food=food,
        monthly_miscellaneous=miscellaneous,
        monthly_savings=savings,
        remaining_money=remaining,
        savings_percentage=savings_percentage,
        personalized_advice=advice,
        breakdown=breakdown,
    )


def parse_recommendation_payload(
    text: str,
    income: float,
    fixed_expenses: float,
) -> BudgetRecommendation:
    """Turn the budget service's JSON answer into a recommendation.

    Args:
        text: JSON object with ``food``, ``miscellaneous``, ``savings``,
            ``advice`` and ``breakdown`` keys
        income: Monthly income after tax
        fixed_expenses: Total of rent, utilities, phone, transport and subscriptions

    Raises:
        RecommendationError: If the payload is not JSON, misses a key, or
            carries a negative or non-numeric amount
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise RecommendationError(f"Recommendation is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise RecommendationError("Recommendation must be a JSON object")

    numbers: Dict[str, float] = {}
    for key in REQUIRED_NUMBERS:
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RecommendationError(f"Recommendation field '{key}' must be a number")
        if value < 0:
            raise RecommendationError(f"Recommendation field '{key}' cannot be negative")
        numbers[key] = float(value)
    for key in REQUIRED_TEXT:
        if not isinstance(data.get(key), str):
            raise RecommendationError(f"Recommendation field '{key}' must be text")

    return build_recommendation(
        income,
        fixed_expenses,
        numbers['food'],
        numbers['miscellaneous'],
        numbers['savings'],
        advice=data['advice'],
        breakdown=data['breakdown'],
    )


def _builtin_budget(name: str, category: ExpenseCategory, amount: float, user_id: str) -> CategoryBudget:
    display = category_display(category)
    return CategoryBudget(
        name=name,
        monthly_budget=amount,
        icon=display['icon'],
        color=display['color'],
        category=category.value,
        is_custom=False,
        user_id=user_id,
    )


def category_budgets_from_recommendation(
    recommendation: BudgetRecommendation,
    pet_budget: float = 0.0,
    kid_budget: float = 0.0,
    custom: Iterable[CategoryBudget] = (),
    user_id: str = '',
) -> List[CategoryBudget]:
    """Built-in category budgets followed by the user's custom categories.

    Pets and kids only get a budget when the household data gives them a
    positive monthly amount.
    """
    budgets = [
        _builtin_budget('Food & Groceries', ExpenseCategory.FOOD, recommendation.monthly_food, user_id),
        _builtin_budget('Entertainment', ExpenseCategory.ENTERTAINMENT, recommendation.monthly_miscellaneous, user_id),
    ]
    if pet_budget > 0:
        budgets.append(_builtin_budget('Pets', ExpenseCategory.PETS, pet_budget, user_id))
    if kid_budget > 0:
        budgets.append(_builtin_budget('Kids', ExpenseCategory.KIDS, kid_budget, user_id))
    budgets.extend(custom)
    return budgets


def budget_breakdown(
    recommendation: BudgetRecommendation,
    pet_budget: float = 0.0,
    kid_budget: float = 0.0,
) -> pd.DataFrame:
    """Allocation shares for the budget breakdown chart.

    Returns:
        DataFrame columns: Name, Amount, Color, Percent. The buffer row comes
        last and only appears when there is money left over.
    """
    rows = [
        ('Food', recommendation.monthly_food, category_display(ExpenseCategory.FOOD)['color']),
        ('Entertainment', recommendation.monthly_miscellaneous,
         category_display(ExpenseCategory.ENTERTAINMENT)['color']),
        ('Savings', recommendation.monthly_savings, SAVINGS_DISPLAY['color']),
    ]
    if pet_budget > 0:
        rows.append(('Pets', pet_budget, category_display(ExpenseCategory.PETS)['color']))
    if kid_budget > 0:
        rows.append(('Kids', kid_budget, category_display(ExpenseCategory.KIDS)['color']))
    if recommendation.remaining_money > 0:
        buffer = max(recommendation.remaining_money - pet_budget - kid_budget, 0.0)
        rows.append(('Buffer', buffer, BUFFER_DISPLAY['color']))

    df = pd.DataFrame(rows, columns=['Name', 'Amount', 'Color'])
    total = (
        recommendation.monthly_food
        + recommendation.monthly_miscellaneous
        + recommendation.monthly_savings
        + max(recommendation.remaining_money, 0.0)
    )
    df['Percent'] = (df['Amount'] / total * 100) if total > 0 else 0.0
    return df


def savings_goal_progress(monthly_savings: float, goal: float) -> SavingsProgress:
    months = int(math.ceil(goal / monthly_savings)) if monthly_savings > 0 else 0
    progress = min(monthly_savings / goal * 100, 100.0) if goal > 0 else 0.0
    return SavingsProgress(
        monthly_savings=monthly_savings,
        goal=goal,
        months_to_goal=months,
        progress_percentage=progress,
    )
