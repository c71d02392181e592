"""Monthly summary generation.

Builds the end-of-month report: one CategorySummary per budget, the
achievements earned and the insights worth showing.  Rule thresholds come
from ``settings/rules.json``; message order follows rule order so a stored
summary reads the same every time it is displayed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence

from .evaluator import percentage_used, spent_for
from .ledger import spending_by_category, total_for_month
from .models import BudgetRecommendation, CategoryBudget, CategorySummary, ExpenseRecord, MonthlySummary, coerce_date
from .settings import get_config_value
from .taxonomy import ExpenseCategory

logger = logging.getLogger(__name__)


def build_category_summaries(
    budgets: Iterable[CategoryBudget],
    spending: Mapping,
) -> List[CategorySummary]:
    """One summary row per budget, in budget order.

    Args:
        budgets: Category budgets for the month
        spending: Month-scoped spend as returned by ``ledger.spending_by_category``

    Returns:
        CategorySummary list with unclamped ``percentage_used``
    """
    summaries: List[CategorySummary] = []
    for budget in budgets:
        spent = spent_for(budget, spending)
        summaries.append(CategorySummary(
            name=budget.name,
            budgeted=budget.monthly_budget,
            spent=spent,
            percentage_used=percentage_used(spent, budget.monthly_budget),
            icon=budget.icon,
            color=budget.color,
        ))
    return summaries


def generate_achievements(
    total_income: float,
    actual_savings: float,
    savings_target: float,
    categories: Sequence[CategorySummary],
) -> List[str]:
    """Achievement badges earned this month.

    Only the highest savings tier is awarded.  "Most categories" needs at
    least half of the categories to be within budget.  Categories without a
    positive cap never earn the "only used" badge.
    """
    achievements: List[str] = []

    if actual_savings >= savings_target:
        achievements.append("🎯 Hit your savings goal!")

    if total_income > 0:
        savings_percent = actual_savings / total_income * 100
        tiers = get_config_value('rules', 'achievements', 'savings_tiers', default=[])
        for tier in sorted(tiers, key=lambda t: t['percent'], reverse=True):
            if savings_percent >= tier['percent']:
                achievements.append(tier['label'])
                break

    if categories:
        under = sum(1 for c in categories if not c.was_over_budget)
        if under == len(categories):
            achievements.append("✨ Stayed under budget in ALL categories!")
        elif under * 2 >= len(categories):
            achievements.append("📊 Under budget in most categories")

    win_percent = get_config_value('rules', 'achievements', 'category_win_percent', default=80)
    for category in categories:
        # Zero caps report 0% used, which is no win
        if category.budgeted <= 0 or category.was_over_budget:
            continue
        if category.percentage_used < win_percent:
            achievements.append(
                f"🎉 Only used {int(category.percentage_used)}% of {category.name} budget"
            )
    return achievements


def generate_insights(
    categories: Sequence[CategorySummary],
    total_spent: float,
    total_income: float,
) -> List[str]:
    insights: List[str] = []

    for category in categories:
        if category.was_over_budget:
            overspent = category.spent - category.budgeted
            insights.append(f"⚠️ {category.name}: ${int(overspent)} over budget")

    # No ratio without income
    if total_income > 0:
        spent_percent = total_spent / total_income * 100
        caution = get_config_value('rules', 'insights', 'spend_caution_percent', default=90)
        praise = get_config_value('rules', 'insights', 'spend_praise_percent', default=70)
        if spent_percent > caution:
            insights.append(f"💡 You spent {int(spent_percent)}% of income - try to reduce spending")
        elif spent_percent < praise:
            insights.append(f"💚 Great job! You only spent {int(spent_percent)}% of income")

    for category in categories:
        if category.percentage_used > 100:
            insights.append(f"📈 Consider increasing {category.name} budget next month")

    underspent = sum(c.saved_amount for c in categories if c.saved_amount > 0)
    if underspent > 0:
        insights.append(f"💡 You saved ${int(underspent)} across categories - add to savings!")
    return insights


def smart_suggestions(
    recommendation: BudgetRecommendation,
    income: float,
    total_spent: float,
    spending: Mapping,
) -> List[str]:
    """Short tips shown next to the live tracker during the month.

    Example:
        >>> smart_suggestions(rec, 3000, 120.0, {ExpenseCategory.FOOD: 120.0})
        ["🎉 Excellent! You're saving 20% of your income", ...]
    """
    tips: List[str] = []

    if income > 0:
        savings_percent = recommendation.monthly_savings / income * 100
        if savings_percent >= get_config_value('rules', 'suggestions', 'savings_praise_percent', default=20):
            tips.append(f"🎉 Excellent! You're saving {int(savings_percent)}% of your income")

    food_ratio = get_config_value('rules', 'suggestions', 'food_alert_ratio', default=0.9)
    if spending.get(ExpenseCategory.FOOD, 0.0) > recommendation.monthly_food * food_ratio:
        tips.append("🍽️ Consider meal planning to stay within your food budget")

    fun_ratio = get_config_value('rules', 'suggestions', 'entertainment_alert_ratio', default=0.8)
    if spending.get(ExpenseCategory.ENTERTAINMENT, 0.0) > recommendation.monthly_miscellaneous * fun_ratio:
        tips.append("🎬 You're close to your entertainment limit - maybe skip one outing?")

    if total_spent < recommendation.monthly_food + recommendation.monthly_miscellaneous:
        tips.append("💪 Great job staying under budget this month!")
    return tips


def generate_monthly_summary(
    user_id: str,
    total_income: float,
    records: Iterable[ExpenseRecord],
    budgets: Iterable[CategoryBudget],
    planned_savings: float,
    reference=None,
    custom_categories: Optional[Sequence[str]] = None,
) -> MonthlySummary:
    """Compose the monthly report for the month containing ``reference``.

    Args:
        user_id: Owner of the records and budgets
        total_income: Monthly income after tax
        records: The user's expense records (any month; filtered here)
        budgets: Category budgets to report against
        planned_savings: Savings target from the recommendation
        reference: Any date in the month to summarize (defaults to today)
        custom_categories: Custom category names accepted as spending keys;
            defaults to the names of the custom budgets

    Returns:
        MonthlySummary where ``total_saved`` is actual savings,
        ``max(income - spent, 0)``, compared against ``planned_savings``
    """
    ref = coerce_date(reference) or date.today()
    records = list(records)
    budgets = list(budgets)
    if custom_categories is None:
        custom_categories = [b.name for b in budgets if b.is_custom]

    total_spent = total_for_month(records, ref)
    spending = spending_by_category(records, ref, custom_categories)
    categories = build_category_summaries(budgets, spending)

    actual_savings = max(total_income - total_spent, 0.0)
    summary = MonthlySummary(
        user_id=user_id,
        month=ref.month,
        year=ref.year,
        total_income=total_income,
        total_spent=total_spent,
        total_saved=actual_savings,
        savings_goal_met=actual_savings >= planned_savings,
        budget_categories=categories,
        achievements=generate_achievements(total_income, actual_savings, planned_savings, categories),
        insights=generate_insights(categories, total_spent, total_income),
    )
    logger.info(
        "Generated %s %d summary for %s: spent %.2f of %.2f",
        summary.month_name, summary.year, user_id, total_spent, total_income,
    )
    return summary
