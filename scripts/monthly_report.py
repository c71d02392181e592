#!/usr/bin/env python3
"""Print (and optionally store) the monthly summary for a user."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_tracker import config, db
from budget_tracker.evaluator import budget_snapshot, budget_warnings, evaluate_budgets, severity_counts
from budget_tracker.ledger import export_expenses_csv, spending_by_category
from budget_tracker.models import CategoryBudget, coerce_date
from budget_tracker.recommendation import category_budgets_from_recommendation
from budget_tracker.summary import generate_monthly_summary


def load_budgets(user_id: str, recommendation, pets: float = 0.0, kids: float = 0.0) -> List[CategoryBudget]:
    """Built-in budgets from the recommendation followed by the stored custom ones.

    Without a recommendation only the stored category budgets are used.
    """
    if recommendation is None:
        return db.fetch_categories(user_id)
    custom = db.fetch_categories(user_id, custom_only=True)
    return category_budgets_from_recommendation(
        recommendation, pet_budget=pets, kid_budget=kids, custom=custom, user_id=user_id,
    )


def main(
    user_id: str,
    income: float,
    month: str | None = None,
    pets: float = 0.0,
    kids: float = 0.0,
    save: bool = False,
    export: bool = False,
) -> int:
    db.init_db()
    reference = coerce_date(month)
    records = db.fetch_expenses(user_id)
    recommendation = db.load_recommendation(user_id)
    budgets = load_budgets(user_id, recommendation, pets, kids)

    if not budgets:
        print("No budget found for this user. Save a recommendation or category budgets first.")
        return 1
    planned_savings = recommendation.monthly_savings if recommendation else 0.0

    summary = generate_monthly_summary(user_id, income, records, budgets, planned_savings, reference=reference)

    print(f"{summary.month_name} {summary.year}")
    print(f"Income ${summary.total_income:,.2f}  Spent ${summary.total_spent:,.2f}  Saved ${summary.total_saved:,.2f}")
    print(f"Savings goal met: {'yes' if summary.savings_goal_met else 'no'}")

    custom = [b.name for b in budgets if b.is_custom]
    statuses = evaluate_budgets(budgets, spending_by_category(records, reference, custom))
    print("\nBudgets:")
    print(budget_snapshot(statuses).to_string(index=False))
    counts = severity_counts(statuses)
    print(f"ok: {counts['ok']}  warning: {counts['warning']}  over: {counts['over']}")
    for warning in budget_warnings(statuses):
        print(f"  ! {warning}")

    if summary.achievements:
        print("\nAchievements:")
        for line in summary.achievements:
            print(f"  {line}")
    if summary.insights:
        print("\nInsights:")
        for line in summary.insights:
            print(f"  {line}")

    if save:
        db.save_summary(summary)
        print("\nSummary saved.")
    if export:
        config.ensure_data_directories()
        target = config.EXPORTS_DIR / f"expenses_{user_id}.csv"
        export_expenses_csv(records, target)
        print(f"Expenses exported to {target}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Generate the monthly budget summary.')
    parser.add_argument('--user', required=True, help='User id to report on')
    parser.add_argument('--income', type=float, required=True, help='Monthly income after tax')
    parser.add_argument('--month', help='Any date in the month to report (YYYY-MM-DD), defaults to today')
    parser.add_argument('--pets', type=float, default=0.0, help='Monthly pet budget')
    parser.add_argument('--kids', type=float, default=0.0, help='Monthly kids budget')
    parser.add_argument('--save', action='store_true', help='Store the summary in the database')
    parser.add_argument('--export', action='store_true', help='Export the expenses as CSV')
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    sys.exit(main(
        args.user, args.income, month=args.month, pets=args.pets, kids=args.kids,
        save=args.save, export=args.export,
    ))
