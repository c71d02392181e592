from datetime import date

import pytest

from budget_tracker import config
from budget_tracker.evaluator import (
    SEVERITY_OK,
    SEVERITY_OVER,
    SEVERITY_WARNING,
    budget_balance,
    budget_snapshot,
    budget_warnings,
    days_left_in_month,
    evaluate_budgets,
    evaluate_category,
    expense_warning,
    overall_progress,
    percentage_used,
    remaining,
    severity_counts,
    spent_for,
)
from budget_tracker.models import CategoryBudget
from budget_tracker.taxonomy import ExpenseCategory


def _budget(name, amount, category='', is_custom=False):
    return CategoryBudget(name, amount, 'icon', 'gray', category=category, is_custom=is_custom)


def test_zero_budget_reports_zero_percent():
    assert percentage_used(0, 0) == 0.0
    assert percentage_used(125.0, 0) == 0.0
    status = evaluate_category('Pets', 125.0, 0)
    assert status.percentage_used == 0.0
    assert status.severity == SEVERITY_OK


def test_food_near_cap_warns_but_is_not_over():
    status = evaluate_category('Food & Groceries', 430.0, 450.0)
    assert status.percentage_used == pytest.approx(95.56, abs=0.01)
    assert status.warning
    assert not status.is_over_budget
    assert status.severity == SEVERITY_WARNING
    assert status.status_color == 'orange'
    assert status.remaining == pytest.approx(20.0)


def test_overspent_category():
    status = evaluate_category('Entertainment', 310.0, 300.0)
    assert status.remaining == pytest.approx(-10.0)
    assert status.is_over_budget
    assert status.severity == SEVERITY_OVER
    assert status.percentage_used > 100
    assert status.display_percentage == 100.0
    assert status.status_color == 'red'


def test_remaining_can_go_negative():
    assert remaining(500.0, 400.0) == -100.0
    assert remaining(100.0, 400.0) == 300.0


def test_negative_cap_does_not_raise():
    status = evaluate_category('Odd', 50.0, -100.0)
    assert status.remaining == -150.0
    assert status.is_over_budget


def test_warning_threshold_is_configurable(monkeypatch):
    assert not evaluate_category('Food', 80.0, 100.0).warning
    assert evaluate_category('Food', 80.0, 100.0, threshold=75).warning
    monkeypatch.setattr(config, 'WARNING_THRESHOLD', 50.0)
    assert evaluate_category('Food', 60.0, 100.0).warning


def test_exactly_at_threshold_warns():
    assert evaluate_category('Food', 90.0, 100.0).warning
    assert evaluate_category('Food', 100.0, 100.0).severity == SEVERITY_OVER
    assert not evaluate_category('Food', 100.0, 100.0).is_over_budget


def test_spent_for_matches_enum_and_custom_keys():
    spending = {ExpenseCategory.FOOD: 430.0, 'Coffee': 22.0}
    assert spent_for(_budget('Food & Groceries', 450.0, category='Food'), spending) == 430.0
    assert spent_for(_budget('Coffee', 60.0, is_custom=True), spending) == 22.0
    assert spent_for(_budget('Pets', 80.0, category='Pets'), spending) == 0.0


def test_evaluate_budgets_and_snapshot():
    budgets = [
        _budget('Food & Groceries', 450.0, category='Food'),
        _budget('Entertainment', 300.0, category='Entertainment'),
        _budget('Coffee', 60.0, is_custom=True),
    ]
    spending = {ExpenseCategory.FOOD: 430.0, ExpenseCategory.ENTERTAINMENT: 310.0, 'Coffee': 12.0}
    statuses = evaluate_budgets(budgets, spending)

    assert [s.name for s in statuses] == ['Food & Groceries', 'Entertainment', 'Coffee']
    assert severity_counts(statuses) == {SEVERITY_OK: 1, SEVERITY_WARNING: 1, SEVERITY_OVER: 1}

    snapshot = budget_snapshot(statuses)
    assert list(snapshot.columns) == [
        'Category', 'Budget', 'Spent', 'Remaining',
        'Percent Used', 'Display Percent', 'Status', 'Warning',
    ]
    assert snapshot['Status'].tolist() == ['Under', 'Over', 'Under']
    assert snapshot['Warning'].tolist() == [True, True, False]


def test_budget_warnings_text():
    statuses = [
        evaluate_category('Food', 430.0, 450.0),
        evaluate_category('Entertainment', 310.5, 300.0),
        evaluate_category('Transport', 10.0, 200.0),
    ]
    assert budget_warnings(statuses) == [
        'Food budget: Only $20 left',
        'Entertainment budget: $10 over budget',
    ]


def test_overall_progress_and_days_left():
    assert overall_progress(375.0, 750.0) == 50.0
    assert overall_progress(375.0, 0.0) == 0.0
    assert days_left_in_month(date(2026, 2, 20)) == 8
    assert days_left_in_month(date(2026, 1, 31)) == 0


def test_budget_balance_reports_without_enforcing():
    budgets = [_budget('Food', 450.0), _budget('Fun', 300.0)]
    balance = budget_balance(3000.0, 1800.0, budgets)
    assert balance.allocated == pytest.approx(2550.0)
    assert balance.unallocated == pytest.approx(450.0)
    assert balance.is_balanced

    tight = budget_balance(2000.0, 1800.0, budgets)
    assert tight.unallocated == pytest.approx(-550.0)
    assert not tight.is_balanced


def test_expense_warning_below_threshold_is_silent():
    assert expense_warning('Food', 300.0, 50.0, 450.0) is None


def test_expense_warning_never_fires_for_zero_budget():
    assert expense_warning('Pets', 0.0, 500.0, 0.0) is None


def test_expense_warning_at_exactly_ninety_percent():
    message = expense_warning('Food', 80.0, 10.0, 100.0)
    assert message == "⚠️ Warning: This will use 90% of your Food budget. You'll only have $10 left."


def test_expense_warning_over_budget():
    assert expense_warning('Food', 400.0, 60.0, 450.0) == '⚠️ This will put you $10 OVER your Food budget!'
    assert expense_warning('Food', 400.0, 50.0, 450.0) == '⚠️ This will put you $0 OVER your Food budget!'


def test_expense_warning_threshold_override():
    assert expense_warning('Fun', 50.0, 10.0, 100.0) is None
    assert expense_warning('Fun', 50.0, 10.0, 100.0, threshold=60) is not None
