from dataclasses import replace
from datetime import date, datetime

import pytest

from budget_tracker import config, db
from budget_tracker.models import (
    BudgetRecommendation,
    CategoryBudget,
    CategorySummary,
    ExpenseRecord,
    MonthlySummary,
)
from budget_tracker.taxonomy import ExpenseCategory, RecurrenceFrequency


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / 'budget.db'
    db.init_db(path)
    return path


def _expense(amount, day, **kwargs):
    return ExpenseRecord(amount, ExpenseCategory.FOOD, 'Groceries', date(2026, 2, day), 'u1', **kwargs)


def _summary(month, year, **kwargs):
    return MonthlySummary(
        user_id='u1',
        month=month,
        year=year,
        total_income=3000.0,
        total_spent=2200.0,
        total_saved=800.0,
        savings_goal_met=True,
        achievements=['🎯 Hit your savings goal!', '💎 Saved 20%+ of income'],
        insights=['⚠️ Entertainment: $10 over budget'],
        **kwargs,
    )


def test_expenses_round_trip(db_path):
    rent = ExpenseRecord(1200.0, 'Bills', 'Rent', date(2026, 2, 1), 'u1', is_recurring=True, frequency='Monthly')
    lunch = _expense(12.5, 3)

    inserted, skipped = db.upsert_expenses([lunch, rent], db_path=db_path)
    assert (inserted, skipped) == (2, 0)

    stored = db.fetch_expenses('u1', db_path=db_path)
    assert [r.id for r in stored] == [rent.id, lunch.id], "expenses load oldest first"
    assert stored[0].category is ExpenseCategory.BILLS
    assert stored[0].frequency is RecurrenceFrequency.MONTHLY
    assert stored[0].is_recurring
    assert stored[1].amount == 12.5
    assert stored[1].frequency is None
    assert db.fetch_expenses('someone-else', db_path=db_path) == []


def test_upsert_ignores_duplicates_and_invalid_amounts(db_path):
    lunch = _expense(12.5, 3)
    db.upsert_expenses([lunch], db_path=db_path)
    inserted, skipped = db.upsert_expenses([lunch, _expense('abc', 4)], db_path=db_path)
    assert (inserted, skipped) == (0, 2)
    assert len(db.fetch_expenses('u1', db_path=db_path)) == 1


def test_fetch_expenses_date_bounds(db_path):
    db.upsert_expenses([_expense(1.0, 1), _expense(2.0, 10), _expense(3.0, 20)], db_path=db_path)
    amounts = [r.amount for r in db.fetch_expenses('u1', '2026-02-05', '2026-02-15', db_path=db_path)]
    assert amounts == [2.0]


def test_delete_expense(db_path):
    lunch = _expense(12.5, 3)
    db.upsert_expenses([lunch], db_path=db_path)
    assert db.delete_expense(lunch.id, db_path=db_path)
    assert not db.delete_expense(lunch.id, db_path=db_path)
    assert db.fetch_expenses('u1', db_path=db_path) == []


def test_categories_round_trip(db_path):
    food = CategoryBudget('Food & Groceries', 450.0, 'fork.knife', 'orange', category='Food', user_id='u1')
    coffee = CategoryBudget('Coffee', 60.0, 'cup.and.saucer.fill', 'brown', is_custom=True, user_id='u1')
    db.save_category(coffee, db_path=db_path)
    db.save_category(food, db_path=db_path)

    stored = db.fetch_categories('u1', db_path=db_path)
    assert [c.name for c in stored] == ['Food & Groceries', 'Coffee'], "built-in budgets come first"
    assert stored[1].key == 'Coffee'
    assert stored[1].is_custom

    custom = db.fetch_categories('u1', custom_only=True, db_path=db_path)
    assert [c.name for c in custom] == ['Coffee']

    assert db.delete_category(coffee.id, db_path=db_path)
    assert [c.name for c in db.fetch_categories('u1', db_path=db_path)] == ['Food & Groceries']


def test_save_category_updates_existing(db_path):
    coffee = CategoryBudget('Coffee', 60.0, 'cup.and.saucer.fill', 'brown', is_custom=True, user_id='u1')
    db.save_category(coffee, db_path=db_path)
    db.save_category(replace(coffee, monthly_budget=75.0), db_path=db_path)
    stored = db.fetch_categories('u1', db_path=db_path)
    assert len(stored) == 1
    assert stored[0].monthly_budget == 75.0


def test_save_category_rejects_empty_name(db_path):
    with pytest.raises(ValueError):
        db.save_category(CategoryBudget('  ', 10.0, 'tag.fill', 'gray', user_id='u1'), db_path=db_path)


def test_latest_recommendation_wins(db_path):
    assert db.load_recommendation('u1', db_path=db_path) is None
    first = BudgetRecommendation(400.0, 250.0, 500.0, 350.0, 16.7, 'Old advice')
    second = BudgetRecommendation(450.0, 300.0, 600.0, 150.0, 20.0, 'New advice', 'Food 450')
    db.save_recommendation('u1', first, db_path=db_path)
    db.save_recommendation('u1', second, db_path=db_path)
    assert db.load_recommendation('u1', db_path=db_path) == second


def test_summaries_round_trip_newest_first(db_path):
    summaries = [
        _summary(11, 2025),
        _summary(2, 2026, budget_categories=[CategorySummary('Food', 450.0, 430.0, 95.6)]),
        _summary(12, 2025),
        _summary(1, 2026, created_at=datetime(2026, 2, 1, 8, 0)),
    ]
    for summary in summaries:
        db.save_summary(summary, db_path=db_path)

    loaded = db.load_summaries('u1', db_path=db_path)
    assert [(s.year, s.month) for s in loaded] == [(2026, 2), (2026, 1), (2025, 12), (2025, 11)]
    assert loaded[0].achievements == summaries[1].achievements
    assert loaded[0].insights == summaries[1].insights
    assert loaded[0].budget_categories == summaries[1].budget_categories
    assert loaded[1].created_at == datetime(2026, 2, 1, 8, 0)


def test_load_summaries_limit(db_path):
    for month in range(1, 13):
        db.save_summary(_summary(month, 2025), db_path=db_path)
    db.save_summary(_summary(1, 2026), db_path=db_path)

    loaded = db.load_summaries('u1', db_path=db_path)
    assert len(loaded) == 12
    assert (loaded[0].year, loaded[0].month) == (2026, 1)
    assert (loaded[-1].year, loaded[-1].month) == (2025, 2)
    assert len(db.load_summaries('u1', limit=3, db_path=db_path)) == 3


def test_default_path_comes_from_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'DB_PATH', tmp_path / 'nested' / 'default.db')
    db.init_db()
    db.upsert_expenses([_expense(5.0, 2)])
    assert (tmp_path / 'nested' / 'default.db').exists()
    assert len(db.fetch_expenses('u1')) == 1
