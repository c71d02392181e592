"""SQLite storage for expenses, category budgets, recommendations and summaries.

Every function takes an optional ``db_path`` so tests and scripts can point
at their own database; it defaults to ``config.DB_PATH``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from . import config
from .models import BudgetRecommendation, CategoryBudget, ExpenseRecord, MonthlySummary

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    amount REAL NOT NULL,
    category TEXT,
    description TEXT,
    expense_date TEXT,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    frequency TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_expense_user_date ON expenses (user_id, expense_date);

CREATE TABLE IF NOT EXISTS budget_categories (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category TEXT,
    icon TEXT,
    color TEXT,
    monthly_budget REAL NOT NULL DEFAULT 0,
    is_custom INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS recommendations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS monthly_summaries (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    month INTEGER NOT NULL,
    year INTEGER NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS ix_summary_user_period ON monthly_summaries (user_id, year, month);
"""


def _resolve(db_path: Optional[PathLike]) -> Path:
    return Path(db_path) if db_path is not None else config.DB_PATH


@contextmanager
def connect(db_path: Optional[PathLike] = None) -> Iterator[sqlite3.Connection]:
    path = _resolve(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[PathLike] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


# Expenses

def upsert_expenses(
    records: Iterable[ExpenseRecord],
    db_path: Optional[PathLike] = None,
) -> Tuple[int, int]:
    """Insert expense records, ignoring ids that are already stored.

    Records are immutable, so an existing id is never overwritten.  Records
    with a non-numeric amount or no date are rejected.

    Returns:
        (inserted_count, skipped_count)
    """
    rows: List[Tuple] = []
    skipped_invalid = 0
    created_at = datetime.now().isoformat()
    for record in records:
        amount = pd.to_numeric(record.amount, errors='coerce')
        if pd.isna(amount) or record.date is None:
            skipped_invalid += 1
            continue
        data = record.to_dict()
        rows.append((
            data['id'],
            data['userId'],
            float(amount),
            data['category'],
            data['description'],
            data['date'],
            int(data['isRecurring']),
            data['recurringFrequency'] or None,
            created_at,
        ))

    if not rows:
        return (0, skipped_invalid)

    insert_sql = (
        "INSERT OR IGNORE INTO expenses (id, user_id, amount, category, description, "
        "expense_date, is_recurring, frequency, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
    )
    with connect(db_path) as conn:
        before_changes = conn.total_changes
        conn.executemany(insert_sql, rows)
        conn.commit()
        inserted = conn.total_changes - before_changes

    skipped = skipped_invalid + len(rows) - inserted
    logger.info("Stored %d expense(s), skipped %d", inserted, skipped)
    return inserted, skipped


def fetch_expenses(
    user_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db_path: Optional[PathLike] = None,
) -> List[ExpenseRecord]:
    """Expenses for a user, oldest first, optionally bounded by ISO dates."""
    where = ["user_id = ?"]
    params: List = [user_id]
    if start_date:
        where.append("expense_date >= ?")
        params.append(start_date)
    if end_date:
        where.append("expense_date <= ?")
        params.append(end_date)

    sql = (
        "SELECT id, user_id AS userId, amount, category, description, expense_date AS date, "
        "is_recurring AS isRecurring, frequency AS recurringFrequency FROM expenses "
        "WHERE " + " AND ".join(where) + " ORDER BY expense_date ASC, created_at ASC"
    )
    with connect(db_path) as conn:
        df = pd.read_sql_query(sql, conn, params=params)
    df = df.astype(object).where(df.notna(), None)
    return [ExpenseRecord.from_dict(row) for row in df.to_dict('records')]


def delete_expense(expense_id: str, db_path: Optional[PathLike] = None) -> bool:
    with connect(db_path) as conn:
        cursor = conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        conn.commit()
        return cursor.rowcount > 0


# Category budgets

def save_category(budget: CategoryBudget, db_path: Optional[PathLike] = None) -> None:
    """Insert or update a category budget.

    Raises:
        ValueError: If the category has no name
    """
    if not budget.name or not budget.name.strip():
        raise ValueError("Category name cannot be empty")
    with connect(db_path) as conn:
        conn.execute(
            "INSERT OR REPLACE INTO budget_categories "
            "(id, user_id, name, category, icon, color, monthly_budget, is_custom) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                budget.id,
                budget.user_id,
                budget.name.strip(),
                budget.key,
                budget.icon,
                budget.color,
                float(budget.monthly_budget),
                int(budget.is_custom),
            ),
        )
        conn.commit()
    logger.info("Saved category budget '%s' for %s", budget.name, budget.user_id)


def fetch_categories(
    user_id: str,
    custom_only: bool = False,
    db_path: Optional[PathLike] = None,
) -> List[CategoryBudget]:
    sql = (
        "SELECT id, user_id, name, category, icon, color, monthly_budget, is_custom "
        "FROM budget_categories WHERE user_id = ?"
    )
    if custom_only:
        sql += " AND is_custom = 1"
    sql += " ORDER BY is_custom ASC, rowid ASC"
    with connect(db_path) as conn:
        rows = conn.execute(sql, (user_id,)).fetchall()
    return [
        CategoryBudget(
            id=row[0],
            user_id=row[1],
            name=row[2],
            category=row[3] or row[2],
            icon=row[4] or '',
            color=row[5] or '',
            monthly_budget=float(row[6]),
            is_custom=bool(row[7]),
        )
        for row in rows
    ]


def delete_category(category_id: str, db_path: Optional[PathLike] = None) -> bool:
    with connect(db_path) as conn:
        cursor = conn.execute("DELETE FROM budget_categories WHERE id = ?", (category_id,))
        conn.commit()
        return cursor.rowcount > 0


# Recommendations

def save_recommendation(
    user_id: str,
    recommendation: BudgetRecommendation,
    db_path: Optional[PathLike] = None,
) -> None:
    """Store a new recommendation snapshot; the latest one wins on load."""
    payload = json.dumps(recommendation.to_dict(), ensure_ascii=False)
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO recommendations (user_id, payload, created_at) VALUES (?, ?, ?)",
            (user_id, payload, datetime.now().isoformat()),
        )
        conn.commit()
    logger.info("Saved budget recommendation for %s", user_id)


def load_recommendation(
    user_id: str,
    db_path: Optional[PathLike] = None,
) -> Optional[BudgetRecommendation]:
    with connect(db_path) as conn:
        row = conn.execute(
            "SELECT payload FROM recommendations WHERE user_id = ? ORDER BY id DESC LIMIT 1",
            (user_id,),
        ).fetchone()
    if row is None:
        return None
    return BudgetRecommendation.from_dict(json.loads(row[0]))


# Monthly summaries

def save_summary(summary: MonthlySummary, db_path: Optional[PathLike] = None) -> None:
    with connect(db_path) as conn:
        conn.execute(
            "INSERT OR REPLACE INTO monthly_summaries (id, user_id, month, year, payload, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                summary.id,
                summary.user_id,
                summary.month,
                summary.year,
                summary.to_json(),
                summary.created_at.isoformat(),
            ),
        )
        conn.commit()
    logger.info("Saved %s %d summary for %s", summary.month_name, summary.year, summary.user_id)


def load_summaries(
    user_id: str,
    limit: int = 12,
    db_path: Optional[PathLike] = None,
) -> List[MonthlySummary]:
    """Most recent summaries first (by year, then month)."""
    with connect(db_path) as conn:
        rows = conn.execute(
            "SELECT payload FROM monthly_summaries WHERE user_id = ? "
            "ORDER BY year DESC, month DESC, created_at DESC LIMIT ?",
            (user_id, limit),
        ).fetchall()
    return [MonthlySummary.from_json(row[0]) for row in rows]
