"""Month-scoped expense aggregation.

Expense records are loaded into a DataFrame once and summed by calendar
month and category.  Records whose category is not recognised still count
towards the monthly total but are left out of the per-category sums.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .models import ExpenseRecord, coerce_date
from .taxonomy import ExpenseCategory, parse_category

logger = logging.getLogger(__name__)

CategoryKey = Union[ExpenseCategory, str]

FRAME_COLUMNS = [
    'id', 'date', 'amount', 'category', 'description',
    'user_id', 'is_recurring', 'frequency',
]
CSV_COLUMNS = ['Date', 'Category', 'Description', 'Amount']


def expenses_to_frame(
    records: Iterable[ExpenseRecord],
    custom_categories: Sequence[str] = (),
) -> pd.DataFrame:
    """Build the working DataFrame for a collection of expense records.

    Args:
        records: Expense records for a single user
        custom_categories: Names of user-defined categories accepted as keys

    Returns:
        DataFrame with one row per record. ``amount`` is numeric (unparseable
        values become 0.0), ``date`` is a datetime column, and ``category``
        holds an :class:`ExpenseCategory`, a canonical custom name, or ``None``
        when the category is not recognised.
    """
    rows = [
        {
            'id': r.id,
            'date': r.date,
            'amount': r.amount,
            'category': r.category,
            'description': r.description,
            'user_id': r.user_id,
            'is_recurring': r.is_recurring,
            'frequency': r.frequency,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    if df.empty:
        return df

    df['date'] = pd.to_datetime(df['date'], errors='coerce')
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0.0).astype(float)

    custom_lookup = {name.strip().lower(): name for name in custom_categories if name}
    df['category'] = df['category'].apply(lambda value: _category_key(value, custom_lookup))

    unknown = int(df['category'].isna().sum())
    if unknown:
        logger.warning("%d expense record(s) have an unrecognised category; excluded from category sums", unknown)
    return df


def _category_key(value, custom_lookup: Dict[str, str]) -> Optional[CategoryKey]:
    member = parse_category(value)
    if member is not None:
        return member
    if isinstance(value, str):
        return custom_lookup.get(value.strip().lower())
    return None


def _month_slice(df: pd.DataFrame, reference) -> pd.DataFrame:
    ref = coerce_date(reference) or date.today()
    if df.empty:
        return df
    mask = (df['date'].dt.year == ref.year) & (df['date'].dt.month == ref.month)
    return df[mask]


def total_for_month(records: Iterable[ExpenseRecord], reference=None) -> float:
    """Sum of amounts dated in the same calendar month as ``reference``.

    Args:
        records: Expense records
        reference: Any date within the month of interest (defaults to today)

    Returns:
        Total spent that month, including records with unknown categories
    """
    scoped = _month_slice(expenses_to_frame(records), reference)
    if scoped.empty:
        return 0.0
    return float(scoped['amount'].sum())


def spending_by_category(
    records: Iterable[ExpenseRecord],
    reference=None,
    custom_categories: Sequence[str] = (),
) -> Dict[CategoryKey, float]:
    """Month-scoped spend per category.

    Example:
        >>> spending_by_category(records, date(2026, 2, 1))
        {<ExpenseCategory.FOOD: 'Food'>: 430.0}
    """
    scoped = _month_slice(expenses_to_frame(records, custom_categories), reference)
    if scoped.empty:
        return {}
    scoped = scoped.dropna(subset=['category'])
    totals: Dict[CategoryKey, float] = {}
    for category, amount in zip(scoped['category'], scoped['amount']):
        totals[category] = totals.get(category, 0.0) + float(amount)
    return totals


def monthly_totals(records: Iterable[ExpenseRecord]) -> pd.DataFrame:
    """Total spend per calendar month, oldest first.

    Returns:
        DataFrame with columns Month (``YYYY-MM``) and Spent
    """
    df = expenses_to_frame(records)
    if df.empty:
        return pd.DataFrame(columns=['Month', 'Spent'])
    df = df.dropna(subset=['date'])
    df['Month'] = df['date'].dt.to_period('M')
    grouped = df.groupby('Month')['amount'].sum().sort_index()
    return pd.DataFrame({
        'Month': grouped.index.astype(str),
        'Spent': grouped.values.astype(float),
    })


def recurring_templates(records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
    return [r for r in records if r.is_recurring]


def export_expenses_csv(
    records: Iterable[ExpenseRecord],
    path: Optional[Path] = None,
) -> str:
    """Export expenses as ``Date,Category,Description,Amount`` CSV.

    Args:
        records: Expense records in the order they should appear
        path: Optional file to write the CSV to

    Returns:
        The CSV text

    Raises:
        OSError: If the file cannot be written
    """
    rows = [
        {
            'Date': r.date.isoformat() if r.date else '',
            'Category': r.category_key or '',
            'Description': r.description,
            'Amount': r.amount,
        }
        for r in records
    ]
    csv_text = pd.DataFrame(rows, columns=CSV_COLUMNS).to_csv(index=False, lineterminator='\n')

    if path is not None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            target.write_text(csv_text, encoding='utf-8')
        except OSError as e:
            raise OSError(f"Failed to export expenses to {target}: {e}") from e
        logger.info("Exported %d expense(s) to %s", len(rows), target)
    return csv_text
