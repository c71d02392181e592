"""Recurring expense processing.

A recurring expense has no separate cursor: its state is the most recent
record sharing the same template key.  Each run materializes the next due
occurrence as a new immutable record, which then becomes the "last
occurrence" for the following run.

By default one period is materialized per template per run, so a long gap
is caught up over repeated runs.  Pass ``backfill=True`` (or set
``BUDGET_TRACKER_RECURRENCE_BACKFILL``) to generate every missed period at
once.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from . import config
from .models import ExpenseRecord, coerce_date, new_id
from .taxonomy import FREQUENCY_RULES, parse_frequency

logger = logging.getLogger(__name__)

TemplateKey = Tuple[str, str, str, float, str]


def next_occurrence_date(last, frequency) -> Optional[date]:
    """Date one period after ``last``, or ``None`` for an unknown frequency.

    Monthly steps use calendar months; the 31st rolls to the last day of
    shorter months.
    """
    member = parse_frequency(frequency)
    last_date = coerce_date(last)
    if member is None or last_date is None:
        return None
    rule = FREQUENCY_RULES[member]
    if rule['unit'] == 'months':
        return (pd.Timestamp(last_date) + pd.DateOffset(months=rule['step'])).date()
    return last_date + timedelta(days=rule['step'])


def is_due(last, frequency, today=None) -> bool:
    """True once at least one full period has elapsed since ``last``."""
    next_date = next_occurrence_date(last, frequency)
    if next_date is None:
        return False
    return next_date <= (coerce_date(today) or date.today())


def due_dates(last, frequency, today=None, backfill: bool = False) -> List[date]:
    """Dates to materialize for one template.

    Returns at most one date unless ``backfill`` is set, in which case every
    period boundary up to and including ``today`` is returned.
    """
    current = coerce_date(today) or date.today()
    dates: List[date] = []
    cursor = coerce_date(last)
    while True:
        next_date = next_occurrence_date(cursor, frequency)
        if next_date is None or next_date > current:
            break
        dates.append(next_date)
        if not backfill:
            break
        cursor = next_date
    return dates


def template_key(record: ExpenseRecord) -> TemplateKey:
    member = parse_frequency(record.frequency)
    amount = pd.to_numeric(record.amount, errors='coerce')
    return (
        record.user_id,
        record.category_key or '',
        record.description.strip().lower(),
        0.0 if pd.isna(amount) else round(float(amount), 2),
        member.value if member else str(record.frequency),
    )


def latest_occurrences(records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
    """Most recent record per recurring template, in first-seen order."""
    latest: Dict[TemplateKey, ExpenseRecord] = {}
    for record in records:
        if not record.is_recurring or record.date is None:
            continue
        key = template_key(record)
        current = latest.get(key)
        if current is None or record.date > current.date:
            latest[key] = record
    return list(latest.values())


def materialize(template: ExpenseRecord, on: date) -> ExpenseRecord:
    return replace(template, id=new_id(), date=on, is_recurring=True)


def process_recurring(
    records: Iterable[ExpenseRecord],
    today=None,
    backfill: Optional[bool] = None,
) -> List[ExpenseRecord]:
    """Generate the recurring occurrences that are due.

    Args:
        records: All of a user's expense records
        today: Evaluation date (defaults to today)
        backfill: Generate every missed period instead of one per template;
            defaults to ``config.RECURRENCE_BACKFILL``

    Returns:
        New expense records to persist, ordered by template then date.
        Calling again with the returned records added and no time advance
        yields nothing new once every template is caught up.
    """
    fill = config.RECURRENCE_BACKFILL if backfill is None else backfill
    created: List[ExpenseRecord] = []
    for template in latest_occurrences(records):
        if parse_frequency(template.frequency) is None:
            logger.debug(
                "Skipping recurring expense %s: unrecognised frequency %r",
                template.id, template.frequency,
            )
            continue
        for due in due_dates(template.date, template.frequency, today, backfill=fill):
            created.append(materialize(template, due))
    if created:
        logger.info("Materialized %d recurring expense(s)", len(created))
    return created


def apply_recurring(
    records: Iterable[ExpenseRecord],
    today=None,
    backfill: Optional[bool] = None,
) -> Tuple[List[ExpenseRecord], List[ExpenseRecord]]:
    """Return ``(all_records, new_records)`` after one processing run."""
    existing = list(records)
    new_records = process_recurring(existing, today, backfill)
    return existing + new_records, new_records

