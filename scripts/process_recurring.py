#!/usr/bin/env python3
"""Materialize recurring expenses that have come due."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_tracker import db
from budget_tracker.recurrence import process_recurring


def main(user_id: str, today: str | None = None, backfill: bool | None = None, dry_run: bool = False) -> int:
    db.init_db()
    records = db.fetch_expenses(user_id)
    created = process_recurring(records, today=today, backfill=backfill)
    if not created:
        print("No recurring expenses are due.")
        return 0

    for record in created:
        print(f"{record.date.isoformat()}  {record.category_key or '?':<14} {record.description:<30} ${record.amount}")

    if dry_run:
        print(f"\n{len(created)} occurrence(s) would be created (dry run).")
        return 0

    inserted, skipped = db.upsert_expenses(created)
    print(f"\nCreated {inserted} occurrence(s), skipped {skipped}.")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Create due occurrences of recurring expenses.')
    parser.add_argument('--user', required=True, help='User id whose expenses are processed')
    parser.add_argument('--today', help='Evaluation date (YYYY-MM-DD), defaults to today')
    parser.add_argument('--backfill', action='store_true', default=None,
                        help='Create every missed occurrence instead of one per expense')
    parser.add_argument('--dry-run', action='store_true', help='Print due occurrences without saving them')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    sys.exit(main(args.user, today=args.today, backfill=args.backfill, dry_run=args.dry_run))
