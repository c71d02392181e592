"""Top-level package for the budget tracker.

The core computations are pure functions over in-memory records:

* ``taxonomy`` – expense categories, recurrence frequencies and display metadata
* ``ledger`` – month-scoped spending totals and CSV export
* ``evaluator`` – budget usage, warnings and status bands
* ``recurrence`` – materializing due recurring expenses
* ``summary`` – monthly summaries with achievements and insights
* ``recommendation`` – budget recommendation snapshots

``db`` stores everything in SQLite and ``visualization`` builds Plotly
figures.  Maintenance scripts live in ``scripts/``:

```bash
python scripts/process_recurring.py --user demo
python scripts/monthly_report.py --user demo --income 3000
```
"""

from . import evaluator  # noqa: F401  # re-exported for convenience
from . import ledger  # noqa: F401  # re-exported for convenience
from . import recurrence  # noqa: F401  # re-exported for convenience
from . import summary  # noqa: F401  # re-exported for convenience
from . import taxonomy  # noqa: F401  # re-exported for convenience

__version__ = "0.1.0"

__all__ = ["evaluator", "ledger", "recurrence", "summary", "taxonomy"]
