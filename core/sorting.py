from __future__ import annotations

from typing import Iterable, List

from core.dates import sort_key
from core.records import Record


def sort_records(records: Iterable[Record]) -> List[Record]:
    """Ascending by start date; blank or unparsable dates sort as the epoch.

    ``sorted`` is stable, so ties keep their filter-stage order.
    """
    return sorted(records, key=lambda r: sort_key(r.start_date))
