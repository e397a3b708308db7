from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Tuple

from core.aggregate import Summary, summarize
from core.data import fetch_rows
from core.errors import ExportInProgressError, RecordNotFoundError
from core.filters import SearchCriteria, filter_records
from core.records import Dataset, Record, load_dataset
from core.sorting import sort_records


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilteredResult:
    criteria: SearchCriteria = field(default_factory=SearchCriteria)
    records: Tuple[Record, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def summary(self) -> Summary:
        return summarize(self.records)


class PortfolioSession:
    """Owns the dataset and the current filtered result.

    Both are only ever replaced, never mutated, so snapshots handed to the
    UI stay valid after the next search.
    """

    def __init__(self, fetcher: Optional[Callable[[], List[List[Any]]]] = None):
        self._fetcher = fetcher or fetch_rows
        self._lock = threading.Lock()
        self._export_lock = threading.Lock()
        self.dataset = Dataset()
        self.result = FilteredResult()

    def load(self, raw_rows: Optional[List[List[Any]]]) -> Dataset:
        with self._lock:
            self.dataset = load_dataset(raw_rows)
            self.result = FilteredResult()
        logger.info("Loaded %d rows", len(self.dataset))
        return self.dataset

    def refresh(self) -> Dataset:
        return self.load(self._fetcher())

    def ensure_loaded(self) -> Dataset:
        if self.dataset.is_empty:
            return self.refresh()
        return self.dataset

    def search(self, criteria: Optional[SearchCriteria] = None) -> FilteredResult:
        criteria = criteria or SearchCriteria()
        with self._lock:
            records = sort_records(filter_records(self.dataset, criteria))
            self.result = FilteredResult(criteria=criteria, records=tuple(records))
        if self.dataset.malformed_count:
            logger.debug("Skipped %d malformed rows", self.dataset.malformed_count)
        return self.result

    def clear(self) -> FilteredResult:
        with self._lock:
            self.result = FilteredResult()
        return self.result

    def record_at(self, index: int) -> Record:
        records = self.result.records
        if index < 0 or index >= len(records):
            raise RecordNotFoundError(index)
        return records[index]

    @contextmanager
    def export_guard(self) -> Iterator[None]:
        """Reject an export while another one is still being built."""
        if not self._export_lock.acquire(blocking=False):
            raise ExportInProgressError()
        try:
            yield
        finally:
            self._export_lock.release()
