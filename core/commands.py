from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Literal, Optional

from core.config import Settings, get_settings
from core.errors import NothingToExportError
from core.export_csv import MEDIA_TYPE as CSV_MEDIA_TYPE
from core.export_csv import build_csv, csv_filename
from core.export_detail import ImageFetcher, build_detail_pdf, detail_pdf_filename
from core.export_pdf import MEDIA_TYPE as PDF_MEDIA_TYPE
from core.export_pdf import build_table_pdf, table_pdf_filename
from core.filters import SearchCriteria
from core.session import FilteredResult, PortfolioSession


ExportKind = Literal["csv", "pdf", "detail_pdf"]


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


@dataclass(frozen=True)
class SearchCommand:
    criteria: SearchCriteria = field(default_factory=SearchCriteria)

    def execute(self, session: PortfolioSession) -> FilteredResult:
        # An empty dataset (first use or failed fetch) is fetched again.
        session.ensure_loaded()
        return session.search(self.criteria)


@dataclass(frozen=True)
class ClearCommand:
    """Reset the search form; the last result stays on screen."""

    def execute(self, session: PortfolioSession) -> SearchCriteria:
        return SearchCriteria()


@dataclass(frozen=True)
class ExportCommand:
    kind: ExportKind
    record_index: Optional[int] = None
    settings: Optional[Settings] = None
    fetch: Optional[ImageFetcher] = None

    def execute(self, session: PortfolioSession) -> ExportArtifact:
        settings = self.settings or get_settings()
        builders: Dict[str, Callable[[PortfolioSession, Settings], ExportArtifact]] = {
            "csv": self._csv,
            "pdf": self._pdf,
            "detail_pdf": self._detail,
        }
        if self.kind not in builders:
            raise ValueError(f"Unknown export kind: {self.kind}")
        with session.export_guard():
            return builders[self.kind](session, settings)

    def _csv(self, session: PortfolioSession, settings: Settings) -> ExportArtifact:
        result = session.result
        return ExportArtifact(csv_filename(settings.export_basename), CSV_MEDIA_TYPE, build_csv(result.records))

    def _pdf(self, session: PortfolioSession, settings: Settings) -> ExportArtifact:
        result = session.result
        content = build_table_pdf(result.records, result.summary, settings)
        return ExportArtifact(table_pdf_filename(settings.export_basename), PDF_MEDIA_TYPE, content)

    def _detail(self, session: PortfolioSession, settings: Settings) -> ExportArtifact:
        if self.record_index is None:
            raise NothingToExportError()
        record = session.record_at(self.record_index)
        content = build_detail_pdf(record, settings, fetch=self.fetch)
        return ExportArtifact(detail_pdf_filename(record), PDF_MEDIA_TYPE, content)
