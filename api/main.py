from __future__ import annotations

import logging
import math
from urllib.parse import quote

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    DetailResponse,
    ErrorResponse,
    MetaOptionsResponse,
    RefreshResponse,
    SearchCriteriaModel,
)
from core.commands import ClearCommand, ExportArtifact, ExportCommand, SearchCommand
from core.config import configure_logging, get_settings
from core.errors import (
    ExportInProgressError,
    ExportRenderError,
    NothingToExportError,
    PortfolioError,
    RecordNotFoundError,
)
from core.filters import SearchCriteria, normalize_criteria
from core.metrics_overview import compute_detail, compute_options, compute_overview
from core.session import PortfolioSession


settings = get_settings()
configure_logging(settings)

app = FastAPI(title="Activity Portfolio Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session = PortfolioSession()


def get_session() -> PortfolioSession:
    return _session


def _criteria_from_model(model: SearchCriteriaModel) -> SearchCriteria:
    return normalize_criteria(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _file(artifact: ExportArtifact) -> Response:
    disposition = f"attachment; filename*=UTF-8''{quote(artifact.filename)}"
    return Response(content=artifact.content, media_type=artifact.media_type, headers={"Content-Disposition": disposition})


def _export(command: ExportCommand, session: PortfolioSession, label: str):
    try:
        return _file(command.execute(session))
    except (NothingToExportError, RecordNotFoundError) as exc:
        return _error(404, exc)
    except ExportInProgressError as exc:
        return _error(409, exc)
    except ExportRenderError as exc:
        return _error(500, exc)
    except Exception as exc:
        logger.exception("%s failed", label)
        return _error(500, exc)


@app.get("/meta/options", response_model=MetaOptionsResponse)
def meta_options(session: PortfolioSession = Depends(get_session)):
    try:
        dataset = session.ensure_loaded()
        return _json(compute_options(dataset))
    except Exception as exc:
        logger.exception("meta_options failed")
        return _error(500, exc)


@app.post("/refresh", response_model=RefreshResponse)
def refresh(session: PortfolioSession = Depends(get_session)):
    try:
        dataset = session.refresh()
        return _json({"rows": len(dataset), "records": len(dataset.records)})
    except Exception as exc:
        logger.exception("refresh failed")
        return _error(500, exc)


@app.post("/search")
def search(criteria: SearchCriteriaModel, session: PortfolioSession = Depends(get_session)):
    try:
        result = SearchCommand(_criteria_from_model(criteria)).execute(session)
        return _json(compute_overview(result, settings))
    except Exception as exc:
        logger.exception("search failed")
        return _error(500, exc)


@app.post("/clear", response_model=SearchCriteriaModel)
def clear(session: PortfolioSession = Depends(get_session)):
    blank = ClearCommand().execute(session)
    return SearchCriteriaModel(**{k: v for k, v in vars(blank).items() if v is not None})


@app.get("/records/{index}", response_model=DetailResponse, responses={404: {"model": ErrorResponse}})
def record_detail(index: int, session: PortfolioSession = Depends(get_session)):
    try:
        return _json(compute_detail(session.record_at(index), index, settings))
    except PortfolioError as exc:
        return _error(404, exc)
    except Exception as exc:
        logger.exception("record_detail failed")
        return _error(500, exc)


@app.post("/export/csv", responses={404: {"model": ErrorResponse}})
def export_csv(session: PortfolioSession = Depends(get_session)):
    return _export(ExportCommand("csv", settings=settings), session, "export_csv")


@app.post("/export/pdf", responses={404: {"model": ErrorResponse}})
def export_pdf(session: PortfolioSession = Depends(get_session)):
    return _export(ExportCommand("pdf", settings=settings), session, "export_pdf")


@app.get("/export/detail/{index}", responses={404: {"model": ErrorResponse}})
def export_detail(index: int, session: PortfolioSession = Depends(get_session)):
    return _export(ExportCommand("detail_pdf", record_index=index, settings=settings), session, "export_detail")
