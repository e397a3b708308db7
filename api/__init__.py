"""HTTP API over the ``core`` pipeline (FastAPI)."""
