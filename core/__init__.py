"""Core (UI-agnostic) dashboard logic.

This package contains:
- the record model and raw store (sheet rows -> typed records)
- filtering, sorting and aggregation of the working set
- session state and the search / clear / export commands
- CSV and PDF exporters
- chart helpers (Altair -> Vega-Lite spec dict)
"""
