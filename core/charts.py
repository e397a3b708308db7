from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from core.aggregate import counts_as_rows

alt.data_transformers.disable_max_rows()

CHART_COLORS = [
    "#FF6384",
    "#36A2EB",
    "#FFCE56",
    "#4BC0C0",
    "#9966FF",
    "#FF9F40",
    "#8AC249",
    "#EA80FC",
    "#00E5FF",
    "#FF5252",
]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def pie_chart(counts: Dict[str, int], title: str, *, height: int = 260) -> alt.Chart:
    """Pie chart of a category frequency table; legend reads ``label: n (p%)``."""
    df = pd.DataFrame(counts_as_rows(counts), columns=["label", "count", "percent"])
    df["legend"] = [f"{lbl}: {n} ({p:.1f}%)" for lbl, n, p in zip(df["label"], df["count"], df["percent"])]
    df["slice"] = range(len(df))
    order = df["legend"].tolist()
    return (
        alt.Chart(df, title=title)
        .mark_arc()
        .encode(
            theta=alt.Theta("count:Q", stack=True),
            color=alt.Color(
                "legend:N",
                title=None,
                sort=order,
                scale=alt.Scale(range=CHART_COLORS),
                legend=alt.Legend(orient="right"),
            ),
            order=alt.Order("slice:Q"),
            tooltip=[
                alt.Tooltip("label:N", title=title),
                alt.Tooltip("count:Q", format=","),
                alt.Tooltip("percent:Q", format=".1f", title="%"),
            ],
        )
        .properties(height=height)
    )
