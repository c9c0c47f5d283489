# src/storage/chart_exporter.py

"""Generate an interactive Plotly HTML chart of the published dataset."""

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Any

from src.config.settings import Settings
from src.models.export_model import ExportModel
from src.storage.blob_store import FileBlobStore

logger = logging.getLogger("price_monitor.chart")


def _get_plotly_go() -> ModuleType:
    """Import plotly.graph_objects lazily."""
    return importlib.import_module("plotly.graph_objects")


def build_history_chart(model: ExportModel) -> Any | None:
    """Build an overlay line chart with one trace per product.

    Returns ``None`` when no product has a recorded price.
    """
    go = _get_plotly_go()
    fig: Any = go.Figure()
    for name, points in model.product_histories.items():
        if not points:
            continue
        fig.add_trace(go.Scatter(
            x=[p.day.isoformat() for p in points],
            y=[p.price for p in points],
            mode="lines+markers",
            name=name[:50],
            hovertemplate=(
                "%{x}<br>"
                "Price: %{y:.2f}"
                "<extra></extra>"
            ),
        ))

    if not fig.data:
        return None

    fig.update_layout(
        title=(
            "Price History, updated "
            f"{model.last_updated.strftime('%Y-%m-%d %H:%M')}"
        ),
        xaxis_title="Date",
        yaxis_title="Price",
        hovermode="x unified",
        template="plotly_white",
        legend={"orientation": "h", "y": -0.15},
    )
    return fig


def export_history_chart(
    model: ExportModel,
    blob_store: FileBlobStore,
    key: str = Settings.CHART_FILE,
) -> Path | None:
    """Write the history chart next to the published dataset."""
    fig = build_history_chart(model)
    if fig is None:
        logger.warning("No price history to chart")
        return None

    html: str = fig.to_html(include_plotlyjs="cdn", full_html=True)
    path = blob_store.write_atomic(key, html)
    logger.info("Chart saved to %s", path)
    return path
