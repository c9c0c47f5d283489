# src/services/export_projector.py

"""Projects the price history into the published dataset."""

from datetime import datetime

from src.models.export_model import ExportModel, HistoryPoint
from src.storage.history_store import HistoryStore


def project(store: HistoryStore, last_updated: datetime) -> ExportModel:
    """Build the denormalised export model from *store*.

    Each product's history has one point per date it was recorded on,
    oldest first. Zero prices are kept as real points.
    """
    all_dates = store.dates()
    latest = store.latest_date()
    latest_prices = (
        store.snapshot_on(latest) if latest is not None else None
    ) or {}

    product_histories: dict[str, list[HistoryPoint]] = {
        name: [] for name in store.product_names()
    }
    for day in all_dates:
        snapshot = store.snapshot_on(day) or {}
        for name, point in snapshot.items():
            product_histories[name].append(
                HistoryPoint(
                    day=day,
                    price=point.price,
                    observed_at=point.observed_at,
                )
            )

    return ExportModel(
        last_updated=last_updated,
        latest_prices=latest_prices,
        product_histories=product_histories,
        all_dates=all_dates,
    )
