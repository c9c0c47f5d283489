# src/models/export_model.py

"""Denormalised read-model published as the static dataset."""

from dataclasses import dataclass
from datetime import date, datetime

from src.models.price_snapshot import Snapshot


@dataclass(frozen=True)
class HistoryPoint:
    """A product's recorded price on one date."""

    day: date
    price: float
    observed_at: datetime

    def to_record(self) -> dict[str, object]:
        """Serialise to a ``{date, price, timestamp}`` entry."""
        return {
            "date": self.day.isoformat(),
            "price": self.price,
            "timestamp": self.observed_at.isoformat(),
        }


@dataclass(frozen=True)
class ExportModel:
    """Latest prices plus every product's full sparse series."""

    last_updated: datetime
    latest_prices: Snapshot
    product_histories: dict[str, list[HistoryPoint]]
    all_dates: list[date]

    def to_record(self) -> dict[str, object]:
        """Serialise to the published ``price-data.json`` shape."""
        return {
            "lastUpdated": self.last_updated.isoformat(),
            "latestPrices": {
                name: point.to_record()
                for name, point in self.latest_prices.items()
            },
            "productHistories": {
                name: [p.to_record() for p in points]
                for name, points in self.product_histories.items()
            },
            "allDates": [d.isoformat() for d in self.all_dates],
        }
