# src/models/price_snapshot.py

"""Point-in-time price observations keyed by product name."""

import math
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    """A single product's price as observed by one fetch."""

    price: float
    observed_at: datetime

    def to_record(self) -> dict[str, object]:
        """Serialise to the on-disk ``{price, timestamp}`` shape."""
        return {
            "price": self.price,
            "timestamp": self.observed_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, object]) -> "PricePoint":
        """Build a point from a ``{price, timestamp}`` record.

        Raises:
            ValueError: The price is not a finite, non-negative number,
                or the timestamp is not ISO-8601.
        """
        price = float(str(record["price"]))
        if not math.isfinite(price) or price < 0:
            msg = f"Invalid price {record['price']!r}"
            raise ValueError(msg)
        return cls(
            price=price,
            observed_at=datetime.fromisoformat(str(record["timestamp"])),
        )


# Product name -> observation. Treated as read-only once produced.
Snapshot = dict[str, PricePoint]
