# src/models/price_delta.py

"""Day-over-day price change record."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PriceDelta:
    """A price change between the prior day and the current fetch."""

    product_name: str
    old_price: float
    new_price: float
    observed_at: datetime
