# src/models/weekly_digest.py

"""Period series, trends and the weekly digest built from them."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta


@dataclass(frozen=True)
class SeriesPoint:
    """One (date, price) entry of a product's period series."""

    day: date
    price: float


@dataclass(frozen=True)
class Trend:
    """First-to-last movement of a period series.

    ``percent_change`` is ``None`` when the first price is zero.
    """

    first_price: float
    last_price: float
    absolute_change: float
    percent_change: float | None


@dataclass
class WeeklyDigest:
    """Per-product series and trends for one digest period."""

    generated_at: datetime
    period_start: date
    period_end: date
    series: dict[str, list[SeriesPoint]] = field(
        default_factory=lambda: dict[str, list[SeriesPoint]]()
    )
    trends: dict[str, Trend] = field(
        default_factory=lambda: dict[str, Trend]()
    )

    @property
    def last_included_day(self) -> date:
        """The final day covered, since ``period_end`` is exclusive."""
        return self.period_end - timedelta(days=1)

    def to_record(self) -> dict[str, object]:
        """Serialise to the weekly report record."""
        return {
            "generatedAt": self.generated_at.isoformat(),
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.last_included_day.isoformat(),
            "data": {
                product: {
                    p.day.isoformat(): p.price for p in points
                }
                for product, points in self.series.items()
            },
        }
