# src/services/period_aggregator.py

"""Per-product price series and trends over a date range."""

import logging
from datetime import date, datetime, timedelta

from src.config.settings import Settings
from src.exceptions import AggregationError
from src.models.weekly_digest import SeriesPoint, Trend, WeeklyDigest
from src.storage.history_store import HistoryStore

logger = logging.getLogger("price_monitor.aggregator")


def default_period(
    reference_date: date,
    days: int = Settings.DIGEST_PERIOD_DAYS,
) -> tuple[date, date]:
    """Half-open ``[reference - days, reference)`` digest window."""
    return reference_date - timedelta(days=days), reference_date


def aggregate(
    store: HistoryStore, start: date, end: date,
) -> dict[str, list[SeriesPoint]]:
    """Collect each product's recorded prices for days in ``[start, end)``.

    Series are sparse: a product missing on a date contributes no point
    for it. Products with no point in the range are absent.
    """
    series: dict[str, list[SeriesPoint]] = {}
    day = start
    while day < end:
        snapshot = store.snapshot_on(day)
        if snapshot is not None:
            for name, point in snapshot.items():
                series.setdefault(name, []).append(
                    SeriesPoint(day=day, price=point.price)
                )
        day += timedelta(days=1)
    return series


def percent_change(first_price: float, last_price: float) -> float:
    """Relative change from *first_price*, in percent, 2 decimals.

    Raises:
        AggregationError: *first_price* is zero.
    """
    if first_price == 0:
        msg = "Percent change is undefined for a zero first price"
        raise AggregationError(msg)
    return round((last_price - first_price) / first_price * 100, 2)


def trend(series: list[SeriesPoint]) -> Trend:
    """Summarise a series by its first and last points in date order.

    A zero first price yields ``percent_change=None``.

    Raises:
        AggregationError: *series* is empty.
    """
    if not series:
        msg = "Cannot compute a trend for an empty series"
        raise AggregationError(msg)

    ordered = sorted(series, key=lambda p: p.day)
    first_price = ordered[0].price
    last_price = ordered[-1].price

    pct: float | None
    try:
        pct = percent_change(first_price, last_price)
    except AggregationError as exc:
        logger.warning("%s (last price %s)", exc, last_price)
        pct = None

    return Trend(
        first_price=first_price,
        last_price=last_price,
        absolute_change=last_price - first_price,
        percent_change=pct,
    )


def build_digest(
    store: HistoryStore,
    reference_date: date,
    generated_at: datetime,
) -> WeeklyDigest:
    """Aggregate the week before *reference_date* into a digest."""
    start, end = default_period(reference_date)
    series = aggregate(store, start, end)

    trends: dict[str, Trend] = {}
    for name, points in series.items():
        try:
            trends[name] = trend(points)
        except AggregationError as exc:
            logger.warning("Skipping trend for %s: %s", name, exc)

    logger.info(
        "Digest %s..%s covers %d products",
        start,
        end,
        len(series),
    )
    return WeeklyDigest(
        generated_at=generated_at,
        period_start=start,
        period_end=end,
        series=series,
        trends=trends,
    )
