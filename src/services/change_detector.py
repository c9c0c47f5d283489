# src/services/change_detector.py

"""Day-over-day price change detection."""

import logging
from datetime import date, timedelta

from src.models.price_delta import PriceDelta
from src.models.price_snapshot import Snapshot
from src.storage.history_store import HistoryStore

logger = logging.getLogger("price_monitor.changes")


def previous_day(reference_date: date) -> date:
    """The calendar day immediately before *reference_date*."""
    return reference_date - timedelta(days=1)


def detect_changes(
    new_snapshot: Snapshot,
    prior_snapshot: Snapshot | None,
) -> list[PriceDelta]:
    """List products whose price differs from the prior snapshot.

    Only products present in both snapshots are compared, with exact
    inequality. Output follows the iteration order of *new_snapshot*.
    """
    if not prior_snapshot:
        return []

    deltas: list[PriceDelta] = []
    for name, current in new_snapshot.items():
        previous = prior_snapshot.get(name)
        if previous is None or current.price == previous.price:
            continue
        logger.info(
            "Price change: %s %s -> %s",
            name,
            previous.price,
            current.price,
        )
        deltas.append(
            PriceDelta(
                product_name=name,
                old_price=previous.price,
                new_price=current.price,
                observed_at=current.observed_at,
            )
        )
    return deltas


def detect_changes_for_day(
    store: HistoryStore,
    new_snapshot: Snapshot,
    reference_date: date,
) -> list[PriceDelta]:
    """Compare *new_snapshot* with what was recorded the day before.

    A gap in history (no record for the previous day) yields no deltas,
    even when older dates exist.
    """
    prior_day = previous_day(reference_date)
    prior_snapshot = store.snapshot_on(prior_day)
    if prior_snapshot is None:
        logger.info(
            "No history for %s, skipping change detection", prior_day,
        )
        return []
    logger.debug(
        "Comparing %d products against %s",
        len(new_snapshot),
        prior_day,
    )
    return detect_changes(new_snapshot, prior_snapshot)
