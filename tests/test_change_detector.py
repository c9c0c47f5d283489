# tests/test_change_detector.py

"""Tests for day-over-day change detection."""

import unittest
from datetime import date, datetime, timezone

from src.models.price_delta import PriceDelta
from src.models.price_snapshot import PricePoint, Snapshot
from src.services.change_detector import (
    detect_changes,
    detect_changes_for_day,
    previous_day,
)
from src.storage.history_store import HistoryStore

_OLD_TS = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)
_NEW_TS = datetime(2024, 1, 3, 8, 0, tzinfo=timezone.utc)


def _snap(ts: datetime = _NEW_TS, **prices: float) -> Snapshot:
    """Build a snapshot from keyword prices."""
    return {
        name: PricePoint(price=price, observed_at=ts)
        for name, price in prices.items()
    }


def _scenario_store() -> HistoryStore:
    """Product A at 10 on Jan 1 and 12 on Jan 2."""
    return HistoryStore({
        date(2024, 1, 1): _snap(_OLD_TS, A=10),
        date(2024, 1, 2): _snap(_OLD_TS, A=12),
    })


class TestDetectChanges(unittest.TestCase):
    """Pure snapshot comparison."""

    def test_identical_snapshots_no_deltas(self) -> None:
        """Comparing a snapshot with itself yields nothing."""
        snap = _snap(A=1, B=2.5)
        self.assertEqual(detect_changes(snap, snap), [])

    def test_changed_price_reported(self) -> None:
        """A differing price produces one delta with both prices."""
        deltas = detect_changes(_snap(A=15), _snap(_OLD_TS, A=12))
        self.assertEqual(
            deltas,
            [PriceDelta("A", old_price=12, new_price=15, observed_at=_NEW_TS)],
        )

    def test_new_product_not_reported(self) -> None:
        """First observation of a product is not a change."""
        deltas = detect_changes(_snap(A=12, B=3), _snap(_OLD_TS, A=12))
        self.assertEqual(deltas, [])

    def test_removed_product_not_reported(self) -> None:
        """Products that disappear are ignored."""
        deltas = detect_changes(_snap(A=12), _snap(_OLD_TS, A=12, B=3))
        self.assertEqual(deltas, [])

    def test_no_prior_snapshot(self) -> None:
        """None or an empty prior snapshot yields no deltas."""
        self.assertEqual(detect_changes(_snap(A=1), None), [])
        self.assertEqual(detect_changes(_snap(A=1), {}), [])

    def test_encounter_order_preserved(self) -> None:
        """Deltas follow the order of the new snapshot."""
        prior = _snap(_OLD_TS, A=1, B=1, C=1)
        new = _snap(C=2, A=2, B=1)
        names = [d.product_name for d in detect_changes(new, prior)]
        self.assertEqual(names, ["C", "A"])

    def test_exact_inequality(self) -> None:
        """Tiny float differences still count as a change."""
        deltas = detect_changes(_snap(A=0.1 + 0.2), _snap(_OLD_TS, A=0.3))
        self.assertEqual(len(deltas), 1)


class TestDetectChangesForDay(unittest.TestCase):
    """Prior-day lookup against the history store."""

    def test_previous_day(self) -> None:
        """previous_day crosses month and year boundaries."""
        self.assertEqual(previous_day(date(2024, 3, 1)), date(2024, 2, 29))
        self.assertEqual(previous_day(date(2024, 1, 1)), date(2023, 12, 31))

    def test_unchanged_against_yesterday(self) -> None:
        """Same price as Jan 2 on Jan 3 means no change."""
        deltas = detect_changes_for_day(
            _scenario_store(), _snap(A=12), date(2024, 1, 3),
        )
        self.assertEqual(deltas, [])

    def test_changed_against_yesterday(self) -> None:
        """Jan 3 price 15 vs Jan 2 price 12 is one delta."""
        deltas = detect_changes_for_day(
            _scenario_store(), _snap(A=15), date(2024, 1, 3),
        )
        self.assertEqual(len(deltas), 1)
        self.assertEqual(deltas[0].product_name, "A")
        self.assertEqual(deltas[0].old_price, 12)
        self.assertEqual(deltas[0].new_price, 15)

    def test_gap_in_history_means_no_deltas(self) -> None:
        """A missing prior day is not replaced by the latest date."""
        deltas = detect_changes_for_day(
            _scenario_store(), _snap(A=99), date(2024, 1, 5),
        )
        self.assertEqual(deltas, [])

    def test_empty_store(self) -> None:
        """First-ever run has nothing to compare against."""
        deltas = detect_changes_for_day(
            HistoryStore(), _snap(A=1), date(2024, 1, 1),
        )
        self.assertEqual(deltas, [])


if __name__ == "__main__":
    unittest.main()
