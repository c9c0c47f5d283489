# src/storage/history_store.py

"""Date-keyed price history and its JSON-backed repository."""

import json
import logging
from collections.abc import Iterator, Mapping
from datetime import date
from typing import cast

from src.exceptions import PersistenceError
from src.models.price_snapshot import PricePoint, Snapshot
from src.storage.blob_store import FileBlobStore

logger = logging.getLogger("price_monitor.history")


class HistoryStore:
    """Immutable archive of one snapshot per calendar date.

    Dates are only ever added; :meth:`merge` returns a new store.
    """

    def __init__(
        self, days: Mapping[date, Snapshot] | None = None,
    ) -> None:
        self._days: dict[date, Snapshot] = {
            day: dict(snapshot)
            for day, snapshot in (days or {}).items()
        }

    def __len__(self) -> int:
        return len(self._days)

    def __contains__(self, day: object) -> bool:
        return day in self._days

    def __iter__(self) -> Iterator[date]:
        return iter(self.dates())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HistoryStore):
            return NotImplemented
        return self._days == other._days

    def __repr__(self) -> str:
        return f"HistoryStore(days={len(self._days)})"

    # ── Queries ──────────────────────────────────────────

    def dates(self) -> list[date]:
        """All recorded dates, oldest first."""
        return sorted(self._days)

    def latest_date(self) -> date | None:
        """The most recent recorded date, or ``None`` when empty."""
        return max(self._days) if self._days else None

    def snapshot_on(self, day: date) -> Snapshot | None:
        """Return a copy of the snapshot recorded on *day*, if any."""
        snapshot = self._days.get(day)
        return dict(snapshot) if snapshot is not None else None

    def product_names(self) -> list[str]:
        """Every product seen on any date, in first-seen date order."""
        names: dict[str, None] = {}
        for day in self.dates():
            for name in self._days[day]:
                names.setdefault(name, None)
        return list(names)

    # ── Updates ──────────────────────────────────────────

    def merge(self, day: date, snapshot: Snapshot) -> "HistoryStore":
        """Return a new store with *snapshot* folded into *day*.

        Incoming products overwrite same-named products for that date;
        products missing from *snapshot* keep their recorded value.
        Other dates are carried over unchanged.
        """
        merged = HistoryStore(self._days)
        existing = merged._days.get(day, {})
        merged._days[day] = {**existing, **snapshot}
        return merged

    # ── Serialisation ────────────────────────────────────

    def to_json(self) -> str:
        """Serialise to the persisted history record."""
        record = {
            day.isoformat(): {
                name: point.to_record()
                for name, point in self._days[day].items()
            }
            for day in self.dates()
        }
        return json.dumps(record, ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, text: str) -> "HistoryStore":
        """Parse a persisted history record.

        Raises:
            PersistenceError: The text is not a well-formed history.
        """
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            msg = f"History record is not valid JSON: {exc}"
            raise PersistenceError(msg) from exc

        if not isinstance(data, dict):
            msg = "History record must be a JSON object"
            raise PersistenceError(msg)

        days: dict[date, Snapshot] = {}
        for key, entries in cast(dict[str, object], data).items():
            try:
                day = date.fromisoformat(key)
            except ValueError as exc:
                msg = f"History key {key!r} is not a calendar date"
                raise PersistenceError(msg) from exc
            # Only YYYY-MM-DD; compact and week forms would alias a day
            if day.isoformat() != key:
                msg = f"History key {key!r} is not in YYYY-MM-DD form"
                raise PersistenceError(msg)
            if not isinstance(entries, dict):
                msg = f"History entry for {key} must be an object"
                raise PersistenceError(msg)
            try:
                days[day] = {
                    str(name): PricePoint.from_record(
                        cast(dict[str, object], record)
                    )
                    for name, record in cast(
                        dict[str, object], entries
                    ).items()
                }
            except (KeyError, TypeError, ValueError) as exc:
                msg = f"Malformed price entry under {key}: {exc}"
                raise PersistenceError(msg) from exc
        return cls(days)


class HistoryRepository:
    """Loads and saves a :class:`HistoryStore` through a blob store."""

    def __init__(
        self, blob_store: FileBlobStore, key: str,
    ) -> None:
        self._blob_store = blob_store
        self._key = key

    def load(self) -> HistoryStore:
        """Read the persisted history; a missing record is an empty store."""
        text = self._blob_store.read(self._key)
        if text is None:
            logger.info(
                "No history record at %s, starting empty",
                self._blob_store.path_for(self._key),
            )
            return HistoryStore()
        store = HistoryStore.from_json(text)
        logger.info("Loaded history with %d days", len(store))
        return store

    def save(self, store: HistoryStore) -> None:
        """Persist the full store with atomic replace."""
        self._blob_store.write_atomic(self._key, store.to_json())
        logger.info("Saved history with %d days", len(store))
