# src/services/price_monitor.py

"""Orchestrates one scheduled price monitoring run."""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path

from src.config.settings import MonitorConfig, Settings
from src.exceptions import NotificationError, PriceMonitorError
from src.models.price_delta import PriceDelta
from src.models.price_snapshot import Snapshot
from src.models.weekly_digest import WeeklyDigest
from src.services.change_detector import detect_changes_for_day
from src.services.export_projector import project
from src.services.notifier import (
    PRICE_CHANGE,
    WEEKLY_DIGEST,
    BaseNotifier,
    EmailNotifier,
    LogNotifier,
)
from src.services.period_aggregator import build_digest
from src.services.price_fetcher import PriceFetcher
from src.storage.blob_store import FileBlobStore
from src.storage.chart_exporter import export_history_chart
from src.storage.history_store import HistoryRepository, HistoryStore

logger = logging.getLogger("price_monitor.run")


@dataclass
class RunOutcome:
    """Container for the result of one monitoring run."""

    reference_date: date
    product_count: int = 0
    deltas: list[PriceDelta] = field(
        default_factory=lambda: list[PriceDelta]()
    )
    digest: WeeklyDigest | None = None
    history_saved: bool = False
    export_path: Path | None = None
    chart_path: Path | None = None
    fatal_error: str | None = None
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )

    @property
    def succeeded(self) -> bool:
        """True when no fatal error aborted the run."""
        return self.fatal_error is None

    @property
    def exit_code(self) -> int:
        """Process exit code for the CLI boundary (0=ok, 1=fail)."""
        return 0 if self.succeeded else 1


def _dump(record: object) -> str:
    return json.dumps(record, ensure_ascii=False, indent=2)


def default_notifier(config: MonitorConfig) -> BaseNotifier:
    """Email when SMTP is configured, otherwise log-only."""
    if config.email_enabled:
        return EmailNotifier(config)
    logger.warning(
        "Email settings incomplete, notifications go to the log only"
    )
    return LogNotifier()


class PriceMonitor:
    """Coordinates fetch, change detection, history and publishing."""

    def __init__(
        self,
        config: MonitorConfig,
        fetcher: PriceFetcher | None = None,
        notifier: BaseNotifier | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or PriceFetcher(config)
        self.notifier = notifier or default_notifier(config)
        self.data_store = FileBlobStore(config.data_dir)
        self.publish_store = FileBlobStore(config.publish_dir)
        self.history = HistoryRepository(
            self.data_store, Settings.HISTORY_FILE,
        )

    # ── Private helpers ──────────────────────────────────

    def _notify(
        self, kind: str, payload: object, outcome: RunOutcome,
    ) -> None:
        """Deliver a notification; failures are recorded, not raised."""
        try:
            self.notifier.notify(kind, payload)
        except NotificationError as exc:
            logger.error("Notification %s failed: %s", kind, exc)
            outcome.errors.append(str(exc))
        except Exception as exc:
            logger.error(
                "Notification %s failed: %s", kind, exc, exc_info=True,
            )
            outcome.errors.append(f"Notification {kind} failed: {exc}")

    def _is_digest_day(self, reference_date: date) -> bool:
        return reference_date.weekday() == self.config.digest_weekday

    def _record_day(
        self,
        store: HistoryStore,
        snapshot: Snapshot,
        reference_date: date,
        outcome: RunOutcome,
    ) -> HistoryStore:
        outcome.deltas = detect_changes_for_day(
            store, snapshot, reference_date,
        )
        if outcome.deltas:
            logger.info("Detected %d price changes", len(outcome.deltas))
            self._notify(PRICE_CHANGE, outcome.deltas, outcome)
        else:
            logger.info("No price changes, nothing to notify")

        updated = store.merge(reference_date, snapshot)
        self.history.save(updated)
        outcome.history_saved = True
        return updated

    def _run_digest(
        self,
        store: HistoryStore,
        reference_date: date,
        now: datetime,
        outcome: RunOutcome,
    ) -> None:
        digest = build_digest(store, reference_date, now)
        self.data_store.write_atomic(
            Settings.WEEKLY_REPORT_FILE, _dump(digest.to_record()),
        )
        outcome.digest = digest
        self._notify(WEEKLY_DIGEST, digest, outcome)

    # ── Public API ───────────────────────────────────────

    def publish(
        self, store: HistoryStore, now: datetime, outcome: RunOutcome,
    ) -> None:
        """Write the export dataset (and chart, if enabled)."""
        model = project(store, now)
        outcome.export_path = self.publish_store.write_atomic(
            Settings.EXPORT_FILE, _dump(model.to_record()),
        )
        logger.info(
            "Published %d products over %d dates",
            len(model.product_histories),
            len(model.all_dates),
        )
        if not self.config.publish_chart:
            return
        try:
            outcome.chart_path = export_history_chart(
                model, self.publish_store,
            )
        except Exception as exc:
            logger.error("Chart export failed: %s", exc, exc_info=True)
            outcome.errors.append(f"Chart export failed: {exc}")

    def run(
        self,
        reference_date: date | None = None,
        now: datetime | None = None,
        force_digest: bool = False,
    ) -> RunOutcome:
        """Execute one run and report what happened.

        Fatal errors (fetch, persistence or anything unexpected) are
        logged and returned on the outcome instead of raised. A failed
        fetch leaves the stored history untouched. Observation timestamps
        are recorded in UTC.
        """
        now = now or datetime.now().astimezone()
        reference_date = reference_date or now.date()
        outcome = RunOutcome(reference_date=reference_date)
        logger.info("===== Price monitor run for %s =====", reference_date)

        try:
            snapshot = self.fetcher.fetch(now.astimezone(timezone.utc))
            outcome.product_count = len(snapshot)

            store = self.history.load()
            store = self._record_day(
                store, snapshot, reference_date, outcome,
            )

            if force_digest or self._is_digest_day(reference_date):
                self._run_digest(store, reference_date, now, outcome)
            else:
                logger.info("Not a digest day, skipping weekly report")

            self.publish(store, now, outcome)
        except PriceMonitorError as exc:
            logger.error("Run failed: %s", exc, exc_info=True)
            outcome.fatal_error = str(exc)
            return outcome
        except Exception as exc:
            logger.error("Run failed unexpectedly: %s", exc, exc_info=True)
            outcome.fatal_error = f"{type(exc).__name__}: {exc}"
            return outcome

        logger.info("===== Price monitor run complete =====")
        return outcome

    def close(self) -> None:
        """Release the fetcher's HTTP session."""
        self.fetcher.close()
