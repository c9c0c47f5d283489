# src/services/price_fetcher.py

"""Fetches the current price list from the upstream shop API."""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import MonitorConfig, Settings
from src.exceptions import FetchError
from src.models.price_snapshot import PricePoint, Snapshot

logger = logging.getLogger("price_monitor.fetcher")

# Characters of a bad response body kept for the log
_BODY_PREVIEW = 500


class PriceFetcher:
    """Single-shot snapshot provider backed by a curl_cffi session.

    A transport error, non-200 status or malformed payload raises
    :class:`FetchError`; there are no retries.
    """

    def __init__(self, config: MonitorConfig) -> None:
        self.config = config
        self.session = curl_requests.Session(
            impersonate=Settings.IMPERSONATE_BROWSER
        )

    def _headers(self) -> dict[str, str]:
        headers = dict(self.config.headers)
        if self.config.cookies:
            headers["Cookie"] = self.config.cookies
        return headers

    def fetch(self, now: datetime | None = None) -> Snapshot:
        """Return the current prices keyed by product name.

        Every product is stamped with the same observation time.
        """
        observed_at = now or datetime.now(timezone.utc)
        logger.info("Requesting prices from %s", self.config.api_url)
        try:
            resp = self.session.get(
                self.config.api_url,
                headers=self._headers(),
                timeout=self.config.request_timeout,
            )
        except Exception as exc:
            msg = f"Request to {self.config.api_url} failed: {exc}"
            raise FetchError(msg) from exc

        logger.info(
            "Upstream responded HTTP %d (%d bytes)",
            resp.status_code,
            len(resp.text),
        )
        if resp.status_code != 200:
            msg = f"Upstream returned HTTP {resp.status_code}"
            raise FetchError(msg)

        try:
            payload: Any = json.loads(resp.text)
        except json.JSONDecodeError as exc:
            logger.error(
                "Raw upstream response: %s", resp.text[:_BODY_PREVIEW],
            )
            msg = f"Failed to parse upstream response: {exc}"
            raise FetchError(msg) from exc

        snapshot = parse_price_payload(payload, observed_at)
        logger.info("Extracted %d product prices", len(snapshot))
        return snapshot

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()


def parse_price_payload(payload: Any, observed_at: datetime) -> Snapshot:
    """Convert ``{"code": 0, "data": [{"name", "price"}]}`` to a snapshot.

    Raises:
        FetchError: The payload reports an error or an item is invalid.
    """
    if not isinstance(payload, dict):
        msg = "Upstream response is not a JSON object"
        raise FetchError(msg)
    if payload.get("code") != 0 or not isinstance(payload.get("data"), list):
        detail = payload.get("msg") or f"code={payload.get('code')!r}"
        msg = f"Upstream reported an error: {detail}"
        raise FetchError(msg)

    snapshot: Snapshot = {}
    for item in payload["data"]:
        if not isinstance(item, dict):
            msg = f"Unexpected price item: {item!r}"
            raise FetchError(msg)
        name = str(item.get("name") or "").strip()
        if not name:
            msg = f"Price item without a name: {item!r}"
            raise FetchError(msg)
        try:
            price = float(str(item.get("price")).strip())
        except ValueError as exc:
            msg = f"Non-numeric price for {name!r}: {item.get('price')!r}"
            raise FetchError(msg) from exc
        if not math.isfinite(price) or price < 0:
            msg = f"Invalid price for {name!r}: {price}"
            raise FetchError(msg)
        snapshot[name] = PricePoint(price=price, observed_at=observed_at)
    return snapshot
