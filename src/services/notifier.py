# src/services/notifier.py

"""Outbound notifications for price changes and weekly digests."""

import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime
from email.message import EmailMessage

from src.config.settings import MonitorConfig
from src.exceptions import NotificationError
from src.models.price_delta import PriceDelta
from src.models.weekly_digest import WeeklyDigest

logger = logging.getLogger("price_monitor.notify")

PRICE_CHANGE = "price_change"
WEEKLY_DIGEST = "weekly_digest"

_SUBJECTS: dict[str, str] = {
    PRICE_CHANGE: "MT card price change alert",
    WEEKLY_DIGEST: "MT card weekly price report",
}


def render_price_changes(deltas: list[PriceDelta]) -> str:
    """Plain-text body listing each price change."""
    lines = ["The following products changed price:", ""]
    for d in deltas:
        lines.append(f"{d.product_name}")
        lines.append(f"  old price: {d.old_price}")
        lines.append(f"  new price: {d.new_price}")
        lines.append(f"  observed:  {d.observed_at.isoformat()}")
        lines.append("")
    return "\n".join(lines)


def render_digest(digest: WeeklyDigest) -> str:
    """Plain-text body with one price table per product."""
    lines: list[str] = []
    for name, points in digest.series.items():
        lines.append(name)
        for p in sorted(points, key=lambda p: p.day):
            lines.append(f"  {p.day.isoformat()}  {p.price}")
        t = digest.trends.get(name)
        if t is not None:
            arrow = "up" if t.absolute_change >= 0 else "down"
            pct = (
                f"{t.percent_change:.2f}%"
                if t.percent_change is not None
                else "n/a"
            )
            lines.append(
                f"  change: {arrow} {abs(t.absolute_change)} ({pct})"
            )
        lines.append("")
    lines.append(
        f"Period: {digest.period_start.isoformat()} to "
        f"{digest.last_included_day.isoformat()}"
    )
    lines.append(f"Generated: {digest.generated_at.isoformat()}")
    return "\n".join(lines)


def render(kind: str, payload: object) -> str:
    """Render *payload* for notification *kind*."""
    if kind == PRICE_CHANGE and isinstance(payload, list):
        return render_price_changes(payload)
    if kind == WEEKLY_DIGEST and isinstance(payload, WeeklyDigest):
        return render_digest(payload)
    msg = f"Unsupported notification kind {kind!r}"
    raise NotificationError(msg)


class BaseNotifier(ABC):
    """Sink for rendered notifications."""

    @abstractmethod
    def notify(self, kind: str, payload: object) -> None:
        """Deliver one notification; raise NotificationError on failure."""
        ...


class LogNotifier(BaseNotifier):
    """Writes notifications to the run log instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def notify(self, kind: str, payload: object) -> None:
        body = render(kind, payload)
        self.sent.append((kind, body))
        logger.info("Notification %s (not sent):\n%s", kind, body)


class EmailNotifier(BaseNotifier):
    """Sends plain-text notifications through SMTP."""

    def __init__(self, config: MonitorConfig) -> None:
        self.config = config

    def _build_message(self, kind: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = _SUBJECTS.get(kind, kind)
        message["From"] = self.config.email_from
        message["To"] = ", ".join(self.config.email_to)
        message.set_content(
            f"{body}\n\nSent: {datetime.now().isoformat(timespec='seconds')}\n"
        )
        return message

    def _connect(self) -> smtplib.SMTP:
        smtp = self.config.smtp
        if smtp.secure:
            return smtplib.SMTP_SSL(
                smtp.host, smtp.port, timeout=smtp.timeout,
            )
        client = smtplib.SMTP(smtp.host, smtp.port, timeout=smtp.timeout)
        client.starttls()
        return client

    def notify(self, kind: str, payload: object) -> None:
        if not self.config.email_enabled:
            msg = "Email is not configured (SMTP_HOST, EMAIL_FROM, EMAIL_TO)"
            raise NotificationError(msg)

        message = self._build_message(kind, render(kind, payload))
        logger.info(
            "Sending %s email to %d recipient(s)",
            kind,
            len(self.config.email_to),
        )
        try:
            with self._connect() as client:
                if self.config.smtp.user:
                    client.login(
                        self.config.smtp.user, self.config.smtp.password,
                    )
                client.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            msg = f"Failed to send {kind} email: {exc}"
            raise NotificationError(msg) from exc
        logger.info("Sent %s email", kind)
