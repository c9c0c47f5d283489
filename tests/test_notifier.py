# tests/test_notifier.py

"""Tests for notification rendering and delivery."""

import smtplib
import unittest
from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch

from src.config.settings import MonitorConfig, SmtpConfig
from src.exceptions import NotificationError
from src.models.price_delta import PriceDelta
from src.models.weekly_digest import SeriesPoint, Trend, WeeklyDigest
from src.services.notifier import (
    PRICE_CHANGE,
    WEEKLY_DIGEST,
    EmailNotifier,
    LogNotifier,
    render,
)

_TS = datetime(2024, 1, 3, 8, 0, tzinfo=timezone.utc)


def _deltas() -> list[PriceDelta]:
    """One price increase."""
    return [PriceDelta("Monthly", 12, 15, _TS)]


def _digest() -> WeeklyDigest:
    """A two-product digest, one with an undefined percent change."""
    return WeeklyDigest(
        generated_at=_TS,
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 8),
        series={
            "A": [SeriesPoint(date(2024, 1, 1), 10), SeriesPoint(date(2024, 1, 2), 12)],
            "Z": [SeriesPoint(date(2024, 1, 1), 0), SeriesPoint(date(2024, 1, 2), 3)],
        },
        trends={
            "A": Trend(10, 12, 2, 20.0),
            "Z": Trend(0, 3, 3, None),
        },
    )


def _email_config(secure: bool = False) -> MonitorConfig:
    """Config with complete SMTP settings."""
    return MonitorConfig(
        email_from="bot@example.com",
        email_to=["a@example.com", "b@example.com"],
        smtp=SmtpConfig(
            host="smtp.example.com",
            port=465 if secure else 587,
            secure=secure,
            user="bot",
            password="secret",
        ),
    )


class TestRender(unittest.TestCase):
    """Plain-text rendering."""

    def test_price_change_body(self) -> None:
        """Old and new prices appear for each delta."""
        body = render(PRICE_CHANGE, _deltas())
        self.assertIn("Monthly", body)
        self.assertIn("old price: 12", body)
        self.assertIn("new price: 15", body)

    def test_digest_body(self) -> None:
        """Each product gets a table row per day and a change line."""
        body = render(WEEKLY_DIGEST, _digest())
        self.assertIn("2024-01-02  12", body)
        self.assertIn("change: up 2 (20.00%)", body)
        self.assertIn("(n/a)", body)
        self.assertIn("Period: 2024-01-01 to 2024-01-07", body)

    def test_unknown_kind_raises(self) -> None:
        """Unsupported kinds are a notification error."""
        with self.assertRaises(NotificationError):
            render("unknown", {})


class TestLogNotifier(unittest.TestCase):
    """Log-only notifier."""

    def test_records_and_logs(self) -> None:
        """Notifications are kept and written to the log."""
        notifier = LogNotifier()
        with self.assertLogs("price_monitor.notify", level="INFO"):
            notifier.notify(PRICE_CHANGE, _deltas())
        self.assertEqual(notifier.sent[0][0], PRICE_CHANGE)


@patch("src.services.notifier.smtplib")
class TestEmailNotifier(unittest.TestCase):
    """SMTP delivery with a mocked smtplib."""

    def test_sends_with_starttls(self, mock_smtplib: MagicMock) -> None:
        """Plain SMTP upgrades with STARTTLS, logs in and sends."""
        mock_smtplib.SMTPException = smtplib.SMTPException
        client = mock_smtplib.SMTP.return_value
        client.__enter__.return_value = client

        EmailNotifier(_email_config()).notify(PRICE_CHANGE, _deltas())

        mock_smtplib.SMTP.assert_called_once_with(
            "smtp.example.com", 587, timeout=30,
        )
        client.starttls.assert_called_once()
        client.login.assert_called_once_with("bot", "secret")
        message = client.send_message.call_args[0][0]
        self.assertEqual(message["To"], "a@example.com, b@example.com")
        self.assertEqual(message["Subject"], "MT card price change alert")

    def test_sends_with_ssl(self, mock_smtplib: MagicMock) -> None:
        """SMTP_SECURE selects implicit TLS."""
        mock_smtplib.SMTPException = smtplib.SMTPException
        client = mock_smtplib.SMTP_SSL.return_value
        client.__enter__.return_value = client

        EmailNotifier(_email_config(secure=True)).notify(
            WEEKLY_DIGEST, _digest(),
        )

        mock_smtplib.SMTP_SSL.assert_called_once_with(
            "smtp.example.com", 465, timeout=30,
        )
        mock_smtplib.SMTP.assert_not_called()
        client.send_message.assert_called_once()

    def test_smtp_failure_raises(self, mock_smtplib: MagicMock) -> None:
        """Delivery failures surface as NotificationError."""
        mock_smtplib.SMTPException = smtplib.SMTPException
        client = mock_smtplib.SMTP.return_value
        client.__enter__.return_value = client
        client.send_message.side_effect = smtplib.SMTPException("rejected")

        with self.assertRaises(NotificationError):
            EmailNotifier(_email_config()).notify(PRICE_CHANGE, _deltas())

    def test_non_ascii_password_raises(self, mock_smtplib: MagicMock) -> None:
        """Login encoding failures surface as NotificationError."""
        mock_smtplib.SMTPException = smtplib.SMTPException
        client = mock_smtplib.SMTP.return_value
        client.__enter__.return_value = client
        client.login.side_effect = UnicodeEncodeError(
            "ascii", "p\u00e4ss", 1, 2, "ordinal not in range(128)",
        )

        with self.assertRaises(NotificationError):
            EmailNotifier(_email_config()).notify(PRICE_CHANGE, _deltas())
        client.send_message.assert_not_called()

    def test_unconfigured_raises(self, mock_smtplib: MagicMock) -> None:
        """Missing SMTP settings fail without connecting."""
        with self.assertRaises(NotificationError):
            EmailNotifier(MonitorConfig()).notify(PRICE_CHANGE, _deltas())
        mock_smtplib.SMTP.assert_not_called()


if __name__ == "__main__":
    unittest.main()
