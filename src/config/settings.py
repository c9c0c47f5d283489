# src/config/settings.py

"""Central configuration for the price monitor."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

from src.exceptions import ConfigError


class Settings:
    """Static defaults for the price monitor."""

    # --- Upstream source ---
    API_URL: str = "https://shop.mt2.cn/ajax.php?act=gettool&cid=2&info=1"
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/126.0.0.0 Safari/537.36 Edg/126.0.0.0"
        ),
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
        "Referer": "https://shop.mt2.cn/",
    }

    # --- Schedule ---
    DIGEST_WEEKDAY: int = 0             # date.weekday(): 0 = Monday
    DIGEST_PERIOD_DAYS: int = 7

    # --- Email ---
    SMTP_PORT: int = 587
    SMTP_TIMEOUT: int = 30

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    PUBLISH_DIR: Path = BASE_DIR / "docs"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Record names ---
    HISTORY_FILE: str = "price-history.json"
    WEEKLY_REPORT_FILE: str = "weekly-report.json"
    EXPORT_FILE: str = "price-data.json"
    CHART_FILE: str = "price-chart.html"


_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    """Read an integer variable, falling back to *default* when unset."""
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"{key} must be an integer, got {raw!r}"
        raise ConfigError(msg) from exc


def _parse_bool(env: Mapping[str, str], key: str) -> bool:
    """Read a boolean flag; anything outside the truthy set is False."""
    return env.get(key, "").strip().lower() in _TRUTHY


def _parse_list(env: Mapping[str, str], key: str) -> list[str]:
    """Split a comma-separated variable into trimmed, non-empty items."""
    return [
        item.strip()
        for item in env.get(key, "").split(",")
        if item.strip()
    ]


@dataclass(frozen=True)
class SmtpConfig:
    """Outbound mail server parameters."""

    host: str = ""
    port: int = Settings.SMTP_PORT
    secure: bool = False                # True = implicit TLS (SMTPS)
    user: str = ""
    password: str = ""
    timeout: int = Settings.SMTP_TIMEOUT


@dataclass(frozen=True)
class MonitorConfig:
    """Runtime configuration handed to every component at construction."""

    api_url: str = Settings.API_URL
    cookies: str = ""
    request_timeout: int = Settings.REQUEST_TIMEOUT
    headers: dict[str, str] = field(
        default_factory=lambda: dict(Settings.DEFAULT_HEADERS)
    )
    email_from: str = ""
    email_to: list[str] = field(default_factory=lambda: list[str]())
    smtp: SmtpConfig = field(default_factory=SmtpConfig)
    data_dir: Path = Settings.DATA_DIR
    publish_dir: Path = Settings.PUBLISH_DIR
    logs_dir: Path = Settings.LOGS_DIR
    digest_weekday: int = Settings.DIGEST_WEEKDAY
    publish_chart: bool = False

    @property
    def email_enabled(self) -> bool:
        """True when enough SMTP settings exist to send mail."""
        return bool(self.smtp.host and self.email_from and self.email_to)

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        dotenv_path: Path | None = None,
    ) -> "MonitorConfig":
        """Build a config from environment variables.

        When *env* is ``None`` the process environment is used, after
        loading a ``.env`` file if one is present.
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        digest_weekday = _parse_int(
            env, "DIGEST_WEEKDAY", Settings.DIGEST_WEEKDAY
        )
        if not 0 <= digest_weekday <= 6:
            msg = f"DIGEST_WEEKDAY must be 0-6, got {digest_weekday}"
            raise ConfigError(msg)

        smtp = SmtpConfig(
            host=env.get("SMTP_HOST", "").strip(),
            port=_parse_int(env, "SMTP_PORT", Settings.SMTP_PORT),
            secure=_parse_bool(env, "SMTP_SECURE"),
            user=env.get("SMTP_USER", ""),
            password=env.get("SMTP_PASS", ""),
        )

        return cls(
            api_url=env.get("PRICE_API_URL", "").strip() or Settings.API_URL,
            cookies=env.get("API_COOKIES", ""),
            request_timeout=_parse_int(
                env, "REQUEST_TIMEOUT", Settings.REQUEST_TIMEOUT
            ),
            email_from=env.get("EMAIL_FROM", "").strip(),
            email_to=_parse_list(env, "EMAIL_TO"),
            smtp=smtp,
            data_dir=Path(env.get("DATA_DIR") or Settings.DATA_DIR),
            publish_dir=Path(env.get("PUBLISH_DIR") or Settings.PUBLISH_DIR),
            logs_dir=Path(env.get("LOGS_DIR") or Settings.LOGS_DIR),
            digest_weekday=digest_weekday,
            publish_chart=_parse_bool(env, "PUBLISH_CHART"),
        )
