from __future__ import annotations

import datetime
import os
from dataclasses import dataclass
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    refresh_interval_seconds: float = 30.0
    audit_log_limit: int = 100
    timezone: str = "UTC"
    refresh_on_startup: bool = True

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def tzinfo(self) -> datetime.tzinfo:
        # UTC needs no tz database on the host
        if self.timezone == "UTC":
            return datetime.UTC
        return ZoneInfo(self.timezone)


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    interval_raw = _getenv("DASHBOARD_REFRESH_INTERVAL_SECONDS", "30")
    limit_raw = _getenv("DASHBOARD_AUDIT_LOG_LIMIT", "100")
    timezone_raw = _getenv("DASHBOARD_TIMEZONE", "UTC")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        refresh_interval = float(interval_raw)
    except ValueError:
        raise ValueError(
            f"DASHBOARD_REFRESH_INTERVAL_SECONDS must be a number (got {interval_raw!r})"
        ) from None
    if refresh_interval <= 0:
        raise ValueError(
            f"DASHBOARD_REFRESH_INTERVAL_SECONDS must be positive (got {interval_raw!r})"
        )

    try:
        audit_log_limit = int(limit_raw)
    except ValueError:
        raise ValueError(
            f"DASHBOARD_AUDIT_LOG_LIMIT must be an integer (got {limit_raw!r})"
        ) from None
    if audit_log_limit <= 0:
        raise ValueError(
            f"DASHBOARD_AUDIT_LOG_LIMIT must be positive (got {limit_raw!r})"
        )

    try:
        if timezone_raw != "UTC":
            ZoneInfo(timezone_raw)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"DASHBOARD_TIMEZONE must be an IANA time zone (got {timezone_raw!r})"
        ) from None

    database_url = _getenv("DATABASE_URL", "") or None
    redis_url = _getenv("REDIS_URL", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", False),
        port=port,
        database_url=database_url,
        redis_url=redis_url,
        refresh_interval_seconds=refresh_interval,
        audit_log_limit=audit_log_limit,
        timezone=timezone_raw,
        refresh_on_startup=_getenv_bool("DASHBOARD_REFRESH_ON_STARTUP", True),
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
