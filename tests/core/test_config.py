from __future__ import annotations

import datetime

import pytest

from credential_dashboard.core.config import AppEnv, Settings, load_settings

_DASHBOARD_VARS = (
    "DASHBOARD_REFRESH_INTERVAL_SECONDS",
    "DASHBOARD_AUDIT_LOG_LIMIT",
    "DASHBOARD_TIMEZONE",
    "DASHBOARD_REFRESH_ON_STARTUP",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_dashboard_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _DASHBOARD_VARS:
        monkeypatch.delenv(name, raising=False)


# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.refresh_interval_seconds == 30.0
    assert settings.audit_log_limit == 100
    assert settings.timezone == "UTC"
    assert settings.refresh_on_startup is True


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("DASHBOARD_REFRESH_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("DASHBOARD_AUDIT_LOG_LIMIT", "250")
    monkeypatch.setenv("DASHBOARD_REFRESH_ON_STARTUP", "off")
    monkeypatch.setenv("LOG_JSON", "yes")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.refresh_interval_seconds == 2.5
    assert settings.audit_log_limit == 250
    assert settings.refresh_on_startup is False
    assert settings.log_json is True


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("DASHBOARD_REFRESH_ON_STARTUP", "FALSE")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"
    assert settings.refresh_on_startup is False


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("LOG_LEVEL", "  warning  ")
    monkeypatch.setenv("DASHBOARD_AUDIT_LOG_LIMIT", " 50 ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"
    assert settings.audit_log_limit == 50


# ---- invalid APP_ENV / LOG_LEVEL ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("LOG_LEVEL", "info")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


# ---- invalid refresh settings ----


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("soon", "must be a number"),
        ("0", "must be positive"),
        ("-5", "must be positive"),
    ],
)
def test_load_settings_rejects_bad_refresh_interval(
    monkeypatch: pytest.MonkeyPatch, value: str, message: str
) -> None:
    monkeypatch.setenv("DASHBOARD_REFRESH_INTERVAL_SECONDS", value)
    with pytest.raises(ValueError, match=f"DASHBOARD_REFRESH_INTERVAL_SECONDS {message}"):
        load_settings()


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("ten", "must be an integer"),
        ("2.5", "must be an integer"),
        ("0", "must be positive"),
    ],
)
def test_load_settings_rejects_bad_audit_log_limit(
    monkeypatch: pytest.MonkeyPatch, value: str, message: str
) -> None:
    monkeypatch.setenv("DASHBOARD_AUDIT_LOG_LIMIT", value)
    with pytest.raises(ValueError, match=f"DASHBOARD_AUDIT_LOG_LIMIT {message}"):
        load_settings()


def test_load_settings_rejects_unknown_timezone(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("DASHBOARD_TIMEZONE", "Mars/Olympus_Mons")
    with pytest.raises(ValueError, match="DASHBOARD_TIMEZONE must be an IANA time zone"):
        load_settings()


def test_load_settings_rejects_non_boolean_flag(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("DASHBOARD_REFRESH_ON_STARTUP", "maybe")
    with pytest.raises(ValueError, match="DASHBOARD_REFRESH_ON_STARTUP must be a boolean"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev", **overrides: object) -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        database_url=None,
        redis_url=None,
        **overrides,
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    prod = _make_settings("prod")
    assert prod.is_prod is True
    assert prod.is_dev is False


def test_settings_utc_tzinfo() -> None:
    assert _make_settings().tzinfo is datetime.UTC


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
