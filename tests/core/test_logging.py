from __future__ import annotations

import logging

from credential_dashboard.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(level: int, msg: str = "hello", *, pathname: str = "test.py", lineno: int = 1):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_selects_formatter() -> None:
    setup_logging("info", json_format=True)
    assert isinstance(logging.getLogger().handlers[0].formatter, _JsonFormatter)

    setup_logging("info")
    assert isinstance(logging.getLogger().handlers[0].formatter, _ContainerFormatter)


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO))
    assert "hello" in output
    assert "[test.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(
        _record(logging.WARNING, "audit log not newest-first", pathname="aggregator.py", lineno=42)
    )
    assert "audit log not newest-first" in output
    assert "[aggregator.py:42]" in output
