"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from formctl.config.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    formctl_logger = logging.getLogger("formctl")
    formctl_level = formctl_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    formctl_logger.setLevel(formctl_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("formctl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("formctl").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("formctl.store")
        log.warning("import_rejected", reason="invalid_json")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "import_rejected"
        assert parsed["reason"] == "invalid_json"
        assert parsed["level"] == "warning"

    def test_stdlib_loggers_share_the_renderer(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("formctl.services.generator").warning("bad pattern %s", "([")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "bad pattern (["
        assert parsed["logger"] == "formctl.services.generator"

    def test_debug_suppressed_without_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("formctl.store").debug("hidden")
        assert capfd.readouterr().err == ""

    def test_reconfigure_replaces_own_handler(self) -> None:
        foreign = logging.NullHandler()
        logging.getLogger().addHandler(foreign)
        configure_logging()
        configure_logging(log_json=True)
        root = logging.getLogger()
        assert foreign in root.handlers
        assert sum(1 for h in root.handlers if h.get_name() == "formctl") == 1
