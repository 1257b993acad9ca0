# tests/test_logging_conf.py
"""
Logging Configuration Tests - Unit Tests for setup_logging

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- sharelink.shared.logging_conf (setup_logging, configure_from_settings)
- sharelink.config (Settings)
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from sharelink.config import Settings
from sharelink.shared.logging_conf import LOG_FILE_NAME, configure_from_settings, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_stdout_only(self):
        assert setup_logging(level="debug") is None
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [logging.StreamHandler]

    def test_stdout_disabled_with_log_dir(self, tmp_path):
        path = setup_logging(log_to_stdout=False, log_dir=tmp_path / "logs")

        assert path == tmp_path / "logs" / LOG_FILE_NAME
        assert [type(h) for h in logging.getLogger().handlers] == [RotatingFileHandler]

    def test_never_silent(self):
        setup_logging(log_to_stdout=False)
        assert len(logging.getLogger().handlers) == 1

    def test_unknown_level_name_defaults_to_info(self):
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_http_client_loggers_quieted(self):
        setup_logging(level=logging.DEBUG)
        assert logging.getLogger("urllib3").level == logging.WARNING


class TestConfigureFromSettings:
    def test_settings_flow_through(self, tmp_path):
        cfg = Settings(log_stdout=False, log_file=str(tmp_path / "server.log"), log_level="WARNING")

        path = configure_from_settings(cfg)

        root = logging.getLogger()
        assert path == tmp_path / "server.log"
        assert root.level == logging.WARNING
        assert [type(h) for h in root.handlers] == [RotatingFileHandler]
