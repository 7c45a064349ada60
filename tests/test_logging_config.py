import logging
import logging.handlers
from pathlib import Path

import pytest

from textmarketer_client.logging_config import get_logger, log_sms_event, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_to_rotating_file(tmp_path: Path, restore_root_logger):
    log_file = tmp_path / "textmarketer.log"

    setup_logging("debug", str(log_file))
    logging.getLogger("textmarketer_client.test").info("hello from test")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0], logging.handlers.RotatingFileHandler)
    root.handlers[0].flush()
    assert "hello from test" in log_file.read_text(encoding="utf-8")


def test_setup_logging_reads_environment(monkeypatch, restore_root_logger):
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.delenv("LOG_FILE", raising=False)

    setup_logging()

    assert restore_root_logger.level == logging.ERROR
    assert isinstance(restore_root_logger.handlers[0], logging.StreamHandler)


def test_log_sms_event_formats_key_values(caplog):
    with caplog.at_level(logging.INFO, logger="sms"):
        log_sms_event("sms_sent", message_id="123", to_number="447777777777")

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert "event_type=sms_sent success=True" in record.getMessage()
    assert "message_id=123 to_number=447777777777" in record.getMessage()


def test_setup_logging_falls_back_on_unknown_level(monkeypatch, restore_root_logger):
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    monkeypatch.delenv("LOG_FILE", raising=False)

    setup_logging()

    assert restore_root_logger.level == logging.WARNING


def test_get_logger_returns_named_logger():
    assert get_logger("textmarketer_client.cli") is logging.getLogger("textmarketer_client.cli")
