from __future__ import annotations

import logging
import sys

from workorder_import.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    set_debug,
    setup_logging,
)


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert first.name == LOGGER_NAME
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_labels(capsys):
    logger = setup_logging()
    logger.info("hello")
    logger.warning("careful")
    logger.error("bad")
    log_summary("files=1")
    out = capsys.readouterr().out.splitlines()
    assert out == ["INFO hello", "WARN careful", "ERROR bad", "SUMMARY files=1"]


def test_child_loggers_use_the_same_handler(capsys):
    setup_logging()
    logging.getLogger("workorder_import.services.grouper").warning("team conflict")
    assert capsys.readouterr().out == "WARN team conflict\n"


def test_debug_hidden_until_set_debug(capsys):
    logger = get_logger()
    logger.debug("invisible")
    set_debug()
    logger.debug("visible")
    out = capsys.readouterr().out
    assert "invisible" not in out
    assert "DEBUG visible" in out


def test_formatter_appends_traceback():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(LOGGER_NAME, logging.ERROR, __file__, 1, "failed", None, None)
        record.exc_info = sys.exc_info()
    text = LabeledFormatter().format(record)
    assert text.startswith("ERROR failed\n")
    assert "RuntimeError: boom" in text


def test_summary_level_name():
    setup_logging()
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"
