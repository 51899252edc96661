"""Tests for package logging setup."""

import logging
from logging.handlers import RotatingFileHandler

from taskgroups.logging import configure_logging, get_logger


def _file_handlers() -> list:
    return [
        h for h in logging.getLogger("taskgroups").handlers if isinstance(h, RotatingFileHandler)
    ]


def test_verbose_enables_debug() -> None:
    configure_logging(verbose=True)
    assert get_logger("taskgroups.groups").isEnabledFor(logging.DEBUG)
    configure_logging(verbose=False)
    assert logging.getLogger("taskgroups").level == logging.NOTSET


def test_log_file_handler_is_replaced(tmp_path) -> None:
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"
    configure_logging(verbose=True, log_file=first)
    configure_logging(verbose=True, log_file=second)
    handlers = _file_handlers()
    assert len(handlers) == 1
    assert handlers[0].baseFilename == str(second)

    get_logger("taskgroups.test").debug("hello")
    assert "hello" in second.read_text(encoding="utf-8")
    assert "hello" not in first.read_text(encoding="utf-8")

    configure_logging()
    assert _file_handlers() == []
