import logging

import pytest

from reactornet import logsetup


class RecordingLogger:
    def __init__(self):
        self.records = []

    def _add(self, lvl, msg, *args):
        self.records.append((lvl, msg % args if args else msg))

    def debug(self, msg, *args):
        self._add("debug", msg, *args)

    def info(self, msg, *args):
        self._add("info", msg, *args)

    def warning(self, msg, *args):
        self._add("warning", msg, *args)

    def error(self, msg, *args):
        self._add("error", msg, *args)


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logsetup.init(logging.INFO)


def test_setup_logger_routes_messages():
    rec = RecordingLogger()
    logsetup.setup_logger(rec, logging.DEBUG)
    logsetup.debug("d %d", 1)
    logsetup.info("i %s", "x")
    logsetup.warning("w")
    logsetup.error("e")
    assert rec.records == [
        ("debug", "d 1"),
        ("info", "i x"),
        ("warning", "w"),
        ("error", "e"),
    ]
    assert logsetup.level() == logging.DEBUG


def test_fatal_logs_at_error_level():
    rec = RecordingLogger()
    logsetup.setup_logger(rec, logging.INFO)
    logsetup.fatal("boom %s", "now")
    assert rec.records == [("error", "boom now")]


def test_setup_logger_none_keeps_previous():
    rec = RecordingLogger()
    logsetup.setup_logger(rec, logging.WARNING)
    logsetup.setup_logger(None, logging.DEBUG)
    assert logsetup.level() == logging.WARNING
    logsetup.info("still here")
    assert rec.records == [("info", "still here")]


def test_log_err_ignores_none_and_logs_errors():
    rec = RecordingLogger()
    logsetup.setup_logger(rec, logging.INFO)
    logsetup.log_err(None)
    assert rec.records == []
    logsetup.log_err(OSError("bad fd"))
    assert len(rec.records) == 1
    lvl, text = rec.records[0]
    assert lvl == "error"
    assert "error occurs during runtime" in text
    assert "bad fd" in text


def test_empty_path_rejected():
    with pytest.raises(ValueError, match="invalid local logger path"):
        logsetup.setup_logger_with_path("", logging.INFO)


def test_file_logging_respects_level(tmp_path):
    path = tmp_path / "server.log"
    logsetup.setup_logger_with_path(str(path), logging.INFO)
    assert logsetup.level() == logging.INFO
    logsetup.debug("hidden message")
    logsetup.info("visible message")
    logsetup.cleanup()
    content = path.read_text(encoding="utf-8")
    assert "visible message" in content
    assert "INFO" in content
    assert "hidden message" not in content


def test_init_sets_level():
    logsetup.init(logging.ERROR)
    assert logsetup.level() == logging.ERROR