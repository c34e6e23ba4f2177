import errno
import logging
import os

import pytest

from ezfeed import log
from ezfeed.log import LogLevel


@pytest.fixture(autouse=True)
def _reset():
    log.set_verbosity(0)
    yield
    log.shutdown()
    log.set_verbosity(0)


def test_syserr_without_error_logs_nothing():
    assert log.syserr(LogLevel.ALERT, 0, "alert") == 0


def test_levels_follow_verbosity():
    verbosity = 0
    log.set_verbosity(verbosity)
    assert log.alert("alert") != 0
    assert log.syserr(LogLevel.ALERT, errno.EINVAL, "alert") != 0
    assert log.syserr(LogLevel.ALERT, errno.EINVAL, None) != 0
    assert log.error("error") != 0
    assert log.syserr(LogLevel.ERROR, errno.EINVAL, "error") != 0
    assert log.warning("warning") != 0
    assert log.syserr(LogLevel.WARNING, errno.EINVAL, "warning") != 0

    assert log.notice("notice") == 0
    assert log.syserr(LogLevel.NOTICE, errno.EINVAL, "notice") == 0
    verbosity += 1
    log.set_verbosity(verbosity)
    assert log.notice("notice") != 0
    assert log.syserr(LogLevel.NOTICE, errno.EINVAL, "notice") != 0

    assert log.info("info") == 0
    assert log.syserr(LogLevel.INFO, errno.EINVAL, "info") == 0
    verbosity += 1
    log.set_verbosity(verbosity)
    assert log.info("info") != 0
    assert log.syserr(LogLevel.INFO, errno.EINVAL, "info") != 0

    assert log.debug("debug") == 0
    assert log.syserr(LogLevel.DEBUG, errno.EINVAL, "debug") == 0
    verbosity += 1
    log.set_verbosity(verbosity)
    assert log.debug("debug") != 0
    assert log.syserr(LogLevel.DEBUG, errno.EINVAL, "debug") != 0


def test_syserr_message_text(caplog):
    with caplog.at_level(logging.DEBUG, logger="ezfeed"):
        assert log.syserr(LogLevel.ERROR, errno.EINVAL, "pfx") == 1
        assert log.syserr(LogLevel.ERROR, errno.EINVAL, None) == 1
    messages = [record.getMessage() for record in caplog.records]
    assert messages == [f"pfx: {os.strerror(errno.EINVAL)}", os.strerror(errno.EINVAL)]


def test_format_arguments(caplog):
    with caplog.at_level(logging.DEBUG, logger="ezfeed"):
        log.warning("%s: attempt #%u", "host", 3)
    assert caplog.records[-1].getMessage() == "host: attempt #3"
    assert caplog.records[-1].levelno == logging.WARNING


def test_filtered_message_not_emitted(caplog):
    with caplog.at_level(logging.DEBUG, logger="ezfeed"):
        assert log.info("hidden") == 0
    assert all(record.getMessage() != "hidden" for record in caplog.records)


def test_init_writes_to_stderr(capsys):
    log.init("progname")
    assert log.error("boom %d", 3) == 1
    log.shutdown()
    err = capsys.readouterr().err
    assert "boom 3" in err
    assert f"progname[{os.getpid()}]" in err