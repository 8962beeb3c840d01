import logging

import pytest

from taskwatch.utils.logging import parse_verbosity, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _handler(kind):
    for handler in logging.getLogger().handlers:
        if type(handler) is kind:
            return handler
    return None


@pytest.mark.parametrize(
    "verbosity,expected",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (3, logging.DEBUG)],
)
def test_console_level_follows_verbosity(tmp_path, verbosity, expected):
    setup_logging(verbosity=verbosity, log_file=str(tmp_path / "run.log"))

    assert _handler(logging.StreamHandler).level == expected
    assert _handler(logging.FileHandler).level == logging.DEBUG


def test_explicit_log_file_written(tmp_path):
    log_path = tmp_path / "nested" / "run.log"
    setup_logging(verbosity=0, log_file=str(log_path))

    logging.getLogger("taskwatch.test").debug("debug line")
    _handler(logging.FileHandler).flush()

    assert log_path.exists()
    assert "debug line" in log_path.read_text(encoding="utf-8")


def test_default_log_file_in_log_dir(tmp_path):
    setup_logging(verbosity=1, log_dir=str(tmp_path / "logs"))

    files = list((tmp_path / "logs").glob("taskwatch_*.log"))
    assert len(files) == 1


def test_sdk_loggers_quieted(tmp_path):
    setup_logging(verbosity=2, log_file=str(tmp_path / "run.log"))

    assert logging.getLogger("notion_client").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_parse_verbosity():
    assert parse_verbosity([]) == 0
    assert parse_verbosity(["-v"]) == 1
    assert parse_verbosity(["--verbose"]) == 1
    assert parse_verbosity(["-vv"]) == 2
    assert parse_verbosity(["-vvv", "-v"]) == 3
