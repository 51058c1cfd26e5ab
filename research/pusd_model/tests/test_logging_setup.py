import logging

import pytest

from pusd_model.src.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


@pytest.mark.parametrize(
    "name, expected",
    [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("bogus", logging.INFO), ("", logging.INFO)],
)
def test_configure_logging_level(name, expected):
    configure_logging(name)
    assert logging.getLogger().level == expected
    assert logging.getLogger("matplotlib").level == logging.WARNING


def test_configure_logging_adds_one_handler():
    root = logging.getLogger()
    root.handlers[:] = []
    configure_logging()
    configure_logging()
    assert len(root.handlers) == 1
