import pytest
from loguru import logger

from lcdclock.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger.remove()


def test_setup_logging_honours_env_level(monkeypatch, capsys) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    setup_logging()

    logger.info("hidden message")
    logger.warning("shown message")

    err = capsys.readouterr().err
    assert "shown message" in err
    assert "hidden message" not in err


def test_explicit_level_wins(monkeypatch, capsys) -> None:
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    setup_logging("debug")

    logger.debug("debug visible")

    assert "debug visible" in capsys.readouterr().err


def test_repeated_setup_keeps_one_sink(capsys) -> None:
    setup_logging("INFO")
    setup_logging("INFO")

    logger.info("logged once")

    assert capsys.readouterr().err.count("logged once") == 1


def test_package_version_matches_pyproject() -> None:
    import lcdclock

    assert lcdclock.__version__ == "0.1.0"
