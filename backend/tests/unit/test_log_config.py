"""Unit tests for per-category logging configuration."""

import logging

import pytest

from portfolio_rag.config import Settings
from portfolio_rag.infrastructure.logging.log_config import _parse_level, setup_logging


@pytest.fixture
def restore_levels():
    names = ["", "sqlalchemy.engine", "httpx", "portfolio_rag.application"]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_setup_logging_applies_category_levels(restore_levels):
    settings = Settings(
        _env_file=None,
        log_level="WARNING",
        log_level_sql="ERROR",
        log_level_http="CRITICAL",
        log_level_rag="DEBUG",
    )

    setup_logging(settings)

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    assert logging.getLogger("httpx").level == logging.CRITICAL
    assert logging.getLogger("portfolio_rag.application").level == logging.DEBUG


def test_parse_level_accepts_any_case_and_defaults_to_info():
    assert _parse_level("debug") == logging.DEBUG
    assert _parse_level("Error") == logging.ERROR
    assert _parse_level("chatty") == logging.INFO
