"""Tests for runtime configuration."""

import logging
from pathlib import Path

from feerecon import config


def test_database_path_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("FEERECON_DB_PATH", "/env/feerecon.db")

    assert config.database_path("/explicit.db") == "/explicit.db"
    assert config.database_path() == "/env/feerecon.db"


def test_database_path_default(monkeypatch, tmp_path):
    monkeypatch.delenv("FEERECON_DB_PATH", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)

    assert config.database_path() == str(tmp_path / ".feerecon" / "feerecon.db")
    assert (tmp_path / ".feerecon").is_dir()


def test_reference_prefix(monkeypatch):
    monkeypatch.delenv("FEERECON_REFERENCE_PREFIX", raising=False)
    assert config.reference_prefix() == "HAR"

    monkeypatch.setenv("FEERECON_REFERENCE_PREFIX", " SCH ")
    assert config.reference_prefix() == "SCH"


def test_configure_logging_levels(monkeypatch):
    monkeypatch.setenv("FEERECON_LOG_LEVEL", "info")

    config.configure_logging()
    assert logging.getLogger("feerecon").level == logging.INFO

    config.configure_logging(verbose=True)
    assert logging.getLogger("feerecon").level == logging.DEBUG
    assert logging.getLogger("pdfminer").level == logging.WARNING
