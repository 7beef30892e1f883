"""Runtime configuration read from the environment."""

import logging
import os
from pathlib import Path
from typing import Optional

DB_PATH_ENV = "FEERECON_DB_PATH"
REFERENCE_PREFIX_ENV = "FEERECON_REFERENCE_PREFIX"
LOG_LEVEL_ENV = "FEERECON_LOG_LEVEL"

DEFAULT_REFERENCE_PREFIX = "HAR"
DEFAULT_LOG_LEVEL = "WARNING"


def database_path(override: Optional[str] = None) -> str:
    """Resolve the SQLite database file.

    Uses the explicit override, then FEERECON_DB_PATH, then
    ~/.feerecon/feerecon.db (creating the directory).
    """
    if override:
        return override
    env_path = os.environ.get(DB_PATH_ENV)
    if env_path:
        return env_path
    db_dir = Path.home() / ".feerecon"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "feerecon.db")


def reference_prefix() -> str:
    """Letter prefix of structured invoice references (e.g. HAR in HAR149)."""
    return os.environ.get(REFERENCE_PREFIX_ENV, DEFAULT_REFERENCE_PREFIX).strip() or DEFAULT_REFERENCE_PREFIX


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging once for CLI runs."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("feerecon").setLevel(level)
    # pdfminer is very chatty at DEBUG
    logging.getLogger("pdfminer").setLevel(max(level, logging.WARNING))
