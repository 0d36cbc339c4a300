# src/config/logging_config.py

"""Per-run logging for product_compare.

Every launch writes ``logs/run_<YYYYMMDD_HHMMSS>.log`` at DEBUG level.
The console only shows warnings unless ``verbose`` is set.  Event log
entries arrive here through the ``product_compare.events`` logger, so
the run file holds the complete aggregation trail.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "product_compare"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _run_log_path(logs_dir: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def setup_logging(verbose: bool = False) -> Path:
    """Attach the run-file and console handlers to ``product_compare``.

    Calling it again is harmless: once a run file is attached only
    the console level is updated and the existing file path is returned.

    Args:
        verbose: Show INFO records on the console instead of WARNING+.

    Returns:
        Path of this run's log file.
    """
    console_level = logging.INFO if verbose else logging.WARNING
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG)

    file_handlers = [
        h for h in root.handlers if isinstance(h, logging.FileHandler)
    ]
    if file_handlers:
        for handler in root.handlers:
            if handler not in file_handlers:
                handler.setLevel(console_level)
        return Path(file_handlers[0].baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = _run_log_path(logs_dir)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root.addHandler(file_handler)
    root.addHandler(console_handler)
    root.debug("Run log opened at %s", log_file)
    return log_file
