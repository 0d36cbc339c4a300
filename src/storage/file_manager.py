# src/storage/file_manager.py

"""Handles saving comparison results and event logs to disk."""

import json
import logging
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings
from src.models.log_entry import LogEntry
from src.services.comparison import ComparisonResult

logger = logging.getLogger("product_compare.storage")


def _slug(text: str) -> str:
    """Filesystem-safe slug for a product name."""
    return re.sub(r"[^A-Za-z0-9]+", "_", text).strip("_")[:40] or "product"


class FileManager:
    """Handles saving comparison results and event logs to disk."""

    def __init__(self) -> None:
        self.results_dir: Path = Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "FileManager initialised, results_dir=%s", self.results_dir
        )

    def save_comparison(self, result: ComparisonResult) -> Path:
        """Save a comparison to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = (
            f"compare_{_slug(result.product1.product_name)}"
            f"_vs_{_slug(result.product2.product_name)}_{timestamp}.json"
        )
        filepath = self.results_dir / filename

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved comparison of '%s' and '%s' to %s",
            result.product1.product_name,
            result.product2.product_name,
            filepath,
        )
        return filepath

    def export_logs(
        self, entries: Iterable[LogEntry], label: str,
    ) -> Path:
        """Write event log entries to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"logs_{_slug(label)}_{timestamp}.json"
        data = [e.to_dict() for e in entries]

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

        logger.info("Exported %d log entries to %s", len(data), filepath)
        return filepath
