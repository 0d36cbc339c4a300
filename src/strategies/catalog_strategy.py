# src/strategies/catalog_strategy.py

"""Heuristic lookup of products in a local JSON catalog."""

import json
import re
from pathlib import Path
from typing import Any

from src.models.errors import StrategyFailure
from src.models.product import ProductRecord
from src.strategies.base_strategy import BaseStrategy


def _tokens(text: str) -> frozenset[str]:
    """Lowercase alphanumeric tokens of *text*."""
    lowered = re.sub(r"[^a-z0-9\s]", " ", text.lower())
    return frozenset(lowered.split())


def _normalise(text: str) -> str:
    return " ".join(sorted(_tokens(text)))


class CatalogStrategy(BaseStrategy):
    """Look a product up in ``catalog.json`` by alias or token overlap.

    An exact (normalised) name or alias match reports the entry's own
    confidence.  Otherwise the entry with the highest Jaccard overlap
    above ``CATALOG_MATCH_THRESHOLD`` wins, with its confidence scaled
    by the overlap.
    """

    PACING = (0.9, 1.5)

    def __init__(
        self,
        name: str = "catalog",
        catalog_path: Path | None = None,
    ) -> None:
        super().__init__(name)
        self.catalog_path = catalog_path or self.settings.CATALOG_PATH
        self._entries: list[dict[str, Any]] | None = None

    def _load_entries(self) -> list[dict[str, Any]]:
        """Load (once) and return the catalog entries."""
        if self._entries is None:
            try:
                with open(self.catalog_path, encoding="utf-8") as f:
                    data: dict[str, Any] = json.load(f)
            except (OSError, json.JSONDecodeError) as exc:
                raise StrategyFailure(
                    f"Catalog unavailable ({self.catalog_path}): {exc}"
                ) from exc
            self._entries = list(data.get("products", []))
            self.logger.debug(
                "[%s] Loaded %d catalog entries from %s",
                self.name,
                len(self._entries),
                self.catalog_path,
            )
        return self._entries

    def _match(
        self, product_name: str,
    ) -> tuple[dict[str, Any], float] | None:
        """Return the best entry and its match score, or ``None``."""
        wanted = _normalise(product_name)
        wanted_tokens = _tokens(product_name)

        best: tuple[dict[str, Any], float] | None = None
        for entry in self._load_entries():
            names = [entry.get("name", ""), *entry.get("aliases", [])]
            if any(_normalise(n) == wanted for n in names if n):
                return entry, 1.0
            for candidate in names:
                cand_tokens = _tokens(candidate)
                if not cand_tokens or not wanted_tokens:
                    continue
                score = len(cand_tokens & wanted_tokens) / len(
                    cand_tokens | wanted_tokens
                )
                if best is None or score > best[1]:
                    best = (entry, score)

        if best is not None and (
            best[1] >= self.settings.CATALOG_MATCH_THRESHOLD
        ):
            return best
        return None

    def fetch(self, product_name: str) -> ProductRecord:
        """Return the catalog record closest to *product_name*."""
        match = self._match(product_name)
        if match is None:
            raise StrategyFailure(
                f"No catalog entry matches '{product_name}'"
            )
        entry, score = match
        self.logger.info(
            "[%s] '%s' matched catalog entry '%s' (score=%.2f)",
            self.name,
            product_name,
            entry.get("name"),
            score,
        )

        record = self._new_record(product_name)
        record.price = str(entry.get("price", ""))
        record.rating = str(entry.get("rating", ""))
        record.features = [str(f) for f in entry.get("features", [])]
        record.specifications = {
            str(k): str(v)
            for k, v in entry.get("specifications", {}).items()
        }
        record.availability = str(entry.get("availability", ""))
        record.description = str(entry.get("description", ""))
        record.images = [str(i) for i in entry.get("images", [])]
        base_confidence = float(entry.get("confidence", 0.8))
        record.confidence = round(base_confidence * score, 3)
        return record
