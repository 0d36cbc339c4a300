# src/filters/record_merger.py

"""Deterministic merge of partial product records into one profile."""

import logging
import re

from src.models.errors import EmptyMergeInput
from src.models.product import ProductRecord

logger = logging.getLogger("product_compare.filters")

_LEADING_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def parse_rating(rating: str) -> float | None:
    """Parse the leading number of a rating such as ``'4.5/5 (x)'``.

    Returns ``None`` when the string has no leading number.
    """
    match = _LEADING_NUMBER_RE.match(rating or "")
    if match is None:
        return None
    return float(match.group(1))


def _union(into: list[str], seen: set[str], values: list[str]) -> None:
    """Append unseen values to *into*, keeping first-seen order."""
    for value in values:
        if value not in seen:
            seen.add(value)
            into.append(value)


class RecordMerger:
    """Combine an ordered sequence of records using per-field rules.

    - ``price``, ``availability``, ``description``: first non-empty wins.
    - ``rating``: highest parsed leading number wins; unparsable ratings
      count as 0 and never beat a parsed one; ties go to the earliest.
    - ``features``, ``images``, ``sources``: first-seen union.
    - ``specifications``: key union, later records overwrite earlier ones.
    - ``name``: always the requested product name.

    The merge is a pure function of its input sequence.
    """

    @staticmethod
    def _pick_rating(records: list[ProductRecord]) -> str:
        best = ""
        best_key: tuple[int, float] | None = None
        for record in records:
            if not record.rating:
                continue
            parsed = parse_rating(record.rating)
            key = (0, 0.0) if parsed is None else (1, parsed)
            if best_key is None or key > best_key:
                best_key = key
                best = record.rating
        return best

    @staticmethod
    def merge(
        records: list[ProductRecord],
        product_name: str,
        demote_synthetic: bool = False,
    ) -> ProductRecord:
        """Merge *records* into a new record named *product_name*.

        With ``demote_synthetic`` the synthetic (fallback) records are
        moved behind every real record before the rules are applied.

        Raises:
            EmptyMergeInput: if *records* is empty.
        """
        if not records:
            raise EmptyMergeInput(
                f"Cannot merge zero records for '{product_name}'"
            )

        ordered = list(records)
        if demote_synthetic:
            ordered = [r for r in ordered if not r.synthetic] + [
                r for r in ordered if r.synthetic
            ]

        merged = ProductRecord(name=product_name)
        seen_features: set[str] = set()
        seen_images: set[str] = set()
        seen_sources: set[str] = set()
        confidences: list[float] = []

        for record in ordered:
            if record.price and not merged.price:
                merged.price = record.price
            if record.availability and not merged.availability:
                merged.availability = record.availability
            if record.description and not merged.description:
                merged.description = record.description

            _union(merged.features, seen_features, record.features)
            _union(merged.images, seen_images, record.images)
            _union(merged.sources, seen_sources, record.sources)

            merged.specifications.update(record.specifications)

            if record.confidence is not None:
                confidences.append(record.confidence)

        merged.rating = RecordMerger._pick_rating(ordered)
        merged.confidence = max(confidences) if confidences else None
        merged.synthetic = all(r.synthetic for r in ordered)

        logger.debug(
            "Merged %d records for '%s' (%d features, %d specs, %d images)",
            len(ordered),
            product_name,
            len(merged.features),
            len(merged.specifications),
            len(merged.images),
        )
        return merged
