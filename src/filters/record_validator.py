# src/filters/record_validator.py

"""Record validation: strip malformed fields from strategy output."""

import logging
import re
from dataclasses import replace

from src.models.product import ProductRecord

logger = logging.getLogger("product_compare.filters")

RATING_PATTERN = re.compile(r"^\s*\d+(?:\.\d+)?\s*/\s*5\b")


class RecordValidator:
    """Normalise strategy records before they enter the accumulator."""

    @staticmethod
    def is_well_formed_rating(rating: str) -> bool:
        """Return True when *rating* looks like ``<number>/5[ ...]``."""
        return bool(RATING_PATTERN.match(rating))

    @staticmethod
    def _clean_list(values: list[str]) -> list[str]:
        return [v.strip() for v in values if v and v.strip()]

    @staticmethod
    def sanitize(
        record: ProductRecord,
    ) -> tuple[ProductRecord, list[str]]:
        """Return a cleaned copy of *record* and the names of dropped fields.

        Strings are stripped, blank list items and blank specification
        keys are removed, a rating that does not match ``<number>/5``
        and a confidence outside ``[0, 1]`` are dropped.
        """
        dropped: list[str] = []

        rating = record.rating.strip()
        if rating and not RecordValidator.is_well_formed_rating(rating):
            logger.debug(
                "Dropped malformed rating %r for %s",
                rating,
                record.name,
            )
            dropped.append("rating")
            rating = ""

        confidence = record.confidence
        if confidence is not None and not 0.0 <= confidence <= 1.0:
            logger.debug(
                "Dropped out-of-range confidence %r for %s",
                confidence,
                record.name,
            )
            dropped.append("confidence")
            confidence = None

        features = RecordValidator._clean_list(record.features)
        images = RecordValidator._clean_list(record.images)
        if len(features) != len(record.features):
            dropped.append("features")
        if len(images) != len(record.images):
            dropped.append("images")

        specifications = {
            str(k).strip(): str(v).strip()
            for k, v in record.specifications.items()
            if str(k).strip()
        }
        if len(specifications) != len(record.specifications):
            dropped.append("specifications")

        cleaned = replace(
            record,
            price=record.price.strip(),
            rating=rating,
            features=features,
            specifications=specifications,
            availability=record.availability.strip(),
            description=record.description.strip(),
            images=images,
            confidence=confidence,
            sources=list(record.sources),
        )
        return cleaned, dropped
