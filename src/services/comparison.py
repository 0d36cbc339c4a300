# src/services/comparison.py

"""Side-by-side aggregation of two products sharing one event log."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from src.models.errors import ValidationError
from src.models.log_entry import LogEntry, LogSummary
from src.services.aggregation_orchestrator import (
    AggregationOrchestrator,
    AggregationResult,
)
from src.services.event_log import EventLog
from src.strategies.registry import build_strategies, resolve_strategies

logger = logging.getLogger("product_compare.comparison")

COMPARATOR_SOURCE = "ProductComparator"


@dataclass
class ComparisonResult:
    """Two aggregated products plus the shared log trail."""

    product1: AggregationResult
    product2: AggregationResult
    logs: tuple[LogEntry, ...]
    summary: LogSummary

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-shaped dict."""
        return {
            "product1": self.product1.record.to_dict(),
            "product2": self.product2.record.to_dict(),
            "logs": [e.to_dict() for e in self.logs],
            "summary": self.summary.to_dict(),
        }


class ProductComparator:
    """Aggregate two products concurrently from the same strategy set.

    Each product gets its own freshly built strategy instances so the
    two aggregations share nothing but the event log.

    The comparator writes to the orchestrator's ``log_sink``.  When an
    orchestrator is injected its sink is used as is; *log_sink* only
    seeds the default orchestrator, and passing both raises
    ``ValueError`` unless they are the same object.
    """

    def __init__(
        self,
        orchestrator: AggregationOrchestrator | None = None,
        log_sink: EventLog | None = None,
    ) -> None:
        if orchestrator is None:
            orchestrator = AggregationOrchestrator(log_sink=log_sink)
        elif log_sink is not None and log_sink is not orchestrator.log_sink:
            raise ValueError(
                "log_sink conflicts with the injected orchestrator's sink"
            )
        self.orchestrator = orchestrator
        self.log_sink: EventLog = orchestrator.log_sink

    async def compare(
        self,
        product1: str,
        product2: str,
        strategy_ids: list[str] | None = None,
    ) -> ComparisonResult:
        """Compare *product1* and *product2*.

        Both names and the strategy list are validated before either
        aggregation starts.

        Raises:
            ValidationError: on a bad name or unknown/empty strategy ids.
        """
        try:
            entries = resolve_strategies(strategy_ids)
            self.orchestrator.validate(product1, entries)
            self.orchestrator.validate(product2, entries)
        except ValidationError as exc:
            self.log_sink.error(
                f"Validation failed: {exc}",
                {"product1": product1, "product2": product2},
                source=COMPARATOR_SOURCE,
            )
            raise
        ids = [e["id"] for e in entries]
        logger.debug(
            "Comparing '%s' and '%s' with strategies %s",
            product1,
            product2,
            ids,
        )

        self.log_sink.info(
            "Starting product comparison",
            {"product1": product1, "product2": product2, "strategies": ids},
            source=COMPARATOR_SOURCE,
        )

        first, second = await asyncio.gather(
            self.orchestrator.aggregate(
                product1, build_strategies(entries)
            ),
            self.orchestrator.aggregate(
                product2, build_strategies(entries)
            ),
        )

        self.log_sink.info(
            "Product comparison completed",
            {
                "product1Features": len(first.record.features),
                "product2Features": len(second.record.features),
            },
            source=COMPARATOR_SOURCE,
        )

        return ComparisonResult(
            product1=first,
            product2=second,
            logs=self.log_sink.entries(),
            summary=self.log_sink.summary(),
        )
