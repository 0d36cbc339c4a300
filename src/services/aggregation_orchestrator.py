# src/services/aggregation_orchestrator.py

"""Runs every strategy for one product and merges what they return."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.config.settings import Settings
from src.filters.record_merger import RecordMerger
from src.models.errors import ValidationError
from src.models.log_entry import LogEntry
from src.models.product import ProductRecord
from src.services.event_log import EventLog
from src.services.fallback_synthesizer import (
    FallbackSynthesizer,
    classify,
)
from src.services.strategy_runner import StrategyRunner, strategy_name

logger = logging.getLogger("product_compare.orchestrator")

ORCHESTRATOR_SOURCE = "AggregationOrchestrator"


class AggregationState(str, Enum):
    """States of a single product aggregation request."""

    VALIDATING = "validating"
    RUNNING = "running"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AggregationResult:
    """Outcome of one product aggregation."""

    product_name: str
    record: ProductRecord
    logs: tuple[LogEntry, ...]
    states: list[AggregationState] = field(
        default_factory=lambda: list[AggregationState]()
    )
    used_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``{record, logs}`` JSON shape."""
        return {
            "record": self.record.to_dict(),
            "logs": [e.to_dict() for e in self.logs],
        }


class AggregationOrchestrator:
    """Validate, run strategies sequentially, fall back, then merge.

    One orchestrator may serve concurrent requests: each call to
    :meth:`aggregate` owns its accumulator and request log, and only
    touches the shared ``log_sink`` through its locked ``extend``.
    """

    def __init__(
        self,
        runner: StrategyRunner | None = None,
        synthesizer: FallbackSynthesizer | None = None,
        log_sink: EventLog | None = None,
    ) -> None:
        self.runner = runner or StrategyRunner()
        self.synthesizer = synthesizer or FallbackSynthesizer()
        self.log_sink = log_sink if log_sink is not None else EventLog()

    # ── Validation ───────────────────────────────────────

    def validate(
        self, product_name: str | None, strategies: list[Any],
    ) -> str:
        """Return the canonical product name or raise ``ValidationError``."""
        name = (product_name or "").strip()
        if not name:
            raise ValidationError("Product name is required")
        limit = Settings.MAX_PRODUCT_NAME_LENGTH
        if len(name) > limit:
            raise ValidationError(
                f"Product name must be at most {limit} characters"
            )
        if not strategies:
            raise ValidationError("No data-acquisition strategies configured")
        return name

    # ── Aggregation ──────────────────────────────────────

    async def aggregate(
        self, product_name: str, strategies: list[Any],
    ) -> AggregationResult:
        """Aggregate one product across *strategies*.

        Raises:
            ValidationError: for a blank or oversized name, or when no
                strategies are configured.  Nothing runs in that case.
        """
        events = EventLog(source=ORCHESTRATOR_SOURCE)
        states = [AggregationState.VALIDATING]

        try:
            name = self.validate(product_name, strategies)
        except ValidationError as exc:
            states.append(AggregationState.FAILED)
            events.error(
                f"Validation failed: {exc}",
                {"product": product_name},
            )
            self.log_sink.extend(events.entries())
            raise

        states.append(AggregationState.RUNNING)
        events.info(
            f"Starting aggregation for {name}",
            {
                "product": name,
                "strategies": [strategy_name(s) for s in strategies],
            },
        )

        accumulator: list[ProductRecord] = []
        for index, strategy in enumerate(strategies, 1):
            if not getattr(strategy, "enabled", True):
                events.info(
                    f"Skipping disabled strategy {strategy_name(strategy)}",
                    {"product": name},
                )
                continue
            logger.debug(
                "Running strategy %d/%d (%s) for '%s'",
                index,
                len(strategies),
                strategy_name(strategy),
                name,
            )
            await self.runner.run(strategy, name, accumulator, events)

        used_fallback = False
        if not accumulator:
            category = classify(name)
            events.info(
                f"No strategy returned data for {name}, "
                "synthesizing fallback record",
                {"product": name, "category": category.value},
            )
            accumulator.append(self.synthesizer.synthesize(name))
            used_fallback = True

        states.append(AggregationState.MERGING)
        record = RecordMerger.merge(accumulator, name)

        states.append(AggregationState.DONE)
        events.info(
            f"Aggregation completed for {name}",
            {
                "product": name,
                "records": len(accumulator),
                "sources": list(record.sources),
                "fallback": used_fallback,
            },
        )

        logs = events.entries()
        self.log_sink.extend(logs)
        return AggregationResult(
            product_name=name,
            record=record,
            logs=logs,
            states=states,
            used_fallback=used_fallback,
        )
