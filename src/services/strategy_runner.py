# src/services/strategy_runner.py

"""Runs a single strategy with a timeout, failure capture and pacing."""

import asyncio
import logging
import random
import threading
from typing import Any

from src.config.settings import Settings
from src.filters.record_validator import RecordValidator
from src.models.errors import StrategyFailure
from src.models.product import ProductRecord
from src.services.event_log import EventLog

logger = logging.getLogger("product_compare.runner")


def strategy_name(strategy: Any) -> str:
    """Identifying name of a strategy, falling back to its class name."""
    return str(getattr(strategy, "name", "") or type(strategy).__name__)


def _discard_outcome(worker: "asyncio.Future[Any]") -> None:
    """Retrieve an abandoned worker's outcome so asyncio does not warn."""
    if not worker.cancelled():
        worker.exception()


class StrategyRunner:
    """Invoke one strategy, bound its execution, and normalise failure.

    Every call to :meth:`run` produces exactly one event log entry
    tagged with the strategy's name: ``info`` on success, ``warn`` on
    any failure.  Failures are never re-raised.
    """

    def __init__(
        self,
        timeout: float | None = None,
        rng: random.Random | None = None,
        cancel_grace: float | None = None,
    ) -> None:
        self.timeout = timeout or Settings.STRATEGY_TIMEOUT
        self.cancel_grace = (
            Settings.STRATEGY_CANCEL_GRACE
            if cancel_grace is None
            else cancel_grace
        )
        self._rng = rng or random.Random()

    def pacing_delay(self, strategy: Any) -> float:
        """Draw the jittered pause that follows *strategy*'s invocation."""
        low, high = getattr(strategy, "pacing", Settings.PACING_DELAY)
        return self._rng.uniform(low, high)

    async def _pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def _invoke(
        self, strategy: Any, product_name: str,
    ) -> ProductRecord:
        """Run ``fetch`` in a worker thread, bounded by the timeout.

        On timeout the strategy's ``cancel_event`` (when it has one) is
        set and the worker gets ``cancel_grace`` seconds to stop before
        the runner moves on.
        """
        timeout = getattr(strategy, "timeout", None) or self.timeout
        cancel_event = getattr(strategy, "cancel_event", None)
        if cancel_event is not None:
            cancel_event.clear()

        worker = asyncio.ensure_future(
            asyncio.to_thread(strategy.fetch, product_name)
        )
        done, _ = await asyncio.wait({worker}, timeout=timeout)
        if not done:
            await self._stop(strategy, worker, cancel_event)
            raise StrategyFailure(f"timed out after {timeout:.1f}s")

        result = worker.result()
        if not isinstance(result, ProductRecord):
            raise StrategyFailure(
                f"returned {type(result).__name__} instead of a record"
            )
        return result

    async def _stop(
        self,
        strategy: Any,
        worker: "asyncio.Future[Any]",
        cancel_event: threading.Event | None,
    ) -> None:
        """Signal a timed-out worker and wait for it to wind down."""
        if cancel_event is not None:
            cancel_event.set()
        done, _ = await asyncio.wait({worker}, timeout=self.cancel_grace)
        if done:
            # The timeout is the reported cause, not the cancellation
            worker.exception()
            return
        logger.warning(
            "Strategy %s ignored cancellation for %.1fs, abandoning its thread",
            strategy_name(strategy),
            self.cancel_grace,
        )
        worker.add_done_callback(_discard_outcome)

    async def run(
        self,
        strategy: Any,
        product_name: str,
        accumulator: list[ProductRecord],
        events: EventLog,
    ) -> ProductRecord | None:
        """Run *strategy* for *product_name* and pace afterwards.

        On success the sanitised record is appended to *accumulator*
        and returned; on failure ``None`` is returned.
        """
        name = strategy_name(strategy)
        record: ProductRecord | None = None
        try:
            raw = await self._invoke(strategy, product_name)
            record, dropped = RecordValidator.sanitize(raw)
            if not record.has_attributes():
                raise StrategyFailure("returned no product attributes")
        except StrategyFailure as exc:
            record = None
            events.warn(
                f"Strategy {name} failed for {product_name}: {exc.cause}",
                {"product": product_name, "error": exc.cause},
                source=name,
            )
        except Exception as exc:
            record = None
            cause = f"{type(exc).__name__}: {exc}"
            logger.debug(
                "Strategy %s raised unexpectedly", name, exc_info=True
            )
            events.warn(
                f"Strategy {name} failed for {product_name}: {cause}",
                {"product": product_name, "error": cause},
                source=name,
            )
        else:
            if not record.sources:
                record.sources.append(name)
            accumulator.append(record)
            metadata: dict[str, Any] = {
                "product": product_name,
                "features": len(record.features),
                "specifications": len(record.specifications),
                "images": len(record.images),
            }
            if dropped:
                metadata["dropped"] = dropped
            events.info(
                f"Strategy {name} completed for {product_name}",
                metadata,
                source=name,
            )

        delay = self.pacing_delay(strategy)
        logger.debug("Pacing %.2fs after strategy %s", delay, name)
        await self._pause(delay)
        return record
