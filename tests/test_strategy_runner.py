# tests/test_strategy_runner.py

"""Tests for StrategyRunner failure capture, timeouts and pacing."""

import asyncio
import random
import threading
import unittest
from unittest.mock import AsyncMock, patch

from src.models.errors import StrategyFailure
from src.models.log_entry import LogLevel
from src.models.product import ProductRecord
from src.services.event_log import EventLog
from src.services.strategy_runner import StrategyRunner, strategy_name


class _Returning:
    """Stub strategy returning a fixed record."""

    def __init__(self, record: ProductRecord, name: str = "good") -> None:
        self.name = name
        self.record = record
        self.pacing = (0.0, 0.0)

    def fetch(self, product_name: str) -> ProductRecord:
        return self.record


class _Raising:
    """Stub strategy raising a given exception."""

    def __init__(self, exc: Exception, name: str = "bad") -> None:
        self.name = name
        self.exc = exc
        self.pacing = (0.0, 0.0)

    def fetch(self, product_name: str) -> ProductRecord:
        raise self.exc


class _Slow:
    """Stub strategy that works until cancelled, recording its steps."""

    def __init__(self, steps: list[str]) -> None:
        self.name = "slow"
        self.timeout = 0.05
        self.pacing = (0.0, 0.0)
        self.cancel_event = threading.Event()
        self.steps = steps

    def fetch(self, product_name: str) -> ProductRecord:
        self.steps.append("slow-start")
        self.cancel_event.wait(5)
        self.steps.append("slow-stopped")
        raise StrategyFailure("cancelled")


class _Stubborn:
    """Stub strategy with no cancel hook that blocks until released."""

    def __init__(self) -> None:
        self.name = "stubborn"
        self.timeout = 0.05
        self.pacing = (0.0, 0.0)
        self.release = threading.Event()

    def fetch(self, product_name: str) -> ProductRecord:
        self.release.wait(5)
        return ProductRecord(name=product_name, price="$1")


class _Recording:
    """Stub strategy that records when it starts."""

    def __init__(self, steps: list[str]) -> None:
        self.name = "fast"
        self.pacing = (0.0, 0.0)
        self.steps = steps

    def fetch(self, product_name: str) -> ProductRecord:
        self.steps.append("fast-start")
        return ProductRecord(name=product_name, price="$2")


class TestRunnerSuccess(unittest.IsolatedAsyncioTestCase):
    """Successful invocations."""

    async def test_appends_record_and_logs_info(self) -> None:
        """A record is accumulated and one info entry emitted."""
        record = ProductRecord(
            name="Widget",
            price="$10",
            features=["a", "b"],
            specifications={"K": "V"},
            images=["u"],
        )
        acc: list[ProductRecord] = []
        events = EventLog()
        result = await StrategyRunner().run(
            _Returning(record), "Widget", acc, events
        )

        self.assertIsNotNone(result)
        self.assertEqual(len(acc), 1)
        entries = events.entries()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].level, LogLevel.INFO)
        self.assertEqual(entries[0].source, "good")
        assert entries[0].metadata is not None
        self.assertEqual(entries[0].metadata["features"], 2)
        self.assertEqual(entries[0].metadata["specifications"], 1)
        self.assertEqual(entries[0].metadata["images"], 1)

    async def test_sources_default_to_strategy_name(self) -> None:
        """Records without provenance are tagged with the strategy."""
        acc: list[ProductRecord] = []
        await StrategyRunner().run(
            _Returning(ProductRecord(name="W", price="$1")),
            "W",
            acc,
            EventLog(),
        )
        self.assertEqual(acc[0].sources, ["good"])

    async def test_malformed_fields_reported(self) -> None:
        """Dropped malformed fields are listed in the metadata."""
        acc: list[ProductRecord] = []
        events = EventLog()
        await StrategyRunner().run(
            _Returning(
                ProductRecord(name="W", price="$1", rating="n/a")
            ),
            "W",
            acc,
            events,
        )
        self.assertEqual(acc[0].rating, "")
        metadata = events.entries()[0].metadata
        assert metadata is not None
        self.assertEqual(metadata["dropped"], ["rating"])


class TestRunnerFailure(unittest.IsolatedAsyncioTestCase):
    """Failures are absorbed and logged as warnings."""

    async def _run_failing(self, strategy: object) -> EventLog:
        acc: list[ProductRecord] = []
        events = EventLog()
        result = await StrategyRunner().run(strategy, "Widget", acc, events)
        self.assertIsNone(result)
        self.assertEqual(acc, [])
        self.assertEqual(len(events), 1)
        self.assertEqual(events.entries()[0].level, LogLevel.WARN)
        return events

    async def test_strategy_failure(self) -> None:
        """StrategyFailure's cause is logged and not re-raised."""
        events = await self._run_failing(
            _Raising(StrategyFailure("site down"))
        )
        entry = events.entries()[0]
        self.assertEqual(entry.source, "bad")
        self.assertIn("site down", entry.message)

    async def test_unexpected_exception(self) -> None:
        """Any other exception is treated the same way."""
        events = await self._run_failing(
            _Raising(ConnectionError("reset"))
        )
        self.assertIn("ConnectionError", events.entries()[0].message)

    async def test_timeout(self) -> None:
        """A strategy exceeding its timeout is a failure."""
        events = await self._run_failing(_Slow([]))
        self.assertIn("timed out", events.entries()[0].message)

    async def test_timed_out_strategy_stops_before_next_starts(self) -> None:
        """A cancelled strategy winds down before the next one runs."""
        steps: list[str] = []
        slow = _Slow(steps)
        runner = StrategyRunner()
        acc: list[ProductRecord] = []
        events = EventLog()
        await runner.run(slow, "Widget", acc, events)
        await runner.run(_Recording(steps), "Widget", acc, events)

        self.assertEqual(steps, ["slow-start", "slow-stopped", "fast-start"])
        self.assertTrue(slow.cancel_event.is_set())
        self.assertEqual([r.price for r in acc], ["$2"])
        self.assertEqual(
            [e.level for e in events.entries()],
            [LogLevel.WARN, LogLevel.INFO],
        )

    async def test_cancel_event_cleared_for_next_run(self) -> None:
        """A strategy reused after a timeout starts uncancelled."""
        slow = _Slow([])
        slow.cancel_event.set()
        slow.timeout = 5.0
        runner = StrategyRunner()
        task = asyncio.ensure_future(
            runner.run(slow, "Widget", [], EventLog())
        )
        await asyncio.sleep(0.05)
        self.assertFalse(task.done())
        slow.cancel_event.set()
        self.assertIsNone(await task)

    async def test_uncooperative_strategy_abandoned(self) -> None:
        """A strategy without a cancel hook is abandoned after the grace."""
        strategy = _Stubborn()
        runner = StrategyRunner(cancel_grace=0.05)
        events = EventLog()
        try:
            result = await runner.run(strategy, "Widget", [], events)
        finally:
            strategy.release.set()
        self.assertIsNone(result)
        self.assertEqual(len(events), 1)
        self.assertIn("timed out", events.entries()[0].message)

    async def test_non_record_return(self) -> None:
        """Returning something other than a record is a failure."""
        strategy = _Returning(ProductRecord(name="W"))
        strategy.record = {"price": "$1"}  # type: ignore[assignment]
        await self._run_failing(strategy)

    async def test_empty_record(self) -> None:
        """A record with no attributes counts as no data."""
        events = await self._run_failing(
            _Returning(ProductRecord(name="W", sources=["good"]))
        )
        self.assertIn("no product attributes", events.entries()[0].message)


class TestRunnerPacing(unittest.IsolatedAsyncioTestCase):
    """Pacing delay after every invocation."""

    def test_pacing_within_strategy_range(self) -> None:
        """The jittered delay is drawn from the strategy's range."""
        runner = StrategyRunner(rng=random.Random(1))
        strategy = _Returning(ProductRecord(name="W", price="$1"))
        strategy.pacing = (0.9, 1.5)
        for _ in range(50):
            delay = runner.pacing_delay(strategy)
            self.assertGreaterEqual(delay, 0.9)
            self.assertLessEqual(delay, 1.5)

    async def test_pause_after_success_and_failure(self) -> None:
        """The runner pauses once per invocation regardless of outcome."""
        runner = StrategyRunner()
        with patch.object(
            StrategyRunner, "_pause", new_callable=AsyncMock
        ) as pause:
            await runner.run(
                _Returning(ProductRecord(name="W", price="$1")),
                "W",
                [],
                EventLog(),
            )
            await runner.run(
                _Raising(StrategyFailure("x")), "W", [], EventLog()
            )
        self.assertEqual(pause.await_count, 2)


class TestStrategyName(unittest.TestCase):
    """strategy_name fallback."""

    def test_falls_back_to_class_name(self) -> None:
        """Objects without a name use their class name."""

        class Nameless:
            def fetch(self, product_name: str) -> ProductRecord:
                return ProductRecord(name=product_name)

        self.assertEqual(strategy_name(Nameless()), "Nameless")


if __name__ == "__main__":
    unittest.main()
