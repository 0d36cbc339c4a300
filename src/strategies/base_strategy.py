# src/strategies/base_strategy.py

"""Abstract base class for all product data-acquisition strategies."""

import logging
import threading
from abc import ABC, abstractmethod

from src.config.settings import Settings
from src.models.errors import StrategyFailure
from src.models.product import ProductRecord


class BaseStrategy(ABC):
    """A pluggable way of fetching attributes for one product.

    ``fetch`` returns a (possibly partial) :class:`ProductRecord` or
    raises :class:`~src.models.errors.StrategyFailure`.  The product
    name is validated by the orchestrator before any strategy runs.

    ``fetch`` runs in a worker thread.  When it overruns its timeout the
    runner sets ``cancel_event``; long-running strategies call
    :meth:`_checkpoint` between steps so they stop promptly.
    """

    # Pacing range (seconds) awaited after each invocation
    PACING: tuple[float, float] = Settings.PACING_DELAY

    def __init__(self, name: str) -> None:
        self.name = name
        self.logger = logging.getLogger(
            f"product_compare.strategies.{name}"
        )
        self.settings = Settings()
        self.timeout: float = self.settings.STRATEGY_TIMEOUT
        self.pacing: tuple[float, float] = self.PACING
        self.enabled: bool = True
        self.cancel_event = threading.Event()

    def _checkpoint(self) -> None:
        """Raise ``StrategyFailure`` if this fetch has been cancelled."""
        if self.cancel_event.is_set():
            raise StrategyFailure(f"{self.name} cancelled after timeout")

    def _new_record(self, product_name: str) -> ProductRecord:
        """Return an empty record attributed to this strategy."""
        return ProductRecord(name=product_name, sources=[self.name])

    @abstractmethod
    def fetch(self, product_name: str) -> ProductRecord:
        """Fetch attributes for *product_name*."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
