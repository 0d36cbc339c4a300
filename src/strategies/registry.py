# src/strategies/registry.py

"""Resolve strategy ids from the settings registry into instances."""

import importlib
import logging
from typing import Any

from src.config.settings import Settings
from src.models.errors import ValidationError
from src.strategies.base_strategy import BaseStrategy

logger = logging.getLogger("product_compare.registry")


def load_strategy_class(dotted_path: str) -> type[Any]:
    """Dynamically import a strategy class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def resolve_strategies(
    strategy_ids: list[str] | None,
) -> list[dict[str, str]]:
    """Map strategy ids to their registry entries.

    Returns every registered strategy when *strategy_ids* is ``None``.
    Raises ``ValidationError`` on unknown ids.
    """
    available = {s["id"]: s for s in Settings.AVAILABLE_STRATEGIES}
    if strategy_ids is None:
        return list(Settings.AVAILABLE_STRATEGIES)

    unknown = [i for i in strategy_ids if i not in available]
    if unknown:
        valid = ", ".join(sorted(available))
        raise ValidationError(
            f"Unknown strategy id(s): {', '.join(unknown)} "
            f"(available: {valid})"
        )
    return [available[i] for i in strategy_ids]


def build_strategies(
    entries: list[dict[str, str]],
) -> list[BaseStrategy]:
    """Instantiate one fresh strategy per registry entry."""
    strategies: list[BaseStrategy] = []
    for entry in entries:
        cls = load_strategy_class(entry["strategy"])
        strategies.append(cls(entry["id"]))
        logger.debug(
            "Built strategy %s (%s)", entry["id"], entry["strategy"]
        )
    return strategies
