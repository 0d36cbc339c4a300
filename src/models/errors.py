# src/models/errors.py

"""Error taxonomy for the aggregation pipeline."""


class ProductCompareError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(ProductCompareError):
    """A malformed request: blank name, oversized name, or no strategies."""


class StrategyFailure(ProductCompareError):
    """A single strategy could not produce data for a product."""

    def __init__(self, cause: str) -> None:
        super().__init__(cause)
        self.cause = cause


class EmptyMergeInput(ProductCompareError):
    """The merger was invoked with zero records."""
