# src/models/product.py

"""Product record model passed between every aggregation stage."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ProductRecord:
    """Attributes collected for one product by one strategy (or merged)."""

    name: str
    price: str = ""
    rating: str = ""
    features: list[str] = field(
        default_factory=lambda: list[str]()
    )
    specifications: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    availability: str = ""
    description: str = ""
    images: list[str] = field(
        default_factory=lambda: list[str]()
    )
    confidence: float | None = None
    sources: list[str] = field(
        default_factory=lambda: list[str]()
    )
    synthetic: bool = False

    def has_attributes(self) -> bool:
        """Return True when any product attribute is populated."""
        return bool(
            self.price
            or self.rating
            or self.features
            or self.specifications
            or self.availability
            or self.description
            or self.images
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-shaped dict; empty strings become ``None``."""
        return {
            "name": self.name,
            "price": self.price or None,
            "rating": self.rating or None,
            "features": list(self.features),
            "specifications": dict(self.specifications),
            "availability": self.availability or None,
            "description": self.description or None,
            "images": list(self.images),
            "confidence": self.confidence,
            "sources": list(self.sources),
            "synthetic": self.synthetic,
        }
