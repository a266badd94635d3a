"""Models package."""

from orderup.models.order import (
    OrderType,
    OrderDifficulty,
    SpecialRequirement,
    REQUIREMENT_LABELS,
    ProductCategory,
    ProductRarity,
    ProductDefinition,
    OrderDefinition,
    ActiveOrderInstance,
)

__all__ = [
    "OrderType",
    "OrderDifficulty",
    "SpecialRequirement",
    "REQUIREMENT_LABELS",
    "ProductCategory",
    "ProductRarity",
    "ProductDefinition",
    "OrderDefinition",
    "ActiveOrderInstance",
]
