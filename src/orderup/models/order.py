"""Order, product and active-instance models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class OrderType(str, Enum):
    """Order type: Standard orders have no deadline, Express orders do."""

    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"


class OrderDifficulty(str, Enum):
    """Difficulty tier of an order."""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class SpecialRequirement(str, Enum):
    """Special handling requirements for an order."""

    FRAGILE = "FRAGILE"
    REFRIGERATION = "REFRIGERATION"
    HAZARDOUS = "HAZARDOUS"


# Display order matters: requirements_description() lists them in this order
REQUIREMENT_LABELS: dict[SpecialRequirement, str] = {
    SpecialRequirement.FRAGILE: "Fragile",
    SpecialRequirement.REFRIGERATION: "Refrigeration Required",
    SpecialRequirement.HAZARDOUS: "Hazardous Material",
}


class ProductCategory(str, Enum):
    """Product category for grouping."""

    UNCATEGORIZED = "UNCATEGORIZED"
    FOOD = "FOOD"
    ELECTRONICS = "ELECTRONICS"
    CLOTHING = "CLOTHING"


class ProductRarity(str, Enum):
    """Product rarity, affects spawn rate and scoring multiplier."""

    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    VERY_RARE = "VERY_RARE"


_RARITY_MULTIPLIERS = {
    ProductRarity.COMMON: 1.0,
    ProductRarity.UNCOMMON: 1.5,
    ProductRarity.RARE: 2.0,
    ProductRarity.VERY_RARE: 3.0,
}

_RARITY_SPAWN_FACTORS = {
    ProductRarity.COMMON: 1.0,
    ProductRarity.UNCOMMON: 0.7,
    ProductRarity.RARE: 0.4,
    ProductRarity.VERY_RARE: 0.2,
}


class ProductDefinition(BaseModel):
    """A product that can be picked and packed into an order."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    description: str = ""
    category: ProductCategory = ProductCategory.UNCATEGORIZED
    weight: float = Field(default=1.0, ge=0)
    base_points: int = 10
    rarity: ProductRarity = ProductRarity.COMMON
    spawn_weight: int = Field(default=50, ge=1, le=100)
    is_available: bool = True

    def rarity_multiplier(self) -> float:
        """Scoring multiplier for this product's rarity."""
        return _RARITY_MULTIPLIERS[self.rarity]

    def effective_spawn_rate(self) -> float:
        """Spawn weight scaled by rarity; zero when the product is unavailable."""
        if not self.is_available:
            return 0.0
        return self.spawn_weight * _RARITY_SPAWN_FACTORS[self.rarity]

    def __str__(self) -> str:
        return f"{self.name} ({self.product_id})"


class OrderDefinition(BaseModel):
    """Immutable definition of an order that can be spawned during a round.

    Required products are stored as product id references; the catalog
    resolves them to ProductDefinition instances.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str
    order_type: OrderType = OrderType.STANDARD
    difficulty: OrderDifficulty = OrderDifficulty.EASY
    customer_name: str = ""
    customer_notes: str = ""
    required_products: tuple[str, ...] = ()
    base_points: int = 50
    express_bonus: int = 25
    express_time_limit: float = Field(default=60.0, gt=0)
    special_requirements: frozenset[SpecialRequirement] = frozenset()
    priority_level: int = Field(default=1, ge=1, le=5)  # 5 = most urgent
    priority_color: str = "white"

    @property
    def is_express(self) -> bool:
        """True for Express orders."""
        return self.order_type == OrderType.EXPRESS

    def points(self) -> int:
        """Points awarded on completion: base points plus the express bonus."""
        if self.is_express:
            return self.base_points + self.express_bonus
        return self.base_points

    def has_requirement(self, requirement: SpecialRequirement) -> bool:
        """Check whether this order carries a special requirement."""
        return requirement in self.special_requirements

    def requirements_description(self) -> str:
        """Comma-separated labels of the special requirements."""
        if not self.special_requirements:
            return "No special requirements"
        return ", ".join(
            label
            for requirement, label in REQUIREMENT_LABELS.items()
            if requirement in self.special_requirements
        )

    def __str__(self) -> str:
        return f"{self.order_id} ({self.order_type.value})"


class ActiveOrderInstance(BaseModel):
    """One live occurrence of an OrderDefinition during a round."""

    model_config = ConfigDict(frozen=True)

    instance_id: int
    definition: OrderDefinition
    spawn_time: float  # round clock at spawn

    @property
    def is_express(self) -> bool:
        return self.definition.is_express

    def age(self, now: float) -> float:
        """Seconds of round time since this instance spawned."""
        return now - self.spawn_time

    def is_overdue(self, now: float) -> bool:
        """True when an Express instance has reached its time limit."""
        return self.is_express and self.age(now) >= self.definition.express_time_limit

    def time_left(self, now: float) -> Optional[float]:
        """Seconds until expiry, or None for orders without a deadline."""
        if not self.is_express:
            return None
        return max(0.0, self.definition.express_time_limit - self.age(now))

    def __str__(self) -> str:
        return f"#{self.instance_id} {self.definition}"
