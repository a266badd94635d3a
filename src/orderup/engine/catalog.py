"""OrderCatalog - the pool of order definitions available for spawning."""

import random
from typing import Iterable, Iterator, Optional
from pydantic import ValidationError
import yaml

from orderup.exceptions import CatalogError
from orderup.models.order import (
    OrderDefinition,
    OrderDifficulty,
    OrderType,
    ProductCategory,
    ProductDefinition,
    ProductRarity,
    SpecialRequirement,
)


class OrderCatalog:
    """Immutable pool of order definitions, plus the products they reference.

    When products are supplied, every product id an order requires must be
    present. A catalog without products skips that check.
    """

    def __init__(
        self,
        orders: Iterable[OrderDefinition] = (),
        products: Iterable[ProductDefinition] = (),
    ):
        self._orders: tuple[OrderDefinition, ...] = tuple(orders)
        self._products: dict[str, ProductDefinition] = {}

        for product in products:
            if product.product_id in self._products:
                raise CatalogError(f"Duplicate product id: {product.product_id}")
            self._products[product.product_id] = product

        seen: set[str] = set()
        for order in self._orders:
            if order.order_id in seen:
                raise CatalogError(f"Duplicate order id: {order.order_id}")
            seen.add(order.order_id)
            if self._products:
                missing = [pid for pid in order.required_products if pid not in self._products]
                if missing:
                    raise CatalogError(
                        f"Order {order.order_id} requires unknown products: {', '.join(missing)}"
                    )

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[OrderDefinition]:
        return iter(self._orders)

    def __contains__(self, order_id: object) -> bool:
        return any(order.order_id == order_id for order in self._orders)

    @property
    def orders(self) -> tuple[OrderDefinition, ...]:
        return self._orders

    @property
    def products(self) -> tuple[ProductDefinition, ...]:
        return tuple(self._products.values())

    def is_empty(self) -> bool:
        return not self._orders

    def get(self, order_id: str) -> Optional[OrderDefinition]:
        """Get an order definition by id."""
        for order in self._orders:
            if order.order_id == order_id:
                return order
        return None

    def get_product(self, product_id: str) -> Optional[ProductDefinition]:
        return self._products.get(product_id)

    def required_products(self, order: OrderDefinition) -> list[ProductDefinition]:
        """Resolve an order's product references, skipping unknown ids."""
        return [
            self._products[pid] for pid in order.required_products if pid in self._products
        ]

    def choose(self, rng: random.Random) -> Optional[OrderDefinition]:
        """Pick one definition uniformly at random, or None if empty."""
        if not self._orders:
            return None
        return rng.choice(self._orders)

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_dict(cls, data: dict) -> "OrderCatalog":
        """Build a catalog from a mapping with `products` and `orders` lists.

        Raises:
            CatalogError: If an entry fails validation or ids clash.
        """
        if not isinstance(data, dict):
            raise CatalogError("Catalog data must be a mapping")
        try:
            products = [ProductDefinition.model_validate(p) for p in data.get("products") or []]
            orders = [OrderDefinition.model_validate(o) for o in data.get("orders") or []]
        except ValidationError as e:
            raise CatalogError(f"Invalid catalog entry: {e}") from e
        return cls(orders=orders, products=products)

    @classmethod
    def load_from_file(cls, filepath: str) -> "OrderCatalog":
        """Load a catalog from a YAML file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise CatalogError(f"Cannot read catalog file {filepath}: {e}") from e
        except yaml.YAMLError as e:
            raise CatalogError(f"Malformed YAML in {filepath}: {e}") from e
        return cls.from_dict(data or {})

    def to_dict(self) -> dict:
        """Inverse of from_dict()."""
        return {
            "products": [p.model_dump(mode="json") for p in self._products.values()],
            "orders": [o.model_dump(mode="json") for o in self._orders],
        }


# Starter warehouse stock
STANDARD_PRODUCTS = [
    ProductDefinition(product_id="apple_crate", name="Apple Crate", category=ProductCategory.FOOD),
    ProductDefinition(product_id="frozen_peas", name="Frozen Peas", category=ProductCategory.FOOD),
    ProductDefinition(
        product_id="headphones",
        name="Headphones",
        category=ProductCategory.ELECTRONICS,
        base_points=15,
        rarity=ProductRarity.UNCOMMON,
    ),
    ProductDefinition(
        product_id="glass_vase",
        name="Glass Vase",
        weight=2.5,
        base_points=20,
        rarity=ProductRarity.RARE,
        spawn_weight=30,
    ),
    ProductDefinition(product_id="tshirt", name="T-Shirt", category=ProductCategory.CLOTHING),
    ProductDefinition(
        product_id="battery_pack",
        name="Battery Pack",
        category=ProductCategory.ELECTRONICS,
        base_points=25,
        rarity=ProductRarity.VERY_RARE,
        spawn_weight=10,
    ),
]

STANDARD_ORDERS = [
    OrderDefinition(
        order_id="ORD-001",
        customer_name="Corner Grocer",
        required_products=("apple_crate", "frozen_peas"),
        special_requirements=frozenset({SpecialRequirement.REFRIGERATION}),
    ),
    OrderDefinition(
        order_id="ORD-002",
        customer_name="Mika",
        difficulty=OrderDifficulty.MEDIUM,
        required_products=("tshirt", "headphones"),
        base_points=60,
    ),
    OrderDefinition(
        order_id="ORD-003",
        order_type=OrderType.EXPRESS,
        customer_name="Florist",
        customer_notes="Opening tomorrow morning",
        difficulty=OrderDifficulty.MEDIUM,
        required_products=("glass_vase",),
        special_requirements=frozenset({SpecialRequirement.FRAGILE}),
        priority_level=4,
        priority_color="orange",
    ),
    OrderDefinition(
        order_id="ORD-004",
        order_type=OrderType.EXPRESS,
        customer_name="Field Lab",
        difficulty=OrderDifficulty.HARD,
        required_products=("battery_pack", "headphones"),
        base_points=80,
        express_bonus=40,
        express_time_limit=45.0,
        special_requirements=frozenset({SpecialRequirement.HAZARDOUS}),
        priority_level=5,
        priority_color="red",
    ),
    OrderDefinition(
        order_id="ORD-005",
        customer_name="Bulk Buyer",
        difficulty=OrderDifficulty.HARD,
        required_products=("apple_crate", "tshirt", "glass_vase"),
        base_points=90,
        special_requirements=frozenset({SpecialRequirement.FRAGILE}),
        priority_level=2,
    ),
]


def create_standard_catalog() -> OrderCatalog:
    """Catalog with the starter orders and products."""
    return OrderCatalog(orders=STANDARD_ORDERS, products=STANDARD_PRODUCTS)
