"""Engine package - round clock, order scheduling and scoring."""

from .config import RoundConfig, DEFAULT_WARNING_THRESHOLDS
from .catalog import (
    OrderCatalog,
    STANDARD_ORDERS,
    STANDARD_PRODUCTS,
    create_standard_catalog,
)
from .score_ledger import ScoreLedger, ScoreState
from .order_scheduler import OrderScheduler, OrderRef
from .round_controller import RoundController
from .validator import (
    RoundValidator,
    NoOpValidator,
    CollectingValidator,
    create_validator,
)
from .session import GameSession

__all__ = [
    "RoundConfig",
    "DEFAULT_WARNING_THRESHOLDS",
    "OrderCatalog",
    "STANDARD_ORDERS",
    "STANDARD_PRODUCTS",
    "create_standard_catalog",
    "ScoreLedger",
    "ScoreState",
    "OrderScheduler",
    "OrderRef",
    "RoundController",
    "RoundValidator",
    "NoOpValidator",
    "CollectingValidator",
    "create_validator",
    "GameSession",
]
