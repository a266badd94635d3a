"""Package exceptions."""


class OrderUpError(Exception):
    """Base class for errors raised by the orderup package."""


class CatalogError(OrderUpError):
    """Raised when an order catalog cannot be built or loaded."""


class ConfigError(OrderUpError):
    """Raised when a round configuration file cannot be loaded."""
