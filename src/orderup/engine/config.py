"""Round configuration, supplied at construction time."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from orderup.exceptions import ConfigError

DEFAULT_WARNING_THRESHOLDS = (120.0, 60.0, 30.0)


class RoundConfig(BaseModel):
    """Tuning values for one session. Not reloadable mid-round.

    Express time limits are not here: they ride on each OrderDefinition.
    """

    model_config = ConfigDict(frozen=True)

    round_duration: float = Field(default=300.0, gt=0)  # seconds
    spawn_interval: float = Field(default=30.0, gt=0)
    max_active_orders: int = Field(default=5, ge=1)
    initial_spawn_count: int = Field(default=3, ge=0)
    warning_thresholds: tuple[float, ...] = DEFAULT_WARNING_THRESHOLDS
    seed: Optional[int] = None  # for order selection

    @field_validator("warning_thresholds")
    @classmethod
    def _sort_thresholds(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        if any(threshold <= 0 for threshold in value):
            raise ValueError("warning thresholds must be positive")
        # Checked in descending order by the round controller
        return tuple(sorted(set(value), reverse=True))

    @property
    def initial_batch_size(self) -> int:
        """Number of orders spawned when a round starts."""
        return min(self.initial_spawn_count, self.max_active_orders)

    @classmethod
    def load_from_file(cls, filepath: str) -> "RoundConfig":
        """Load a configuration from a YAML mapping.

        Raises:
            ConfigError: If the file is missing, is not YAML, or holds
                invalid values.
        """
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {filepath}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {filepath}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {filepath} must contain a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {filepath}: {e}") from e
