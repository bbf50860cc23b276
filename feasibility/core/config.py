"""Centralized settings for the feasibility core.

Settings are read from the environment (prefix ``FEASIBILITY_``) or a ``.env``
file in the working directory. Only presentation-level defaults live here:
the calculation and report engines never read settings, so their output
depends on their arguments alone.
"""

import logging
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings container."""

    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level used by configure_logging()",
    )

    # Sensitivity defaults (used when neither the caller nor the scenario
    # supplies its own steps)
    DEFAULT_RENT_STEPS: List[float] = Field(
        default_factory=lambda: [-0.15, -0.10, -0.05, 0.0, 0.05, 0.10, 0.15],
        description="Rent deltas in $/SF/month",
    )
    DEFAULT_HARD_COST_STEPS: List[float] = Field(
        default_factory=lambda: [-15.0, -10.0, -5.0, 0.0, 5.0, 10.0, 15.0],
        description="Hard cost deltas in $/NRSF",
    )
    DEFAULT_LAND_COST_STEPS: List[float] = Field(
        default_factory=lambda: [
            -2_000_000.0, -1_000_000.0, -500_000.0, 0.0,
            500_000.0, 1_000_000.0, 2_000_000.0,
        ],
        description="Land cost deltas in absolute dollars",
    )

    model_config = SettingsConfigDict(
        env_prefix="FEASIBILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


# Module-level singleton; import this rather than constructing Settings().
settings = Settings()


def get_settings() -> Settings:
    """Return the shared settings instance."""
    return settings
