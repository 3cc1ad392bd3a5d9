"""
Configuration management.
"""

import os
from dataclasses import dataclass, field

from appraisal.valuation.config import DEFAULT_ENGINE_CONFIG, EngineConfig


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "plain"))

    # Valuation
    max_radius_km: float = field(
        default_factory=lambda: float(
            os.getenv(
                "VALUATION_MAX_RADIUS_KM",
                str(DEFAULT_ENGINE_CONFIG.similarity.max_radius_km),
            )
        )
    )
    mad_multiplier: float = field(
        default_factory=lambda: float(
            os.getenv(
                "VALUATION_MAD_MULTIPLIER",
                str(DEFAULT_ENGINE_CONFIG.outliers.mad_multiplier),
            )
        )
    )
    range_k: float = field(
        default_factory=lambda: float(
            os.getenv("VALUATION_RANGE_K", str(DEFAULT_ENGINE_CONFIG.aggregation.range_k))
        )
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_engine_config(self) -> EngineConfig:
        """Engine parameter set with the environment overrides applied."""
        return DEFAULT_ENGINE_CONFIG.with_overrides(
            similarity__max_radius_km=self.max_radius_km,
            outliers__mad_multiplier=self.mad_multiplier,
            aggregation__range_k=self.range_k,
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "max_radius_km": self.max_radius_km,
            "mad_multiplier": self.mad_multiplier,
            "range_k": self.range_k,
        }
