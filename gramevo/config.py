"""
gramevo Configuration System

Pydantic v2-based configuration with YAML/JSON support and environment overrides.

Features:
- Type-safe configuration models
- YAML/JSON file loading
- Environment variable overrides
- Validation with defaults
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, Field


# =============================================================================
# Evolution Configuration
# =============================================================================


class EvolutionConfig(BaseModel):
    """Configuration for a grammatical evolution run."""

    # Population
    population_size: int = Field(
        default=50,
        ge=1,
        le=100000,
        description="Number of individuals in population",
    )

    # Generations
    num_generations: int = Field(
        default=10,
        ge=0,
        le=1000000,
        description="Generations run by the autonomous driver",
    )

    # Mutation
    mutation_rate: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Probability of mutating each child",
    )

    # Selection
    truncation_fraction: float = Field(
        default=0.3,
        ge=0.0,
        lt=1.0,
        description="Fraction of lowest-ranked individuals excluded from breeding",
    )

    selection: Literal["auto", "truncation", "direct"] = Field(
        default="auto",
        description="Parent selection; auto picks direct when no evaluator is set",
    )

    # Derivation
    max_depth: int = Field(
        default=6,
        ge=0,
        le=1000,
        description="Depth from which direct recursion is suppressed",
    )

    genome_length: int = Field(
        default=200,
        ge=1,
        le=800,
        description="Codons per genome",
    )

    # Reproducibility
    seed: int | None = Field(
        default=None,
        description="Random seed; None draws one from the OS",
    )

    # Population filling
    max_fill_attempts: int = Field(
        default=10000,
        ge=1,
        description="Consecutive rejected candidates tolerated while filling one slot",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Configuration for loguru sinks."""

    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file",
    )

    rotation: str = Field(default="100 MB", description="Log file rotation")
    retention: str = Field(default="30 days", description="Log file retention")

    serialize: bool = Field(
        default=False,
        description="Emit JSON log records",
    )


# =============================================================================
# Main Configuration
# =============================================================================


class GEConfig(BaseModel):
    """Complete gramevo configuration."""

    experiment_name: str = Field(
        default="gramevo",
        description="Name used in logs and history exports",
    )

    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GEConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            GEConfig instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str | Path) -> GEConfig:
        """
        Load configuration from JSON file.

        Args:
            path: Path to JSON file

        Returns:
            GEConfig instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        logger.info(f"Loaded configuration from {path}")
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "GRAMEVO_") -> GEConfig:
        """
        Load configuration from environment variables.

        Environment variables should be in the format:
        GRAMEVO_EVOLUTION__POPULATION_SIZE=100
        GRAMEVO_LOGGING__LEVEL=DEBUG

        Args:
            prefix: Environment variable prefix

        Returns:
            GEConfig instance
        """
        config_dict: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue

            # Remove prefix and convert to nested dict
            parts = key[len(prefix):].lower().split("__")

            current = config_dict
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = _parse_env_value(value)

        logger.info(f"Loaded configuration from environment variables (prefix={prefix})")
        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Path to YAML file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

        logger.info(f"Saved configuration to {path}")

    def to_json(self, path: str | Path) -> None:
        """
        Save configuration to JSON file.

        Args:
            path: Path to JSON file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

        logger.info(f"Saved configuration to {path}")


def _parse_env_value(value: str) -> Any:
    """Interpret an environment string as bool, int, float or leave it as text."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


# =============================================================================
# Configuration Factory
# =============================================================================


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "GRAMEVO_",
) -> GEConfig:
    """
    Load configuration with automatic format detection.

    Priority:
    1. Explicit config file (YAML or JSON)
    2. Environment variables
    3. Defaults

    Args:
        config_path: Path to config file (YAML or JSON)
        env_prefix: Environment variable prefix

    Returns:
        GEConfig instance
    """
    if config_path:
        path = Path(config_path)
        if path.suffix in (".yaml", ".yml"):
            return GEConfig.from_yaml(path)
        elif path.suffix == ".json":
            return GEConfig.from_json(path)
        else:
            raise ValueError(f"Unknown config format: {path.suffix}")

    if any(key.startswith(env_prefix) for key in os.environ):
        return GEConfig.from_env(env_prefix)

    logger.info("Using default configuration")
    return GEConfig()


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "GEConfig",
    "EvolutionConfig",
    "LoggingConfig",
    "load_config",
]
