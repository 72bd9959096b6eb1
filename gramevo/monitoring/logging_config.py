"""
Logging Configuration for gramevo.

Provides structured logging with loguru integration.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    format_string: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Configure logging for gramevo.

    Args:
        log_level: Logging level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rotation: Log rotation size/time
        retention: Log retention period
        format_string: Custom format string
        serialize: Whether to serialize logs as JSON
    """
    # Remove default handler
    logger.remove()

    # Default format
    if format_string is None:
        if serialize:
            format_string = "{message}"
        else:
            format_string = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            )

    # Console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=log_level.upper(),
        colorize=not serialize,
        serialize=serialize,
    )

    # File handler
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_file),
            format=format_string,
            level=log_level.upper(),
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize,
        )

    # Add context
    logger.configure(extra={"component": "gramevo"})


class LogContext:
    """Context manager for structured logging."""

    def __init__(self, **kwargs):
        """
        Initialize log context.

        Args:
            **kwargs: Context key-value pairs
        """
        self.context = kwargs
        self.token = None

    def __enter__(self):
        self.token = logger.contextualize(**self.context)
        self.token.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token:
            self.token.__exit__(exc_type, exc_val, exc_tb)


def _format_fitness(fitness: Optional[float]) -> str:
    return "unset" if fitness is None else f"{fitness:.4f}"


def log_evolution_start(generations: int, population_size: int, interactive: bool = False):
    """Log evolution start."""
    with LogContext(phase="evolution"):
        mode = "interactive" if interactive else "autonomous"
        logger.info(
            f"Starting {mode} evolution: generations={generations}, "
            f"population_size={population_size}"
        )


def log_evolution_generation(generation: int, evaluations: int, used_codons: int,
                             best_fitness: Optional[float], phenotype: Optional[str]):
    """Log the best-ever individual after a generation was scored."""
    with LogContext(phase="evolution", generation=generation):
        logger.info(
            f"Generation {generation}: evaluations={evaluations}, "
            f"used_codons={used_codons}, best={_format_fitness(best_fitness)}, "
            f"phenotype={phenotype!r}"
        )


def log_evolution_complete(best_fitness: Optional[float], total_generations: int,
                           total_time: float):
    """Log evolution completion."""
    with LogContext(phase="evolution"):
        logger.success(
            f"Evolution complete: "
            f"best_fitness={_format_fitness(best_fitness)}, "
            f"generations={total_generations}, "
            f"total_time={total_time:.2f}s"
        )
