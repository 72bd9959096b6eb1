"""
Monitoring for gramevo.

Structured logging with loguru, plus helpers that report the progress of an
evolution run.
"""

from .logging_config import (
    LogContext,
    configure_logging,
    log_evolution_complete,
    log_evolution_generation,
    log_evolution_start,
)

__all__ = [
    "configure_logging",
    "LogContext",
    "log_evolution_start",
    "log_evolution_generation",
    "log_evolution_complete",
]
