"""
gramevo Exceptions

Exception Hierarchy:
    GrammarEvolutionError (base)
    ├── InvalidGrammarError
    ├── MappingFailure
    ├── DepthBoundUnsatisfiableError
    ├── GenerationExhaustedError
    └── ProtocolViolationError

MappingFailure never leaves the population manager: a genome that runs out
of codons is discarded and replaced. The other four are the failures a
caller can observe.
"""

from __future__ import annotations

from typing import Any


class GrammarEvolutionError(Exception):
    """
    Base exception for all gramevo errors.

    Carries a short message plus a details dict that is rendered
    into the string form.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidGrammarError(GrammarEvolutionError):
    """Raised when a grammar description cannot be turned into a Grammar."""


class MappingFailure(GrammarEvolutionError):
    """Raised when a derivation exhausts the genome before completing."""

    def __init__(self, symbol: str, genome_length: int):
        super().__init__(
            "Genome exhausted during derivation",
            details={"symbol": symbol, "genome_length": genome_length},
        )
        self.symbol = symbol
        self.genome_length = genome_length


class DepthBoundUnsatisfiableError(GrammarEvolutionError):
    """
    Raised when the depth bound is reached on a nonterminal whose
    productions all recurse directly into itself.
    """

    def __init__(self, symbol: str, depth: int, attempts: int):
        super().__init__(
            "No non-recursive production available at depth limit",
            details={"symbol": symbol, "depth": depth, "attempts": attempts},
        )
        self.symbol = symbol
        self.depth = depth
        self.attempts = attempts


class GenerationExhaustedError(GrammarEvolutionError):
    """Raised when the population cannot be filled with novel individuals."""

    def __init__(self, filled: int, target: int, attempts: int):
        super().__init__(
            "Could not fill population with novel individuals",
            details={"filled": filled, "target": target, "attempts": attempts},
        )
        self.filled = filled
        self.target = target
        self.attempts = attempts


class ProtocolViolationError(GrammarEvolutionError):
    """Raised when ask/tell is used out of order or with bad fitness values."""


__all__ = [
    "GrammarEvolutionError",
    "InvalidGrammarError",
    "MappingFailure",
    "DepthBoundUnsatisfiableError",
    "GenerationExhaustedError",
    "ProtocolViolationError",
]
