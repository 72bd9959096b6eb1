"""
Evolution Controller

Drives a grammatical evolution run, either autonomously or through the
ask/tell protocol.

Features:
- ask()/tell() for externally supplied fitness (interactive runs)
- evolve() for the autonomous generational loop
- Best-ever tracking and per-generation history
- Reproducible runs from a single seed

Protocol states:
    CREATED -> INITIALIZED -> EVALUATION_PENDING <-> REPLACED

The population returned by ask() is the order fitness values must be told
back in.
"""

from __future__ import annotations

import math
import numbers
import random
import time
from collections.abc import Mapping, Sequence
from enum import Enum, auto
from typing import Any, Callable

from loguru import logger

from .config import EvolutionConfig
from .exceptions import ProtocolViolationError
from .genome.encoding import Individual
from .genome.fitness import NULL_EVALUATOR, Evaluator, as_evaluator
from .genome.grammar import Grammar
from .genome.history import EvolutionHistory
from .genome.operators import SelectionStrategy
from .genome.population import PopulationManager
from .monitoring import log_evolution_complete, log_evolution_generation, log_evolution_start


# =============================================================================
# Controller State
# =============================================================================


class ControllerState(Enum):
    """Position of a controller in the ask/tell protocol."""

    CREATED = auto()              # No population yet
    INITIALIZED = auto()          # First population built, not yet asked for
    EVALUATION_PENDING = auto()   # Population handed out, waiting for tell()
    REPLACED = auto()             # Fitness told, next population built


# =============================================================================
# Evolution Controller
# =============================================================================


class EvolutionController:
    """
    Grammatical evolution engine.

    Without an evaluator the controller runs interactively: fitness comes
    from outside through tell(), and parents are chosen by direct selection
    unless the configuration says otherwise.
    """

    def __init__(
        self,
        grammar: Grammar | Mapping[str, Any],
        config: EvolutionConfig | None = None,
        evaluator: Evaluator | Callable[[str], float] | None = None,
        experiment_name: str = "gramevo",
    ):
        """
        Initialize controller.

        Args:
            grammar: Grammar, or a description accepted by Grammar.from_dict
            config: Evolution configuration (defaults if None)
            evaluator: Fitness function; None for interactive runs
            experiment_name: Name recorded in the history
        """
        self.grammar = grammar if isinstance(grammar, Grammar) else Grammar.from_dict(grammar)
        self.config = config or EvolutionConfig()

        self.interactive = evaluator is None
        self.evaluator = NULL_EVALUATOR if evaluator is None else as_evaluator(evaluator)
        self.selection_strategy = self._resolve_selection()

        # One random source for the whole engine
        self.rng = random.Random(self.config.seed)

        self.population = PopulationManager(
            self.grammar,
            self.config,
            self.rng,
            maximize=self.evaluator.maximize,
        )
        self.history = EvolutionHistory(experiment_name)

        self.state = ControllerState.CREATED
        self.evaluations = 0

        logger.info(
            "Initialized EvolutionController",
            population_size=self.config.population_size,
            genome_length=self.config.genome_length,
            codon_modulus=self.grammar.codon_modulus,
            selection=self.selection_strategy.name,
            evaluator=self.evaluator.name,
            seed=self.config.seed,
        )

    def _resolve_selection(self) -> SelectionStrategy:
        match self.config.selection:
            case "truncation":
                return SelectionStrategy.TRUNCATION
            case "direct":
                return SelectionStrategy.DIRECT
            case _:
                return SelectionStrategy.DIRECT if self.interactive else SelectionStrategy.TRUNCATION

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def maximize(self) -> bool:
        return self.evaluator.maximize

    @property
    def best_ever(self) -> Individual | None:
        return self.population.best_ever

    @property
    def generation(self) -> int:
        return self.population.generation

    # ------------------------------------------------------------------
    # Ask / tell protocol
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Build the first population."""
        if self.state is not ControllerState.CREATED:
            raise ProtocolViolationError(
                "init() may only be called once",
                details={"state": self.state.name},
            )

        self.population.initialize()
        self.state = ControllerState.INITIALIZED

    def ask(self) -> list[Individual]:
        """
        Return the current population.

        Calling ask() again before tell() returns the same individuals in
        the same order.
        """
        if self.state is ControllerState.CREATED:
            raise ProtocolViolationError(
                "ask() called before init()",
                details={"state": self.state.name},
            )

        self.state = ControllerState.EVALUATION_PENDING
        return list(self.population.individuals)

    def tell(self, fitness_values: Sequence[float]) -> None:
        """
        Assign fitness to the asked population and breed the next one.

        Args:
            fitness_values: One number per individual, in ask() order

        Raises:
            ProtocolViolationError: If no ask() is pending, or the values are
                the wrong count, not numbers, or NaN. Nothing is changed.
        """
        if self.state is not ControllerState.EVALUATION_PENDING:
            raise ProtocolViolationError(
                "tell() called without a pending ask()",
                details={"state": self.state.name},
            )

        values = list(fitness_values)
        expected = len(self.population.individuals)
        if len(values) != expected:
            raise ProtocolViolationError(
                "Wrong number of fitness values",
                details={"expected": expected, "received": len(values)},
            )

        for index, value in enumerate(values):
            if not isinstance(value, numbers.Real):
                raise ProtocolViolationError(
                    "Fitness values must be numbers",
                    details={"index": index, "type": type(value).__name__},
                )
            if math.isnan(value):
                raise ProtocolViolationError(
                    "Fitness values must not be NaN",
                    details={"index": index},
                )

        generation = self.population.generation
        self.population.assign_fitness([float(value) for value in values])
        self.evaluations += len(values)

        best = self.population.best_ever
        self.history.record(
            generation,
            self.population.compute_statistics(generation),
            best,
            self.evaluations,
        )
        log_evolution_generation(
            generation,
            self.evaluations,
            best.used_codons,
            best.fitness,
            best.phenotype,
        )

        self.population.next_generation(self.selection_strategy)
        self.state = ControllerState.REPLACED

    # ------------------------------------------------------------------
    # Autonomous driver
    # ------------------------------------------------------------------

    def evolve(self, generations: int | None = None) -> Individual:
        """
        Run the generational loop with the configured evaluator.

        Args:
            generations: Rounds to run (config.num_generations if None)

        Returns:
            Best individual found so far
        """
        if generations is None:
            generations = self.config.num_generations
        if generations < 0:
            raise ValueError("generations must be >= 0")

        if self.state is ControllerState.CREATED:
            self.init()

        log_evolution_start(generations, self.config.population_size, self.interactive)
        start_time = time.time()

        for _ in range(generations):
            population = self.ask()
            fitness_values = [self.evaluator(individual.phenotype) for individual in population]
            self.tell(fitness_values)

        log_evolution_complete(self.best_ever.fitness, generations, time.time() - start_time)

        return self.best_ever

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def describe(self, individual: Individual | None = None) -> dict[str, Any]:
        """
        Summarize an individual (best-ever by default).

        Returns:
            Used genome region, used codon count, fitness, phenotype
        """
        if individual is None:
            individual = self.best_ever
        if individual is None:
            raise ProtocolViolationError(
                "No individual to describe before init()",
                details={"state": self.state.name},
            )
        return individual.describe()

    def get_statistics(self) -> dict[str, Any]:
        """
        Get run statistics.

        Returns:
            Dictionary with protocol state, counters and history summary
        """
        stats: dict[str, Any] = {
            "state": self.state.name,
            "generation": self.population.generation,
            "evaluations": self.evaluations,
            "interactive": self.interactive,
            "maximize": self.maximize,
            "selection": self.selection_strategy.name.lower(),
            "novelty_cache_size": len(self.population.novelty_cache),
            "history": self.history.compute_summary(),
        }

        if self.population.individuals:
            stats["population"] = self.population.compute_statistics().to_dict()
        if self.best_ever is not None:
            stats["best_ever"] = self.best_ever.describe()

        return stats


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "ControllerState",
    "EvolutionController",
]
