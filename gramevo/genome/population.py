"""
Population Management for Grammatical Evolution

This module manages the population of individuals across generations:
- Initialization from random genomes
- Global duplicate suppression (novelty cache)
- Selection strategies (truncation, direct)
- Generational replacement with single-individual elitism
- Best-ever tracking
- Population statistics

Every phenotype admitted during a run is remembered, and no later candidate
with the same phenotype is admitted again, even after the original has
left the population.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any

import numpy as np
from loguru import logger

from ..config import EvolutionConfig
from ..exceptions import GenerationExhaustedError
from .encoding import Individual, random_genome
from .grammar import Grammar
from .mapper import DerivationMapper
from .operators import CrossoverOperator, MutationOperator, SelectionStrategy


# =============================================================================
# Population Statistics
# =============================================================================


@dataclass
class PopulationStatistics:
    """Statistics about the current population."""

    generation: int
    population_size: int
    evaluated: int

    # Fitness statistics
    avg_fitness: float
    max_fitness: float
    min_fitness: float
    std_fitness: float
    best_ever_fitness: float | None

    # Diversity & size metrics
    unique_phenotypes: int
    avg_used_codons: float
    avg_phenotype_length: float
    novelty_cache_size: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "generation": self.generation,
            "population_size": self.population_size,
            "evaluated": self.evaluated,
            "avg_fitness": self.avg_fitness,
            "max_fitness": self.max_fitness,
            "min_fitness": self.min_fitness,
            "std_fitness": self.std_fitness,
            "best_ever_fitness": self.best_ever_fitness,
            "unique_phenotypes": self.unique_phenotypes,
            "avg_used_codons": self.avg_used_codons,
            "avg_phenotype_length": self.avg_phenotype_length,
            "novelty_cache_size": self.novelty_cache_size,
        }


# =============================================================================
# Population Manager
# =============================================================================


class PopulationManager:
    """
    Owns the live population of one engine.

    Responsibilities:
    - Build populations of mapped, novel individuals
    - Select breeding pools
    - Breed the next population through crossover and mutation
    - Track the best individual seen so far
    - Collect population statistics
    """

    def __init__(
        self,
        grammar: Grammar,
        config: EvolutionConfig,
        rng: random.Random,
        maximize: bool = True,
    ):
        """
        Initialize population manager.

        Args:
            grammar: Grammar genomes are mapped through
            config: Evolution configuration
            rng: Random source owned by the engine
            maximize: Optimisation direction for best-ever tracking and ranking
        """
        self.grammar = grammar
        self.config = config
        self.rng = rng
        self.maximize = maximize

        self.mapper = DerivationMapper(grammar, config.max_depth)
        self.mutation_operator = MutationOperator(grammar.codon_modulus, rng)
        self.crossover_operator = CrossoverOperator(rng)

        # Population storage
        self.individuals: list[Individual] = []
        self.novelty_cache: set[str] = set()
        self.best_ever: Individual | None = None
        self.generation = 0

        logger.debug(
            "Initialized PopulationManager",
            population_size=config.population_size,
            genome_length=config.genome_length,
            codon_modulus=grammar.codon_modulus,
        )

    def __len__(self) -> int:
        return len(self.individuals)

    @property
    def phenotypes(self) -> list[str]:
        return [ind.phenotype for ind in self.individuals]

    # ------------------------------------------------------------------
    # Building populations
    # ------------------------------------------------------------------

    def random_genome(self) -> list[int]:
        """Fresh genome with codons uniform in [0, codon_modulus)."""
        return random_genome(self.config.genome_length, self.grammar.codon_modulus, self.rng)

    def try_admit(self, genome: list[int], population: list[Individual], generation: int) -> bool:
        """
        Map a genome and append it to `population` if its phenotype is new.

        Args:
            genome: Candidate genome
            population: Population under construction
            generation: Birth generation for the individual

        Returns:
            True if admitted, False if mapping failed or the phenotype was seen before
        """
        individual = self.mapper.map(genome, generation=generation)
        if individual is None:
            return False

        if individual.phenotype in self.novelty_cache:
            return False

        self.novelty_cache.add(individual.phenotype)
        population.append(individual)
        return True

    def fill_randomly(self, population: list[Individual], generation: int) -> None:
        """
        Top up `population` with random individuals.

        Raises:
            GenerationExhaustedError: If `max_fill_attempts` candidates in a
                row are rejected for one slot
        """
        target = self.config.population_size
        attempts = 0

        while len(population) < target:
            if self.try_admit(self.random_genome(), population, generation):
                attempts = 0
                continue

            attempts += 1
            if attempts >= self.config.max_fill_attempts:
                logger.error(
                    "Population fill exhausted",
                    filled=len(population),
                    target=target,
                    attempts=attempts,
                )
                raise GenerationExhaustedError(len(population), target, attempts)

    def initialize(self) -> list[Individual]:
        """
        Build the first population and seed best-ever with its first member.

        Returns:
            The new population
        """
        self.individuals = []
        self.generation = 0
        self.fill_randomly(self.individuals, generation=0)
        self.best_ever = self.individuals[0]

        logger.info(
            "Population initialized",
            size=len(self.individuals),
            cache_size=len(self.novelty_cache),
        )

        return self.individuals

    # ------------------------------------------------------------------
    # Fitness
    # ------------------------------------------------------------------

    def assign_fitness(self, fitness_values: list[float]) -> None:
        """Assign fitness in population order, then update best-ever."""
        for individual, fitness in zip(self.individuals, fitness_values):
            individual.fitness = fitness

        self.update_best_ever()

    def is_better_or_equal(self, candidate: float, incumbent: float) -> bool:
        if self.maximize:
            return candidate >= incumbent
        return candidate <= incumbent

    def update_best_ever(self) -> Individual | None:
        """
        Scan the population in order; any individual at least as good as
        best-ever replaces it, so ties go to the later individual.
        """
        for individual in self.individuals:
            if individual.fitness is None:
                continue
            if (
                self.best_ever is None
                or self.best_ever.fitness is None
                or self.is_better_or_equal(individual.fitness, self.best_ever.fitness)
            ):
                self.best_ever = individual

        return self.best_ever

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _rank_key(self, individual: Individual) -> float:
        fitness = individual.fitness if individual.fitness is not None else 0.0
        return fitness if self.maximize else -fitness

    def truncation_selection(self) -> tuple[list[Individual], Individual]:
        """
        Rank the population best-last and cut the pool from it.

        The lowest `floor(size * truncation_fraction)` individuals are
        dropped, and the best-ranked one is held back as the elitism source.

        Returns:
            (breeding pool, elitism source)
        """
        ranked = sorted(self.individuals, key=self._rank_key)
        start = math.floor(len(ranked) * self.config.truncation_fraction)
        return ranked[start:len(ranked) - 1], ranked[-1]

    def direct_selection(self) -> tuple[list[Individual], Individual]:
        """
        Pool everything with positive fitness, or the whole population if
        nothing qualifies. The population is left unsorted, so its last
        member is the elitism source whatever its fitness.

        Returns:
            (breeding pool, elitism source)
        """
        pool = [ind for ind in self.individuals if ind.fitness is not None and ind.fitness > 0]
        if not pool:
            pool = list(self.individuals)
        return pool, self.individuals[-1]

    def select(self, strategy: SelectionStrategy) -> tuple[list[Individual], Individual]:
        match strategy:
            case SelectionStrategy.TRUNCATION:
                return self.truncation_selection()

            case SelectionStrategy.DIRECT:
                return self.direct_selection()

            case _:
                raise ValueError(f"Unknown selection strategy: {strategy}")

    # ------------------------------------------------------------------
    # Replacement
    # ------------------------------------------------------------------

    def next_generation(self, strategy: SelectionStrategy) -> list[Individual]:
        """
        Replace the population with the next generation.

        Args:
            strategy: Parent selection strategy

        Returns:
            The new population
        """
        pool, elite = self.select(strategy)
        self.individuals = self.breed(pool, elite)
        self.generation += 1
        return self.individuals

    def _sample_parents(self, pool: list[Individual]) -> tuple[Individual, Individual]:
        if len(pool) >= 2:
            parent_a, parent_b = self.rng.sample(pool, 2)
            return parent_a, parent_b
        return pool[0], pool[0]

    def breed(self, pool: list[Individual], elite: Individual) -> list[Individual]:
        """
        Build a new population: a copy of `elite`, then offspring of `pool`.

        Every child is one try whether or not it is admitted. Once tries
        exceed twice the population size (or the pool is empty) the rest of
        the population is filled with random individuals.

        Args:
            pool: Breeding pool
            elite: Individual carried over unchanged

        Returns:
            New population
        """
        target = self.config.population_size
        generation = self.generation + 1
        new_population = [elite.model_copy(deep=True)]

        tries = 0
        mutations = 0

        while len(new_population) < target:
            if tries > target * 2 or not pool:
                logger.debug(
                    "Breeding stalled, filling with random individuals",
                    tries=tries,
                    filled=len(new_population),
                    pool_size=len(pool),
                )
                self.fill_randomly(new_population, generation)
                break

            parent_a, parent_b = self._sample_parents(pool)
            child_a, child_b = self.crossover_operator.crossover(
                parent_a.genome, parent_a.used_codons,
                parent_b.genome, parent_b.used_codons,
            )

            # First child
            if self.rng.random() < self.config.mutation_rate:
                child_a = self.mutation_operator.mutate(child_a, parent_a.used_codons)
                mutations += 1
            self.try_admit(child_a, new_population, generation)
            tries += 1

            # Second child
            if len(new_population) == target:
                break
            if self.rng.random() < self.config.mutation_rate:
                child_b = self.mutation_operator.mutate(child_b, parent_b.used_codons)
                mutations += 1
            self.try_admit(child_b, new_population, generation)
            tries += 1

        logger.debug(
            "Population replaced",
            generation=generation,
            pool_size=len(pool),
            tries=tries,
            mutations=mutations,
        )

        return new_population

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def compute_statistics(self, generation: int | None = None) -> PopulationStatistics:
        """
        Compute population statistics.

        Args:
            generation: Generation number (current one if None)

        Returns:
            Population statistics
        """
        if generation is None:
            generation = self.generation

        scored = [ind.fitness for ind in self.individuals if ind.fitness is not None]
        fitness_values = np.asarray(scored or [0.0], dtype=float)

        used_codons = np.asarray([ind.used_codons for ind in self.individuals] or [0], dtype=float)
        lengths = np.asarray([len(ind.phenotype or "") for ind in self.individuals] or [0], dtype=float)

        best_ever_fitness = self.best_ever.fitness if self.best_ever is not None else None

        return PopulationStatistics(
            generation=generation,
            population_size=len(self.individuals),
            evaluated=len(scored),
            avg_fitness=float(np.mean(fitness_values)),
            max_fitness=float(np.max(fitness_values)),
            min_fitness=float(np.min(fitness_values)),
            std_fitness=float(np.std(fitness_values)),
            best_ever_fitness=best_ever_fitness,
            unique_phenotypes=len(set(self.phenotypes)),
            avg_used_codons=float(np.mean(used_codons)),
            avg_phenotype_length=float(np.mean(lengths)),
            novelty_cache_size=len(self.novelty_cache),
        )


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "PopulationStatistics",
    "PopulationManager",
]
