"""
Genome Evolution Operators - Mutation & Crossover

Genetic operators work on raw genomes and are restricted to the used-codon
region, where a change can actually alter the phenotype:
- Mutation: redraw a single codon inside the used region
- Crossover: one cut point inside the shorter used region, tails swapped

Both operators draw from the random source they are given, never from the
module-level `random` state, so an engine's run is reproducible from its seed.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from enum import Enum, auto

from loguru import logger


# =============================================================================
# Enums
# =============================================================================


class SelectionStrategy(Enum):
    """Strategies for selecting parents from population."""

    TRUNCATION = auto()          # Fitness-ranked slice (autonomous runs)
    DIRECT = auto()              # Everything with positive fitness (interactive runs)


# =============================================================================
# Mutation Operator
# =============================================================================


class MutationOperator:
    """Point mutation within the used-codon region."""

    def __init__(self, codon_modulus: int, rng: random.Random):
        """
        Initialize mutation operator.

        Args:
            codon_modulus: Exclusive upper bound on codon values
            rng: Random source shared with the owning engine
        """
        if codon_modulus < 1:
            raise ValueError("codon_modulus must be >= 1")

        self.codon_modulus = codon_modulus
        self.rng = rng

    def mutate(self, genome: Sequence[int], used_codons: int) -> list[int]:
        """
        Redraw one codon in [0, used_codons).

        Args:
            genome: Parent genome (not modified)
            used_codons: Size of the used region

        Returns:
            Child genome of the same length
        """
        if not 1 <= used_codons <= len(genome):
            raise ValueError(f"used_codons must be in [1, {len(genome)}], got {used_codons}")

        child = list(genome)
        locus = self.rng.randrange(used_codons)
        child[locus] = self.rng.randrange(self.codon_modulus)

        logger.trace("Genome mutated", locus=locus, value=child[locus])

        return child


# =============================================================================
# Crossover Operator
# =============================================================================


class CrossoverOperator:
    """Single-point crossover within the shorter used region."""

    def __init__(self, rng: random.Random):
        """
        Initialize crossover operator.

        Args:
            rng: Random source shared with the owning engine
        """
        self.rng = rng

    def crossover(
        self,
        genome_a: Sequence[int],
        used_a: int,
        genome_b: Sequence[int],
        used_b: int,
    ) -> tuple[list[int], list[int]]:
        """
        Swap tails at a cut point drawn from [0, min(used_a, used_b)).

        Introns travel with the tails, so children keep the parents' full
        lengths. When either used region is empty the cut is 0 and the
        children are copies of the opposite parents.

        Returns:
            (head of A + tail of B, head of B + tail of A)
        """
        bound = min(used_a, used_b)
        cut = self.rng.randrange(bound) if bound > 0 else 0

        logger.trace("Crossover performed", cut=cut, bound=bound)

        return self.cut_and_splice(genome_a, genome_b, cut)

    @staticmethod
    def cut_and_splice(
        genome_a: Sequence[int],
        genome_b: Sequence[int],
        cut: int,
    ) -> tuple[list[int], list[int]]:
        """Splice two genomes at a fixed cut point."""
        child1 = list(genome_a[:cut]) + list(genome_b[cut:])
        child2 = list(genome_b[:cut]) + list(genome_a[cut:])
        return child1, child2


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "SelectionStrategy",
    "MutationOperator",
    "CrossoverOperator",
]
