"""
Genome Encoding Module

Genetic representation used by the engine: a genome is a fixed-length list
of integer codons, and an Individual pairs a genome with the phenotype it
derives to, the number of codons that derivation read, and its fitness.
"""

from __future__ import annotations

import random
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Individual(BaseModel):
    """
    One member of a population.

    Codons past `used_codons` are introns: the mapper never read them for
    this phenotype, but crossover still carries them to offspring.
    """
    model_config = ConfigDict(validate_assignment=True)

    genome: list[int]
    phenotype: str | None = None
    used_codons: int = Field(default=0, ge=0)
    fitness: float | None = None

    # Generation the individual was created in
    generation: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_used_codons(self) -> Individual:
        if self.used_codons > len(self.genome):
            raise ValueError(
                f"used_codons ({self.used_codons}) exceeds genome length ({len(self.genome)})"
            )
        return self

    @property
    def used_region(self) -> list[int]:
        """Codons actually consumed by the derivation."""
        return self.genome[:self.used_codons]

    @property
    def introns(self) -> list[int]:
        return self.genome[self.used_codons:]

    @property
    def is_evaluated(self) -> bool:
        return self.fitness is not None

    def describe(self) -> dict[str, Any]:
        """Summary for display: used region, codon count, fitness, phenotype."""
        return {
            "genome": self.used_region,
            "codons": self.used_codons,
            "fitness": self.fitness,
            "phenotype": self.phenotype,
            "generation": self.generation,
        }


def random_genome(length: int, codon_modulus: int, rng: random.Random) -> list[int]:
    """
    Draw a genome uniformly from [0, codon_modulus) at every locus.

    Args:
        length: Number of codons
        codon_modulus: Exclusive upper bound on codon values
        rng: Random source (consumed in locus order)

    Returns:
        New genome
    """
    return [rng.randrange(codon_modulus) for _ in range(length)]


__all__ = [
    "Individual",
    "random_genome",
]
