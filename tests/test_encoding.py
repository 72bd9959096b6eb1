"""
Unit tests for the Individual record.
"""

import pytest
from pydantic import ValidationError

from gramevo.genome.encoding import Individual


class TestIndividual:
    """Test Individual validation and helpers."""

    def test_defaults(self):
        individual = Individual(genome=[1, 2, 3])

        assert individual.phenotype is None
        assert individual.fitness is None
        assert individual.used_codons == 0
        assert not individual.is_evaluated

    def test_used_region_and_introns(self):
        individual = Individual(genome=[4, 5, 6, 7], phenotype="x", used_codons=2)

        assert individual.used_region == [4, 5]
        assert individual.introns == [6, 7]

    def test_used_codons_cannot_exceed_genome(self):
        with pytest.raises(ValidationError):
            Individual(genome=[1, 2], used_codons=3)

    def test_fitness_assignment_validated(self):
        individual = Individual(genome=[0], phenotype="0", used_codons=1)

        individual.fitness = 2
        assert individual.fitness == 2.0
        assert individual.is_evaluated

        with pytest.raises(ValidationError):
            individual.fitness = "high"

    def test_describe(self):
        individual = Individual(genome=[2, 0, 1, 9], phenotype="01", used_codons=3, fitness=1.5)

        assert individual.describe() == {
            "genome": [2, 0, 1],
            "codons": 3,
            "fitness": 1.5,
            "phenotype": "01",
            "generation": 0,
        }

    def test_copy_is_independent(self):
        individual = Individual(genome=[1, 2], phenotype="a", used_codons=1, fitness=1.0)
        clone = individual.model_copy(deep=True)
        clone.genome.append(3)

        assert individual.genome == [1, 2]
        assert clone.fitness == 1.0
