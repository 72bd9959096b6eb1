"""
Unit tests for genotype-to-phenotype mapping.

Tests cover:
- Worked derivations and used-codon counts
- Genome exhaustion
- Depth bounding of recursive nonterminals
- Introns do not affect the phenotype
"""

import random

import pytest

from gramevo.exceptions import DepthBoundUnsatisfiableError, MappingFailure
from gramevo.genome.encoding import Individual, random_genome
from gramevo.genome.grammar import Grammar
from gramevo.genome.mapper import Derivation, DerivationMapper


# ============================================================================
# Derivation
# ============================================================================

class TestDerivation:
    """Test leftmost depth-first derivation."""

    @pytest.mark.parametrize(
        "genome, phenotype, used",
        [
            ([0], "0", 1),
            ([1], "1", 1),
            ([2, 0, 1], "01", 3),
            ([2, 2, 1, 0, 1], "101", 5),
            ([4, 5, 6], "1", 1),
        ],
    )
    def test_binary_derivations(self, binary_grammar, genome, phenotype, used):
        mapper = DerivationMapper(binary_grammar, max_depth=10)
        assert mapper.derive(genome) == Derivation(phenotype=phenotype, used_codons=used)

    def test_terminals_consume_no_codons(self, expression_grammar):
        """Test ( <e> <op> <e> ) reads one codon per nonterminal only."""
        mapper = DerivationMapper(expression_grammar, max_depth=10)
        # <e> -> ( <e> <op> <e> ), <e> -> <v> -> x, <op> -> *, <e> -> <v> -> 1.0
        derivation = mapper.derive([0, 1, 0, 2, 1, 1])

        assert derivation.phenotype == "(x*1.0)"
        assert derivation.used_codons == 6

    def test_trailing_codons_are_introns(self, binary_grammar):
        mapper = DerivationMapper(binary_grammar, max_depth=10)
        derivation = mapper.derive([2, 0, 1, 2, 2, 2])

        assert derivation.phenotype == "01"
        assert derivation.used_codons == 3

    def test_used_prefix_reproduces_phenotype(self, expression_grammar):
        """Test re-deriving from the used region plus padding gives the same result."""
        mapper = DerivationMapper(expression_grammar, max_depth=4)
        rng = random.Random(7)

        for _ in range(50):
            genome = random_genome(60, expression_grammar.codon_modulus, rng)
            try:
                derivation = mapper.derive(genome)
            except MappingFailure:
                continue

            assert derivation.used_codons <= len(genome)
            prefix = genome[:derivation.used_codons]
            assert mapper.derive(prefix) == derivation
            assert mapper.derive(prefix + [0] * 5) == derivation


# ============================================================================
# Failure
# ============================================================================

class TestMappingFailure:
    """Test genome exhaustion."""

    def test_exhausted_genome_raises(self, binary_grammar):
        mapper = DerivationMapper(binary_grammar, max_depth=10)

        with pytest.raises(MappingFailure) as exc_info:
            mapper.derive([2])

        assert exc_info.value.symbol == "<e>"
        assert exc_info.value.genome_length == 1

    def test_empty_genome_raises(self, binary_grammar):
        with pytest.raises(MappingFailure):
            DerivationMapper(binary_grammar, max_depth=10).derive([])

    def test_map_returns_none_on_failure(self, binary_grammar):
        assert DerivationMapper(binary_grammar, max_depth=10).map([2, 2]) is None

    def test_map_builds_individual(self, binary_grammar):
        individual = DerivationMapper(binary_grammar, max_depth=10).map([2, 0, 1, 1], generation=3)

        assert isinstance(individual, Individual)
        assert individual.phenotype == "01"
        assert individual.used_codons == 3
        assert individual.fitness is None
        assert individual.generation == 3
        assert individual.introns == [1]

    def test_negative_max_depth_rejected(self, binary_grammar):
        with pytest.raises(ValueError):
            DerivationMapper(binary_grammar, max_depth=-1)


# ============================================================================
# Depth Bound
# ============================================================================

class TestDepthBound:
    """Test recursion suppression past max_depth."""

    def test_recursion_suppressed_at_root(self, binary_grammar):
        """Test codon 2 is stepped to 0 when the bound is already reached."""
        derivation = DerivationMapper(binary_grammar, max_depth=0).derive([2, 0])

        assert derivation.phenotype == "0"
        assert derivation.used_codons == 1

    def test_recursion_suppressed_below_root(self, binary_grammar):
        derivation = DerivationMapper(binary_grammar, max_depth=1).derive([2, 2, 0, 1])

        assert derivation.phenotype == "00"
        assert derivation.used_codons == 3

    def test_genome_not_modified(self, binary_grammar):
        genome = [2, 2, 0, 1]
        DerivationMapper(binary_grammar, max_depth=0).derive(genome)
        assert genome == [2, 2, 0, 1]

    def test_phenotype_length_bounded(self, binary_grammar):
        """Test no derivation exceeds a full binary tree of the bounded depth."""
        mapper = DerivationMapper(binary_grammar, max_depth=3)
        rng = random.Random(11)

        for _ in range(100):
            genome = [2] * 5 + random_genome(40, 3, rng)
            derivation = mapper.derive(genome)
            assert len(derivation.phenotype) <= 2 ** 3

    def test_non_recursive_rules_ignore_bound(self):
        grammar = Grammar.from_dict({"<s>": [["<v>", "<v>"]], "<v>": [["a"], ["b"]]})
        derivation = DerivationMapper(grammar, max_depth=0).derive([0, 1, 0])

        assert derivation.phenotype == "ba"

    def test_unsatisfiable_bound(self):
        """Test a rule whose every production recurses cannot honour the bound."""
        grammar = Grammar.from_dict({"<a>": [["<a>", "x"], ["x", "<a>"]]})

        with pytest.raises(DepthBoundUnsatisfiableError) as exc_info:
            DerivationMapper(grammar, max_depth=0).derive([0, 0, 0])

        assert exc_info.value.symbol == "<a>"
        assert exc_info.value.attempts == grammar.codon_modulus
