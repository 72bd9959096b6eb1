"""
Genotype-to-Phenotype Mapping

Leftmost, depth-first derivation driven by a genome. Each nonterminal
expansion reads the next unread codon and picks production
`codon % len(productions)`. The read position (cursor) is passed into and
returned from every recursive call, so codons are consumed globally in
derivation order.

Past `max_depth`, a directly recursive nonterminal is steered away from
productions that contain itself by stepping the codon value until a
non-recursive production comes up. Only the choice is altered; the genome
is left untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from ..exceptions import DepthBoundUnsatisfiableError, MappingFailure
from .encoding import Individual
from .grammar import Grammar, Production


@dataclass(frozen=True)
class Derivation:
    """Result of a complete derivation."""

    phenotype: str
    used_codons: int


class DerivationMapper:
    """Maps genomes to phenotypes through a grammar."""

    def __init__(self, grammar: Grammar, max_depth: int):
        """
        Initialize mapper.

        Args:
            grammar: Grammar to derive with
            max_depth: Depth from which direct recursion is suppressed
        """
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")

        self.grammar = grammar
        self.max_depth = max_depth

    def derive(self, genome: Sequence[int]) -> Derivation:
        """
        Derive the phenotype of a genome.

        Args:
            genome: Codon sequence

        Returns:
            Phenotype text and number of codons read

        Raises:
            MappingFailure: If the genome runs out before the derivation ends
            DepthBoundUnsatisfiableError: If the depth bound cannot be honoured
        """
        phenotype, cursor = self._expand(self.grammar.start_symbol, genome, 0, 0)
        return Derivation(phenotype=phenotype, used_codons=cursor)

    def map(self, genome: Sequence[int], generation: int = 0) -> Individual | None:
        """
        Build an unevaluated Individual from a genome.

        Returns None when the genome is exhausted mid-derivation; such a
        genome has no phenotype and must be replaced, not scored.
        """
        try:
            derivation = self.derive(genome)
        except MappingFailure as e:
            logger.trace("Mapping failed", symbol=e.symbol)
            return None

        return Individual(
            genome=list(genome),
            phenotype=derivation.phenotype,
            used_codons=derivation.used_codons,
            generation=generation,
        )

    def _expand(
        self,
        symbol: str,
        genome: Sequence[int],
        depth: int,
        cursor: int,
    ) -> tuple[str, int]:
        """Expand one symbol; returns its text and the advanced cursor."""
        if self.grammar.is_terminal(symbol):
            return symbol, cursor

        if cursor >= len(genome):
            raise MappingFailure(symbol, len(genome))

        codon = genome[cursor]
        cursor += 1

        productions = self.grammar.productions(symbol)
        production = productions[codon % len(productions)]

        if (
            depth >= self.max_depth
            and symbol in self.grammar.recursive_nonterminals
            and symbol in production
        ):
            production = self._non_recursive_choice(symbol, codon, depth)

        parts = []
        for sub_symbol in production:
            text, cursor = self._expand(sub_symbol, genome, depth + 1, cursor)
            parts.append(text)

        return "".join(parts), cursor

    def _non_recursive_choice(self, symbol: str, codon: int, depth: int) -> Production:
        """Step the codon until the chosen production does not contain `symbol`."""
        productions = self.grammar.productions(symbol)
        modulus = self.grammar.codon_modulus

        # codon_modulus is a multiple of len(productions), so this visits every production
        for _ in range(modulus):
            codon = (codon + 1) % modulus
            production = productions[codon % len(productions)]
            if symbol not in production:
                return production

        raise DepthBoundUnsatisfiableError(symbol, depth, modulus)


__all__ = [
    "Derivation",
    "DerivationMapper",
]
