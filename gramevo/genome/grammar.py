"""
Grammar Model

Immutable context-free grammar used to map genomes to phenotypes.

A grammar description is a mapping from nonterminal to an ordered list of
productions, each production an ordered list of symbols:

    {
        "<e>": [["(", "<e>", "<op>", "<e>", ")"], ["<var>"]],
        "<op>": [["+"], ["*"]],
        "<var>": [["x"], ["y"]]
    }

Nonterminals are written between angle brackets; every other symbol is a
terminal and is copied into the phenotype verbatim. The first nonterminal
found when the description is read left to right is the start symbol.

The codon modulus is the LCM of the production counts, so for every rule
each production is equally likely under `codon % len(productions)`.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from loguru import logger

from ..exceptions import InvalidGrammarError


NONTERMINAL_PATTERN = re.compile(r"<[^<>\"']*>")

Production = tuple[str, ...]


def is_nonterminal(symbol: str) -> bool:
    """True if the symbol is written between angle brackets."""
    return len(symbol) >= 2 and symbol.startswith("<") and symbol.endswith(">")


def _find_start_symbol(text: str) -> str | None:
    match = NONTERMINAL_PATTERN.search(text)
    return match.group(0) if match else None


@dataclass(frozen=True)
class Grammar:
    """
    Validated, immutable grammar.

    Build instances with `from_dict`, `from_json`, `from_yaml` or
    `from_file`; they validate the description and derive the remaining
    fields.

    Attributes:
        rules: Nonterminal -> tuple of productions
        start_symbol: Symbol the derivation starts from
        nonterminals: Declared nonterminals
        terminals: Every non-delimited symbol used in a production
        recursive_nonterminals: Nonterminals with a production that
            contains the nonterminal itself (direct recursion only)
        codon_modulus: LCM of all production counts
    """

    rules: Mapping[str, tuple[Production, ...]]
    start_symbol: str
    nonterminals: frozenset[str]
    terminals: frozenset[str]
    recursive_nonterminals: frozenset[str]
    codon_modulus: int

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(
        cls,
        description: Any,
        start_symbol: str | None = None,
    ) -> Grammar:
        """
        Build a grammar from a mapping of lists of lists.

        Args:
            description: Nonterminal -> list of productions
            start_symbol: Explicit start symbol (first key if None)

        Returns:
            Validated Grammar

        Raises:
            InvalidGrammarError: If the description is malformed
        """
        if not isinstance(description, Mapping):
            raise InvalidGrammarError(
                "Grammar description must be a mapping",
                details={"type": type(description).__name__},
            )
        if not description:
            raise InvalidGrammarError("Grammar description has no rules")

        rules: dict[str, tuple[Production, ...]] = {}
        for lhs, rhs in description.items():
            if not isinstance(lhs, str) or not is_nonterminal(lhs):
                raise InvalidGrammarError(
                    "Rule name must be a nonterminal like <name>",
                    details={"rule": lhs},
                )
            if not isinstance(rhs, (list, tuple)):
                raise InvalidGrammarError(
                    "Productions must be a list",
                    details={"rule": lhs, "type": type(rhs).__name__},
                )
            if len(rhs) == 0:
                raise InvalidGrammarError("Rule has no productions", details={"rule": lhs})

            productions = []
            for production in rhs:
                if not isinstance(production, (list, tuple)):
                    raise InvalidGrammarError(
                        "Production must be a list of symbols",
                        details={"rule": lhs, "production": production},
                    )
                for symbol in production:
                    if not isinstance(symbol, str):
                        raise InvalidGrammarError(
                            "Symbol must be a string",
                            details={"rule": lhs, "symbol": symbol},
                        )
                productions.append(tuple(production))
            rules[lhs] = tuple(productions)

        nonterminals = frozenset(rules)
        terminals = set()
        recursive = set()
        for lhs, productions in rules.items():
            for production in productions:
                for symbol in production:
                    if not is_nonterminal(symbol):
                        terminals.add(symbol)
                    elif symbol not in nonterminals:
                        raise InvalidGrammarError(
                            "Production references an undeclared nonterminal",
                            details={"rule": lhs, "symbol": symbol},
                        )
                if lhs in production:
                    recursive.add(lhs)

        if start_symbol is None:
            start_symbol = next(iter(rules))
        elif start_symbol not in nonterminals:
            raise InvalidGrammarError(
                "Start symbol is not a declared nonterminal",
                details={"start_symbol": start_symbol},
            )

        grammar = cls(
            rules=MappingProxyType(rules),
            start_symbol=start_symbol,
            nonterminals=nonterminals,
            terminals=frozenset(terminals),
            recursive_nonterminals=frozenset(recursive),
            codon_modulus=math.lcm(*(len(p) for p in rules.values())),
        )

        logger.debug(
            "Grammar loaded",
            start_symbol=grammar.start_symbol,
            nonterminals=len(grammar.nonterminals),
            codon_modulus=grammar.codon_modulus,
        )

        return grammar

    @classmethod
    def from_json(cls, text: str) -> Grammar:
        """Parse a JSON grammar; the first <...> token in the text is the start symbol."""
        try:
            description = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidGrammarError("Grammar is not valid JSON", details={"error": str(e)}) from e
        return cls.from_dict(description, start_symbol=_find_start_symbol(text))

    @classmethod
    def from_yaml(cls, text: str) -> Grammar:
        """Parse a YAML grammar; the first <...> token in the text is the start symbol."""
        try:
            description = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise InvalidGrammarError("Grammar is not valid YAML", details={"error": str(e)}) from e
        return cls.from_dict(description, start_symbol=_find_start_symbol(text))

    @classmethod
    def from_file(cls, path: str | Path) -> Grammar:
        """
        Load a grammar file (.json, .yaml or .yml).

        Args:
            path: Grammar file path

        Returns:
            Validated Grammar
        """
        path = Path(path)
        text = path.read_text()

        match path.suffix.lower():
            case ".json":
                grammar = cls.from_json(text)
            case ".yaml" | ".yml":
                grammar = cls.from_yaml(text)
            case _:
                raise InvalidGrammarError(
                    "Unsupported grammar file format",
                    details={"path": str(path)},
                )

        logger.info(f"Loaded grammar from {path}")
        return grammar

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_nonterminal(self, symbol: str) -> bool:
        return symbol in self.nonterminals

    def is_terminal(self, symbol: str) -> bool:
        return symbol not in self.nonterminals

    def productions(self, symbol: str) -> tuple[Production, ...]:
        """Productions of a nonterminal, in declaration order."""
        return self.rules[symbol]

    def to_dict(self) -> dict[str, list[list[str]]]:
        """Convert back to a plain description."""
        return {lhs: [list(p) for p in productions] for lhs, productions in self.rules.items()}

    def summary(self) -> dict[str, Any]:
        """Human-readable facts about the grammar."""
        return {
            "start_symbol": self.start_symbol,
            "nonterminals": sorted(self.nonterminals),
            "terminals": sorted(self.terminals),
            "recursive_nonterminals": sorted(self.recursive_nonterminals),
            "production_counts": {lhs: len(p) for lhs, p in self.rules.items()},
            "codon_modulus": self.codon_modulus,
        }


__all__ = [
    "Grammar",
    "Production",
    "is_nonterminal",
]
