"""
Unit tests for the grammar model.

Tests cover:
- Derived fields (codon modulus, recursion, terminals, start symbol)
- Validation of malformed descriptions
- JSON / YAML / file loading
- Immutability
"""

import dataclasses
import json

import pytest

from gramevo.exceptions import InvalidGrammarError
from gramevo.genome.grammar import Grammar, is_nonterminal


# ============================================================================
# Derived Fields
# ============================================================================

class TestGrammarStructure:
    """Test fields derived from a description."""

    def test_codon_modulus_single_rule(self, binary_grammar):
        """Test modulus of a single three-production rule."""
        assert binary_grammar.codon_modulus == 3

    def test_codon_modulus_is_lcm(self, expression_grammar):
        """Test modulus is the LCM of 2, 3 and 2."""
        assert expression_grammar.codon_modulus == 6

    def test_codon_modulus_divisible_by_every_rule(self, expression_grammar):
        """Test uniform production choice for uniform codons."""
        for productions in expression_grammar.rules.values():
            assert expression_grammar.codon_modulus % len(productions) == 0

    def test_start_symbol_is_first_key(self, expression_grammar):
        assert expression_grammar.start_symbol == "<e>"

    def test_explicit_start_symbol(self):
        grammar = Grammar.from_dict({"<a>": [["x"]], "<b>": [["<a>"]]}, start_symbol="<b>")
        assert grammar.start_symbol == "<b>"

    def test_unknown_start_symbol_rejected(self):
        with pytest.raises(InvalidGrammarError):
            Grammar.from_dict({"<a>": [["x"]]}, start_symbol="<z>")

    def test_terminals_and_nonterminals(self, expression_grammar):
        """Test symbols are partitioned by the angle-bracket convention."""
        assert expression_grammar.nonterminals == {"<e>", "<op>", "<v>"}
        assert expression_grammar.terminals == {"(", ")", "+", "-", "*", "x", "1.0"}
        assert expression_grammar.is_terminal("x")
        assert expression_grammar.is_nonterminal("<op>")

    def test_direct_recursion_detected(self, binary_grammar, expression_grammar):
        assert binary_grammar.recursive_nonterminals == {"<e>"}
        assert expression_grammar.recursive_nonterminals == {"<e>"}

    def test_indirect_recursion_not_detected(self):
        """Test only direct self-reference counts as recursion."""
        grammar = Grammar.from_dict({
            "<a>": [["<b>"]],
            "<b>": [["<a>"], ["x"]],
        })
        assert grammar.recursive_nonterminals == frozenset()

    def test_productions_are_tuples(self, binary_grammar):
        assert binary_grammar.productions("<e>") == (("0",), ("1",), ("<e>", "<e>"))

    def test_to_dict_round_trip(self, expression_grammar):
        rebuilt = Grammar.from_dict(expression_grammar.to_dict())
        assert rebuilt.rules == expression_grammar.rules
        assert rebuilt.codon_modulus == expression_grammar.codon_modulus

    def test_summary(self, binary_grammar):
        summary = binary_grammar.summary()
        assert summary["start_symbol"] == "<e>"
        assert summary["codon_modulus"] == 3
        assert summary["production_counts"] == {"<e>": 3}
        assert summary["recursive_nonterminals"] == ["<e>"]

    def test_is_nonterminal_convention(self):
        assert is_nonterminal("<e>")
        assert not is_nonterminal("e")
        assert not is_nonterminal("<")
        assert not is_nonterminal("<=")


# ============================================================================
# Validation
# ============================================================================

class TestGrammarValidation:
    """Test malformed descriptions are rejected."""

    @pytest.mark.parametrize(
        "description",
        [
            {},
            [["x"]],
            "not a grammar",
            {"e": [["x"]]},
            {"<e>": []},
            {"<e>": "x"},
            {"<e>": ["x"]},
            {"<e>": [["x", 1]]},
            {"<e>": [["<missing>"]]},
        ],
        ids=[
            "empty",
            "not-a-mapping",
            "string",
            "undelimited-rule",
            "no-productions",
            "productions-not-list",
            "production-not-list",
            "non-string-symbol",
            "undeclared-nonterminal",
        ],
    )
    def test_invalid_descriptions(self, description):
        with pytest.raises(InvalidGrammarError):
            Grammar.from_dict(description)

    def test_error_carries_details(self):
        with pytest.raises(InvalidGrammarError) as exc_info:
            Grammar.from_dict({"<e>": [["<missing>"]]})

        assert exc_info.value.details["symbol"] == "<missing>"
        assert "<missing>" in str(exc_info.value)


# ============================================================================
# Loading
# ============================================================================

class TestGrammarLoading:
    """Test text and file constructors."""

    def test_from_json(self):
        grammar = Grammar.from_json('{"<s>": [["<v>", "<v>"]], "<v>": [["a"], ["b"]]}')
        assert grammar.start_symbol == "<s>"
        assert grammar.codon_modulus == 2

    def test_from_yaml(self):
        text = (
            "<s>:\n"
            "  - ['<v>', '!']\n"
            "<v>:\n"
            "  - [a]\n"
            "  - [b]\n"
            "  - [c]\n"
        )
        grammar = Grammar.from_yaml(text)
        assert grammar.start_symbol == "<s>"
        assert grammar.codon_modulus == 3
        assert "!" in grammar.terminals

    def test_invalid_json(self):
        with pytest.raises(InvalidGrammarError):
            Grammar.from_json("{not json")

    def test_invalid_yaml(self):
        with pytest.raises(InvalidGrammarError):
            Grammar.from_yaml("<s>: [unclosed")

    def test_from_file_json(self, grammar_file):
        grammar = Grammar.from_file(grammar_file)
        assert grammar.codon_modulus == 3

    def test_from_file_yaml(self, tmp_path, expression_grammar):
        import yaml

        path = tmp_path / "expr.yml"
        path.write_text(yaml.safe_dump(expression_grammar.to_dict(), sort_keys=False))

        grammar = Grammar.from_file(path)
        assert grammar.codon_modulus == 6
        assert grammar.start_symbol == "<e>"

    def test_from_file_unsupported_suffix(self, tmp_path, binary_description):
        path = tmp_path / "grammar.txt"
        path.write_text(json.dumps(binary_description))

        with pytest.raises(InvalidGrammarError):
            Grammar.from_file(path)


# ============================================================================
# Immutability
# ============================================================================

class TestGrammarImmutability:
    """Test grammars cannot be changed after construction."""

    def test_fields_frozen(self, binary_grammar):
        with pytest.raises(dataclasses.FrozenInstanceError):
            binary_grammar.codon_modulus = 7

    def test_rules_read_only(self, binary_grammar):
        with pytest.raises(TypeError):
            binary_grammar.rules["<e>"] = (("x",),)

    def test_source_description_not_shared(self, binary_description):
        grammar = Grammar.from_dict(binary_description)
        binary_description["<e>"].append(["2"])

        assert len(grammar.productions("<e>")) == 3
