"""Tests for mathedit.latex -- the structured parse boundary."""

from __future__ import annotations

import pytest

from mathedit.definitions import CommandRegistry
from mathedit.latex import get_value, insert_latex, parse_latex, serialize, tokenize
from mathedit.tree import Document, Style


def _round_trip(latex: str, registry: CommandRegistry | None = None) -> str:
    doc = Document()
    return serialize(doc, parse_latex(doc, latex, registry=registry))


class TestTokenize:
    def test_control_words_and_characters(self) -> None:
        assert tokenize("\\frac{a}{b}") == ["\\frac", "{", "a", "}", "{", "b", "}"]

    def test_whitespace_is_dropped(self) -> None:
        assert tokenize("\\alpha  x") == ["\\alpha", "x"]

    def test_control_symbols_and_starred_words(self) -> None:
        assert tokenize("\\,\\{\\operatorname*") == ["\\,", "\\{", "\\operatorname*"]


class TestParse:
    """Node kinds produced for each construct."""

    def test_character_kinds(self) -> None:
        doc = Document()
        nodes = parse_latex(doc, "x+1=(y),z")
        assert [n.kind for n in nodes] == [
            "mord", "mbin", "mord", "mrel", "mopen", "mord", "mclose", "mpunct", "mord",
        ]

    def test_known_command(self) -> None:
        doc = Document()
        (node,) = parse_latex(doc, "\\alpha")
        assert node.kind == "mord"
        assert node.value == "α"
        assert node.command == "\\alpha"

    def test_unknown_command_is_kept_as_error(self) -> None:
        doc = Document()
        (node,) = parse_latex(doc, "\\zzz")
        assert node.kind == "error"
        assert serialize(doc, [node]) == "\\zzz"

    def test_missing_arguments_become_placeholders(self) -> None:
        doc = Document()
        (frac,) = parse_latex(doc, "\\frac")
        args = doc.children_of(frac)
        assert [a.kind for a in args] == ["group", "group"]
        assert all(len(a.children) == 1 for a in args)  # only the sentinel

    def test_unbraced_argument(self) -> None:
        doc = Document()
        (sqrt,) = parse_latex(doc, "\\sqrt2")
        (arg,) = doc.children_of(sqrt)
        assert [n.value for n in doc.children_of(arg)[1:]] == ["2"]

    def test_unbalanced_brace_is_kept(self) -> None:
        assert _round_trip("a}") == "a}"

    def test_style_is_copied_to_every_node(self) -> None:
        doc = Document()
        style = Style(color="red")
        nodes = parse_latex(doc, "ab", style=style)
        assert all(n.style == style and n.style is not style for n in nodes)

    def test_macro_expansion(self) -> None:
        registry = CommandRegistry.default({"\\RR": "\\mathbb{R}"})
        doc = Document()
        (node,) = parse_latex(doc, "\\RR", registry=registry)
        assert node.kind == "macro"
        assert node.children
        assert serialize(doc, [node]) == "\\RR"

    def test_recursive_macro_terminates(self) -> None:
        registry = CommandRegistry.default({"\\loop": "\\loop x"})
        assert _round_trip("\\loop", registry) == "\\loop"


class TestSerialize:
    """Parse then serialize gives the canonical form."""

    @pytest.mark.parametrize(
        "latex",
        [
            "\\frac{x}{y}+\\sqrt{2}",
            "x^{2}_{i}",
            "\\sin x",
            "\\alpha\\beta",
            "\\{a,b\\}",
        ],
    )
    def test_canonical_input_round_trips(self, latex: str) -> None:
        assert _round_trip(latex) == latex

    def test_superscript_is_braced(self) -> None:
        assert _round_trip("x^2") == "x^{2}"

    def test_space_after_control_word(self) -> None:
        assert _round_trip("\\alpha  x") == "\\alpha x"


class TestInsertLatex:
    """Splicing parsed content at the cursor."""

    def test_insert_after_cursor(self) -> None:
        doc = Document()
        insert_latex(doc, "ac", selection_mode="after")
        doc.position = 1
        insert_latex(doc, "b", selection_mode="after")
        assert get_value(doc) == "abc"
        assert doc.position == 2

    def test_placeholder_selection(self) -> None:
        doc = Document()
        (frac,) = insert_latex(doc, "\\frac")
        numerator = doc.children_of(frac)[0]
        assert doc.at(doc.position) is doc.children_of(numerator)[0]

    def test_item_selection(self) -> None:
        doc = Document()
        insert_latex(doc, "xy", selection_mode="item")
        assert (doc.anchor, doc.position) == (0, 2)

    def test_empty_input_inserts_nothing(self) -> None:
        doc = Document()
        assert insert_latex(doc, "  ") == []
        assert doc.last_offset == 0
