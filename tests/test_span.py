"""Tests for mathedit.span -- locating the command token at the cursor."""

from __future__ import annotations

from mathedit.span import (
    command_span,
    find_command_token,
    get_latex_group,
    get_latex_group_body,
    is_well_formed_command,
)
from mathedit.tree import Document, Node, NodeState


def _region(text: str, ghost: str = "") -> tuple[Document, Node]:
    """A document holding one raw region; the cursor is after ``text``."""
    doc = Document()
    group = doc.create("latexgroup", mode="latex")
    doc.append_children(doc.root, [group])
    typed = [doc.create("latex", char, mode="latex") for char in text]
    ghosts = [
        doc.create("latex", char, mode="latex", state=NodeState.GHOST) for char in ghost
    ]
    doc.append_children(group, typed + ghosts)
    doc.position = doc.offset_of(doc.children_of(group)[len(text)])
    return doc, group


class TestExplicitCommands:
    """Marker followed by command characters."""

    def test_explicit_token(self) -> None:
        doc, _ = _region("\\fo")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\fo"
        assert token.explicit is True
        assert len(token.nodes) == 3

    def test_lone_marker_is_a_token(self) -> None:
        doc, _ = _region("\\")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\"

    def test_cursor_inside_command_covers_whole_run(self) -> None:
        doc, group = _region("\\alpha")
        doc.position = doc.offset_of(doc.children_of(group)[3])  # after "\al"
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\alpha"

    def test_star_is_a_command_character(self) -> None:
        doc, _ = _region("\\al*")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\al*"

    def test_token_stops_at_non_command_character(self) -> None:
        doc, _ = _region("x+\\si")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\si"


class TestBareWords:
    """Letters without a marker are looked up as if they had one."""

    def test_bare_word_gets_synthetic_marker(self) -> None:
        doc, _ = _region("fo")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\fo"
        assert token.explicit is False
        assert [n.value for n in token.nodes] == ["f", "o"]

    def test_single_letter_is_not_a_token(self) -> None:
        doc, _ = _region("f")
        assert find_command_token(doc) is None

    def test_bare_run_stops_at_digit(self) -> None:
        doc, _ = _region("ab1cd")
        token = find_command_token(doc)
        assert token is not None
        assert token.text == "\\cd"

    def test_star_breaks_bare_words(self) -> None:
        doc, _ = _region("al*")
        assert find_command_token(doc) is None

    def test_bare_words_can_be_disabled(self) -> None:
        doc, _ = _region("fo")
        assert find_command_token(doc, bare_words=False) is None

    def test_minimum_length_is_tunable(self) -> None:
        doc, _ = _region("fo")
        assert find_command_token(doc, min_bare_length=3) is None
        doc, _ = _region("f")
        assert find_command_token(doc, min_bare_length=1) is not None


class TestCommandSpan:
    """Offset range of the explicit command, ghost suffix included."""

    def test_span_covers_marker_through_ghosts(self) -> None:
        doc, group = _region("\\alph", ghost="a")
        children = doc.children_of(group)
        span = command_span(doc)
        assert span == (doc.offset_of(children[1]) - 1, doc.offset_of(children[-1]))
        assert "".join(n.value for n in doc.get_nodes(*span)) == "\\alpha"

    def test_no_span_outside_a_command(self) -> None:
        doc, _ = _region("xy")
        assert command_span(doc) is None

    def test_no_span_at_region_start(self) -> None:
        doc, group = _region("\\al")
        assert command_span(doc, doc.offset_of(doc.children_of(group)[0])) is None


class TestRegionHelpers:
    def test_region_lookup(self) -> None:
        doc, group = _region("ab", ghost="c")
        assert get_latex_group(doc) is group
        assert [n.value for n in get_latex_group_body(doc)] == ["a", "b", "c"]

    def test_no_region(self) -> None:
        doc = Document()
        assert get_latex_group(doc) is None
        assert get_latex_group_body(doc) == []

    def test_well_formed_command(self) -> None:
        assert is_well_formed_command("\\zzz")
        assert not is_well_formed_command("\\")
        assert not is_well_formed_command("zzz")
        assert not is_well_formed_command("\\a1")
