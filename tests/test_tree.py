"""Tests for mathedit.tree -- arena nodes, offsets and selection."""

from __future__ import annotations

import pytest

from mathedit.tree import Document, Node, NodeState


def _append(doc: Document, *values: str, parent: Node | None = None) -> list[Node]:
    nodes = [doc.create("mord", value) for value in values]
    doc.append_children(parent or doc.root, nodes)
    return nodes


class TestDocumentStructure:
    """Containers, sentinels and the post-order offset space."""

    def test_empty_document_has_only_the_root_sentinel(self) -> None:
        doc = Document()
        assert [node.kind for node in doc.atoms] == ["first"]
        assert doc.last_offset == 0
        assert doc.position == 0

    def test_containers_get_a_sentinel_with_their_mode(self) -> None:
        doc = Document()
        group = doc.create("latexgroup", mode="latex")
        first = doc.children_of(group)[0]
        assert first.kind == "first"
        assert first.mode == "latex"
        assert doc.parent_of(first) is group

    def test_atoms_are_post_order(self) -> None:
        doc = Document()
        x = _append(doc, "x")[0]
        group = doc.create("group")
        doc.append_children(doc.root, [group])
        y = _append(doc, "y", parent=group)[0]

        atoms = doc.atoms
        assert atoms.index(x) < atoms.index(y) < atoms.index(group)
        assert doc.offset_of(group) == doc.last_offset

    def test_offset_of_detached_node_is_minus_one(self) -> None:
        doc = Document()
        node = doc.create("mord", "x")
        assert doc.offset_of(node) == -1
        assert doc.offset_of(None) == -1

    def test_get_nodes_is_half_open(self) -> None:
        doc = Document()
        a, b, c = _append(doc, "a", "b", "c")
        assert doc.get_nodes(1, 3) == [b, c]
        assert doc.get_nodes(0, 1) == [a]


class TestDocumentMutation:
    """Sibling derivation, splicing and removal."""

    def test_siblings_follow_child_list_order(self) -> None:
        doc = Document()
        a, b = _append(doc, "a", "b")
        assert doc.right_sibling(a) is b
        assert doc.left_sibling(b) is a
        assert doc.right_sibling(b) is None

    def test_add_children_after_keeps_order(self) -> None:
        doc = Document()
        a, d = _append(doc, "a", "d")
        b, c = doc.create("mord", "b"), doc.create("mord", "c")
        doc.add_children_after([b, c], a)
        assert [n.value for n in doc.children_of(doc.root)[1:]] == ["a", "b", "c", "d"]
        assert doc.right_sibling(c) is d

    def test_remove_child_discards_subtree(self) -> None:
        doc = Document()
        group = doc.create("group")
        doc.append_children(doc.root, [group])
        inner = _append(doc, "x", parent=group)[0]

        doc.remove_child(group)
        assert group not in doc
        assert inner not in doc
        assert doc.last_offset == 0

    def test_attaching_twice_is_a_contract_violation(self) -> None:
        doc = Document()
        node = _append(doc, "x")[0]
        with pytest.raises(RuntimeError):
            doc.append_children(doc.root, [node])

    def test_siblings_of_parentless_node_raise(self) -> None:
        doc = Document()
        with pytest.raises(RuntimeError):
            doc.left_sibling(doc.root)

    def test_clear_keeps_root_sentinel(self) -> None:
        doc = Document()
        _append(doc, "a", "b")
        doc.position = 2
        doc.clear()
        assert doc.last_offset == 0
        assert doc.position == 0


class TestNodeState:
    """Ghost and error flags are views over one closed state."""

    def test_flags_are_exclusive(self) -> None:
        node = Document().create("latex", "a", mode="latex")
        node.is_suggestion = True
        assert node.state is NodeState.GHOST
        node.is_error = True
        assert node.is_error
        assert not node.is_suggestion

    def test_clearing_the_other_flag_is_a_no_op(self) -> None:
        node = Document().create("latex", "a", mode="latex")
        node.is_error = True
        node.is_suggestion = False
        assert node.state is NodeState.ERRONEOUS
        node.is_error = False
        assert node.state is NodeState.COMMITTED


class TestCursorAndSelection:
    """Position clamping and sibling selection."""

    def test_position_is_clamped(self) -> None:
        doc = Document()
        _append(doc, "a", "b")
        doc.position = 10
        assert doc.position == 2
        doc.position = -3
        assert doc.position == 0

    def test_setting_position_collapses_selection(self) -> None:
        doc = Document()
        _append(doc, "a", "b")
        doc.set_selection(0, 2)
        assert not doc.selection_is_collapsed
        doc.position = 1
        assert doc.selection_is_collapsed

    def test_selected_siblings(self) -> None:
        doc = Document()
        a, b, c = _append(doc, "a", "b", "c")
        doc.set_selection(3, 1)
        assert doc.selected_siblings() == [b, c]

    def test_selection_across_parents_selects_nothing(self) -> None:
        doc = Document()
        _append(doc, "a")
        group = doc.create("group")
        doc.append_children(doc.root, [group])
        inner = _append(doc, "x", parent=group)[0]
        doc.set_selection(1, doc.offset_of(inner))
        assert doc.selected_siblings() == []
