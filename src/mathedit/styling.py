"""Style applied to content inserted at the cursor."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mathedit.tree import Node, Style

if TYPE_CHECKING:
    from mathedit.mathfield import Mathfield

_STYLELESS_KINDS = frozenset({"first", "root", "latexgroup", "latex", "group"})


def _styled(node: Node | None) -> bool:
    return node is not None and node.kind not in _STYLELESS_KINDS and node.mode == "math"


def compute_insert_style(mf: Mathfield) -> Style:
    """Copy the style of the neighbour selected by ``style_bias``."""
    bias = mf.settings.style_bias
    if bias == "none":
        return Style()

    model = mf.model
    node = model.at(model.position)
    if bias == "right" and node is not None and node.parent is not None:
        node = model.right_sibling(node)

    if not _styled(node):
        return Style()
    return node.style.copy()  # type: ignore[union-attr]
