"""Arena-backed document tree with a linear offset space.

Nodes live in a ``Document`` keyed by stable integer ids. A parent owns the
ordered list of its children's ids; sibling relationships are derived from the
position in that list, so removing or splicing nodes never leaves a dangling
link behind.

The offset space is the post-order flattening of the tree (children before
their parent, the root excluded). Offset ``k`` means "cursor right after
``atoms[k]``"; every container starts with a ``first`` sentinel so that the
start of a container is addressable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Literal

ParseMode = Literal["math", "latex", "text"]

CONTAINER_KINDS = frozenset({"root", "latexgroup", "group"})


class NodeState(Enum):
    """Closed state of a node: exactly one of these at any time."""

    COMMITTED = "committed"
    GHOST = "ghost"
    ERRONEOUS = "erroneous"


@dataclass
class Style:
    variant: str | None = None
    variant_style: str | None = None
    color: str | None = None
    background_color: str | None = None
    font_size: str | None = None

    def copy(self) -> Style:
        return replace(self)


@dataclass(eq=False)
class Node:
    id: int
    kind: str
    value: str = ""
    command: str | None = None
    mode: ParseMode = "math"
    style: Style = field(default_factory=Style)
    state: NodeState = NodeState.COMMITTED
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def is_raw(self) -> bool:
        """True for a raw-source node holding one LaTeX character."""
        return self.kind == "latex"

    @property
    def is_suggestion(self) -> bool:
        return self.state is NodeState.GHOST

    @is_suggestion.setter
    def is_suggestion(self, value: bool) -> None:
        if value:
            self.state = NodeState.GHOST
        elif self.state is NodeState.GHOST:
            self.state = NodeState.COMMITTED

    @property
    def is_error(self) -> bool:
        return self.state is NodeState.ERRONEOUS

    @is_error.setter
    def is_error(self, value: bool) -> None:
        if value:
            self.state = NodeState.ERRONEOUS
        elif self.state is NodeState.ERRONEOUS:
            self.state = NodeState.COMMITTED

    def __repr__(self) -> str:
        flag = "" if self.state is NodeState.COMMITTED else f" {self.state.value}"
        return f"<Node #{self.id} {self.kind} {self.command or self.value!r}{flag}>"


class Document:
    """The editable tree plus cursor and selection."""

    def __init__(self) -> None:
        self._nodes: dict[int, Node] = {}
        self._next_id = 0
        self._atoms: list[Node] | None = None
        self._offsets: dict[int, int] = {}
        self.root = self.create("root")
        self._position = 0
        self._anchor = 0

    # -- Node creation / lookup ---------------------------------------------

    def create(
        self,
        kind: str,
        value: str = "",
        *,
        command: str | None = None,
        mode: ParseMode = "math",
        style: Style | None = None,
        state: NodeState = NodeState.COMMITTED,
    ) -> Node:
        """Allocate a detached node (containers get their sentinel)."""
        node = self._register(
            kind,
            value=value,
            command=command,
            mode=mode,
            style=style.copy() if style else Style(),
            state=state,
        )
        if kind in CONTAINER_KINDS:
            first = self._register("first", mode=mode)
            first.parent = node.id
            node.children.append(first.id)
        return node

    def _register(self, kind: str, **fields: object) -> Node:
        node = Node(id=self._next_id, kind=kind, **fields)  # type: ignore[arg-type]
        self._next_id += 1
        self._nodes[node.id] = node
        return node

    def get(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and self._nodes.get(node.id) is node

    def parent_of(self, node: Node) -> Node | None:
        return self._nodes[node.parent] if node.parent is not None else None

    def children_of(self, node: Node) -> list[Node]:
        return [self._nodes[i] for i in node.children]

    # -- Siblings -------------------------------------------------------------

    def _siblings(self, node: Node) -> tuple[list[int], int]:
        if node.parent is None:
            raise RuntimeError(f"{node!r} has no parent")
        siblings = self._nodes[node.parent].children
        return siblings, siblings.index(node.id)

    def left_sibling(self, node: Node) -> Node | None:
        siblings, index = self._siblings(node)
        return self._nodes[siblings[index - 1]] if index > 0 else None

    def right_sibling(self, node: Node) -> Node | None:
        siblings, index = self._siblings(node)
        if index + 1 < len(siblings):
            return self._nodes[siblings[index + 1]]
        return None

    # -- Mutation -------------------------------------------------------------

    def _attach(self, parent: Node, nodes: Iterable[Node]) -> list[int]:
        ids: list[int] = []
        for node in nodes:
            if node.parent is not None:
                raise RuntimeError(f"{node!r} is already attached")
            node.parent = parent.id
            ids.append(node.id)
        return ids

    def append_children(self, parent: Node, nodes: Iterable[Node]) -> None:
        parent.children.extend(self._attach(parent, nodes))
        self._invalidate()

    def add_children_after(self, nodes: Iterable[Node], after: Node) -> None:
        """Insert ``nodes`` as right siblings of ``after``, in order."""
        siblings, index = self._siblings(after)
        parent = self._nodes[after.parent]  # type: ignore[index]
        siblings[index + 1 : index + 1] = self._attach(parent, nodes)
        self._invalidate()

    def remove_child(self, node: Node) -> None:
        """Detach ``node`` and drop its whole subtree from the arena."""
        siblings, index = self._siblings(node)
        del siblings[index]
        node.parent = None
        self._discard(node)
        self._invalidate()

    def clear(self) -> None:
        for child in self.children_of(self.root)[1:]:
            self.remove_child(child)
        self.position = 0

    def _discard(self, node: Node) -> None:
        for child_id in node.children:
            self._discard(self._nodes[child_id])
        self._nodes.pop(node.id, None)

    def _invalidate(self) -> None:
        self._atoms = None

    # -- Offsets --------------------------------------------------------------

    @property
    def atoms(self) -> list[Node]:
        """Post-order flattening of the tree, root excluded."""
        if self._atoms is None:
            self._rebuild()
        return self._atoms  # type: ignore[return-value]

    def _rebuild(self) -> None:
        atoms: list[Node] = []
        self._flatten(self.root, atoms)
        self._atoms = atoms
        self._offsets = {node.id: i for i, node in enumerate(atoms)}

    def _flatten(self, node: Node, out: list[Node]) -> None:
        for child_id in node.children:
            child = self._nodes[child_id]
            self._flatten(child, out)
            out.append(child)

    @property
    def last_offset(self) -> int:
        return len(self.atoms) - 1

    def at(self, offset: int) -> Node | None:
        atoms = self.atoms
        if 0 <= offset < len(atoms):
            return atoms[offset]
        return None

    def offset_of(self, node: Node | None) -> int:
        """Offset of ``node``, or -1 when it is not part of the tree."""
        if node is None:
            return -1
        if self._atoms is None:
            self._rebuild()
        return self._offsets.get(node.id, -1)

    def get_nodes(self, start: int, end: int) -> list[Node]:
        """Nodes whose offset lies in the half-open range ``(start, end]``."""
        atoms = self.atoms
        return atoms[max(start + 1, 0) : end + 1]

    # -- Cursor / selection ---------------------------------------------------

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, self.last_offset))

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, offset: int) -> None:
        """Move the cursor and collapse the selection."""
        self._position = self._clamp(offset)
        self._anchor = self._position

    @property
    def anchor(self) -> int:
        return self._anchor

    def set_selection(self, anchor: int, focus: int) -> None:
        self._anchor = self._clamp(anchor)
        self._position = self._clamp(focus)

    @property
    def selection_is_collapsed(self) -> bool:
        return self._anchor == self._position

    def selected_siblings(self) -> list[Node]:
        """Nodes between anchor and cursor when both sit in the same parent."""
        if self.selection_is_collapsed:
            return []
        low, high = sorted((self._anchor, self._position))
        start, end = self.at(low), self.at(high)
        if start is None or end is None or start.parent != end.parent:
            return []
        siblings, first = self._siblings(start)
        last = siblings.index(end.id)
        return [self._nodes[i] for i in siblings[first + 1 : last + 1]]
