"""LaTeX parsing into structured nodes, and serialization back to LaTeX."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Literal

from mathedit.definitions import DEFAULT_REGISTRY, CommandRegistry
from mathedit.tree import Document, Node, Style

logger = logging.getLogger(__name__)

SelectionMode = Literal["placeholder", "item", "after"]

_TOKEN_RE = re.compile(r"\\[a-zA-Z]+\*?|\\.|\s+|.", re.DOTALL)
_CONTROL_WORD_END_RE = re.compile(r"\\[a-zA-Z]+\*?$")

_BINARY_CHARS = frozenset("+-*/")
_RELATION_CHARS = frozenset("=<>")
_OPEN_CHARS = frozenset("([")
_CLOSE_CHARS = frozenset(")]")
_PUNCT_CHARS = frozenset(",;")

_MAX_MACRO_DEPTH = 8


def tokenize(latex: str) -> list[str]:
    """Split LaTeX into control sequences and single characters.

    Whitespace only separates tokens and is dropped.
    """
    return [token for token in _TOKEN_RE.findall(latex) if not token.isspace()]


def _char_kind(char: str) -> str:
    if char in _BINARY_CHARS:
        return "mbin"
    if char in _RELATION_CHARS:
        return "mrel"
    if char in _OPEN_CHARS:
        return "mopen"
    if char in _CLOSE_CHARS:
        return "mclose"
    if char in _PUNCT_CHARS:
        return "mpunct"
    return "mord"


class _Parser:
    def __init__(
        self,
        model: Document,
        tokens: list[str],
        style: Style,
        registry: CommandRegistry,
        depth: int = 0,
    ) -> None:
        self._model = model
        self._tokens = tokens
        self._style = style
        self._registry = registry
        self._depth = depth
        self._pos = 0

    def _peek(self) -> str | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _make(self, kind: str, value: str = "", command: str | None = None) -> Node:
        return self._model.create(kind, value, command=command, style=self._style)

    def parse_sequence(self, closing: bool = False) -> list[Node]:
        nodes: list[Node] = []
        while (token := self._peek()) is not None:
            if token == "}":
                if closing:
                    return nodes
                # Unbalanced brace, kept so that nothing typed is lost
                self._pos += 1
                nodes.append(self._make("error", token))
                continue
            nodes.append(self.parse_atom())
        return nodes

    def parse_atom(self) -> Node:
        token = self._tokens[self._pos]
        self._pos += 1

        if token == "{":
            group = self._make("group")
            self._model.append_children(group, self.parse_sequence(closing=True))
            if self._peek() == "}":
                self._pos += 1
            return group

        if token in ("^", "_"):
            node = self._make("subsup", token)
            self._model.append_children(node, [self.parse_argument()])
            return node

        if token.startswith("\\") and len(token) > 1:
            return self._parse_command(token)

        return self._make(_char_kind(token), token)

    def parse_argument(self) -> Node:
        """Parse one argument, always returned as a group.

        A missing argument yields an empty group, i.e. a placeholder.
        """
        if self._peek() == "{":
            return self.parse_atom()
        group = self._make("group")
        token = self._peek()
        if token is not None and token != "}":
            self._model.append_children(group, [self.parse_atom()])
        return group

    def _parse_command(self, token: str) -> Node:
        definition = self._registry.get(token)
        if definition is None:
            logger.debug("Unknown command %s", token)
            return self._make("error", token, command=token)

        if definition.kind == "macro":
            node = self._make("macro", command=token)
            expansion = self._registry.macro(token) or ""
            if self._depth < _MAX_MACRO_DEPTH:
                inner = _Parser(
                    self._model,
                    tokenize(expansion),
                    self._style,
                    self._registry,
                    self._depth + 1,
                )
                self._model.append_children(node, inner.parse_sequence())
            return node

        node = self._make(definition.kind, definition.glyph, command=token)
        if definition.args:
            self._model.append_children(
                node, [self.parse_argument() for _ in range(definition.args)]
            )
        return node


def parse_latex(
    model: Document,
    latex: str,
    *,
    style: Style | None = None,
    registry: CommandRegistry | None = None,
) -> list[Node]:
    """Parse ``latex`` into detached nodes allocated in ``model``."""
    parser = _Parser(model, tokenize(latex), style or Style(), registry or DEFAULT_REGISTRY)
    return parser.parse_sequence()


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def node_to_latex(model: Document, node: Node) -> str:
    kind = node.kind
    if kind == "first" or node.is_suggestion:
        return ""
    if kind == "latex":
        return node.value
    if kind == "latexgroup":
        return "".join(node_to_latex(model, child) for child in model.children_of(node))
    if kind == "root":
        return serialize(model, model.children_of(node))
    if kind == "group":
        return "{" + serialize(model, model.children_of(node)) + "}"
    if kind == "subsup":
        return node.value + "".join(node_to_latex(model, child) for child in model.children_of(node))
    if kind == "macro":
        return node.command or ""
    if node.command and node.children:
        return node.command + "".join(node_to_latex(model, child) for child in model.children_of(node))
    return node.command or node.value


def serialize(model: Document, nodes: Iterable[Node]) -> str:
    result = ""
    for node in nodes:
        piece = node_to_latex(model, node)
        if piece and piece[0].isalpha() and _CONTROL_WORD_END_RE.search(result):
            result += " "
        result += piece
    return result


def get_value(model: Document) -> str:
    return node_to_latex(model, model.root)


# ---------------------------------------------------------------------------
# Insertion
# ---------------------------------------------------------------------------


def _first_placeholder(model: Document, nodes: list[Node]) -> Node | None:
    for node in nodes:
        for atom in [*_descendants(model, node), node]:
            if atom.kind == "group" and len(atom.children) == 1:
                return atom
    return None


def _descendants(model: Document, node: Node) -> list[Node]:
    out: list[Node] = []
    for child in model.children_of(node):
        out.extend(_descendants(model, child))
        out.append(child)
    return out


def insert_latex(
    model: Document,
    latex: str,
    *,
    style: Style | None = None,
    selection_mode: SelectionMode = "placeholder",
    registry: CommandRegistry | None = None,
) -> list[Node]:
    """Parse ``latex`` and splice it in right after the cursor.

    With ``placeholder`` the cursor lands in the first empty argument if there
    is one; with ``item`` the inserted content is selected.
    """
    nodes = parse_latex(model, latex, style=style, registry=registry)
    if not nodes:
        return nodes

    after = model.at(model.position)
    if after is None:
        raise RuntimeError(f"No node at offset {model.position}")
    start = model.position
    model.add_children_after(nodes, after)
    end = model.offset_of(nodes[-1])

    placeholder = _first_placeholder(model, nodes)
    if selection_mode == "placeholder" and placeholder is not None:
        model.position = model.offset_of(model.children_of(placeholder)[0])
    elif selection_mode == "item":
        model.set_selection(start, end)
    else:
        model.position = end
    return nodes
