"""Locate the raw editing region and the command token around the cursor."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from mathedit.tree import Document, Node

COMMAND_MARKER = "\\"

_COMMAND_CHAR_RE = re.compile(r"^[a-zA-Z*]$")
_LETTER_RE = re.compile(r"^[a-zA-Z]$")
_WELL_FORMED_RE = re.compile(r"^\\[a-zA-Z*]+$")


@dataclass(frozen=True)
class CommandToken:
    """The run of raw nodes forming the command name being typed.

    ``text`` always starts with the marker. For a bare word the marker is
    synthetic: it is not among ``nodes``.
    """

    text: str
    nodes: tuple[Node, ...]
    explicit: bool


def is_command_char(char: str) -> bool:
    return bool(_COMMAND_CHAR_RE.match(char))


def is_well_formed_command(text: str) -> bool:
    return bool(_WELL_FORMED_RE.match(text))


def _raw_command_char(node: Node) -> bool:
    return node.is_raw and is_command_char(node.value)


def _raw_letter(node: Node) -> bool:
    return node.is_raw and bool(_LETTER_RE.match(node.value))


def _is_marker(node: Node | None) -> bool:
    return node is not None and node.is_raw and node.value == COMMAND_MARKER


def _walk_left(
    model: Document, node: Node | None, accept: Callable[[Node], bool]
) -> tuple[list[Node], Node | None]:
    """Collect accepted nodes leftward; also return the node that stopped the walk."""
    run: list[Node] = []
    while node is not None and accept(node):
        run.insert(0, node)
        node = model.left_sibling(node)
    return run, node


def _walk_right(
    model: Document, node: Node | None, accept: Callable[[Node], bool]
) -> list[Node]:
    run: list[Node] = []
    while node is not None and accept(node):
        run.append(node)
        node = model.right_sibling(node)
    return run


def get_latex_group(model: Document) -> Node | None:
    for node in model.atoms:
        if node.kind == "latexgroup":
            return node
    return None


def get_latex_group_body(model: Document) -> list[Node]:
    group = get_latex_group(model)
    if group is None:
        return []
    return [node for node in model.children_of(group) if node.is_raw]


def find_command_token(
    model: Document,
    offset: int | None = None,
    *,
    bare_words: bool = True,
    min_bare_length: int = 2,
) -> CommandToken | None:
    """Find the command token ending at ``offset`` (default: the cursor).

    An explicit command is the marker followed by ``[A-Za-z*]`` characters.
    Failing that, a run of at least ``min_bare_length`` letters not preceded
    by the marker is looked up as if it had one.
    """
    start = model.at(model.position if offset is None else offset)

    _, stop = _walk_left(model, start, _raw_command_char)
    if stop is not None and _is_marker(stop):
        nodes = [stop, *_walk_right(model, model.right_sibling(stop), _raw_command_char)]
        text = "".join(node.value for node in nodes)
        return CommandToken(text=text, nodes=tuple(nodes), explicit=True)

    if not bare_words:
        return None

    run, stop = _walk_left(model, start, _raw_letter)
    if len(run) >= min_bare_length and not _is_marker(stop):
        text = COMMAND_MARKER + "".join(node.value for node in run)
        return CommandToken(text=text, nodes=tuple(run), explicit=False)
    return None


def command_span(model: Document, before: int | None = None) -> tuple[int, int] | None:
    """Offset range ``(start, end]`` of the explicit command around ``before``.

    The range covers the marker and every command character on either side,
    ghost suffix included. ``None`` when ``before`` is not inside a command.
    """
    node = model.at(model.position if before is None else before)
    if node is None or not (_raw_command_char(node) or _is_marker(node)):
        return None

    _, marker = _walk_left(model, node, _raw_command_char)
    if marker is None or not _is_marker(marker):
        return None

    tail = _walk_right(model, model.right_sibling(marker), _raw_command_char)
    last = tail[-1] if tail else marker
    return model.offset_of(marker) - 1, model.offset_of(last)
