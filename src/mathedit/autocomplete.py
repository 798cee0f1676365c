"""Command autocomplete inside a raw LaTeX editing region.

While the user types in a ``latexgroup`` the best suggestion for the command
being typed is previewed as *ghost* raw nodes after the typed text. Ghost
nodes never serialize; they become real content only when accepted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import TYPE_CHECKING, Literal, Sequence

from mathedit.latex import insert_latex
from mathedit.popover import hide_suggestion_popover, show_suggestion_popover
from mathedit.span import (
    CommandToken,
    command_span,
    find_command_token,
    get_latex_group,
    get_latex_group_body,
    is_well_formed_command,
)
from mathedit.styling import compute_insert_style
from mathedit.tree import Document, NodeState, ParseMode

if TYPE_CHECKING:
    from mathedit.mathfield import Mathfield

logger = logging.getLogger(__name__)

Completion = Literal["reject", "accept", "accept-suggestion", "accept-all"]

COMPLETIONS: tuple[Completion, ...] = ("reject", "accept", "accept-suggestion", "accept-all")

_SINGLE_ALNUM_RE = re.compile(r"^[a-zA-Z0-9]$")


def remove_suggestion(mf: Mathfield) -> None:
    """Drop every ghost node.

    A cursor inside the ghost run goes back before the first ghost; otherwise
    it stays after the same node.
    """
    model = mf.model
    ghosts = [node for node in get_latex_group_body(model) if node.is_suggestion]
    if not ghosts:
        return
    cursor = model.at(model.position)
    if cursor is None or cursor.is_suggestion:
        cursor = model.left_sibling(ghosts[0])
    for node in ghosts:
        model.remove_child(node)
    model.position = model.offset_of(cursor)


def _clear_errors(model: Document) -> None:
    for node in get_latex_group_body(model):
        node.is_error = False


def locate_command(mf: Mathfield) -> CommandToken | None:
    settings = mf.settings
    return find_command_token(
        mf.model,
        mf.model.position,
        bare_words=settings.bare_word_suggestions,
        min_bare_length=settings.min_bare_word_length,
    )


def update_autocomplete(mf: Mathfield, *, at_index: int | None = None) -> None:
    """Re-evaluate the suggestion for the command at the cursor.

    Stale ghosts and error flags are cleared first, so calling this twice in a
    row leaves the tree unchanged.
    """
    model = mf.model
    remove_suggestion(mf)
    _clear_errors(model)

    if not model.selection_is_collapsed or mf.settings.popover_policy == "off":
        hide_suggestion_popover(mf)
        return

    token = locate_command(mf)
    if token is None:
        hide_suggestion_popover(mf)
        return

    if mf.has_async_source:
        mf.request_suggestions(token, at_index=at_index)
        return

    apply_suggestions(mf, token, mf.suggest(token.text), at_index=at_index)


def apply_suggestions(
    mf: Mathfield,
    token: CommandToken,
    suggestions: Sequence[str],
    *,
    at_index: int | None = None,
) -> None:
    if not suggestions:
        # Looks like a command name, but not a known one
        if token.explicit and is_well_formed_command(token.text):
            for node in token.nodes:
                node.is_error = True
            logger.debug("No command matches %s", token.text)
        hide_suggestion_popover(mf)
        return

    index = at_index or 0
    mf.suggestion_index = len(suggestions) - 1 if index < 0 else index % len(suggestions)
    suggestion = suggestions[mf.suggestion_index]

    if suggestion != token.text:
        added = insert_ghost_suffix(mf.model, token, suggestion)
        logger.debug("Previewing %s after %s (%d ghost nodes)", suggestion, token.text, added)
        mf.request_render()

    show_suggestion_popover(mf, suggestions)


def insert_ghost_suffix(model: Document, token: CommandToken, suggestion: str) -> int:
    """Append the part of ``suggestion`` beyond the typed text as ghosts.

    The suffix is taken by length difference, so nothing is added when the
    suggestion is not longer than what was typed.
    """
    extra = len(suggestion) - len(token.text)
    if extra <= 0:
        return 0
    ghosts = [
        model.create("latex", char, mode="latex", state=NodeState.GHOST)
        for char in suggestion[-extra:]
    ]
    model.add_children_after(ghosts, token.nodes[-1])
    return len(ghosts)


def next_suggestion(mf: Mathfield) -> None:
    update_autocomplete(mf, at_index=mf.suggestion_index + 1)


def previous_suggestion(mf: Mathfield) -> None:
    update_autocomplete(mf, at_index=mf.suggestion_index - 1)


def accept_command_suggestion(model: Document, *, before: int | None = None) -> bool:
    """Promote the ghost nodes of the command around ``before`` to real text.

    Values and positions are untouched. Returns whether anything changed.
    """
    span = command_span(model, before)
    if span is None:
        return False
    result = False
    for node in model.get_nodes(*span):
        if node.is_suggestion:
            node.is_suggestion = False
            result = True
    return result


def complete(
    mf: Mathfield,
    completion: Completion = "accept",
    *,
    mode: ParseMode | None = None,
    select_item: bool = False,
) -> bool:
    """Leave the raw editing region.

    ``reject`` drops it, ``accept-suggestion`` only promotes the ghost nodes,
    ``accept`` parses the typed text (ghosts excluded) into the document and
    ``accept-all`` promotes the ghosts first. Returns False when there is
    nothing to complete.
    """
    if completion not in COMPLETIONS:
        raise ValueError(f"Unknown completion mode: {completion!r}")

    hide_suggestion_popover(mf)
    mf.cancel_pending()

    model = mf.model
    group = get_latex_group(model)
    if group is None:
        return False

    if completion in ("accept-suggestion", "accept-all"):
        ghosts = [node for node in get_latex_group_body(model) if node.is_suggestion]
        for node in ghosts:
            node.is_suggestion = False
        if ghosts:
            model.position = model.offset_of(ghosts[-1])
        if completion == "accept-suggestion":
            return bool(ghosts)

    body = [node for node in get_latex_group_body(model) if not node.is_suggestion]
    latex = "".join(node.value for node in body)

    new_position = model.left_sibling(group)
    model.remove_child(group)
    model.position = model.offset_of(new_position)
    mf.switch_mode(mode or "math")

    if completion == "reject":
        return True

    style = compute_insert_style(mf)
    # Variants only make sense for letters and digits
    if not _SINGLE_ALNUM_RE.match(latex) and mf.settings.style_bias != "none":
        style = replace(style, variant="normal", variant_style=None)

    insert_latex(
        model,
        latex,
        style=style,
        selection_mode="item" if select_item else "placeholder",
        registry=mf.registry,
    )
    logger.debug("Committed %r", latex)

    mf.snapshot()
    mf.announce("replacement", latex)
    mf.switch_mode("math")
    return True


def pick_suggestion(mf: Mathfield, index: int) -> bool:
    """Replace the region with the shown candidate at ``index``."""
    if not 0 <= index < len(mf.shown_suggestions):
        return False
    command = mf.shown_suggestions[index]

    complete(mf, "reject")
    insert_latex(
        mf.model,
        command,
        style=compute_insert_style(mf),
        selection_mode="placeholder",
        registry=mf.registry,
    )
    logger.debug("Picked %s", command)

    mf.snapshot()
    mf.announce("replacement", command)
    return True
