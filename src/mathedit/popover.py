"""Suggestion display: the sink protocol, a terminal panel, and scheduling.

The engine talks to any ``SuggestionDisplay``. Which list is currently shown
is tracked on the ``Mathfield`` (never module-global) so that several editors
can share one panel without cross-talk.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, Sequence

from wcwidth import wcswidth

from mathedit.definitions import DEFAULT_REGISTRY, CommandRegistry

if TYPE_CHECKING:
    from mathedit.mathfield import Mathfield

logger = logging.getLogger(__name__)

SHORTCUT_COUNT = 9


class SuggestionDisplay(Protocol):
    def show_candidates(self, suggestions: Sequence[str], active_index: int) -> None: ...

    def hide_candidates(self) -> None: ...


def _width(text: str) -> int:
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def _fit(text: str, width: int) -> str:
    """Truncate ``text`` to ``width`` columns and pad it to exactly that."""
    out = ""
    used = 0
    for char in text:
        w = max(_width(char), 0)
        if used + w > width:
            break
        out += char
        used += w
    return out + " " * (width - used)


class SuggestionPopover:
    """Terminal rendition of the suggestion list.

    Style commands are not listed. The rest is grouped into symbols and
    functions; the active candidate carries an arrow and the first nine
    candidates show their ``ctrl+N`` shortcut.
    """

    def __init__(
        self,
        registry: CommandRegistry | None = None,
        max_visible: int = 9,
    ) -> None:
        self._registry = registry or DEFAULT_REGISTRY
        self._max_visible = max(1, max_visible)
        self.suggestions: list[str] = []
        self.active_index = 0
        self.visible = False
        self.anchor: int | None = None

    # -- SuggestionDisplay ----------------------------------------------------

    def show_candidates(self, suggestions: Sequence[str], active_index: int) -> None:
        self.suggestions = list(suggestions)
        self.active_index = active_index

    def hide_candidates(self) -> None:
        self.suggestions = []
        self.active_index = 0
        self.visible = False
        self.anchor = None

    def reveal(self, anchor: int) -> None:
        """Make the panel visible next to the cursor offset ``anchor``."""
        if self.suggestions:
            self.visible = True
            self.anchor = anchor

    # -- Layout ---------------------------------------------------------------

    def _category(self, command: str) -> str:
        definition = self._registry.get(command)
        return definition.category if definition else "symbol"

    def _glyph(self, command: str) -> str:
        definition = self._registry.get(command)
        return definition.glyph if definition and definition.glyph else command

    def sections(self) -> list[tuple[str, list[int]]]:
        """Section titles with the suggestion indexes listed under each."""
        symbols: list[int] = []
        functions: list[int] = []
        for index, command in enumerate(self.suggestions):
            category = self._category(command)
            if category == "style":
                continue
            (symbols if category == "symbol" else functions).append(index)

        result: list[tuple[str, list[int]]] = []
        if symbols:
            result.append(("Symbols", symbols))
        if functions:
            result.append(("Variable or Function", functions))
        return result

    def _window(self, indexes: list[int]) -> list[int]:
        if len(indexes) <= self._max_visible:
            return indexes
        try:
            active = indexes.index(self.active_index)
        except ValueError:
            active = 0
        start = max(0, min(active - self._max_visible // 2, len(indexes) - self._max_visible))
        return indexes[start : start + self._max_visible]

    def render(self, width: int) -> list[str]:
        if not self.visible or not self.suggestions:
            return []

        sections = self.sections()
        listed = [i for _, indexes in sections for i in indexes]
        shown = set(self._window(listed))

        lines: list[str] = []
        for title, indexes in sections:
            rows = [i for i in indexes if i in shown]
            if not rows:
                continue
            lines.append(_fit(title, width))
            for index in rows:
                lines.append(self._render_item(index, width))

        if len(shown) < len(listed):
            position = listed.index(self.active_index) + 1 if self.active_index in listed else 0
            lines.append(_fit(f"  ({position}/{len(listed)})", width))
        return lines

    def _render_item(self, index: int, width: int) -> str:
        command = self.suggestions[index]
        prefix = "→ " if index == self.active_index else "  "
        shortcut = f"ctrl+{index + 1}" if index < SHORTCUT_COUNT else ""
        body = f"{prefix}{self._glyph(command)}  {command}"
        body_width = max(0, width - len(shortcut) - 1) if shortcut else width
        line = _fit(body, body_width)
        if shortcut:
            line += " " + shortcut
        return line


# ---------------------------------------------------------------------------
# Engine-side display bookkeeping
# ---------------------------------------------------------------------------


def show_suggestion_popover(mf: Mathfield, suggestions: Sequence[str]) -> None:
    if not suggestions:
        hide_suggestion_popover(mf)
        return

    changed = list(suggestions) != mf.shown_suggestions
    if changed:
        if mf.shown_suggestions:
            mf.display.hide_candidates()
        mf.shown_suggestions = list(suggestions)

    mf.display.show_candidates(mf.shown_suggestions, mf.suggestion_index)

    if changed:
        # Positioning waits for the layout to settle
        mf.defer(lambda: update_suggestion_popover_position(mf))


def hide_suggestion_popover(mf: Mathfield) -> None:
    mf.suggestion_index = 0
    mf.shown_suggestions = []
    mf.cancel_deferred()
    mf.display.hide_candidates()


def update_suggestion_popover_position(mf: Mathfield) -> None:
    """Deferred step: reveal the display at the cursor if still relevant."""
    # The session may have been torn down or moved on since this was scheduled
    if mf.disposed or not mf.shown_suggestions:
        return

    node = mf.model.at(mf.model.position)
    if node is None or node.mode != "latex":
        hide_suggestion_popover(mf)
        return

    reveal = getattr(mf.display, "reveal", None)
    if callable(reveal):
        reveal(mf.model.position)
    logger.debug("Suggestion display placed at offset %d", mf.model.position)


def is_suggestion_popover_visible(mf: Mathfield) -> bool:
    return bool(mf.shown_suggestions)
