"""Editing session: document, mode, suggestion state and pending work.

Everything the autocomplete engine needs beyond the tree itself lives on a
``Mathfield`` instance, so several editors never share suggestion state.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Protocol, Sequence

from mathedit.announcer import AnnounceEvent, Announcer, LiveRegion
from mathedit.autocomplete import (
    accept_command_suggestion,
    apply_suggestions,
    complete,
    locate_command,
    next_suggestion,
    pick_suggestion,
    previous_suggestion,
    remove_suggestion,
    update_autocomplete,
)
from mathedit.definitions import CommandRegistry
from mathedit.keybindings import Keybindings
from mathedit.latex import get_value, insert_latex, node_to_latex, serialize
from mathedit.popover import (
    SuggestionDisplay,
    SuggestionPopover,
    hide_suggestion_popover,
)
from mathedit.settings import MathfieldSettings
from mathedit.span import (
    COMMAND_MARKER,
    CommandToken,
    command_span,
    get_latex_group,
    get_latex_group_body,
    is_command_char,
)
from mathedit.styling import compute_insert_style
from mathedit.tree import Document, Node, ParseMode
from mathedit.undo import UndoManager

logger = logging.getLogger(__name__)


class SuggestionSource(Protocol):
    def suggest(self, context: Any, prefix: str) -> Sequence[str]: ...


class Mathfield:
    """A math editor instance with raw LaTeX editing and autocomplete."""

    def __init__(
        self,
        settings: MathfieldSettings | None = None,
        *,
        source: SuggestionSource | None = None,
        display: SuggestionDisplay | None = None,
        announcer: Announcer | None = None,
    ) -> None:
        self.settings = settings or MathfieldSettings()
        self.registry = CommandRegistry.default(self.settings.macros)
        self.source: SuggestionSource = source or self.registry
        self.has_async_source = inspect.iscoroutinefunction(
            getattr(self.source, "suggest", None)
        )
        self.display: SuggestionDisplay = display or SuggestionPopover(
            self.registry, self.settings.max_visible_suggestions
        )
        self.announcer: Announcer = announcer or LiveRegion()
        self.keybindings = Keybindings(self.settings.keybindings)

        self.model = Document()
        self.mode: ParseMode = self.settings.default_mode

        # Suggestion cursor and the list it indexes
        self.suggestion_index = 0
        self.shown_suggestions: list[str] = []

        self._undo: UndoManager[Document] = UndoManager(self.settings.undo_depth)
        self._undo.reset(self.model)

        # Pending work owned by this session
        self._deferred: asyncio.TimerHandle | None = None
        self._pending_query: asyncio.Task[None] | None = None
        self._query_generation = 0
        self._render_requested = False

        self.disposed = False
        self.on_render: Callable[[Mathfield], None] | None = None
        self.on_mode_change: Callable[[ParseMode, ParseMode], None] | None = None

    # -- Value ----------------------------------------------------------------

    def get_value(self) -> str:
        return get_value(self.model)

    def set_value(self, latex: str) -> None:
        """Replace the content and start a fresh undo history."""
        self.cancel_pending()
        hide_suggestion_popover(self)
        self._set_mode("math")
        self.model.clear()
        insert_latex(self.model, latex, selection_mode="after", registry=self.registry)
        self._undo.reset(self.model)

    def get_latex_region(self) -> str | None:
        """Typed text of the open raw region (ghosts excluded), if any."""
        group = get_latex_group(self.model)
        return node_to_latex(self.model, group) if group is not None else None

    def get_ghost_text(self) -> str:
        return "".join(n.value for n in get_latex_group_body(self.model) if n.is_suggestion)

    # -- Mode -----------------------------------------------------------------

    def switch_mode(self, target: ParseMode) -> bool:
        """Change the editing mode; switching to the current mode is a no-op.

        Entering ``latex`` opens a raw region holding the serialized
        selection. Leaving it cancels pending suggestion work.
        """
        if target == self.mode:
            return False
        self.cancel_pending()
        hide_suggestion_popover(self)
        if target == "latex":
            self._open_latex_region()
        self._set_mode(target)
        return True

    def _set_mode(self, target: ParseMode) -> None:
        previous = self.mode
        if previous == target:
            return
        self.mode = target
        logger.debug("Mode %s -> %s", previous, target)
        if self.on_mode_change:
            self.on_mode_change(previous, target)

    def _open_latex_region(self) -> None:
        model = self.model
        selected = model.selected_siblings()
        latex = serialize(model, selected)
        if selected:
            anchor = model.left_sibling(selected[0])
            for node in selected:
                model.remove_child(node)
        else:
            anchor = model.at(model.position)
        if anchor is None:
            raise RuntimeError(f"No node at offset {model.position}")

        group = model.create("latexgroup", mode="latex")
        model.add_children_after([group], anchor)
        model.append_children(
            group, [model.create("latex", char, mode="latex") for char in latex]
        )
        last = model.children_of(group)[-1]
        model.position = model.offset_of(last)

    # -- Suggestions ----------------------------------------------------------

    def suggest(self, prefix: str) -> list[str]:
        logger.debug("Querying suggestions for %s", prefix)
        return list(self.source.suggest(self, prefix))

    def request_suggestions(self, token: CommandToken, *, at_index: int | None = None) -> None:
        """Query an async source; only the latest request may apply."""
        self.cancel_pending_query()
        loop = asyncio.get_running_loop()
        self._pending_query = loop.create_task(
            self._run_query(self._query_generation, token.text, at_index)
        )

    async def _run_query(self, generation: int, command: str, at_index: int | None) -> None:
        try:
            suggestions = list(await self.source.suggest(self, command))  # type: ignore[misc]
        except Exception as exc:
            logger.warning("Suggestion source failed for %s: %s", command, exc)
            if generation == self._query_generation and not self.disposed:
                self._pending_query = None
                hide_suggestion_popover(self)
            return
        if generation != self._query_generation or self.disposed:
            logger.debug("Discarding stale suggestions for %s", command)
            return
        self._pending_query = None

        token = locate_command(self)
        if token is None or token.text != command:
            logger.debug("Discarding suggestions for %s: command changed", command)
            return
        apply_suggestions(self, token, suggestions, at_index=at_index)

    async def flush_suggestions(self) -> None:
        """Wait for the pending suggestion query, if any."""
        task = self._pending_query
        if task is not None:
            await asyncio.wait({task})

    @property
    def query_pending(self) -> bool:
        return self._pending_query is not None and not self._pending_query.done()

    def cancel_pending_query(self) -> None:
        self._query_generation += 1
        if self._pending_query is not None and not self._pending_query.done():
            self._pending_query.cancel()
        self._pending_query = None

    # -- Deferred work / rendering --------------------------------------------

    def defer(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the display has settled.

        Only one deferred callback is pending per session. Without a running
        event loop it runs immediately.
        """
        self.cancel_deferred()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback()
            return
        delay = self.settings.popover_settle_delay_ms / 1000
        self._deferred = loop.call_later(delay, self._run_deferred, callback)

    def _run_deferred(self, callback: Callable[[], None]) -> None:
        self._deferred = None
        if self.disposed:
            return
        callback()

    def cancel_deferred(self) -> None:
        if self._deferred is not None:
            self._deferred.cancel()
            self._deferred = None

    def cancel_pending(self) -> None:
        self.cancel_pending_query()
        self.cancel_deferred()

    def request_render(self) -> None:
        """Schedule ``on_render`` for the next loop tick; calls coalesce."""
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._do_render()
            return
        loop.call_soon(self._do_render)

    def _do_render(self) -> None:
        self._render_requested = False
        if self.disposed:
            return
        if self.on_render:
            self.on_render(self)

    def dispose(self) -> None:
        self.cancel_pending()
        hide_suggestion_popover(self)
        self.disposed = True

    # -- Undo / accessibility -------------------------------------------------

    def snapshot(self) -> None:
        self._undo.snapshot(self.model)

    def undo(self) -> bool:
        return self._restore(self._undo.undo())

    def redo(self) -> bool:
        return self._restore(self._undo.redo())

    def _restore(self, state: Document | None) -> bool:
        if state is None:
            return False
        self.cancel_pending()
        hide_suggestion_popover(self)
        self.model = state
        self._set_mode("math")
        return True

    def announce(self, event: AnnounceEvent, text: str | None = None) -> None:
        """Announce ``text``, or the node before the cursor when omitted."""
        if text is None:
            node = self.model.at(self.model.position)
            text = node_to_latex(self.model, node) if node is not None else ""
        self.announcer.announce(event, text)

    # -- Editing --------------------------------------------------------------

    def type_char(self, char: str) -> None:
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")
        if self.mode == "latex":
            self._insert_raw(char)
            return
        if char == COMMAND_MARKER:
            self.switch_mode("latex")
            self._insert_raw(char)
            return
        insert_latex(
            self.model,
            char,
            style=compute_insert_style(self),
            selection_mode="after",
            registry=self.registry,
        )
        self.snapshot()

    def _insert_raw(self, char: str) -> None:
        model = self.model
        if not is_command_char(char) and self._cursor_before_ghost():
            # Typing past a previewed suggestion confirms it
            span = command_span(model)
            if span is not None and accept_command_suggestion(model):
                model.position = span[1]
        remove_suggestion(self)

        after = model.at(model.position)
        if after is None:
            raise RuntimeError(f"No node at offset {model.position}")
        node = model.create("latex", char, mode="latex")
        model.add_children_after([node], after)
        model.position = model.offset_of(node)
        update_autocomplete(self)
        self.request_render()

    def _cursor_before_ghost(self) -> bool:
        cursor = self.model.at(self.model.position)
        if cursor is None:
            return False
        following = self.model.right_sibling(cursor)
        return following is not None and following.is_suggestion

    def delete_backward(self) -> bool:
        model = self.model
        if self.mode == "latex":
            remove_suggestion(self)
            node = model.at(model.position)
            if node is None or not node.is_raw:
                if not get_latex_group_body(model):
                    return complete(self, "reject")
                return False
            self._remove_left_of_cursor(node)
            update_autocomplete(self)
            self.request_render()
            return True

        node = model.at(model.position)
        if node is None or node.kind == "first":
            return False
        self._remove_left_of_cursor(node)
        self.snapshot()
        return True

    def _remove_left_of_cursor(self, node: Node) -> None:
        model = self.model
        left = model.left_sibling(node)
        model.remove_child(node)
        model.position = model.offset_of(left)

    def move(self, delta: int) -> bool:
        model = self.model
        if self.mode != "latex":
            before = model.position
            model.position = before + delta
            return model.position != before

        remove_suggestion(self)
        group = get_latex_group(self.model)
        if group is None:
            return False
        children = model.children_of(group)
        low, high = model.offset_of(children[0]), model.offset_of(children[-1])
        before = model.position
        model.position = max(low, min(high, before + delta))
        update_autocomplete(self)
        return model.position != before

    def select_all(self) -> None:
        self.model.set_selection(0, self.model.last_offset)

    # -- Keys -----------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Run the action bound to ``key``, or type it if it is a character."""
        action = self.keybindings.action_for(key, self.mode)
        if action is not None:
            return self.execute(action)
        if len(key) == 1 and key.isprintable():
            self.type_char(key)
            return True
        return False

    def execute(self, action: str) -> bool:
        if action == "undo":
            return self.undo()
        if action == "redo":
            return self.redo()
        if action == "selectAll":
            self.select_all()
            return True
        if action == "deleteBackward":
            return self.delete_backward()
        if action == "moveLeft":
            return self.move(-1)
        if action == "moveRight":
            return self.move(1)
        if action == "enterLatexMode":
            return self.switch_mode("latex")

        if self.mode != "latex":
            return False
        if action == "complete":
            if self.shown_suggestions:
                return pick_suggestion(self, self.suggestion_index)
            return complete(self, "accept")
        if action == "completeAll":
            return complete(self, "accept-all")
        if action == "acceptSuggestion":
            return complete(self, "accept-suggestion")
        if action == "reject":
            return complete(self, "reject")
        if action == "nextSuggestion":
            if not self.shown_suggestions:
                return False
            next_suggestion(self)
            return True
        if action == "previousSuggestion":
            if not self.shown_suggestions:
                return False
            previous_suggestion(self)
            return True
        if action.startswith("pickSuggestion"):
            return pick_suggestion(self, int(action[len("pickSuggestion"):]) - 1)
        return False
