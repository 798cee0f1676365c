"""Mathfield keybindings: key ids to editor actions."""

from __future__ import annotations

from typing import Literal

MathfieldAction = Literal[
    # Commit protocol
    "complete",
    "completeAll",
    "acceptSuggestion",
    "reject",
    "enterLatexMode",
    # Suggestion cursor
    "nextSuggestion",
    "previousSuggestion",
    "pickSuggestion1",
    "pickSuggestion2",
    "pickSuggestion3",
    "pickSuggestion4",
    "pickSuggestion5",
    "pickSuggestion6",
    "pickSuggestion7",
    "pickSuggestion8",
    "pickSuggestion9",
    # Editing
    "deleteBackward",
    "moveLeft",
    "moveRight",
    "selectAll",
    # History
    "undo",
    "redo",
]

KeybindingsConfig = dict[str, str | list[str]]

DEFAULT_MATHFIELD_KEYBINDINGS: dict[MathfieldAction, str | list[str]] = {
    "complete": "enter",
    "completeAll": "shift+enter",
    "acceptSuggestion": "tab",
    "reject": "escape",
    "enterLatexMode": "escape",
    "nextSuggestion": "down",
    "previousSuggestion": "up",
    **{f"pickSuggestion{n}": f"ctrl+{n}" for n in range(1, 10)},  # type: ignore[misc]
    "deleteBackward": "backspace",
    "moveLeft": "left",
    "moveRight": "right",
    "selectAll": "ctrl+a",
    "undo": "ctrl+z",
    "redo": ["ctrl+y", "ctrl+shift+z"],
}

# Actions only meaningful in one mode; a key may be bound in both.
LATEX_MODE_ACTIONS: frozenset[str] = frozenset({
    "complete",
    "completeAll",
    "acceptSuggestion",
    "reject",
    "nextSuggestion",
    "previousSuggestion",
    *(f"pickSuggestion{n}" for n in range(1, 10)),
})
MATH_MODE_ACTIONS: frozenset[str] = frozenset({"enterLatexMode"})

_MODIFIER_ORDER = ("ctrl", "alt", "shift", "meta")


def normalize_key(key: str) -> str:
    """Canonical key id: lower case, modifiers in a fixed order.

    ``"Shift+Ctrl+Z"`` and ``"ctrl+shift+z"`` normalize to the same id.
    A lone ``+`` is a valid key.
    """
    if key == "+" or "+" not in key:
        return key.lower() if len(key) > 1 else key
    *modifiers, base = key.split("+")
    if base == "":
        base = "+"
    mods = {m.lower() for m in modifiers}
    ordered = [m for m in _MODIFIER_ORDER if m in mods]
    return "+".join([*ordered, base.lower()])


class Keybindings:
    """Maps normalized key ids to actions, defaults overridden by config."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[str, list[str]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_keys.clear()
        for source in (DEFAULT_MATHFIELD_KEYBINDINGS, config):
            for action, keys in source.items():
                key_list = keys if isinstance(keys, list) else [keys]
                self._action_to_keys[action] = [normalize_key(k) for k in key_list]

    def matches(self, key: str, action: str) -> bool:
        return normalize_key(key) in self._action_to_keys.get(action, [])

    def action_for(self, key: str, mode: str | None = None) -> str | None:
        """First action bound to ``key`` that applies in ``mode``."""
        normalized = normalize_key(key)
        for action, keys in self._action_to_keys.items():
            if normalized not in keys:
                continue
            if mode is not None and not _applies(action, mode):
                continue
            return action
        return None

    def get_keys(self, action: str) -> list[str]:
        return list(self._action_to_keys.get(action, []))

    def set_config(self, config: KeybindingsConfig) -> None:
        self._build_maps(config)


def _applies(action: str, mode: str) -> bool:
    if action in LATEX_MODE_ACTIONS:
        return mode == "latex"
    if action in MATH_MODE_ACTIONS:
        return mode != "latex"
    return True
