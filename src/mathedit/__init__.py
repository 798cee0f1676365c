"""mathedit: LaTeX command autocomplete for a structured math editor."""

# Commit protocol and suggestion engine
from mathedit.autocomplete import (
    COMPLETIONS,
    Completion,
    accept_command_suggestion,
    complete,
    insert_ghost_suffix,
    next_suggestion,
    pick_suggestion,
    previous_suggestion,
    remove_suggestion,
    update_autocomplete,
)

# Default collaborators
from mathedit.announcer import Announcer, LiveRegion
from mathedit.definitions import DEFAULT_REGISTRY, CommandDefinition, CommandRegistry
from mathedit.fuzzy import FuzzyMatch, fuzzy_match, rank_commands
from mathedit.keybindings import DEFAULT_MATHFIELD_KEYBINDINGS, Keybindings, normalize_key
from mathedit.latex import get_value, insert_latex, parse_latex, serialize, tokenize

# Session
from mathedit.mathfield import Mathfield, SuggestionSource
from mathedit.popover import (
    SuggestionDisplay,
    SuggestionPopover,
    hide_suggestion_popover,
    is_suggestion_popover_visible,
    show_suggestion_popover,
    update_suggestion_popover_position,
)
from mathedit.settings import MathfieldSettings, load_settings, save_settings
from mathedit.span import CommandToken, command_span, find_command_token, get_latex_group
from mathedit.styling import compute_insert_style
from mathedit.tree import Document, Node, NodeState, Style
from mathedit.undo import UndoManager

__all__ = [
    "COMPLETIONS",
    "DEFAULT_MATHFIELD_KEYBINDINGS",
    "DEFAULT_REGISTRY",
    "Announcer",
    "CommandDefinition",
    "CommandRegistry",
    "CommandToken",
    "Completion",
    "Document",
    "FuzzyMatch",
    "Keybindings",
    "LiveRegion",
    "Mathfield",
    "MathfieldSettings",
    "Node",
    "NodeState",
    "Style",
    "SuggestionDisplay",
    "SuggestionPopover",
    "SuggestionSource",
    "UndoManager",
    "accept_command_suggestion",
    "command_span",
    "complete",
    "compute_insert_style",
    "find_command_token",
    "fuzzy_match",
    "get_latex_group",
    "get_value",
    "hide_suggestion_popover",
    "insert_ghost_suffix",
    "insert_latex",
    "is_suggestion_popover_visible",
    "load_settings",
    "next_suggestion",
    "normalize_key",
    "parse_latex",
    "pick_suggestion",
    "previous_suggestion",
    "rank_commands",
    "remove_suggestion",
    "save_settings",
    "serialize",
    "show_suggestion_popover",
    "tokenize",
    "update_autocomplete",
    "update_suggestion_popover_position",
]
