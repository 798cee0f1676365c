"""Command table and the default suggestion source."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Sequence

from mathedit.fuzzy import COMMAND_MARKER, rank_commands

logger = logging.getLogger(__name__)

CommandCategory = Literal["symbol", "function", "structure", "style"]

DEFAULT_MAX_SUGGESTIONS = 50


@dataclass(frozen=True)
class CommandDefinition:
    """How a control sequence parses and where the panel lists it."""

    name: str
    kind: str
    glyph: str = ""
    args: int = 0
    category: CommandCategory = "symbol"


def _table(
    kind: str,
    entries: dict[str, str],
    category: CommandCategory = "symbol",
) -> list[CommandDefinition]:
    return [
        CommandDefinition(
            name=COMMAND_MARKER + name, kind=kind, glyph=glyph, category=category
        )
        for name, glyph in entries.items()
    ]


GREEK = {
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ", "epsilon": "ϵ",
    "varepsilon": "ε", "zeta": "ζ", "eta": "η", "theta": "θ", "vartheta": "ϑ",
    "iota": "ι", "kappa": "κ", "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ",
    "pi": "π", "varpi": "ϖ", "rho": "ρ", "varrho": "ϱ", "sigma": "σ",
    "varsigma": "ς", "tau": "τ", "upsilon": "υ", "phi": "ϕ", "varphi": "φ",
    "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ", "Xi": "Ξ",
    "Pi": "Π", "Sigma": "Σ", "Upsilon": "Υ", "Phi": "Φ", "Psi": "Ψ",
    "Omega": "Ω",
}

ORDINARY = {
    "infty": "∞", "partial": "∂", "nabla": "∇", "emptyset": "∅",
    "hbar": "ℏ", "ell": "ℓ", "aleph": "ℵ", "forall": "∀", "exists": "∃",
    "neg": "¬", "angle": "∠", "prime": "′", "degree": "°",
}

BINARY = {
    "pm": "±", "mp": "∓", "times": "×", "div": "÷", "cdot": "⋅", "ast": "∗",
    "circ": "∘", "bullet": "∙", "cup": "∪", "cap": "∩", "wedge": "∧",
    "vee": "∨", "oplus": "⊕", "otimes": "⊗", "setminus": "∖",
}

RELATIONS = {
    "le": "≤", "leq": "≤", "ge": "≥", "geq": "≥", "ne": "≠", "neq": "≠",
    "approx": "≈", "equiv": "≡", "sim": "∼", "simeq": "≃", "cong": "≅",
    "propto": "∝", "subset": "⊂", "subseteq": "⊆", "supset": "⊃",
    "supseteq": "⊇", "in": "∈", "notin": "∉", "ni": "∋", "to": "→",
    "rightarrow": "→", "leftarrow": "←", "Rightarrow": "⇒",
    "Leftarrow": "⇐", "iff": "⟺", "implies": "⟹", "mapsto": "↦",
}

LARGE_OPERATORS = {
    "sum": "∑", "prod": "∏", "coprod": "∐", "int": "∫", "iint": "∬",
    "oint": "∮", "bigcup": "⋃", "bigcap": "⋂",
}

FUNCTIONS = {
    name: name
    for name in (
        "sin", "cos", "tan", "cot", "sec", "csc", "arcsin", "arccos",
        "arctan", "sinh", "cosh", "tanh", "log", "ln", "exp", "lim",
        "max", "min", "sup", "inf", "det", "dim", "gcd", "deg",
    )
}

STRUCTURES = [
    CommandDefinition("\\frac", "genfrac", "⁄", args=2, category="structure"),
    CommandDefinition("\\dfrac", "genfrac", "⁄", args=2, category="structure"),
    CommandDefinition("\\tfrac", "genfrac", "⁄", args=2, category="structure"),
    CommandDefinition("\\binom", "genfrac", "()", args=2, category="structure"),
    CommandDefinition("\\sqrt", "sqrt", "√", args=1, category="structure"),
    CommandDefinition("\\overline", "font", "‾", args=1, category="structure"),
    CommandDefinition("\\vec", "font", "→", args=1, category="structure"),
    CommandDefinition("\\hat", "font", "^", args=1, category="structure"),
]

STYLES = [
    CommandDefinition(COMMAND_MARKER + name, "font", args=1, category="style")
    for name in (
        "mathbf", "mathit", "mathrm", "mathsf", "mathtt", "mathbb",
        "mathcal", "mathfrak", "boldsymbol", "text", "textbf", "textit",
        "boxed",
    )
]

SPACING = _table("space", {",": " ", ";": " ", "quad": "  ", "qquad": "    "})

BUILTIN_DEFINITIONS: list[CommandDefinition] = [
    *_table("mord", GREEK),
    *_table("mord", ORDINARY),
    *_table("mbin", BINARY),
    *_table("mrel", RELATIONS),
    *_table("mop", LARGE_OPERATORS),
    *_table("mop", FUNCTIONS, category="function"),
    *STRUCTURES,
    *STYLES,
    *SPACING,
    CommandDefinition("\\{", "mopen", "{"),
    CommandDefinition("\\}", "mclose", "}"),
]


class CommandRegistry:
    """Known commands and macros; also the default suggestion source."""

    def __init__(
        self,
        definitions: Iterable[CommandDefinition] = (),
        macros: dict[str, str] | None = None,
    ) -> None:
        self._definitions: dict[str, CommandDefinition] = {}
        self._macros: dict[str, str] = {}
        for definition in definitions:
            self.register(definition)
        for name, expansion in (macros or {}).items():
            self.define_macro(name, expansion)

    @classmethod
    def default(cls, macros: dict[str, str] | None = None) -> CommandRegistry:
        return cls(BUILTIN_DEFINITIONS, macros)

    def register(self, definition: CommandDefinition) -> None:
        if not definition.name.startswith(COMMAND_MARKER):
            raise ValueError(f"Command names start with a backslash: {definition.name!r}")
        self._definitions[definition.name] = definition

    def define_macro(self, name: str, expansion: str) -> None:
        self.register(CommandDefinition(name=name, kind="macro"))
        self._macros[name] = expansion
        logger.debug("Defined macro %s -> %s", name, expansion)

    def get(self, name: str) -> CommandDefinition | None:
        return self._definitions.get(name)

    def macro(self, name: str) -> str | None:
        return self._macros.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._definitions)

    def suggest(self, context: Any, prefix: str) -> Sequence[str]:
        """Ranked full command names for ``prefix`` (marker included)."""
        settings = getattr(context, "settings", None)
        limit = getattr(settings, "max_suggestions", DEFAULT_MAX_SUGGESTIONS)
        return rank_commands(prefix, self._definitions)[:limit]


DEFAULT_REGISTRY = CommandRegistry.default()
