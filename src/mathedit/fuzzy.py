"""Fuzzy matching and ranking of command names.

A query matches if all of its characters appear in the text in order (not
necessarily consecutive). Lower score = better match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

COMMAND_MARKER = "\\"


@dataclass
class FuzzyMatch:
    matches: bool
    score: float


def fuzzy_match(query: str, text: str, *, case_sensitive: bool = False) -> FuzzyMatch:
    if not case_sensitive:
        query = query.lower()
        text = text.lower()

    if not query:
        return FuzzyMatch(matches=True, score=0)
    if len(query) > len(text):
        return FuzzyMatch(matches=False, score=0)

    query_index = 0
    score: float = 0
    last_match_index = -1
    consecutive_matches = 0

    for i, char in enumerate(text):
        if query_index >= len(query):
            break
        if char != query[query_index]:
            continue

        if last_match_index == i - 1:
            consecutive_matches += 1
            score -= consecutive_matches * 5
        else:
            consecutive_matches = 0
            if last_match_index >= 0:
                score += (i - last_match_index - 1) * 2

        # Matching the first letter of the name counts as a word boundary
        if i == 0:
            score -= 10

        score += i * 0.1
        last_match_index = i
        query_index += 1

    if query_index < len(query):
        return FuzzyMatch(matches=False, score=0)

    # Unmatched trailing characters make a candidate slightly worse
    score += (len(text) - last_match_index - 1) * 0.5
    return FuzzyMatch(matches=True, score=score)


def rank_commands(prefix: str, names: Iterable[str]) -> list[str]:
    """Rank command names for a typed ``prefix`` such as ``\\alph``.

    Names that start with the prefix come first, shortest first. Names the
    prefix only fuzzy-matches (case-sensitively, marker excluded) follow, best
    score first.
    """
    if not prefix.startswith(COMMAND_MARKER) or len(prefix) < 2:
        return []

    candidates = list(names)
    exact = sorted(
        (name for name in candidates if name.startswith(prefix)),
        key=lambda name: (len(name), name),
    )
    seen = set(exact)

    query = prefix[1:]
    scored: list[tuple[float, int, str]] = []
    for name in candidates:
        if name in seen or not name.startswith(COMMAND_MARKER):
            continue
        match = fuzzy_match(query, name[1:], case_sensitive=True)
        if match.matches:
            scored.append((match.score, len(name), name))

    scored.sort()
    return exact + [name for _, _, name in scored]
