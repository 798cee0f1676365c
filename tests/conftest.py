from __future__ import annotations

from typing import Sequence

import pytest

from mathedit.mathfield import Mathfield
from mathedit.settings import MathfieldSettings


class RecordingDisplay:
    """Display sink that records every call made to it."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def show_candidates(self, suggestions: Sequence[str], active_index: int) -> None:
        self.calls.append(("show", list(suggestions), active_index))

    def hide_candidates(self) -> None:
        self.calls.append(("hide",))


@pytest.fixture
def mf() -> Mathfield:
    """A fresh editor in math mode with default settings."""
    return Mathfield(MathfieldSettings())


@pytest.fixture
def latex_mf(mf: Mathfield) -> Mathfield:
    """An editor with an empty raw LaTeX region open."""
    mf.switch_mode("latex")
    return mf


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()
