"""Accessibility announcements."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

AnnounceEvent = Literal["replacement"]


class Announcer(Protocol):
    def announce(self, event: AnnounceEvent, text: str) -> None: ...


@dataclass
class LiveRegion:
    """Records announcements the way a screen-reader live region would."""

    messages: list[tuple[AnnounceEvent, str]] = field(default_factory=list)
    max_messages: int = 50

    def announce(self, event: AnnounceEvent, text: str) -> None:
        logger.debug("announce %s: %s", event, text)
        self.messages.append((event, text))
        if len(self.messages) > self.max_messages:
            del self.messages[0]

    @property
    def last(self) -> tuple[AnnounceEvent, str] | None:
        return self.messages[-1] if self.messages else None
