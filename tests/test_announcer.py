"""Tests for mathedit.announcer."""

from __future__ import annotations

from mathedit.announcer import LiveRegion


class TestLiveRegion:
    def test_records_messages(self) -> None:
        region = LiveRegion()
        assert region.last is None
        region.announce("replacement", "\\alpha")
        assert region.last == ("replacement", "\\alpha")

    def test_keeps_latest_messages(self) -> None:
        region = LiveRegion(max_messages=2)
        for text in ("a", "b", "c"):
            region.announce("replacement", text)
        assert [text for _, text in region.messages] == ["b", "c"]
