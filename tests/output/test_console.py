"""Tests for the Rich console factory."""

from __future__ import annotations

from unitwire.output.console import create_console, get_output, style_for_state


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console()
        console.print("[uw.ok]OK[/uw.ok] done")
        assert get_output(console).strip() == "OK done"

    def test_state_styles(self) -> None:
        assert style_for_state("failed") == "uw.state.failed"
        assert style_for_state("activating") == ""
