"""
Tests for the Terminal UI
=========================
Tests Rich rendering in lexaccess/ui.py.
"""

import sys
from io import StringIO
from pathlib import Path

from rich.console import Console

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lexaccess.models import Channel, RoundResult, WordLink
from lexaccess.report import generate_report
from lexaccess.session import QuizSession
from lexaccess.ui import QuizUI, render_bar


def _render(renderable) -> str:
    console = Console(file=StringIO(), width=120, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestRenderBar:
    def test_full_and_empty(self):
        assert render_bar(100, width=10).plain == "█" * 10
        assert render_bar(0, width=10).plain == "░" * 10

    def test_clamped(self):
        assert render_bar(150, width=4).plain == "████"


class TestRoundsTable:
    """Tests for the round summary."""

    def test_words_come_from_played_chain(self):
        """A custom chain shows its own answers, not the bundled ones."""
        chain = [
            WordLink(Channel.PHONO, "CAT", "HAT", "Worn on the head"),
            WordLink(Channel.SEMANTIC, "HAT", "CAP", "A brimmed one"),
        ]
        session = QuizSession("18–29", chain=chain, practice_chain=(), clock=lambda: 0.0)
        session.start_test()
        session.submit("AT")
        session.advance()
        session.skip()

        out = _render(QuizUI().render_report(session.report))
        assert "Round summary" in out
        assert "HAT" in out
        assert "CAP" in out
        assert "FLUTTER" not in out

    def test_unknown_words(self):
        report = generate_report([RoundResult(Channel.MIXED, True, False, 0, 1000)], "18–29")
        out = _render(QuizUI().render_report(report))
        assert "Round summary" in out
        assert "FLUTTER" not in out


class TestRoundScreen:
    def test_shows_prompt_and_letters(self):
        session = QuizSession("18–29", chain=[WordLink(Channel.PHONO, "NIGHT", "LIGHT", "Brightness")],
                              practice_chain=(), clock=lambda: 0.0)
        session.start_test()
        out = _render(QuizUI().render_round(session))
        assert "NIGHT" in out
        assert "Brightness" in out
        assert "L _ _ _ _" in out
