#!/usr/bin/env python3
"""
Terminal UI
===========
Rich-based rendering for the quiz: the round screen (prompt, clue, letter
boxes, feedback) and the end-of-session report.

Usage:
    from lexaccess.ui import QuizUI

    ui = QuizUI()
    ui.show_round(session)
    ui.show_report(report)
"""

from typing import List, Optional

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lexaccess.content import Content, load_content
from lexaccess.models import Channel, MatchOutcome, Report, RoundResult
from lexaccess.scoring import compute_round_score
from lexaccess.settings import get_setting

GREEN = "bold green"

_STATUS = {
    MatchOutcome.CORRECT: ("✓", "bold green"),
    MatchOutcome.PARTIAL: ("~", "bold yellow"),
    MatchOutcome.WRONG: ("✗", "dim"),
}


def render_bar(pct: float, width: int = None) -> Text:
    """A horizontal percentage bar."""
    if width is None:
        width = get_setting("ui.bar_width", 20)
    pct = max(0, min(100, pct))
    filled = int(round(width * pct / 100))
    bar = Text("█" * filled, style="green")
    bar.append("░" * (width - filled), style="dim")
    return bar


def render_letters(state) -> Text:
    """Letter boxes for the round in progress."""
    text = Text()
    cells = state.masked().split(" ")
    for i, cell in enumerate(cells):
        if i:
            text.append(" ")
        if i < state.revealed or state.finished:
            text.append(cell, style=GREEN)
        elif cell == "_":
            text.append(cell, style="dim")
        else:
            text.append(cell, style="bold white")
    return text


class QuizUI:
    """
    Renders quiz screens to a Rich console.

    Args:
        console: Console to draw on (default: a new stdout console)
        content: Static content (default: content.yaml)
    """

    def __init__(self, console: Console = None, content: Content = None):
        self.console = console or Console(highlight=False)
        self.content = content or load_content()

    # === Round screen ===

    def render_round(self, session) -> Panel:
        state = session.current
        meta = self.content.channels[state.link.type]

        header = Text()
        if session.is_practice:
            header.append(f"Practice round {session.round_index + 1} of {session.total_rounds}", style="dim")
        else:
            header.append(f"Round {session.round_index + 1} of {session.total_rounds}", style="dim")
        header.append("  ")
        header.append(render_bar(session.progress * 100))

        body = Table.grid(padding=(0, 1))
        body.add_column()
        body.add_row(header)
        body.add_row(Text(""))
        body.add_row(Text("Starting word", style="dim"))
        body.add_row(Text(state.link.prompt, style="bold white"))
        body.add_row(Text(""))
        body.add_row(Text(f"{meta.icon} {meta.label}: {meta.description}", style="cyan"))
        body.add_row(Text(state.link.clue))
        body.add_row(Text(""))
        body.add_row(render_letters(state))

        feedback = self.render_feedback(state.feedback)
        if feedback is not None:
            body.add_row(Text(""))
            body.add_row(feedback)

        return Panel(body, title="[bold]Semantic Access Test[/bold]", border_style="green", box=box.ROUNDED)

    def render_feedback(self, feedback: Optional[MatchOutcome]) -> Optional[Text]:
        if feedback is MatchOutcome.CORRECT:
            return Text("✓ Correct!", style=GREEN)
        if feedback is MatchOutcome.PARTIAL:
            text = Text("Sounds right, check the spelling", style="bold yellow")
            text.append("\nLogged as a phonological near-miss", style="dim")
            return text
        if feedback is MatchOutcome.WRONG:
            return Text("Not quite, try again", style="bold red")
        return None

    def show_round(self, session):
        self.console.print(self.render_round(session))

    # === Report ===

    def _score_panel(self, report: Report) -> Panel:
        text = Text(justify="center")
        text.append(f"{report.pct}", style="bold green")
        text.append(" / 100\n", style="dim")
        text.append(f"{report.percentile}th percentile · ages {report.age_bracket}\n", style="green")
        text.append(
            f"Age-group average: {report.norm.mean:g} · SD ±{report.norm.sd:g}", style="dim"
        )
        return Panel(text, title="[bold]Your results[/bold]", border_style="green", box=box.ROUNDED)

    def _channels_table(self, report: Report) -> Table:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Channel")
        table.add_column("Score", justify="right")
        table.add_column("")
        for score in report.channel_scores:
            meta = self.content.channels[score.channel]
            table.add_row(f"{meta.icon} {score.label}", f"{score.pct}", render_bar(score.pct))
        return table

    def _near_miss_panel(self, report: Report) -> Optional[Panel]:
        if not report.partial_count:
            return None
        noun = "answer" if report.partial_count == 1 else "answers"
        text = Text(f"{report.partial_count} sound-correct, spelling-incorrect {noun}\n", style="bold yellow")
        channels = ", ".join(c.label for c in report.partial_types)
        text.append(f"Channels: {channels}\n", style="dim")
        text.append(self.content.near_miss)
        return Panel(text, title="[bold]Phonological near-misses[/bold]", border_style="yellow", box=box.ROUNDED)

    def _archetype_panel(self, report: Report) -> Panel:
        a = report.archetype
        text = Text(f"{a.icon} {a.name}\n", style="bold")
        text.append(a.description)
        return Panel(text, title="[bold]Your profile[/bold]", border_style="magenta", box=box.ROUNDED)

    def _insights_panel(self, report: Report) -> Panel:
        text = Text()
        text.append(f"Strongest: {report.strongest.label} ({report.strongest.pct})\n", style=GREEN)
        text.append(self.content.strengths[report.strongest.channel] + "\n\n")
        text.append(f"Growth area: {report.weakest.label} ({report.weakest.pct})\n", style="bold yellow")
        text.append(self.content.weaknesses[report.weakest.channel])
        return Panel(text, title="[bold]Strengths & growth[/bold]", border_style="cyan", box=box.ROUNDED)

    def _strategies_panel(self, channel: Channel) -> Panel:
        text = Text()
        for i, strategy in enumerate(self.content.strategies[channel], 1):
            if i > 1:
                text.append("\n\n")
            text.append(f"{i}. {strategy.title}\n", style="bold")
            text.append(strategy.body)
        label = self.content.channels[channel].label
        return Panel(text, title=f"[bold]How to train your {label.lower()} channel[/bold]",
                     border_style="blue", box=box.ROUNDED)

    def _why_panel(self) -> Optional[Panel]:
        if not self.content.why_it_matters:
            return None
        text = Text()
        for i, note in enumerate(self.content.why_it_matters):
            if i:
                text.append("\n")
            text.append(f"{note.label}: ", style="bold")
            text.append(note.note)
        return Panel(text, title="[bold]Why it matters[/bold]", border_style="dim", box=box.ROUNDED)

    def _rounds_table(self, results: List[RoundResult]) -> Table:
        table = Table(title="Round summary", box=box.SIMPLE_HEAD, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Word")
        table.add_column("Type")
        table.add_column("", justify="center")
        table.add_column("Reveals", justify="right")
        table.add_column("Time", justify="right")
        table.add_column("Score", justify="right")

        for i, r in enumerate(results):
            icon, style = _STATUS[r.outcome]
            table.add_row(
                str(i + 1),
                r.answer or "-",
                self.content.channels[r.type].label,
                Text(icon, style=style),
                str(r.reveals),
                f"{r.time_ms / 1000:.1f}s",
                f"{compute_round_score(r):.1f}",
            )
        return table

    def render_report(self, report: Report, detailed: bool = True) -> Group:
        parts = [
            self._score_panel(report),
            self._channels_table(report),
        ]
        near_miss = self._near_miss_panel(report)
        if near_miss is not None:
            parts.append(near_miss)
        parts.append(self._archetype_panel(report))
        parts.append(self._insights_panel(report))
        if detailed:
            why = self._why_panel()
            if why is not None:
                parts.append(why)
            parts.append(self._strategies_panel(report.weakest.channel))
            if report.results:
                parts.append(self._rounds_table(list(report.results)))
        return Group(*parts)

    def show_report(self, report: Report, detailed: bool = True):
        self.console.print(self.render_report(report, detailed=detailed))


__all__ = [
    'QuizUI',
    'render_bar',
    'render_letters',
]
