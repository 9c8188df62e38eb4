from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.traceback import Traceback

from .conversation import ConversationState
from .models import AnalysisResult, ChecklistResult, ChecklistStatus, Speaker
from .report import SECTION_TITLES

STATUS_STYLES = {
    ChecklistStatus.PASS: ("✅", "green"),
    ChecklistStatus.FAIL: ("❌", "red"),
    ChecklistStatus.WARNING: ("⚠️", "yellow"),
}


def _score_style(score: int) -> str:
    if score >= 80:
        return "bold green"
    if score >= 60:
        return "bold yellow"
    return "bold red"


class ReviewDisplay:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_analysis(self, analysis: AnalysisResult, title: str = "SINTA Analysis"):
        status = Text()
        status.append(f"⭐ {analysis.level.value}\n", style="bold blue")
        status.append("Publishability: ")
        status.append(f"{analysis.publishability_score}/100\n", style=_score_style(analysis.publishability_score))
        status.append("Completeness: ")
        status.append(f"{analysis.completeness}%\n", style=_score_style(analysis.completeness))

        if analysis.weaknesses:
            status.append("\nWeaknesses\n", style="bold red")
            for i, weakness in enumerate(analysis.weaknesses, 1):
                status.append(f"{i}. {weakness}\n")
        if analysis.suggestions:
            status.append("\nSuggestions\n", style="bold green")
            for suggestion in analysis.suggestions:
                status.append(f"✓ {suggestion}\n")

        self.console.print(Panel(status, title=title))

        table = Table(title="Detailed Analysis", show_lines=True)
        table.add_column("Section", style="cyan", no_wrap=True)
        table.add_column("Commentary")
        for key, label in SECTION_TITLES.items():
            table.add_row(label, analysis.section_analysis[key])
        self.console.print(table)

    def show_checklist(self, checklist: ChecklistResult):
        table = Table(title=f"SINTA Requirements ({checklist.passed_count}/{checklist.total_count} passed)")
        table.add_column("", no_wrap=True)
        table.add_column("Requirement", style="bold")
        table.add_column("Details")
        for item in checklist.items:
            icon, style = STATUS_STYLES[item.status]
            table.add_row(icon, Text(item.name, style=style), item.details)
        self.console.print(table)

    def show_conversation(self, conversation: ConversationState):
        for turn in conversation.turns:
            if turn.speaker is Speaker.REQUESTER:
                self.console.print(Panel(turn.text, title="You", title_align="right", border_style="blue"))
            else:
                self.console.print(Panel(turn.text, title="Reviewer", title_align="left", border_style="green"))

    def show_error(self, error: Exception, context: Optional[str] = None, show_traceback: bool = False):
        """Show error details; the caller decides whether to offer a retry"""
        status = Text()
        status.append("❌ Request Failed!\n\n", style="bold red")

        if context:
            status.append(f"Context: {context}\n\n", style="yellow")

        if getattr(error, 'status_code', None) is not None:
            status.append(f"Status Code: {error.status_code}\n", style="yellow")

        status.append(f"Error Type: {type(error).__name__}\n", style="red")
        status.append(f"Error Message: {str(error)}\n", style="red")

        if getattr(error, 'response_body', None):
            status.append(f"\nResponse Details:\n{error.response_body}", style="dim red")
        if getattr(error, 'raw_text', None):
            status.append(f"\nModel Output:\n{error.raw_text}", style="dim red")

        self.console.print(Panel(status, title="SINTA Reviewer"))

        if show_traceback and error.__traceback__ is not None:
            self.console.print("\n[bold red]Traceback:[/]")
            self.console.print(Traceback.from_exception(
                type(error),
                error,
                error.__traceback__,
            ))
