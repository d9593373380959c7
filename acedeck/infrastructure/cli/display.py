import logging
import time
from datetime import datetime
from typing import Any, List, Optional, Sequence

from rich.align import Align
from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from acedeck.domain.interfaces.user_interface import UserInterface
from acedeck.domain.models.catalog import Subject
from acedeck.domain.models.common import ProcessedOutput, PromptText, RotationStatus
from acedeck.utils.notebook import Section

logger = logging.getLogger(__name__)


def _format_duration(session_duration_secs: float) -> str:
    minutes, seconds = divmod(int(session_duration_secs), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {seconds}s" if hours else f"{minutes}m {seconds}s"


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()
        self.session_start_time = time.time()
        self.last_sender = None

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays output text to the user, rendering Markdown in a panel.

        Args:
            output: The processed output string to display.
            **kwargs: Additional arguments including:
                - title: The title/sender of the message (default: "AceBot")
        """
        title = kwargs.get("title", "AceBot")
        timestamp = datetime.now().strftime("%H:%M:%S")

        # Add a small spacing above if not a continuation
        if self.last_sender != title:
            self.console.print("")
        self.last_sender = title

        header = f"[bold white]{title}[/bold white] [dim]·[/dim] [dim white]{timestamp}[/dim white]"
        self.console.print(Panel(
            Markdown(str(output)),
            title=header,
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1),
        ))

    def display_notebook(self, sections: List[Section], title: str, **kwargs: Any) -> None:
        """Displays generated notes or questions, one panel per section."""
        logger.debug(f"Displaying notebook '{title}' with {len(sections)} sections")
        self.console.print("")
        self.console.print(Panel(Text(title, justify="center", style="bold cyan"), border_style="cyan", box=SIMPLE))
        for section in sections:
            self.console.print(Panel(
                Text(section.body),
                title=f"[bold magenta]{section.title}[/bold magenta]",
                title_align="left",
                border_style="magenta",
                box=ROUNDED,
                padding=(0, 1),
            ))

    def get_prompt(self, prompt_message: str = "Input: ") -> PromptText:
        """Gets input from the user using the rich console."""
        self.last_sender = None
        self.console.print("")
        user_input = self.console.input(f"[bold green] {prompt_message} [/bold green]")
        return PromptText(user_input)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_progress(self, message: str) -> None:
        """Shows a one-line progress note such as 'Limit Reached (429), rotating key...'."""
        self.console.print(f"[dim yellow]… {message}[/dim yellow]")

    def display_status(self, provider_name: str, status: RotationStatus) -> None:
        """Displays the credential rotation snapshot of a provider."""
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")
        table.add_row("Provider", provider_name)
        table.add_row("Active keys", str(status.active_credentials))
        table.add_row("Current key", f"{status.current_index} of {status.active_credentials}")
        table.add_row("Last rotation", status.last_rotation_reason or "-")
        self.console.print(table)

    def display_catalog(self, subjects: Sequence[Subject]) -> None:
        """Lists subjects; for a single subject lists its chapters instead."""
        if len(subjects) == 1:
            subject = subjects[0]
            table = Table(title=f"{subject.icon} {subject.name}", box=ROUNDED, border_style="cyan")
            table.add_column("Id", style="dim")
            table.add_column("Chapter", style="bold")
            table.add_column("Description")
            for chapter in subject.chapters:
                table.add_row(chapter.id, chapter.title, chapter.description)
        else:
            table = Table(title="Subjects", box=ROUNDED, border_style="cyan")
            table.add_column("Id", style="dim")
            table.add_column("Subject", style="bold")
            table.add_column("Chapters", justify="right")
            for subject in subjects:
                table.add_row(subject.id, f"{subject.icon} {subject.name}", str(len(subject.chapters)))
        self.console.print(table)

    def display_session_header(self, provider_name: str = "AI") -> None:
        """Displays a stylized header for a new tutor session."""
        self.session_start_time = time.time()
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]AceBot AI Tutor[/bold cyan]")
        table.add_row(f"AI Provider: [bold]{provider_name}[/bold]")
        table.add_row(f"Session started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        table.add_row("Type 'exit' or 'quit' to end the session")
        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        """Displays a stylized footer at the end of a tutor session."""
        table = Table(show_header=False, box=SIMPLE, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]Tutor Session Summary[/bold cyan]")
        table.add_row(f"Messages exchanged: [bold]{message_count}[/bold]")
        table.add_row(f"Session duration: [bold]{_format_duration(session_duration_secs)}[/bold]")
        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")
