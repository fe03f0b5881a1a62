"""
Rich formatting utilities for consistent terminal output.

"Beauty is in the eye of the beholder. But colors help." — schema.cx
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import RunSummary

# Centralized console instance
console = Console()


class Colors:
    """Consistent color scheme for the application."""
    SUCCESS = "green"
    ERROR = "red"
    WARNING = "yellow"
    INFO = "cyan"
    MUTED = "dim"
    REPO_NAME = "bold blue"


def print_success(message: str, prefix: str = "✓") -> None:
    """Print a success message in green."""
    console.print(f"[{Colors.SUCCESS}]{prefix} {message}[/{Colors.SUCCESS}]")


def print_error(message: str, prefix: str = "✗") -> None:
    """Print an error message in red."""
    console.print(f"[{Colors.ERROR}]{prefix} {message}[/{Colors.ERROR}]")


def print_warning(message: str, prefix: str = "⚠") -> None:
    """Print a warning message in yellow."""
    console.print(f"[{Colors.WARNING}]{prefix} {message}[/{Colors.WARNING}]")


def print_info(message: str, prefix: str = "ℹ") -> None:
    """Print an info message in cyan."""
    console.print(f"[{Colors.INFO}]{prefix} {message}[/{Colors.INFO}]")


def print_section_header(text: str) -> None:
    """Print a section header with visual separation."""
    console.print(f"\n[bold cyan]{'─' * 60}[/bold cyan]")
    console.print(f"[bold cyan]{text}[/bold cyan]")
    console.print(f"[bold cyan]{'─' * 60}[/bold cyan]\n")


def format_repo_name(full_name: str) -> str:
    """Format a repository identifier with consistent styling."""
    return f"[{Colors.REPO_NAME}]{full_name}[/{Colors.REPO_NAME}]"


def create_summary_table(title: str) -> Table:
    """Create a styled table for summary statistics."""
    table = Table(title=title, show_header=True, header_style="bold cyan", border_style="cyan")
    return table


def print_run_summary(summary: RunSummary) -> None:
    """
    Print the final run summary.

    "Numbers tell the story. Make sure it's a good one." — schema.cx
    """
    table = create_summary_table("Backup Summary")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    table.add_row("Total repos", str(summary.total))
    table.add_row(f"[{Colors.SUCCESS}]Successful[/{Colors.SUCCESS}]", str(summary.succeeded))
    table.add_row(f"[{Colors.ERROR}]Failed[/{Colors.ERROR}]", str(summary.failed_count))
    console.print()
    console.print(table)

    if summary.failed:
        console.print("\n[bold red]Failed repositories:[/bold red]")
        for identifier in summary.failed:
            outcome = summary.outcome_for(identifier)
            reason = f" [{Colors.MUTED}]({escape(outcome.reason)})[/{Colors.MUTED}]" if outcome and outcome.reason else ""
            console.print(f"  - {escape(identifier)}{reason}", highlight=False)
