"""
Rich progress displays for CLI operations.

All output goes to stderr to preserve stdout for machine-readable output.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


def _model_display(model: str) -> str:
    return model if len(model) <= 40 else f"{model[:37]}..."


@contextmanager
def task_progress(
    action: str,
    model: str | None = None,
    provider: str | None = None,
    reference_used: bool = False,
) -> Iterator[None]:
    """
    Display a spinner while a provider call (and any polling) runs.

    Args:
        action: Verb phrase shown first, e.g. "Generating video"
        model: The model being used
        provider: Provider family the model routed to
        reference_used: Whether a reference image is being sent

    Yields:
        None while the call is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = [action]
    if model:
        desc_parts.append(f"[dim]({_model_display(model)})[/dim]")
    if provider:
        desc_parts.append(f"[dim]via {provider}[/dim]")
    if reference_used:
        desc_parts.append("• [dim cyan]with reference[/dim cyan]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(
    title: str,
    output: str,
    elapsed: float,
    model_used: str,
    provider: str,
    saved_to: Path | None = None,
    prompt_used: str | None = None,
) -> None:
    """
    Print a rich formatted success panel.

    Data URIs are shortened; the full value is still written to stdout.
    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    if saved_to is not None:
        table.add_row("Saved to", f"[bold green]{saved_to}[/bold green]")
    shown = output if len(output) <= 120 else f"{output[:117]}..."
    table.add_row("Result", shown)
    table.add_row("Model", model_used)
    table.add_row("Provider", provider)
    table.add_row("Time", f"{elapsed:.1f}s")
    if prompt_used:
        table.add_row("Prompt", f"[dim]{prompt_used}[/dim]")

    panel = Panel(
        table,
        title=f"[bold green]✓ {title}[/bold green]",
        border_style="green",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)


def print_text_result(title: str, text: str) -> None:
    """Print an analysis text in a panel."""
    console.print()
    console.print(Panel(text, title=f"[bold green]✓ {title}[/bold green]", border_style="green"))


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")
