"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from fontgardener.core import ExportReport, ImportReport

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Fontgardener[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_project_info(path: Path, sources: list[str], sets: list[str]) -> None:
    """Print fontgarden information.

    Args:
        path: Project directory
        sources: Source names
        sets: Set names
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(str(path))
    console.print(line)
    console.print(f"  {len(sources)} sources {SYM_DOT} {len(sets)} sets")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def _format_names(names: list[str], limit: int = 20) -> str:
    text = ", ".join(names[:limit])
    if len(names) > limit:
        text += f" {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(names) - limit} more)"
    return text


def print_import_summary(report: ImportReport, verbose: bool = False) -> None:
    """Print the result of an import.

    Args:
        report: Import report
        verbose: Also list moved and sparse glyphs by name
    """
    stats = report.stats
    console.print(
        f"\n[bold green]{SYM_OK} Imported[/bold green] into set "
        f"[bold]{report.set_name}[/bold] in {_format_time(stats.duration_seconds)}"
    )
    console.print(
        f"  {stats.glyph_count} glyphs {SYM_DOT} {len(report.sources)} sources {SYM_DOT} "
        f"{stats.entry_count} entries"
    )
    console.print(
        f"  {stats.payloads_added} payloads added {SYM_DOT} "
        f"{stats.payloads_removed} payloads removed"
    )

    if report.moved:
        console.print(f"  [yellow]{len(report.moved)}[/yellow] glyphs moved from other sets")
        if verbose:
            table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
            table.add_column("Glyph")
            table.add_column("Previous set")
            for glyph_name, previous in sorted(report.moved.items()):
                table.add_row(glyph_name, previous)
            console.print(table)

    if report.sparse:
        console.print(f"  {len(report.sparse)} glyphs not defined in every source")
        if verbose:
            for glyph_name, lacking in sorted(report.sparse.items()):
                console.print(f"  {glyph_name}: missing in {_format_names(lacking)}")


def print_export_summary(report: ExportReport) -> None:
    """Print the result of an export.

    Args:
        report: Export report
    """
    console.print(
        f"\n[bold green]{SYM_OK} Exported[/bold green] in "
        f"{_format_time(report.stats.duration_seconds)}"
    )
    for source_name, path in report.paths.items():
        line = Text("  ")
        line.append(str(path), style="bold")
        line.append(f" ({report.glyph_counts[source_name]} glyphs)")
        console.print(line)


def print_success(message: str) -> None:
    """Print a one-line success message.

    Args:
        message: Message text
    """
    console.print(f"\n[bold green]{SYM_OK}[/bold green] {message}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
