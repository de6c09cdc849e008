"""CLI application entry point for fontgardener.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from fontgardener import __version__
from fontgardener.cli.output import (
    console,
    print_error,
    print_export_summary,
    print_header,
    print_import_summary,
    print_project_info,
    print_step,
    print_success,
)
from fontgardener.config import (
    ExportConfig,
    FontgardenerSettings,
    ImportConfig,
    LoggingConfig,
    SetConflictPolicy,
)
from fontgardener.core import GlyphExporter, GlyphImporter
from fontgardener.exceptions import CodecError, FontgardenerError, StoreError
from fontgardener.io import parse_name_list, parse_source
from fontgardener.store import Fontgarden
from fontgardener.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="fontgardener",
    help="Store the glyphs of a font family deduplicated and split into sets.",
    add_completion=False,
    no_args_is_help=True,
)

LogFileOption = Annotated[
    Path | None,
    typer.Option(
        "--log-file",
        help="Write detailed logs to file",
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option(
        "--log-level",
        help="Logging level (DEBUG|INFO|WARNING|ERROR)",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Verbose console output",
    ),
]
QuietOption = Annotated[
    bool,
    typer.Option(
        "--quiet",
        "-q",
        help="Minimal console output",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Fontgardener[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Store the glyphs of a font family deduplicated and split into sets."""


def _setup(
    log_file: Path | None, log_level: str, verbose: bool, quiet: bool
) -> LoggingConfig:
    """Validate output flags and configure logging."""
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    logging_config = LoggingConfig(log_file=log_file, log_level=log_level)
    configure_logging(
        log_file=logging_config.log_file,
        console_level="DEBUG" if verbose else logging_config.log_level,
        file_level=logging_config.file_log_level,
        quiet=quiet,
    )
    if not quiet:
        print_header(__version__)
    return logging_config


def _fail(error: Exception) -> typer.Exit:
    """Report an error and build the matching exit."""
    if isinstance(error, CodecError):
        print_error(f"Could not process source: {error.reason}", details=error.path)
    elif isinstance(error, StoreError):
        print_error(f"Fontgarden problem: {error}")
    elif isinstance(error, FontgardenerError):
        print_error(str(error))
    else:
        print_error(f"Unexpected error: {error}")
    return typer.Exit(code=1)


@app.command()
def new(
    path: Annotated[
        Path,
        typer.Argument(
            help="Fontgarden directory to create",
            show_default=False,
        ),
    ],
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    quiet: QuietOption = False,
) -> None:
    """Create a new, empty fontgarden.

    Example:
        fontgardener new MyFamily.fontgarden
    """
    _setup(log_file, log_level, False, quiet)

    try:
        Fontgarden.new(path)
    except FontgardenerError as e:
        raise _fail(e) from e

    if not quiet:
        print_success(f"Created {path}")


@app.command("import")
def import_(
    path: Annotated[
        Path,
        typer.Argument(
            help="Fontgarden directory to import into",
            show_default=False,
        ),
    ],
    glyphs_file: Annotated[
        Path,
        typer.Argument(
            help="Text file of glyphs to import, one per line",
            show_default=False,
        ),
    ],
    fonts: Annotated[
        list[Path],
        typer.Argument(
            help="UFO sources to import from",
            show_default=False,
        ),
    ],
    set_name: Annotated[
        str,
        typer.Option(
            "--set-name",
            "-s",
            help="Set to import glyphs into",
        ),
    ] = "default",
    source_names: Annotated[
        list[str] | None,
        typer.Option(
            "--source-name",
            help="Source name per UFO, in order (default: the UFO's style name)",
        ),
    ] = None,
    on_conflict: Annotated[
        SetConflictPolicy,
        typer.Option(
            "--on-conflict",
            help="What to do with glyphs that belong to another set",
        ),
    ] = SetConflictPolicy.MOVE,
    follow_components: Annotated[
        bool,
        typer.Option(
            "--follow-components/--no-follow-components",
            help="Also import glyphs used as components",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of worker threads (default: auto)",
            min=1,
        ),
    ] = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Import glyphs from UFO sources into a set.

    Example:
        fontgardener import MyFamily.fontgarden latin.txt Regular.ufo Bold.ufo --set-name Latin
    """
    logging_config = _setup(log_file, log_level, verbose, quiet)

    if source_names and len(source_names) != len(fonts):
        print_error(
            "Number of --source-name options does not match the number of UFOs",
            details=f"{len(source_names)} names for {len(fonts)} sources",
        )
        raise typer.Exit(code=1)

    settings = FontgardenerSettings(
        importing=ImportConfig(
            conflict_policy=on_conflict,
            follow_components=follow_components,
            max_workers=workers,
        ),
        logging=logging_config,
    )

    try:
        garden = Fontgarden.load(path)
        glyph_names = parse_name_list(glyphs_file)

        if not quiet:
            print_step("Loading sources")
        names = source_names or [None] * len(fonts)
        sources = [parse_source(font, name) for font, name in zip(fonts, names)]
        if not quiet:
            for font, source in zip(fonts, sources):
                console.print(f"  {font} → {source.name}")
            print_step(f"Importing {len(glyph_names)} glyphs")

        report = GlyphImporter(settings.importing).run(garden, set_name, glyph_names, sources)
    except Exception as e:
        raise _fail(e) from e

    if not quiet:
        print_import_summary(report, verbose=verbose)


@app.command()
def export(
    path: Annotated[
        Path,
        typer.Argument(
            help="Fontgarden directory to export from",
            show_default=False,
        ),
    ],
    set_names: Annotated[
        list[str] | None,
        typer.Option(
            "--set-name",
            "-s",
            help="Set to export (repeatable)",
        ),
    ] = None,
    glyphs_file: Annotated[
        Path | None,
        typer.Option(
            "--glyphs-file",
            help="Text file of glyphs to export, one per line",
        ),
    ] = None,
    source_names: Annotated[
        list[str] | None,
        typer.Option(
            "--source-name",
            help="Source to export (repeatable, default: all)",
        ),
    ] = None,
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory to write UFOs into",
        ),
    ] = Path("."),
    follow_components: Annotated[
        bool,
        typer.Option(
            "--follow-components/--no-follow-components",
            help="Also export glyphs used as components",
        ),
    ] = True,
    overwrite: Annotated[
        bool,
        typer.Option(
            "--overwrite/--no-overwrite",
            help="Replace existing UFOs in the output directory",
        ),
    ] = True,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Export sets or glyphs as one UFO per source.

    Without --set-name or --glyphs-file, every set is exported.

    Example:
        fontgardener export MyFamily.fontgarden --set-name Latin -o build
    """
    logging_config = _setup(log_file, log_level, verbose, quiet)

    settings = FontgardenerSettings(
        exporting=ExportConfig(follow_components=follow_components, overwrite=overwrite),
        logging=logging_config,
    )

    try:
        garden = Fontgarden.load(path)
        if not quiet:
            print_project_info(path, garden.sources, garden.sets.set_names())
        glyph_names = parse_name_list(glyphs_file) if glyphs_file is not None else None

        if not quiet:
            print_step("Exporting")
        report = GlyphExporter(settings.exporting).run(
            garden,
            output_dir,
            set_names=set_names or None,
            glyph_names=glyph_names,
            source_names=source_names or None,
        )
    except Exception as e:
        raise _fail(e) from e

    if not quiet:
        print_export_summary(report)


@app.command("remove-set")
def remove_set(
    path: Annotated[
        Path,
        typer.Argument(
            help="Fontgarden directory",
            show_default=False,
        ),
    ],
    set_name: Annotated[
        str,
        typer.Argument(
            help="Set to remove",
            show_default=False,
        ),
    ],
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    quiet: QuietOption = False,
) -> None:
    """Remove a set and its glyphs from a fontgarden."""
    _setup(log_file, log_level, False, quiet)

    try:
        garden = Fontgarden.load(path)
        removed = garden.remove_set(set_name)
    except Exception as e:
        raise _fail(e) from e

    if not quiet:
        print_success(f"Removed set {set_name} ({len(removed)} glyphs)")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
