"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from obsidiant.commands.convert import execute_convert
from obsidiant.commands.inspect import execute_inspect
from obsidiant.models.config import ClassifierConfig

app = typer.Typer(
    name="obsidiant",
    help="Convert EPUB books into Obsidian notes, one note per chapter.",
    add_completion=False,
)

console = Console()

SUPPORTED_MODES = ("epub",)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging through rich on stderr."""
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def validate_input(book_path: Path) -> Path:
    if not book_path.exists():
        console.print(f"[red]File not found: {book_path}[/]")
        raise typer.Exit(1)
    if book_path.suffix.lower() != ".epub":
        console.print(f"[red]Unsupported file format: {book_path.suffix or '(none)'}[/]")
        console.print("[dim]Supported formats: .epub[/]")
        raise typer.Exit(1)
    return book_path.resolve()


def load_config(config_path: Path | None) -> ClassifierConfig:
    try:
        return ClassifierConfig.load(config_path)
    except Exception as e:
        console.print(f"[red]Invalid configuration file {config_path}: {e}[/]")
        raise typer.Exit(1)


ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="JSON file overriding classifier thresholds",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Show detailed analysis logs",
    ),
]


@app.command()
def convert(
    book_path: Annotated[
        Path,
        typer.Argument(help="Path to the EPUB file"),
    ],
    output_dir: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for the Obsidian notes",
        ),
    ] = Path("./Books"),
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Input mode (only 'epub' is supported)",
        ),
    ] = "epub",
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Convert an EPUB into an Obsidian book note plus chapter notes."""
    setup_logging(verbose=verbose, quiet=quiet)

    if mode not in SUPPORTED_MODES:
        console.print(f"[red]Unsupported mode: {mode}. Use one of: {', '.join(SUPPORTED_MODES)}[/]")
        raise typer.Exit(1)

    book_path = validate_input(book_path)
    config = load_config(config_path)

    try:
        execute_convert(
            book_path=book_path,
            output_dir=output_dir,
            config=config,
            quiet=quiet,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error: {e}[/]")
        raise typer.Exit(1)


@app.command()
def inspect(
    book_path: Annotated[
        Path,
        typer.Argument(help="Path to the EPUB file"),
    ],
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the classification as JSON",
        ),
    ] = False,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show how an EPUB's spine is classified, without writing notes."""
    setup_logging(verbose=verbose, quiet=as_json)

    book_path = validate_input(book_path)
    config = load_config(config_path)

    try:
        execute_inspect(
            book_path=book_path,
            config=config,
            as_json=as_json,
            console=console,
        )
    except Exception as e:
        console.print(f"[red]Error reading file: {e}[/]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
