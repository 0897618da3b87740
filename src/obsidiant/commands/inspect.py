"""Inspect command implementation."""

from pathlib import Path

from rich.console import Console
from rich.table import Table

from obsidiant.commands.convert import load_book, summary_panel
from obsidiant.models.classification import Chapter, Classification
from obsidiant.models.config import ClassifierConfig

KIND_STYLES = {
    "front_matter": "dim",
    "prologue": "cyan",
    "chapter": "white",
    "epilogue": "cyan",
    "back_matter": "dim",
}


def segment_table(classification: Classification) -> Table:
    """One row per classified segment, in reading order."""
    table = Table(title="Book Structure", show_header=True, header_style="bold cyan")
    table.add_column("Spine", style="dim", width=5, justify="right")
    table.add_column("Kind")
    table.add_column("#", justify="right", style="green")
    table.add_column("Part", style="magenta")
    table.add_column("Title", style="white")
    table.add_column("Source", style="dim")

    for segment in classification.segments():
        number = ""
        part = ""
        source = segment.href
        if isinstance(segment, Chapter):
            number = str(segment.chapter_number)
            if segment.part:
                part = f"{segment.part.number}. {segment.part.title}"
            if segment.has_inline_content:
                source = f"{segment.href} (split)"

        style = KIND_STYLES.get(segment.kind, "white")
        table.add_row(
            str(segment.spine_index),
            f"[{style}]{segment.kind.replace('_', ' ')}[/]",
            number,
            part,
            segment.title or "",
            source,
        )
    return table


def execute_inspect(
    book_path: Path,
    config: ClassifierConfig,
    as_json: bool,
    console: Console,
) -> Classification:
    """Execute the inspect command."""
    _, metadata, classification = load_book(book_path, config)

    if as_json:
        print(classification.model_dump_json(indent=2))
        return classification

    console.print()
    console.print(summary_panel(metadata, classification))
    console.print()
    console.print(segment_table(classification))
    console.print()
    return classification
