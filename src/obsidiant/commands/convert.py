"""Convert command implementation."""

import logging
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from obsidiant.core.archive import PackageArchive, extract_package
from obsidiant.core.classifier import classify_package
from obsidiant.core.output_writer import VaultWriter
from obsidiant.core.package_parser import parse_package_metadata
from obsidiant.models.classification import Classification
from obsidiant.models.config import ClassifierConfig
from obsidiant.models.package import PackageMetadata

log = logging.getLogger(__name__)


def load_book(
    book_path: Path, config: ClassifierConfig
) -> tuple[PackageArchive, PackageMetadata, Classification]:
    """Read the archive, its package document, and classify its spine."""
    archive = extract_package(book_path)
    metadata = parse_package_metadata(archive)
    classification = classify_package(metadata.spine, archive, config)
    return archive, metadata, classification


def summary_panel(metadata: PackageMetadata, classification: Classification) -> Panel:
    info_lines = [
        f"[bold]{metadata.display_title}[/]",
        "",
        f"[dim]Author:[/] {metadata.display_creator}",
        f"[dim]Language:[/] {metadata.language or 'Unknown'}",
        f"[dim]Spine items:[/] {len(metadata.spine)}",
        f"[dim]Front matter:[/] {len(classification.front_matter)}",
        f"[dim]Prologue:[/] {'yes' if classification.prologue else 'no'}",
        f"[dim]Chapters:[/] {len(classification.chapters)}",
        f"[dim]Epilogue:[/] {'yes' if classification.epilogue else 'no'}",
        f"[dim]Back matter:[/] {len(classification.back_matter)}",
    ]
    if classification.is_multipart:
        info_lines.append(f"[dim]Parts:[/] {len(classification.part_numbers())}")
    return Panel("\n".join(info_lines), title="Book Information", border_style="green")


def execute_convert(
    book_path: Path,
    output_dir: Path,
    config: ClassifierConfig,
    quiet: bool,
    console: Console,
) -> Path:
    """Execute the convert command; returns the book directory."""
    if quiet:
        archive, metadata, classification = load_book(book_path, config)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("Analyzing EPUB structure...", total=None)
            archive, metadata, classification = load_book(book_path, config)

    if not classification.chapters:
        log.warning(f"No chapters detected in {book_path.name}")

    writer = VaultWriter(output_dir, metadata)
    written = writer.write(classification, archive)

    if not quiet:
        console.print()
        console.print(summary_panel(metadata, classification))
        console.print()
        console.print(f"[green]Wrote {len(written)} files to {writer.book_dir}[/]")

    return writer.book_dir
