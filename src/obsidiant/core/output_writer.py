"""Write a classified book to an Obsidian vault directory."""

import logging
import re
from datetime import datetime
from pathlib import Path, PurePosixPath

import yaml

from obsidiant.core.archive import PackageArchive
from obsidiant.core.renderer import NoteContext, NoteRenderer
from obsidiant.models.classification import Chapter, Classification
from obsidiant.models.package import PackageMetadata

log = logging.getLogger(__name__)

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
BARE_PART_NUMBER = re.compile(r"^\d+\.?$")
MAX_FILENAME_LENGTH = 255


def sanitize_file_name(name: str) -> str:
    """Make a title safe to use as a file name on every platform."""
    name = INVALID_FILENAME_CHARS.sub("-", name)
    name = re.sub(r"\s+", " ", name).strip()
    if name.endswith("."):
        name = name[:-1]
    return name[:MAX_FILENAME_LENGTH]


def part_heading(number: int, title: str | None) -> str:
    """Heading for a part in the table of contents.

    Generic titles ("Part 2", "2.", very short strings) collapse to
    ``Part N``.
    """
    if (
        title
        and title != f"Part {number}"
        and not BARE_PART_NUMBER.match(title.strip())
        and len(title.strip()) > 2
    ):
        return f"Part {number} - {title}"
    return f"Part {number}"


class VaultWriter:
    """Write the book note, cover, and one note per reading segment."""

    def __init__(self, output_dir: Path, metadata: PackageMetadata):
        """Initialize vault writer.

        Args:
            output_dir: Root directory of the vault (the book gets a subdirectory)
            metadata: Package metadata of the book being written
        """
        self.metadata = metadata
        self.book_title = sanitize_file_name(metadata.display_title)
        self.book_dir = output_dir / self.book_title
        self.renderer = NoteRenderer()

    # =========================================================================
    # File names
    # =========================================================================

    def chapter_note_name(self, chapter: Chapter) -> str:
        if chapter.part:
            return f"{self.book_title} - Part {chapter.part.number} - Chapter {chapter.chapter_number}"
        return f"{self.book_title} - Chapter {chapter.chapter_number}"

    def prologue_note_name(self) -> str:
        return f"{self.book_title} - Prologue"

    def epilogue_note_name(self) -> str:
        return f"{self.book_title} - Epilogue"

    # =========================================================================
    # Writing
    # =========================================================================

    def write(self, classification: Classification, archive: PackageArchive) -> list[Path]:
        """Write every file of the book; returns the paths written."""
        self.book_dir.mkdir(parents=True, exist_ok=True)
        log.info(f"Writing book directory: {self.book_dir}")

        written: list[Path] = []
        cover_name = self.write_cover(archive)
        if cover_name:
            written.append(self.book_dir / cover_name)

        written.append(self.write_book_note(classification, cover_name))
        written.extend(self.write_segment_notes(classification, archive))
        written.append(self.write_classification(classification))
        return written

    def write_cover(self, archive: PackageArchive) -> str | None:
        """Copy the cover image next to the notes; returns its file name."""
        entry = archive.find_cover()
        if entry is None:
            log.warning("No cover image found")
            return None

        cover_name = f"{self.book_title}{PurePosixPath(entry.path).suffix}"
        (self.book_dir / cover_name).write_bytes(entry.data)
        log.info(f"Extracted cover: {cover_name}")
        return cover_name

    def write_book_note(self, classification: Classification, cover_name: str | None) -> Path:
        frontmatter: dict[str, object] = {
            "title": self.metadata.display_title,
            "author": self.metadata.display_creator,
            "language": self.metadata.language or "Unknown",
            "identifier": self.metadata.identifier or "Unknown",
            "type": "book",
            "source": "epub",
            "chapters": len(classification.chapters),
            "imported": datetime.now().date().isoformat(),
        }
        if cover_name:
            frontmatter["cover"] = f"[[{cover_name}]]"

        lines = [
            "---",
            yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True).rstrip("\n"),
            "---",
            f"# {self.metadata.display_title}",
            "",
            "## Table of Contents",
            "",
        ]
        lines.extend(self.table_of_contents(classification))

        path = self.book_dir / f"{self.book_title}.md"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        log.info(f"Generated book note: {path.name}")
        return path

    def table_of_contents(self, classification: Classification) -> list[str]:
        lines: list[str] = []
        if classification.prologue:
            lines += [f"**Prologue**: [[{self.prologue_note_name()}]]", ""]

        current_part: int | None = None
        for chapter in classification.chapters:
            if chapter.part and chapter.part.number != current_part:
                current_part = chapter.part.number
                if lines and lines[-1]:
                    lines.append("")
                lines += [f"### {part_heading(chapter.part.number, chapter.part.title)}", ""]
            lines.append(f"{chapter.chapter_number}. [[{self.chapter_note_name(chapter)}]]")

        if classification.epilogue:
            if lines and lines[-1]:
                lines.append("")
            lines.append(f"**Epilogue**: [[{self.epilogue_note_name()}]]")
        return lines

    def write_segment_notes(
        self, classification: Classification, archive: PackageArchive
    ) -> list[Path]:
        """Render prologue, chapters and epilogue; a failing note is skipped."""
        book = self.metadata.display_title
        jobs: list[tuple[str, str | None, str, NoteContext]] = []

        if classification.prologue:
            jobs.append((
                classification.prologue.href,
                None,
                self.prologue_note_name(),
                NoteContext(title="Prologue", note_type="prologue", book_title=book),
            ))
        for chapter in classification.chapters:
            jobs.append((
                chapter.href,
                chapter.content,
                self.chapter_note_name(chapter),
                NoteContext(
                    title=str(chapter.chapter_number),
                    note_type="chapter",
                    book_title=book,
                    chapter_number=chapter.chapter_number,
                    part=chapter.part,
                ),
            ))
        if classification.epilogue:
            jobs.append((
                classification.epilogue.href,
                None,
                self.epilogue_note_name(),
                NoteContext(title="Epilogue", note_type="epilogue", book_title=book),
            ))

        written: list[Path] = []
        for href, content, note_name, context in jobs:
            try:
                markup = content or archive.read_text(href)
            except UnicodeDecodeError as e:
                log.error(f"Could not decode {href}: {e}")
                continue
            if markup is None:
                log.warning(f"Content file not found: {href}")
                continue

            path = self.book_dir / f"{note_name}.md"
            path.write_text(self.renderer.render(markup, context), encoding="utf-8")
            log.info(f"Generated {context.note_type}: {path.name}")
            written.append(path)

        log.info(f"Processed {len(written)} of {len(jobs)} notes")
        return written

    def write_classification(self, classification: Classification) -> Path:
        """Write the classification result as JSON."""
        path = self.book_dir / "classification.json"
        path.write_text(classification.model_dump_json(indent=2), encoding="utf-8")
        return path
