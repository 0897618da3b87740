"""Shared fixtures: XHTML documents, in-memory archives and EPUB files."""

import io
import zipfile
from pathlib import Path, PurePosixPath

import pytest

from obsidiant.core.archive import ArchiveEntry, PackageArchive
from obsidiant.models.analysis import AnalyzedItem, Fingerprint, PatternTag
from obsidiant.models.package import SpineEntry

# Neutral vocabulary: none of these words trip a structural signature
FILLER = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua"
).split()


def words(count: int) -> str:
    """``count`` whitespace-separated filler words."""
    return " ".join(FILLER[i % len(FILLER)] for i in range(count))


def xhtml(body: str, title: str | None = None) -> str:
    head = f"<head><title>{title}</title></head>" if title else "<head></head>"
    return f'<html xmlns="http://www.w3.org/1999/xhtml">{head}<body>{body}</body></html>'


def make_archive(files: dict[str, str | bytes]) -> PackageArchive:
    entries = [
        ArchiveEntry(path, content.encode("utf-8") if isinstance(content, str) else content)
        for path, content in files.items()
    ]
    return PackageArchive(entries)


def make_item(
    index: int,
    word_count: int = 0,
    tags: tuple[PatternTag, ...] = (),
    href: str | None = None,
    **fields,
) -> AnalyzedItem:
    """An analyzed spine item with a hand-built fingerprint."""
    item_id = f"item{index:02d}"
    fingerprint = Fingerprint(
        word_count=word_count,
        patterns=frozenset(tags),
        **fields,
    )
    return AnalyzedItem(
        entry=SpineEntry(id=item_id, href=href or f"{item_id}.xhtml"),
        fingerprint=fingerprint,
        original_index=index,
    )


CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""


def package_document(
    documents: list[str],
    title: str = "Test Book",
    creator: str = "Jane Doe",
    language: str = "en",
) -> str:
    manifest = "\n".join(
        f'    <item id="{PurePosixPath(name).stem}" href="{name}" media-type="application/xhtml+xml"/>'
        for name in documents
    )
    spine = "\n".join(f'    <itemref idref="{PurePosixPath(name).stem}"/>' for name in documents)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>{title}</dc:title>
    <dc:creator>{creator}</dc:creator>
    <dc:language>{language}</dc:language>
    <dc:identifier id="bookid">urn:uuid:0000-1111</dc:identifier>
  </metadata>
  <manifest>
{manifest}
  </manifest>
  <spine>
{spine}
  </spine>
</package>
"""


def build_epub(
    documents: dict[str, str],
    title: str = "Test Book",
    extra: dict[str, str | bytes] | None = None,
) -> bytes:
    """Zip bytes of a minimal EPUB; ``documents`` are spine files under OEBPS/."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("mimetype", "application/epub+zip")
        archive.writestr("META-INF/container.xml", CONTAINER_XML)
        archive.writestr("OEBPS/content.opf", package_document(list(documents), title=title))
        for name, markup in documents.items():
            archive.writestr(f"OEBPS/{name}", markup)
        for name, content in (extra or {}).items():
            archive.writestr(name, content)
    return buffer.getvalue()


def sample_documents() -> dict[str, str]:
    """Title page, prologue header and body, three chapters, acknowledgments."""
    return {
        "title.xhtml": xhtml('<div class="titlepage"><p>The Long Road</p></div>'),
        "prologue.xhtml": xhtml("<h1>Prologue</h1>"),
        "opening.xhtml": xhtml(f"<p>{words(150)}</p>"),
        "ch01.xhtml": xhtml(f"<h1>Arrival</h1><p>{words(300)}</p>"),
        "ch02.xhtml": xhtml(f"<h1>Harbour</h1><p>{words(300)}</p>"),
        "ch03.xhtml": xhtml(f"<h1>Departure</h1><p>{words(300)}</p>"),
        "thanks.xhtml": xhtml(f"<p>Acknowledgments {words(80)}</p>"),
    }


@pytest.fixture
def epub_path(tmp_path: Path) -> Path:
    """A small single-part EPUB with a cover image."""
    path = tmp_path / "book.epub"
    path.write_bytes(
        build_epub(
            sample_documents(),
            title="Test Book",
            extra={"OEBPS/images/cover.jpg": b"\xff\xd8\xff\xe0fake-jpeg"},
        )
    )
    return path
