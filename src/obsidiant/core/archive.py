"""Read EPUB archives into memory."""

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path

from obsidiant.core.errors import PackageError

log = logging.getLogger(__name__)

COVER_NAMES = ("cover.jpg", "cover.jpeg", "cover.png", "cover.gif")
IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif")


@dataclass(frozen=True)
class ArchiveEntry:
    """A single file or directory entry of the archive."""

    path: str
    data: bytes
    is_directory: bool = False


class PackageArchive:
    """In-memory view of an EPUB archive, in archive order."""

    def __init__(self, entries: list[ArchiveEntry]):
        self.entries = entries

    def documents(self) -> list[ArchiveEntry]:
        """All non-directory entries."""
        return [e for e in self.entries if not e.is_directory]

    def get(self, path: str) -> ArchiveEntry | None:
        """Exact path lookup."""
        for entry in self.entries:
            if entry.path == path and not entry.is_directory:
                return entry
        return None

    def find_document(self, href_fragment: str) -> ArchiveEntry | None:
        """First file whose path contains the fragment.

        Spine hrefs are relative to the package document, so they are
        matched as substrings of the full archive path.
        """
        if not href_fragment:
            return None
        for entry in self.documents():
            if href_fragment in entry.path:
                return entry
        return None

    def find_entry(self, href_fragment: str) -> bytes | None:
        """Bytes of the document matching the fragment, or None."""
        entry = self.find_document(href_fragment)
        return entry.data if entry else None

    def read_text(self, href_fragment: str) -> str | None:
        """Decode a document as UTF-8; None when it does not exist."""
        data = self.find_entry(href_fragment)
        if data is None:
            return None
        return data.decode("utf-8")

    def find_cover(self) -> ArchiveEntry | None:
        """Locate the cover image by common names, else a shallow image."""
        for cover_name in COVER_NAMES:
            for entry in self.documents():
                if cover_name in entry.path.lower():
                    return entry

        for entry in self.documents():
            if entry.path.lower().endswith(IMAGE_SUFFIXES) and len(entry.path.split("/")) <= 2:
                return entry
        return None


def extract_package(path: Path) -> PackageArchive:
    """Read every entry of the archive at ``path``.

    Raises:
        PackageError: If the file does not exist or is not a ZIP archive
    """
    if not path.exists():
        raise PackageError(f"File not found: {path}")

    entries: list[ArchiveEntry] = []
    try:
        with zipfile.ZipFile(path) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    entries.append(ArchiveEntry(info.filename, b"", is_directory=True))
                else:
                    entries.append(ArchiveEntry(info.filename, archive.read(info)))
    except zipfile.BadZipFile as e:
        raise PackageError(f"Failed to open EPUB file: {e}") from e
    except OSError as e:
        raise PackageError(f"Failed to read EPUB file: {e}") from e

    log.info(f"Extracted {len(entries)} entries from {path.name}")
    return PackageArchive(entries)
