"""Resolve human part titles from navigation documents."""

import logging
import re

from obsidiant.core.archive import PackageArchive
from obsidiant.core.signature import parse_markup
from obsidiant.models.analysis import PartTitleMap

log = logging.getLogger(__name__)

NAVIGATION_SUFFIXES = (".xhtml", ".html", ".htm")
NAVIGATION_MARKERS = ("nav", "toc", "navigation")

# "Partie 5. Deux femmes d'action déterminées"
PART_LINK_PATTERN = re.compile(r"^(?:partie|part)\s+(\d+)\.\s*(.+)$", re.IGNORECASE)


def is_navigation_document(path: str) -> bool:
    lower = path.lower()
    return lower.endswith(NAVIGATION_SUFFIXES) and any(m in lower for m in NAVIGATION_MARKERS)


def extract_part_titles(markup: str | bytes) -> PartTitleMap:
    """Part titles linked from one navigation document."""
    titles: PartTitleMap = {}
    soup = parse_markup(markup)
    for link in soup.find_all("a", href=True):
        text = " ".join(link.get_text(" ").split())
        match = PART_LINK_PATTERN.match(text)
        if match:
            titles[int(match.group(1))] = match.group(2).strip()
    return titles


def resolve_part_titles(archive: PackageArchive) -> PartTitleMap:
    """Build the part number -> title map for the whole package.

    Later navigation documents overwrite earlier ones for a repeated number.
    """
    titles: PartTitleMap = {}
    for entry in archive.documents():
        if not is_navigation_document(entry.path):
            continue
        found = extract_part_titles(entry.data)
        for number, title in found.items():
            log.info(f"Found part title in navigation: Partie {number}. {title}")
        titles.update(found)
    return titles
