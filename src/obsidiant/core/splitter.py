"""Split one physical document into several logical chapters."""

import logging
import re

from obsidiant.core.signature import heading_text, parse_markup
from obsidiant.models.analysis import AnalyzedItem
from obsidiant.models.classification import Chapter, PartRef
from obsidiant.models.config import ClassifierConfig

log = logging.getLogger(__name__)

# <h1 class="level1_title">...</h1> marks a chapter boundary
SECTION_HEADING_PATTERN = re.compile(
    r"<h1[^>]*class=\"[^\"]*level1_title[^\"]*\"[^>]*>(.*?)</h1>",
    re.IGNORECASE | re.DOTALL,
)
BARE_NUMERAL_PATTERN = re.compile(r"^\d+\.$")

LEADING_NUMBER_PATTERN = re.compile(r"^(\d+)")
NAMED_NUMBER_PATTERNS = (
    re.compile(r"chapitre\s+(\d+)", re.IGNORECASE),
    re.compile(r"chapter\s+(\d+)", re.IGNORECASE),
)


def _heading_title(inner_markup: str) -> str:
    return heading_text(parse_markup(inner_markup)) or ""


def chapter_number_from_title(title: str, position: int) -> int:
    """Leading integer, then "chapitre N"/"chapter N", then the position."""
    match = LEADING_NUMBER_PATTERN.match(title)
    if match:
        return int(match.group(1))
    for pattern in NAMED_NUMBER_PATTERNS:
        match = pattern.search(title)
        if match:
            return int(match.group(1))
    return position


def select_boundaries(
    headings: list[tuple[re.Match, str]], config: ClassifierConfig
) -> list[tuple[re.Match, str]]:
    """Drop bare "N." headings when named headings clearly dominate.

    Bare numerals are treated as subsection noise only when named headings
    outnumber them by more than ``config.subsection_ratio`` to one.
    """
    numbered = [h for h in headings if BARE_NUMERAL_PATTERN.match(h[1])]
    named = [h for h in headings if not BARE_NUMERAL_PATTERN.match(h[1])]

    if numbered and len(named) > config.subsection_ratio * len(numbered):
        log.info(f"Skipping {len(numbered)} numbered subsections, keeping {len(named)} named chapters")
        return named
    return headings


def split_internal_chapters(
    markup: str,
    item: AnalyzedItem,
    part: PartRef | None,
    config: ClassifierConfig | None = None,
) -> list[Chapter]:
    """Split a content file on its level-1 section headings.

    Returns an empty list when the document has no section headings, in
    which case the caller keeps the file as a single chapter.
    """
    config = config or ClassifierConfig()

    headings = [
        (match, _heading_title(match.group(1)))
        for match in SECTION_HEADING_PATTERN.finditer(markup)
    ]
    log.debug(f"Found {len(headings)} section headings in {item.href}")
    if not headings:
        return []

    boundaries = select_boundaries(headings, config)

    chapters: list[Chapter] = []
    for position, (match, title) in enumerate(boundaries, start=1):
        body_end = boundaries[position][0].start() if position < len(boundaries) else len(markup)
        body = markup[match.end():body_end]
        number = chapter_number_from_title(title, position)

        chapters.append(
            Chapter(
                id=f"{item.id}_ch{number}",
                href=item.href,
                title=title or f"Chapter {number}",
                chapter_number=number,
                part=part,
                content=body,
                spine_index=item.original_index,
            )
        )

    log.info(f"Extracted {len(chapters)} chapters from {item.href}")
    return chapters
