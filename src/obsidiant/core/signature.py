"""Derive a structural fingerprint from a single document's markup.

The extractor never raises on malformed markup: anything it cannot make
sense of simply leaves the corresponding fingerprint field empty.
"""

import logging
import re
import warnings

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

from obsidiant.models.analysis import Fingerprint, PartTitleMap, PatternTag
from obsidiant.models.config import ClassifierConfig

# Suppress XML parsing warnings, EPUB documents are XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

log = logging.getLogger(__name__)


# =============================================================================
# Signatures
# =============================================================================

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
TOP_HEADING_TAGS = ["h1", "h2", "h3"]

CHAPTER_NUMBER_CLASSES = ("chapn", "chap_n")
PART_NUMBER_CLASS = "part_number"
PART_TITLE_CLASS = "part_title"

# c05_part_cut1.xhtml: files c05..c12 hold navigation parts 1..8
FILENAME_PART_PATTERN = re.compile(r"c(\d+)_part_cut(\d+)\.xhtml")
FILENAME_PART_OFFSET = 4

CHAPTER_NUMBER_TEXT = (re.compile(r"^(\d+)$"), re.compile(r"^\[(\d+)\]$"))

PROLOGUE_OPENING = re.compile(r"^(prologue|préface|avant-propos|introduction)")
EPILOGUE_OPENING = re.compile(r"^(epilogue|épilogue|conclusion|postface)")
PROLOGUE_HEADING = re.compile(r"prologue")
EPILOGUE_HEADING = re.compile(r"[ée]pilogue")

OPENING_SIGNATURES: list[tuple[PatternTag, re.Pattern]] = [
    (PatternTag.PROLOGUE, PROLOGUE_OPENING),
    (PatternTag.EPILOGUE, EPILOGUE_OPENING),
    (PatternTag.ACKNOWLEDGMENT, re.compile(r"^(remerciements|acknowledge?ments?)")),
    (PatternTag.THANKS, re.compile(r"^(thanks|merci)")),
    (PatternTag.BIBLIOGRAPHY, re.compile(r"^(bibliographie|bibliography)")),
    (PatternTag.REFERENCES, re.compile(r"^(références|references)")),
    (PatternTag.INDEX, re.compile(r"^(index|table des matières alphabétique)")),
]

# Matched against class, id and epub:type attribute values
ATTRIBUTE_SIGNATURES: dict[PatternTag, tuple[str, ...]] = {
    PatternTag.TITLE_PAGE: ("pagetitre", "auteur_ident", "titlepage"),
    PatternTag.COPYRIGHT: ("copyright",),
    PatternTag.EPIGRAPH: ("exergues", "epigraph"),
    PatternTag.TOC: ("toc", "table"),
    PatternTag.DEDICATION: ("dedication",),
}

# Matched anywhere in the lowercased document text
TEXT_SIGNATURES: dict[PatternTag, tuple[str, ...]] = {
    PatternTag.COPYRIGHT: ("copyright",),
    PatternTag.TOC: ("sommaire", "table des matières"),
    PatternTag.DEDICATION: ("dédicace",),
    PatternTag.CHAPTER_MARKER: ("chapitre", "chapter"),
}

# Headings that are dates or elapsed-time captions, never titles
DATE_LIKE = re.compile(r"^\w+\s+\d{1,2}\s+\w+\s+\d{4}$")  # "Friday 22 November 2013"
ELAPSED_LIKE = re.compile(r"^\w+\s+(mois\s+plus\s+tard|months?\s+later)$", re.IGNORECASE)


# =============================================================================
# Text helpers
# =============================================================================


def parse_markup(markup: str | bytes) -> BeautifulSoup:
    """Parse markup with scripts and styles removed."""
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup


def soup_text(soup: BeautifulSoup | Tag) -> str:
    """Tag-stripped text with whitespace collapsed."""
    return " ".join(soup.get_text(" ").split())


def count_words(markup: str) -> int:
    """Whitespace-delimited tokens after stripping all markup."""
    return len(soup_text(parse_markup(markup)).split())


def heading_text(tag: Tag | None) -> str | None:
    if tag is None:
        return None
    return soup_text(tag) or None


def _has_class(tag: Tag, names: tuple[str, ...], exact: bool = True) -> bool:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if exact:
        return any(c in names for c in classes)
    return any(name in c for c in classes for name in names)


def _attribute_tokens(soup: BeautifulSoup) -> str:
    """Lowercased class, id and epub:type values of every element."""
    tokens: list[str] = []
    for tag in soup.find_all(True):
        for attr in ("class", "id", "epub:type"):
            value = tag.get(attr)
            if not value:
                continue
            if isinstance(value, list):
                tokens.extend(value)
            else:
                tokens.append(value)
    return " ".join(tokens).lower()


# =============================================================================
# Extraction
# =============================================================================


def extract_chapter_number(soup: BeautifulSoup) -> tuple[bool, int | None]:
    """Find a chapter-number heading.

    Returns (marker_present, number). The number accepts ``31`` and ``[1]``.
    """
    for heading in soup.find_all(HEADING_TAGS):
        if not _has_class(heading, CHAPTER_NUMBER_CLASSES):
            continue
        text = heading_text(heading) or ""
        for pattern in CHAPTER_NUMBER_TEXT:
            match = pattern.match(text)
            if match:
                return True, int(match.group(1))
        return True, None
    return False, None


def extract_part(
    soup: BeautifulSoup, path: str | None, part_titles: PartTitleMap
) -> tuple[int | None, str | None]:
    """Detect a part number and title, first successful signal wins."""
    # (a) filename convention
    if path:
        match = FILENAME_PART_PATTERN.search(path)
        if match:
            file_part = int(match.group(1))
            mapped = file_part - FILENAME_PART_OFFSET
            if mapped in part_titles:
                log.debug(f"Part from filename c{file_part} -> part {mapped}: {part_titles[mapped]}")
                return mapped, part_titles[mapped]
            log.debug(f"Part from filename: {path} -> Part {file_part}")
            return file_part, f"Part {file_part}"

    first_heading = soup.find(TOP_HEADING_TAGS)
    first_heading_text = heading_text(first_heading)

    # (b) dedicated part classes
    for heading in soup.find_all("h1"):
        if not _has_class(heading, (PART_NUMBER_CLASS,), exact=False):
            continue
        number_match = re.search(r"(\d+)", heading_text(heading) or "")
        if not number_match:
            continue
        number = int(number_match.group(1))
        if number in part_titles:
            return number, part_titles[number]
        title_heading = next(
            (h for h in soup.find_all("h2") if _has_class(h, (PART_TITLE_CLASS,), exact=False)),
            None,
        )
        return number, heading_text(title_heading) or first_heading_text

    # (c) any numbered top-level heading, confirmed by the navigation map
    if first_heading_text:
        number_match = re.search(r"(\d+)", first_heading_text)
        if number_match and int(number_match.group(1)) in part_titles:
            number = int(number_match.group(1))
            log.debug(f"Part from heading '{first_heading_text}': {part_titles[number]}")
            return number, part_titles[number]

    return None, None


def _pick_title(soup: BeautifulSoup) -> str | None:
    """First page title or heading that is not a date-like caption."""
    candidates = [
        soup.title.get_text(strip=True) if soup.title else None,
        heading_text(soup.find("h1")),
        heading_text(soup.find("h2")),
        heading_text(soup.find("h3")),
    ]
    for candidate in candidates:
        if not candidate:
            continue
        candidate = candidate.strip()
        if DATE_LIKE.match(candidate) or ELAPSED_LIKE.match(candidate):
            continue
        return candidate
    return None


def extract_fingerprint(
    markup: str,
    path: str | None = None,
    part_titles: PartTitleMap | None = None,
    config: ClassifierConfig | None = None,
) -> Fingerprint:
    """Compute the fingerprint of one document."""
    part_titles = part_titles or {}
    config = config or ClassifierConfig()

    soup = parse_markup(markup)
    text = soup_text(soup)
    lower_text = text.lower()
    attributes = _attribute_tokens(soup)
    word_count = len(text.split())

    patterns: set[PatternTag] = set()

    marker_present, chapter_number = extract_chapter_number(soup)
    if marker_present:
        patterns.add(PatternTag.CALIBRE_CHAPTER_MARKER)
    if chapter_number is not None:
        patterns.add(PatternTag.CALIBRE_NUMBERED_CHAPTER)

    part_number, part_title = extract_part(soup, path, part_titles)
    if part_number is not None:
        patterns.add(PatternTag.PART_HEADER)
    if any(
        _has_class(tag, (PART_NUMBER_CLASS, PART_TITLE_CLASS), exact=False)
        for tag in soup.find_all(["h1", "h2"])
    ):
        patterns.add(PatternTag.PART_MARKER)

    h1_texts = [(heading_text(h) or "").lower() for h in soup.find_all("h1")]
    prologue_heading = any(PROLOGUE_HEADING.search(t) for t in h1_texts)
    epilogue_heading = any(EPILOGUE_HEADING.search(t) for t in h1_texts)
    if prologue_heading:
        patterns.add(PatternTag.PROLOGUE_HEADER)
    if epilogue_heading:
        patterns.add(PatternTag.EPILOGUE_HEADER)

    for tag, pattern in OPENING_SIGNATURES:
        if pattern.match(lower_text):
            patterns.add(tag)
    for tag, signatures in ATTRIBUTE_SIGNATURES.items():
        if any(s in attributes for s in signatures):
            patterns.add(tag)
    for tag, signatures in TEXT_SIGNATURES.items():
        if any(s in lower_text for s in signatures):
            patterns.add(tag)

    if soup.find("img") is not None and word_count < config.image_heavy_max_words:
        patterns.add(PatternTag.IMAGE_HEAVY)

    if chapter_number is not None:
        title = str(chapter_number)
    elif PatternTag.EPILOGUE in patterns or epilogue_heading:
        title = "Epilogue"
    elif PatternTag.PROLOGUE in patterns or prologue_heading:
        title = "Prologue"
    else:
        title = _pick_title(soup)

    return Fingerprint(
        title=title,
        word_count=word_count,
        substantial_words=config.substantial_words,
        patterns=frozenset(patterns),
        chapter_number=chapter_number,
        part_number=part_number,
        part_title=part_title,
    )
