"""Assemble the ordered chapter list from the residual main content."""

import logging
from dataclasses import dataclass, field

from obsidiant.core.archive import PackageArchive
from obsidiant.core.signature import count_words
from obsidiant.core.splitter import split_internal_chapters
from obsidiant.models.analysis import AnalyzedItem, PatternTag
from obsidiant.models.classification import Chapter, PartRef
from obsidiant.models.config import ClassifierConfig

log = logging.getLogger(__name__)


@dataclass
class PartGroup:
    """A raw part: its header document and its content documents."""

    raw_number: int
    header: AnalyzedItem
    content_files: list[AnalyzedItem] = field(default_factory=list)


@dataclass
class ChapterAssembly:
    chapters: list[Chapter] = field(default_factory=list)
    is_multipart: bool = False


def is_multipart(items: list[AnalyzedItem]) -> bool:
    return any(item.has(PatternTag.PART_HEADER) for item in items)


# =============================================================================
# Single-part books
# =============================================================================


def _is_chapter_body(item: AnalyzedItem, config: ClassifierConfig) -> bool:
    return item.fingerprint.has_substantial_text and item.word_count > config.chapter_body_min_words


def assemble_single_part(items: list[AnalyzedItem], config: ClassifierConfig) -> list[Chapter]:
    """Pair chapter-number markers with their bodies and number the rest."""
    numbered: dict[int, AnalyzedItem] = {}
    unnumbered: list[AnalyzedItem] = []
    for item in items:
        number = item.fingerprint.chapter_number
        if number is not None:
            numbered[number] = item
        else:
            unnumbered.append(item)

    chapters: list[Chapter] = []
    consumed: set[int] = set()

    for number in sorted(numbered):
        marker = numbered[number]
        is_pure_marker = (
            marker.word_count < config.marker_max_words
            and marker.has(PatternTag.CALIBRE_CHAPTER_MARKER)
        )
        if not is_pure_marker:
            chapters.append(_chapter(marker, number, marker.title))
            continue

        body = next(
            (
                item
                for item in unnumbered
                if item.original_index not in consumed
                and item.original_index > marker.original_index
                and _is_chapter_body(item, config)
            ),
            None,
        )
        if body is not None:
            consumed.add(body.original_index)
            chapters.append(_chapter(body, number, marker.title or f"[{number}]"))
        elif (
            marker.fingerprint.has_substantial_text
            and marker.word_count > config.marker_alone_min_words
        ):
            chapters.append(_chapter(marker, number, marker.title or f"[{number}]"))
        else:
            log.debug(f"Dropping chapter {number}: marker {marker.href} has no body")

    next_number = max(numbered) + 1 if numbered else 1
    for item in unnumbered:
        if item.original_index in consumed or not _is_chapter_body(item, config):
            continue
        chapters.append(_chapter(item, next_number, item.title))
        next_number += 1

    chapters.sort(key=lambda c: c.chapter_number)
    return chapters


def _chapter(item: AnalyzedItem, number: int, title: str | None) -> Chapter:
    return Chapter(
        id=item.id,
        href=item.href,
        title=title,
        chapter_number=number,
        spine_index=item.original_index,
    )


# =============================================================================
# Multi-part books
# =============================================================================


def group_parts(items: list[AnalyzedItem], config: ClassifierConfig) -> dict[int, PartGroup]:
    """Group part-tagged items by raw part number, in spine order."""
    groups: dict[int, PartGroup] = {}
    for item in items:
        if not item.has(PatternTag.PART_HEADER):
            continue
        raw_number = item.fingerprint.part_number
        group = groups.setdefault(raw_number, PartGroup(raw_number=raw_number, header=item))
        if item.word_count < config.part_header_max_words:
            group.header = item
        else:
            group.content_files.append(item)
    return groups


def _is_part_content(item: AnalyzedItem, config: ClassifierConfig) -> bool:
    return item.fingerprint.has_substantial_text and item.word_count >= config.part_content_min_words


def remap_part_numbers(groups: dict[int, PartGroup], config: ClassifierConfig) -> dict[int, int]:
    """Dense 1..K numbering of the parts that have substantial content files."""
    with_content = sorted(
        n for n, g in groups.items() if any(_is_part_content(i, config) for i in g.content_files)
    )
    return {raw: index for index, raw in enumerate(with_content, start=1)}


def assemble_multipart(
    items: list[AnalyzedItem], documents: PackageArchive, config: ClassifierConfig
) -> list[Chapter]:
    """Split every substantial content file of every part into chapters."""
    groups = group_parts(items, config)
    mapping = remap_part_numbers(groups, config)
    log.info("Part number mapping: " + ", ".join(f"{raw}->{seq}" for raw, seq in mapping.items()))

    chapters: list[Chapter] = []
    for raw_number, part_number in mapping.items():
        group = groups[raw_number]
        part = PartRef(
            number=part_number,
            title=group.header.fingerprint.part_title or f"Part {part_number}",
        )
        log.info(f"Part {part.number}: '{part.title}' ({len(group.content_files)} content files)")

        for item in group.content_files:
            if not _is_part_content(item, config):
                log.debug(f"Skipping content file: {item.href}")
                continue

            try:
                markup = documents.read_text(item.href)
            except UnicodeDecodeError as e:
                log.warning(f"Could not extract chapters from {item.href}: {e}")
                continue
            if markup is None:
                log.warning(f"Content file not found: {item.href}")
                continue

            internal = split_internal_chapters(markup, item, part, config)
            if internal:
                chapters.extend(internal)
            else:
                chapters.append(
                    Chapter(
                        id=item.id,
                        href=item.href,
                        title=item.title or "1",
                        chapter_number=1,
                        part=part,
                        spine_index=item.original_index,
                    )
                )
    return chapters


def densify_parts(chapters: list[Chapter]) -> list[Chapter]:
    """Renumber parts 1..K over the parts that still hold chapters."""
    surviving = sorted({c.part.number for c in chapters if c.part})
    mapping = {old: new for new, old in enumerate(surviving, start=1)}
    if all(old == new for old, new in mapping.items()):
        return chapters

    parts: dict[int, PartRef] = {}
    result: list[Chapter] = []
    for chapter in chapters:
        if chapter.part is None:
            result.append(chapter)
            continue
        old = chapter.part.number
        if old not in parts:
            new = mapping[old]
            title = chapter.part.title
            if title == f"Part {old}":
                title = f"Part {new}"
            parts[old] = chapter.part.model_copy(update={"number": new, "title": title})
            log.debug(f"Part {old} renumbered to {new} after filtering")
        result.append(chapter.model_copy(update={"part": parts[old]}))
    return result


def renumber_within_parts(chapters: list[Chapter]) -> list[Chapter]:
    """Renumber densely any part whose chapter numbers collide."""
    by_part: dict[int, list[int]] = {}
    for chapter in chapters:
        by_part.setdefault(chapter.part.number if chapter.part else 0, []).append(chapter.chapter_number)
    colliding = {p for p, numbers in by_part.items() if len(set(numbers)) != len(numbers)}
    if not colliding:
        return chapters

    counters: dict[int, int] = {}
    result: list[Chapter] = []
    for chapter in chapters:
        part_number = chapter.part.number if chapter.part else 0
        if part_number in colliding:
            counters[part_number] = counters.get(part_number, 0) + 1
            chapter = chapter.model_copy(update={"chapter_number": counters[part_number]})
        result.append(chapter)
    return result


# =============================================================================
# Final filtering
# =============================================================================


def body_word_count(chapter: Chapter, documents: PackageArchive) -> int | None:
    """Word count of the chapter body, or None when it cannot be found."""
    if chapter.has_inline_content:
        return count_words(chapter.content)
    markup = documents.read_text(chapter.href)
    if markup is None:
        return None
    return count_words(markup)


def filter_chapters(
    chapters: list[Chapter], documents: PackageArchive, config: ClassifierConfig
) -> list[Chapter]:
    """Drop marker-only remnants whose body is too short."""
    kept: list[Chapter] = []
    for chapter in chapters:
        try:
            words = body_word_count(chapter, documents)
        except UnicodeDecodeError:
            log.warning(f"Could not verify content for chapter {chapter.chapter_number}")
            kept.append(chapter)
            continue
        if words is None:
            log.warning(f"Chapter {chapter.chapter_number} source not found: {chapter.href}")
            continue
        if words > config.final_min_words:
            kept.append(chapter)
        else:
            log.debug(f"Dropping chapter {chapter.chapter_number} ({words} words): {chapter.href}")
    return kept


def assemble_chapters(
    items: list[AnalyzedItem],
    documents: PackageArchive,
    config: ClassifierConfig | None = None,
) -> ChapterAssembly:
    """Build the final ordered chapter list."""
    config = config or ClassifierConfig()
    multipart = is_multipart(items)

    if multipart:
        log.info("Detected multipart book")
        candidates = assemble_multipart(items, documents, config)
    else:
        candidates = assemble_single_part(items, config)

    chapters = filter_chapters(candidates, documents, config)

    if multipart:
        chapters = renumber_within_parts(densify_parts(chapters))
    else:
        chapters = [
            chapter.model_copy(update={"chapter_number": index})
            for index, chapter in enumerate(chapters, start=1)
        ]

    log.info(f"Assembled {len(chapters)} chapters")
    return ChapterAssembly(chapters=chapters, is_multipart=multipart)
