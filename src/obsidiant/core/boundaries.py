"""Split the analyzed spine into front matter, main content and back matter."""

import logging
from dataclasses import dataclass, field

from obsidiant.models.analysis import AnalyzedItem, PatternTag
from obsidiant.models.classification import (
    BackMatterItem,
    Epilogue,
    FrontMatterItem,
    Prologue,
)
from obsidiant.models.config import ClassifierConfig

log = logging.getLogger(__name__)

FRONT_MATTER_TAGS = (
    PatternTag.TITLE_PAGE,
    PatternTag.COPYRIGHT,
    PatternTag.EPIGRAPH,
    PatternTag.TOC,
    PatternTag.DEDICATION,
    PatternTag.IMAGE_HEAVY,
)
BACK_MATTER_TAGS = (
    PatternTag.EPILOGUE,
    PatternTag.ACKNOWLEDGMENT,
    PatternTag.BIBLIOGRAPHY,
    PatternTag.INDEX,
    PatternTag.THANKS,
    PatternTag.REFERENCES,
)


@dataclass
class BoundaryResult:
    """Boundary classification plus the residual main content."""

    front_matter: list[FrontMatterItem] = field(default_factory=list)
    back_matter: list[BackMatterItem] = field(default_factory=list)
    prologue: Prologue | None = None
    epilogue: Epilogue | None = None
    main_content: list[AnalyzedItem] = field(default_factory=list)
    main_content_start: int = 0
    main_content_end: int = -1


def _is_main_content(item: AnalyzedItem, excluded: tuple[PatternTag, ...], config: ClassifierConfig) -> bool:
    fp = item.fingerprint
    return (
        fp.has_substantial_text
        and fp.word_count > config.main_content_min_words
        and not fp.has(*excluded)
    )


def find_main_content_start(items: list[AnalyzedItem], config: ClassifierConfig) -> int:
    """Index of the first main-content item among the leading items."""
    for i in range(min(config.boundary_scan_window, len(items))):
        item = items[i]
        if _is_main_content(item, FRONT_MATTER_TAGS, config):
            return i
        if item.has(PatternTag.PROLOGUE, PatternTag.PROLOGUE_HEADER):
            return i
    return 0


def find_main_content_end(items: list[AnalyzedItem], start: int, config: ClassifierConfig) -> int:
    """Index of the last main-content item, scanning backwards."""
    total = len(items)
    lower = max(total - config.boundary_scan_window, start)
    for i in range(total - 1, lower - 1, -1):
        item = items[i]
        if _is_main_content(item, BACK_MATTER_TAGS, config):
            return i
        if item.has(PatternTag.EPILOGUE):
            return i
    return total - 1


def _without(items: list[AnalyzedItem], removed: set[int]) -> list[AnalyzedItem]:
    """Filter items out by original index."""
    return [item for item in items if item.original_index not in removed]


def resolve_prologue(
    main: list[AnalyzedItem], config: ClassifierConfig
) -> tuple[Prologue | None, list[AnalyzedItem]]:
    """Find the prologue among the first main-content items.

    A ``prologue-header`` item acts as a separator: the following item is
    the prologue when it is substantial, otherwise the header itself if it
    is substantial. Plain header pages with neither are skipped.
    """
    for i in range(min(config.prologue_scan_window, len(main))):
        item = main[i]
        if not item.has(PatternTag.PROLOGUE_HEADER):
            continue

        following = main[i + 1] if i + 1 < len(main) else None
        if (
            following is not None
            and following.fingerprint.has_substantial_text
            and following.word_count > config.prologue_body_min_words
        ):
            log.info(f"Prologue: {following.href} (header {item.href})")
            return (
                _prologue(following),
                _without(main, {item.original_index, following.original_index}),
            )
        if item.fingerprint.has_substantial_text and item.word_count > config.prologue_body_min_words:
            log.info(f"Prologue: {item.href}")
            return _prologue(item), _without(main, {item.original_index})

    if main and main[0].has(PatternTag.PROLOGUE):
        log.info(f"Prologue: {main[0].href}")
        return _prologue(main[0]), main[1:]

    return None, main


def resolve_epilogue(
    main: list[AnalyzedItem], config: ClassifierConfig
) -> tuple[Epilogue | None, list[AnalyzedItem]]:
    """Find the epilogue among the last main-content items."""
    for i in range(max(len(main) - config.epilogue_scan_window, 0), len(main)):
        item = main[i]
        if not item.has(PatternTag.EPILOGUE_HEADER):
            continue

        if i + 1 < len(main):
            following = main[i + 1]
            log.info(f"Epilogue: {following.href} (header {item.href})")
            return (
                _epilogue(following),
                _without(main, {item.original_index, following.original_index}),
            )
        log.info(f"Epilogue: {item.href}")
        return _epilogue(item), _without(main, {item.original_index})

    if main and main[-1].has(PatternTag.EPILOGUE):
        log.info(f"Epilogue: {main[-1].href}")
        return _epilogue(main[-1]), main[:-1]

    return None, main


def _prologue(item: AnalyzedItem) -> Prologue:
    return Prologue(id=item.id, href=item.href, spine_index=item.original_index)


def _epilogue(item: AnalyzedItem) -> Epilogue:
    return Epilogue(id=item.id, href=item.href, spine_index=item.original_index)


def classify_boundaries(
    items: list[AnalyzedItem], config: ClassifierConfig | None = None
) -> BoundaryResult:
    """Partition the analyzed spine and resolve prologue and epilogue."""
    config = config or ClassifierConfig()
    if not items:
        return BoundaryResult()

    start = find_main_content_start(items, config)
    end = find_main_content_end(items, start, config)
    log.info(f"Main content spans spine items {start}..{end} of {len(items)}")

    front_matter = [
        FrontMatterItem(id=item.id, href=item.href, title=item.title, spine_index=item.original_index)
        for item in items[:start]
    ]
    back_matter = [
        BackMatterItem(id=item.id, href=item.href, title=item.title, spine_index=item.original_index)
        for item in items[end + 1:]
    ]

    main = items[start:end + 1]
    prologue, main = resolve_prologue(main, config)
    epilogue, main = resolve_epilogue(main, config)

    return BoundaryResult(
        front_matter=front_matter,
        back_matter=back_matter,
        prologue=prologue,
        epilogue=epilogue,
        main_content=main,
        main_content_start=start,
        main_content_end=end,
    )
