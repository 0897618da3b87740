"""Classify a package's spine into its logical book structure."""

import logging

from obsidiant.core.archive import PackageArchive
from obsidiant.core.assembler import assemble_chapters
from obsidiant.core.boundaries import classify_boundaries
from obsidiant.core.part_titles import resolve_part_titles
from obsidiant.core.signature import extract_fingerprint
from obsidiant.models.analysis import AnalyzedItem, Fingerprint, PartTitleMap
from obsidiant.models.classification import Classification
from obsidiant.models.config import ClassifierConfig
from obsidiant.models.package import SpineEntry

log = logging.getLogger(__name__)


def analyze_entry(
    entry: SpineEntry,
    index: int,
    archive: PackageArchive,
    part_titles: PartTitleMap,
    config: ClassifierConfig,
) -> AnalyzedItem:
    """Fingerprint one spine entry; unreadable documents get an empty fingerprint."""
    document = archive.find_document(entry.href)
    fingerprint = Fingerprint.empty()

    if document is None:
        log.warning(f"Spine item not found in archive: {entry.href}")
    else:
        try:
            markup = document.data.decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning(f"Could not read content from {entry.href}: {e}")
        else:
            fingerprint = extract_fingerprint(markup, document.path, part_titles, config)

    return AnalyzedItem(entry=entry, fingerprint=fingerprint, original_index=index)


def analyze_spine(
    spine: list[SpineEntry],
    archive: PackageArchive,
    part_titles: PartTitleMap,
    config: ClassifierConfig | None = None,
) -> list[AnalyzedItem]:
    """Fingerprint every spine entry, preserving spine order."""
    config = config or ClassifierConfig()
    items = [
        analyze_entry(entry, index, archive, part_titles, config)
        for index, entry in enumerate(spine)
    ]
    for item in items:
        fp = item.fingerprint
        log.debug(
            f"  {item.original_index}: {item.href} - patterns: "
            f"[{', '.join(sorted(p.value for p in fp.patterns))}] - wordCount: {fp.word_count}"
        )
    return items


def classify_items(
    items: list[AnalyzedItem],
    archive: PackageArchive,
    config: ClassifierConfig | None = None,
) -> Classification:
    """Run boundary classification and chapter assembly on analyzed items."""
    config = config or ClassifierConfig()

    boundaries = classify_boundaries(items, config)
    assembly = assemble_chapters(boundaries.main_content, archive, config)

    return Classification(
        front_matter=boundaries.front_matter,
        prologue=boundaries.prologue,
        chapters=assembly.chapters,
        epilogue=boundaries.epilogue,
        back_matter=boundaries.back_matter,
        is_multipart=assembly.is_multipart,
    )


def classify_package(
    spine: list[SpineEntry],
    archive: PackageArchive,
    config: ClassifierConfig | None = None,
) -> Classification:
    """Full two-phase pipeline: part titles first, then per-document analysis."""
    config = config or ClassifierConfig()

    part_titles = resolve_part_titles(archive)
    items = analyze_spine(spine, archive, part_titles, config)
    classification = classify_items(items, archive, config)

    log.info(
        f"Classified {len(spine)} spine items: "
        f"{len(classification.front_matter)} front matter, "
        f"{len(classification.chapters)} chapters, "
        f"{len(classification.back_matter)} back matter"
    )
    return classification
