"""Data models for per-document structural analysis."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from obsidiant.models.package import SpineEntry


class PatternTag(str, Enum):
    """Structural signal attached to a document by the signature extractor."""

    TITLE_PAGE = "title-page"
    COPYRIGHT = "copyright"
    EPIGRAPH = "epigraph"
    TOC = "toc"
    DEDICATION = "dedication"
    PROLOGUE = "prologue"
    EPILOGUE = "epilogue"
    PROLOGUE_HEADER = "prologue-header"
    EPILOGUE_HEADER = "epilogue-header"
    CHAPTER_MARKER = "chapter-marker"
    ACKNOWLEDGMENT = "acknowledgment"
    BIBLIOGRAPHY = "bibliography"
    INDEX = "index"
    THANKS = "thanks"
    REFERENCES = "references"
    CALIBRE_CHAPTER_MARKER = "calibre-chapter-marker"
    CALIBRE_NUMBERED_CHAPTER = "calibre-numbered-chapter"
    PART_HEADER = "part-header"
    PART_MARKER = "part-marker"
    IMAGE_HEAVY = "image-heavy"


# Part number -> human readable part title, built once per package
PartTitleMap = dict[int, str]


class Fingerprint(BaseModel):
    """Compact facts derived from one document's markup and path."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    word_count: int = Field(default=0, ge=0)
    # Threshold in effect when the fingerprint was taken
    substantial_words: int = 50
    patterns: frozenset[PatternTag] = frozenset()
    chapter_number: int | None = None
    part_number: int | None = None
    part_title: str | None = None

    @property
    def has_substantial_text(self) -> bool:
        return self.word_count > self.substantial_words

    @classmethod
    def empty(cls) -> "Fingerprint":
        """Fingerprint of a document that could not be read."""
        return cls()

    def has(self, *tags: PatternTag) -> bool:
        """True if any of the given tags is present."""
        return any(tag in self.patterns for tag in tags)


class AnalyzedItem(BaseModel):
    """A spine entry with its fingerprint and stable spine position."""

    model_config = ConfigDict(frozen=True)

    entry: SpineEntry
    fingerprint: Fingerprint
    original_index: int

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def href(self) -> str:
        return self.entry.href

    @property
    def word_count(self) -> int:
        return self.fingerprint.word_count

    @property
    def title(self) -> str | None:
        return self.fingerprint.title

    def has(self, *tags: PatternTag) -> bool:
        return self.fingerprint.has(*tags)
