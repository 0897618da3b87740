"""Classifier configuration."""

from pathlib import Path

from pydantic import BaseModel, Field


class ClassifierConfig(BaseModel):
    """Thresholds and scan windows used by the structure heuristics.

    Word-count comparisons against these values are strict (``>``/``<``)
    except ``part_content_min_words``, which is inclusive.
    """

    # Signature extraction
    substantial_words: int = 50  # has_substantial_text = word_count > this
    image_heavy_max_words: int = 20

    # Boundary detection
    boundary_scan_window: int = 10
    main_content_min_words: int = 200
    prologue_scan_window: int = 3
    epilogue_scan_window: int = 3
    prologue_body_min_words: int = 100

    # Chapter assembly
    marker_max_words: int = 200
    chapter_body_min_words: int = 200
    marker_alone_min_words: int = 100
    part_header_max_words: int = 100
    part_content_min_words: int = 200
    final_min_words: int = 20

    # Internal chapter splitting: bare "N." headings are dropped as
    # subsection noise only when named headings outnumber them by more
    # than this ratio.
    subsection_ratio: int = Field(default=2, ge=1)

    @classmethod
    def load(cls, path: Path | None) -> "ClassifierConfig":
        """Load configuration from a JSON file, or defaults when no path."""
        if path is None:
            return cls()
        return cls.model_validate_json(path.read_text(encoding="utf-8"))
