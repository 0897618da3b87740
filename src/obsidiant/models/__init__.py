"""Data models."""

from obsidiant.models.analysis import (
    AnalyzedItem,
    Fingerprint,
    PartTitleMap,
    PatternTag,
)
from obsidiant.models.classification import (
    AnySegment,
    BackMatterItem,
    Chapter,
    Classification,
    Epilogue,
    FrontMatterItem,
    PartRef,
    Prologue,
)
from obsidiant.models.config import ClassifierConfig
from obsidiant.models.package import ManifestItem, PackageMetadata, SpineEntry

__all__ = [
    # Package models
    "SpineEntry",
    "ManifestItem",
    "PackageMetadata",
    # Analysis models
    "PatternTag",
    "PartTitleMap",
    "Fingerprint",
    "AnalyzedItem",
    # Classification models
    "PartRef",
    "FrontMatterItem",
    "Prologue",
    "Chapter",
    "Epilogue",
    "BackMatterItem",
    "AnySegment",
    "Classification",
    # Configuration
    "ClassifierConfig",
]
