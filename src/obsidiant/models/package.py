"""Data models for the EPUB package structure."""

from pydantic import BaseModel, ConfigDict, Field


class SpineEntry(BaseModel):
    """One manifest reference in reading order."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str


class ManifestItem(BaseModel):
    """Manifest entry: a document or resource declared by the package."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    media_type: str = ""


class PackageMetadata(BaseModel):
    """Package-level metadata, manifest and spine."""

    title: str | None = None
    creator: str | None = None
    language: str | None = None
    identifier: str | None = None
    spine: list[SpineEntry] = Field(default_factory=list)
    manifest: dict[str, ManifestItem] = Field(default_factory=dict)

    @property
    def display_title(self) -> str:
        return self.title or "Unknown Title"

    @property
    def display_creator(self) -> str:
        return self.creator or "Unknown Author"
