"""Data models for the classified book structure."""

from typing import Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class PartRef(BaseModel):
    """The part a chapter belongs to in a multi-part book."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str


class Segment(BaseModel):
    """Common fields of every classified spine segment."""

    model_config = ConfigDict(frozen=True)

    id: str
    href: str
    title: str | None = None
    spine_index: int


class FrontMatterItem(Segment):
    kind: Literal["front_matter"] = "front_matter"


class BackMatterItem(Segment):
    kind: Literal["back_matter"] = "back_matter"


class Prologue(Segment):
    kind: Literal["prologue"] = "prologue"
    title: str = "Prologue"


class Epilogue(Segment):
    kind: Literal["epilogue"] = "epilogue"
    title: str = "Epilogue"


class Chapter(Segment):
    """A chapter, either a whole spine document or a slice of one."""

    kind: Literal["chapter"] = "chapter"
    chapter_number: int
    part: PartRef | None = None
    # Inline markup for chapters split out of a larger document
    content: str | None = None

    @property
    def has_inline_content(self) -> bool:
        return bool(self.content)


AnySegment = Union[FrontMatterItem, Prologue, Chapter, Epilogue, BackMatterItem]


class Classification(BaseModel):
    """Logical structure reconstructed from the spine."""

    front_matter: list[FrontMatterItem] = Field(default_factory=list)
    prologue: Prologue | None = None
    chapters: list[Chapter] = Field(default_factory=list)
    epilogue: Epilogue | None = None
    back_matter: list[BackMatterItem] = Field(default_factory=list)
    is_multipart: bool = False

    def segments(self) -> Iterator[AnySegment]:
        """Yield every segment in reading order."""
        yield from self.front_matter
        if self.prologue:
            yield self.prologue
        yield from self.chapters
        if self.epilogue:
            yield self.epilogue
        yield from self.back_matter

    def part_numbers(self) -> list[int]:
        """Distinct part numbers in chapter order."""
        numbers: list[int] = []
        for chapter in self.chapters:
            if chapter.part and chapter.part.number not in numbers:
                numbers.append(chapter.part.number)
        return numbers
