"""Render classified segments into Obsidian Markdown notes."""

import re
from dataclasses import dataclass
from typing import Literal

import yaml
from bs4 import BeautifulSoup, NavigableString, Tag
from markdownify import markdownify as md

from obsidiant.core.signature import parse_markup
from obsidiant.models.classification import PartRef

NoteType = Literal["prologue", "chapter", "epilogue"]

# Calibre heading classes
REMOVED_HEADING_CLASSES = ("chapn", "chap_n", "pre_tit")
SUBTITLE_HEADING_CLASSES = ("chaptit", "int_niv", "prestit")
FOOTNOTE_SEPARATOR_CLASSES = ("border_note", "bordernote")

FOOTNOTE_BODY_NUMBER = re.compile(r"^\s*(\d+)\s*\.\s*")
PAGE_ANCHOR_ID = re.compile(r"^page_\d+$")


@dataclass(frozen=True)
class NoteContext:
    """Frontmatter facts of the note being rendered."""

    title: str
    note_type: NoteType
    book_title: str | None = None
    chapter_number: int | None = None
    part: PartRef | None = None


def _classes(tag: Tag) -> list[str]:
    value = tag.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def _has_any_class(tag: Tag, names: tuple[str, ...]) -> bool:
    return any(c in names for c in _classes(tag))


class NoteRenderer:
    """Convert chapter markup into an Obsidian note."""

    def render(self, markup: str, context: NoteContext) -> str:
        """Frontmatter, title header and Markdown body."""
        parts = [self.frontmatter(context), f"# {context.title}\n\n"]
        if context.note_type == "chapter" and context.part:
            parts.append(f"*{context.part.title}*\n\n")
        parts.append(self.to_markdown(markup))
        return "".join(parts)

    def frontmatter(self, context: NoteContext) -> str:
        data: dict[str, object] = {"title": context.title, "type": context.note_type}
        if context.chapter_number:
            data["chapter"] = context.chapter_number
        if context.book_title:
            data["book"] = context.book_title
        if context.part:
            data["part"] = context.part.number
            data["partTitle"] = context.part.title
        data["source"] = "epub"
        dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        return f"---\n{dumped}---\n\n"

    def to_markdown(self, markup: str) -> str:
        """Convert calibre-flavoured XHTML to clean Markdown."""
        soup = parse_markup(markup)

        for tag in soup(["head", "nav", "header", "footer", "aside"]):
            tag.decompose()

        self._convert_calibre(soup)

        body = soup.body or soup
        markdown = md(
            str(body),
            heading_style="ATX",
            bullets="-",
            strip=["a"],  # Remove link formatting but keep text
            escape_misc=False,
        )
        # Collapse runs of blank lines
        lines = [line.rstrip() for line in markdown.split("\n")]
        cleaned = []
        prev_blank = False
        for line in lines:
            is_blank = not line.strip()
            if is_blank and prev_blank:
                continue
            cleaned.append(line)
            prev_blank = is_blank

        return "\n".join(cleaned).strip() + "\n"

    def _convert_calibre(self, soup: BeautifulSoup) -> None:
        """Rewrite calibre-specific markup into plain HTML."""
        for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
            if _has_any_class(heading, REMOVED_HEADING_CLASSES):
                heading.decompose()
            elif _has_any_class(heading, SUBTITLE_HEADING_CLASSES):
                self._replace_with_bold_paragraph(soup, heading)

        for rule in soup.find_all("hr"):
            if _has_any_class(rule, FOOTNOTE_SEPARATOR_CLASSES):
                rule.decompose()

        for note in soup.find_all("div", class_="ntb"):
            self._convert_footnote_body(soup, note)

        for anchor in soup.find_all("a"):
            if "apnb" in _classes(anchor):
                number = anchor.get_text(strip=True)
                anchor.replace_with(NavigableString(f"[^{number}]"))
            elif PAGE_ANCHOR_ID.match(anchor.get("id", "")) and not anchor.get_text(strip=True):
                anchor.decompose()

        for letter in soup.find_all("span", class_="let"):
            letter.name = "strong"
            del letter["class"]

        for block in soup.find_all("div", class_="lettre"):
            block.name = "blockquote"
            label = soup.new_tag("p")
            strong = soup.new_tag("strong")
            strong.string = "Letter/Email:"
            label.append(strong)
            block.insert(0, label)

    def _replace_with_bold_paragraph(self, soup: BeautifulSoup, heading: Tag) -> None:
        text = heading.get_text(" ", strip=True)
        paragraph = soup.new_tag("p")
        strong = soup.new_tag("strong")
        strong.string = text
        paragraph.append(strong)
        heading.replace_with(paragraph)

    def _convert_footnote_body(self, soup: BeautifulSoup, note: Tag) -> None:
        """``<div class="ntb">1. text</div>`` becomes ``[^1]: text``."""
        text = " ".join(note.get_text(" ").split())
        match = FOOTNOTE_BODY_NUMBER.match(text)
        if not match:
            return
        paragraph = soup.new_tag("p")
        paragraph.string = f"[^{match.group(1)}]: {text[match.end():]}"
        note.replace_with(paragraph)
