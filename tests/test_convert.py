"""Tests for loading and converting a book end to end."""

import zipfile

import pytest
from conftest import CONTAINER_XML, package_document, words, xhtml
from typer.testing import CliRunner

from obsidiant.cli import app
from obsidiant.commands.convert import load_book
from obsidiant.models.config import ClassifierConfig


@pytest.fixture
def book_with_missing_document(tmp_path):
    """Spine ch01, ch02, gone; gone.xhtml is declared but not archived."""
    path = tmp_path / "partial.epub"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("mimetype", "application/epub+zip")
        archive.writestr("META-INF/container.xml", CONTAINER_XML)
        archive.writestr(
            "OEBPS/content.opf",
            package_document(["ch01.xhtml", "ch02.xhtml", "gone.xhtml"], title="Partial"),
        )
        archive.writestr("OEBPS/ch01.xhtml", xhtml(f"<h1>Arrival</h1><p>{words(300)}</p>"))
        archive.writestr("OEBPS/ch02.xhtml", xhtml(f"<h1>Harbour</h1><p>{words(300)}</p>"))
    return path


def test_missing_document_does_not_fail_the_book(book_with_missing_document):
    _, metadata, classification = load_book(book_with_missing_document, ClassifierConfig())

    assert [entry.href for entry in metadata.spine] == ["ch01.xhtml", "ch02.xhtml", "gone.xhtml"]
    assert [(c.chapter_number, c.href) for c in classification.chapters] == [
        (1, "ch01.xhtml"),
        (2, "ch02.xhtml"),
    ]
    assert [item.href for item in classification.back_matter] == ["gone.xhtml"]


def test_convert_book_with_missing_document(tmp_path, book_with_missing_document):
    out = tmp_path / "vault"
    result = CliRunner().invoke(app, ["convert", str(book_with_missing_document), "-o", str(out), "-q"])

    assert result.exit_code == 0, result.output
    assert (out / "Partial" / "Partial - Chapter 1.md").exists()
    assert (out / "Partial" / "Partial - Chapter 2.md").exists()
