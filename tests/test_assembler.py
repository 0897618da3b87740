"""Tests for chapter assembly: marker pairing, parts and final filtering."""

from conftest import make_archive, make_item, words, xhtml

from obsidiant.core.assembler import (
    assemble_chapters,
    assemble_single_part,
    densify_parts,
    filter_chapters,
    group_parts,
    remap_part_numbers,
    renumber_within_parts,
)
from obsidiant.models.analysis import PatternTag
from obsidiant.models.classification import Chapter, PartRef
from obsidiant.models.config import ClassifierConfig

MARKER = (PatternTag.CALIBRE_CHAPTER_MARKER, PatternTag.CALIBRE_NUMBERED_CHAPTER)
PART = (PatternTag.PART_HEADER,)


def marker(index: int, number: int, word_count: int = 5):
    return make_item(index, word_count, MARKER, chapter_number=number, title=str(number))


def prose_archive(*items, word_count: int = 300):
    return make_archive({f"OEBPS/{i.href}": xhtml(f"<p>{words(word_count)}</p>") for i in items})


class TestSinglePart:
    def test_marker_paired_with_later_body(self):
        items = [marker(0, 12), make_item(1, 500)]

        chapters = assemble_single_part(items, ClassifierConfig())

        assert len(chapters) == 1
        assert chapters[0].chapter_number == 12
        assert chapters[0].href == "item01.xhtml"
        assert chapters[0].title == "12"
        assert chapters[0].spine_index == 1

    def test_marker_pairing_survives_final_renumbering(self):
        items = [marker(0, 12), make_item(1, 500)]
        assembly = assemble_chapters(items, prose_archive(*items))

        assert not assembly.is_multipart
        assert [(c.chapter_number, c.href) for c in assembly.chapters] == [(1, "item01.xhtml")]

    def test_body_must_follow_marker(self):
        items = [make_item(0, 300), marker(1, 1)]

        chapters = assemble_single_part(items, ClassifierConfig())

        # The marker has no body after it and is too short to stand alone
        assert [(c.chapter_number, c.href) for c in chapters] == [(2, "item00.xhtml")]

    def test_long_marker_stands_alone(self):
        chapters = assemble_single_part([marker(0, 3, word_count=150)], ClassifierConfig())
        assert [c.chapter_number for c in chapters] == [3]

    def test_short_marker_without_body_dropped(self):
        assert assemble_single_part([marker(0, 3, word_count=50)], ClassifierConfig()) == []

    def test_numbered_item_with_body_is_own_chapter(self):
        items = [marker(0, 4, word_count=300), make_item(1, 300)]

        chapters = assemble_single_part(items, ClassifierConfig())

        assert [(c.chapter_number, c.href) for c in chapters] == [
            (4, "item00.xhtml"),
            (5, "item01.xhtml"),
        ]

    def test_each_body_paired_once(self):
        items = [marker(0, 1), make_item(1, 300), marker(2, 2), make_item(3, 300)]

        chapters = assemble_single_part(items, ClassifierConfig())

        assert [(c.chapter_number, c.href) for c in chapters] == [
            (1, "item01.xhtml"),
            (2, "item03.xhtml"),
        ]

    def test_short_unnumbered_items_ignored(self):
        items = [make_item(0, 300), make_item(1, 150), make_item(2, 300)]
        chapters = assemble_single_part(items, ClassifierConfig())
        assert [c.href for c in chapters] == ["item00.xhtml", "item02.xhtml"]

    def test_dense_numbering(self):
        items = [marker(0, 7), make_item(1, 300), make_item(2, 300), make_item(3, 300)]
        assembly = assemble_chapters(items, prose_archive(*items))

        assert [c.chapter_number for c in assembly.chapters] == [1, 2, 3]


class TestMultipart:
    def build(self):
        items = [
            make_item(0, 5, PART, part_number=5, part_title="Les Débuts"),
            make_item(1, 600, PART, part_number=5, part_title="Les Débuts"),
            make_item(2, 5, PART, part_number=7, part_title="Vide"),
            make_item(3, 5, PART, part_number=9, part_title="La Fin"),
            make_item(4, 600, PART, part_number=9, part_title="La Fin"),
        ]
        split = (
            f'<h1 class="level1_title">Chapitre 1</h1><p>{words(100)}</p>'
            f'<h1 class="level1_title">Chapitre 2</h1><p>{words(100)}</p>'
        )
        archive = make_archive(
            {
                "OEBPS/item00.xhtml": xhtml("<h1>Partie 5</h1>"),
                "OEBPS/item01.xhtml": xhtml(split),
                "OEBPS/item02.xhtml": xhtml("<h1>Partie 7</h1>"),
                "OEBPS/item03.xhtml": xhtml("<h1>Partie 9</h1>"),
                "OEBPS/item04.xhtml": xhtml(f"<p>{words(300)}</p>"),
            }
        )
        return items, archive

    def test_group_parts(self):
        items, _ = self.build()
        groups = group_parts(items, ClassifierConfig())

        assert sorted(groups) == [5, 7, 9]
        assert groups[5].header.id == "item00"
        assert [i.id for i in groups[5].content_files] == ["item01"]
        assert groups[7].content_files == []

    def test_parts_renumbered_densely(self):
        items, _ = self.build()
        groups = group_parts(items, ClassifierConfig())
        assert remap_part_numbers(groups, ClassifierConfig()) == {5: 1, 9: 2}

    def test_assembly(self):
        items, archive = self.build()
        assembly = assemble_chapters(items, archive)

        assert assembly.is_multipart
        summary = [(c.part.number, c.part.title, c.chapter_number) for c in assembly.chapters]
        assert summary == [
            (1, "Les Débuts", 1),
            (1, "Les Débuts", 2),
            (2, "La Fin", 1),
        ]
        assert assembly.chapters[0].has_inline_content
        assert not assembly.chapters[2].has_inline_content

    def test_insubstantial_content_file_skipped(self):
        items = [
            make_item(0, 5, PART, part_number=1),
            make_item(1, 150, PART, part_number=1),
            make_item(2, 5, PART, part_number=2),
            make_item(3, 300, PART, part_number=2),
        ]
        archive = prose_archive(*items)
        assembly = assemble_chapters(items, archive)

        assert [c.part.number for c in assembly.chapters] == [1]
        assert assembly.chapters[0].href == "item03.xhtml"
        assert assembly.chapters[0].part.title == "Part 1"

    def test_missing_content_file_skipped(self):
        items = [make_item(0, 5, PART, part_number=1), make_item(1, 300, PART, part_number=1)]
        assembly = assemble_chapters(items, make_archive({}))
        assert assembly.chapters == []

    def test_part_emptied_by_final_filter_leaves_no_gap(self):
        items = [
            make_item(0, 5, PART, part_number=1, part_title="Les Débuts"),
            make_item(1, 300, PART, part_number=1, part_title="Les Débuts"),
            make_item(2, 5, PART, part_number=2, part_title="Le Milieu"),
            make_item(3, 300, PART, part_number=2, part_title="Le Milieu"),
            make_item(4, 5, PART, part_number=3),
            make_item(5, 300, PART, part_number=3),
        ]
        stubs = "".join(
            f'<h1 class="level1_title">Chapitre {n}</h1><p>{words(5)}</p>' for n in (1, 2, 3)
        )
        archive = make_archive(
            {
                "OEBPS/item01.xhtml": xhtml(f"<p>{words(300)}</p>"),
                "OEBPS/item03.xhtml": xhtml(stubs),
                "OEBPS/item05.xhtml": xhtml(f"<p>{words(300)}</p>"),
            }
        )

        assembly = assemble_chapters(items, archive)

        assert [(c.part.number, c.part.title) for c in assembly.chapters] == [
            (1, "Les Débuts"),
            (2, "Part 2"),
        ]
        assert [c.href for c in assembly.chapters] == ["item01.xhtml", "item05.xhtml"]

    def test_densify_parts_keeps_dense_numbering(self):
        one = PartRef(number=1, title="A")
        chapters = [Chapter(id="a", href="a", chapter_number=1, part=one, spine_index=0)]
        assert densify_parts(chapters) == chapters

    def test_whole_file_chapters_renumbered_within_part(self):
        items = [
            make_item(0, 5, PART, part_number=1),
            make_item(1, 300, PART, part_number=1),
            make_item(2, 300, PART, part_number=1),
        ]
        assembly = assemble_chapters(items, prose_archive(*items))
        assert [c.chapter_number for c in assembly.chapters] == [1, 2]


class TestFinalFilter:
    def chapter(self, href="item00.xhtml", content=None, number=1):
        return Chapter(id="c", href=href, chapter_number=number, spine_index=0, content=content)

    def test_word_threshold_is_strict(self):
        archive = make_archive(
            {
                "OEBPS/short.xhtml": xhtml(f"<p>{words(20)}</p>"),
                "OEBPS/long.xhtml": xhtml(f"<p>{words(21)}</p>"),
            }
        )
        chapters = [self.chapter("short.xhtml"), self.chapter("long.xhtml")]

        kept = filter_chapters(chapters, archive, ClassifierConfig())

        assert [c.href for c in kept] == ["long.xhtml"]

    def test_inline_content_counted(self):
        chapters = [
            self.chapter("doc.xhtml", content=f"<p>{words(21)}</p>"),
            self.chapter("doc.xhtml", content=f"<p>{words(3)}</p>"),
        ]
        archive = make_archive({"OEBPS/doc.xhtml": xhtml(f"<p>{words(500)}</p>")})

        kept = filter_chapters(chapters, archive, ClassifierConfig())

        assert len(kept) == 1
        assert kept[0].content == f"<p>{words(21)}</p>"

    def test_missing_source_dropped(self):
        assert filter_chapters([self.chapter("gone.xhtml")], make_archive({}), ClassifierConfig()) == []

    def test_undecodable_source_kept(self):
        archive = make_archive({"OEBPS/bad.xhtml": b"\xff\xfe\xfa"})
        kept = filter_chapters([self.chapter("bad.xhtml")], archive, ClassifierConfig())
        assert len(kept) == 1


def test_renumber_only_colliding_parts():
    one = PartRef(number=1, title="A")
    two = PartRef(number=2, title="B")
    chapters = [
        Chapter(id="a", href="a", chapter_number=1, part=one, spine_index=0),
        Chapter(id="b", href="b", chapter_number=1, part=one, spine_index=1),
        Chapter(id="c", href="c", chapter_number=4, part=two, spine_index=2),
    ]
    result = renumber_within_parts(chapters)
    assert [c.chapter_number for c in result] == [1, 2, 4]
