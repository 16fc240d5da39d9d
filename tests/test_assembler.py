"""Tests for assembling segmented chapters into a DocumentStructure."""

import pytest

from docstruct.ingestion.assembler import (
    DocumentAssembler,
    build_structure,
    build_table_of_contents,
    segment_chapters,
)
from docstruct.ingestion.confidence import score_chapters
from docstruct.ingestion.segmenter import Segmenter
from docstruct.models.raw import DocumentMetadata, RawChapter, RawDocument


@pytest.fixture
def assembler() -> DocumentAssembler:
    return DocumentAssembler()


@pytest.fixture
def raw_document() -> RawDocument:
    return RawDocument(
        metadata=DocumentMetadata(title="Sample", author="A. Writer"),
        chapters=[
            RawChapter(title="One", text="First sentence here. Second one.\n\nMore text."),
            RawChapter(title="Two", text="Another chapter begins. It goes on."),
            RawChapter(title="Three", text="Closing words for the book."),
        ],
    )


class TestSegmentChapters:
    def test_offsets_are_threaded(self) -> None:
        raws = [RawChapter(text="abc def."), RawChapter(text="ghi jkl.")]
        chapters = segment_chapters(Segmenter(), raws)
        assert chapters[0].char_range.start == 0
        assert chapters[1].char_range.start == chapters[0].char_range.end
        assert [c.position for c in chapters] == [0, 1]

    def test_start_offset(self) -> None:
        chapters = segment_chapters(Segmenter(), [RawChapter(text="Words.")], 40)
        assert chapters[0].char_range.start == 40

    def test_no_chapters(self) -> None:
        assert segment_chapters(Segmenter(), []) == []


class TestDocumentAssembler:
    def test_totals_are_sums(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        assert structure.total_chapters == 3
        assert structure.total_word_count == sum(c.word_count for c in structure.chapters)
        for chapter in structure.chapters:
            assert chapter.word_count == sum(p.word_count for p in chapter.paragraphs)
            for paragraph in chapter.paragraphs:
                assert paragraph.word_count == sum(
                    s.word_count for s in paragraph.sentences
                )
        assert structure.total_paragraphs == 4
        assert structure.total_sentences == 6

    def test_chapter_ranges_are_monotonic(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        for previous, current in zip(structure.chapters, structure.chapters[1:]):
            assert current.char_range.start >= previous.char_range.end

    def test_children_within_parent_ranges(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        for chapter in structure.chapters:
            for paragraph in chapter.paragraphs:
                assert chapter.char_range.contains(paragraph.char_range)
                for sentence in paragraph.sentences:
                    assert paragraph.char_range.contains(sentence.char_range)

    def test_confidence_matches_scorer(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        assert structure.confidence == score_chapters(structure.chapters)
        assert 0.0 <= structure.confidence <= 1.0

    def test_processing_metrics(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        metrics = structure.processing_metrics
        assert metrics is not None
        assert metrics.parse_end_time >= metrics.parse_start_time
        assert metrics.source_length == structure.chapters[-1].char_range.end
        assert metrics.processing_errors == []

    def test_empty_chapter_is_kept_and_reported(self, assembler: DocumentAssembler) -> None:
        raw = RawDocument(
            chapters=[RawChapter(title="Full", text="Some text."), RawChapter(title="Hole", text="  ")]
        )
        structure = assembler.assemble(raw)
        assert structure.total_chapters == 2
        assert structure.chapters[1].paragraphs == []
        assert len(structure.processing_metrics.processing_errors) == 1
        assert "Hole" in structure.processing_metrics.processing_errors[0]

    def test_metadata_carried_over(
        self, assembler: DocumentAssembler, raw_document: RawDocument
    ) -> None:
        structure = assembler.assemble(raw_document)
        assert structure.metadata.title == "Sample"
        assert structure.metadata.author == "A. Writer"

    def test_empty_document(self, assembler: DocumentAssembler) -> None:
        structure = assembler.assemble(RawDocument())
        assert structure.chapters == []
        assert structure.total_word_count == 0
        assert structure.processing_metrics.source_length == 0


class TestTableOfContents:
    def test_untitled_chapters_get_placeholder(self) -> None:
        chapters = segment_chapters(
            Segmenter(), [RawChapter(title="Intro", text="A b."), RawChapter(text="C d.", level=2)]
        )
        toc = build_table_of_contents(chapters)
        assert [(e.title, e.level, e.chapter_position) for e in toc] == [
            ("Intro", 1, 0),
            ("Chapter 2", 2, 1),
        ]

    def test_build_structure_without_metrics(self) -> None:
        chapters = segment_chapters(Segmenter(), [RawChapter(text="Hello world.")])
        structure = build_structure(DocumentMetadata(title="T"), chapters)
        assert structure.processing_metrics is None
        assert len(structure.table_of_contents) == 1
