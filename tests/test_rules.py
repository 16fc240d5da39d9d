"""Tests for the built-in validation rules."""

import pytest

from docstruct.config import ValidationConfig
from docstruct.ingestion.assembler import build_structure, segment_chapters
from docstruct.ingestion.segmenter import Segmenter
from docstruct.models.document import DocumentStructure
from docstruct.models.raw import DocumentMetadata, RawChapter
from docstruct.validation.rules import (
    calculate_score,
    chapter_length_outliers,
    check_basic_structure,
    check_chapter_structure,
    check_paragraph_structure,
    check_sentence_structure,
    check_structure_coherence,
)


def _words(n: int) -> str:
    return " ".join(["word"] * n) + "."


def _structure(*texts: str, title: str = "Test Document") -> DocumentStructure:
    raws = [RawChapter(title=f"Chapter {i + 1}", text=text) for i, text in enumerate(texts)]
    chapters = segment_chapters(Segmenter(), raws)
    return build_structure(DocumentMetadata(title=title), chapters)


def _codes(result) -> list[str]:
    return [issue.code for issue in [*result.errors, *result.warnings]]


class TestCalculateScore:
    def test_no_issues(self) -> None:
        assert calculate_score([], [], 0.5, 0.05) == 1.0

    def test_floors_at_zero(self) -> None:
        structure = DocumentStructure()
        errors = check_chapter_structure(structure).errors * 3
        assert calculate_score(errors, [], 0.5, 0.05) == 0.0


# ── Chapter rule ─────────────────────────────────────────────────────────────


class TestChapterStructure:
    def test_no_chapters(self) -> None:
        result = check_chapter_structure(DocumentStructure())
        assert result.is_valid is False
        assert _codes(result) == ["NO_CHAPTERS"]
        assert result.errors[0].severity == "high"
        assert result.score == pytest.approx(0.5)

    def test_healthy_chapter(self) -> None:
        result = check_chapter_structure(_structure(_words(60)))
        assert result.is_valid is True
        assert result.warnings == []
        assert result.score == 1.0

    def test_short_chapter(self) -> None:
        result = check_chapter_structure(_structure(_words(60), _words(5)))
        assert _codes(result) == ["SHORT_CHAPTER"]
        assert result.warnings[0].location.chapter == 1
        assert result.warnings[0].severity == "low"
        assert result.score == pytest.approx(0.95)

    def test_empty_chapter(self) -> None:
        result = check_chapter_structure(_structure(_words(60), "   "))
        assert _codes(result) == ["EMPTY_CHAPTER"]
        assert result.warnings[0].severity == "medium"
        assert result.is_valid is True

    def test_threshold_from_config(self) -> None:
        config = ValidationConfig(min_chapter_words=10)
        result = check_chapter_structure(_structure(_words(20)), config)
        assert result.warnings == []


# ── Paragraph rule ───────────────────────────────────────────────────────────


class TestParagraphStructure:
    def test_clean_paragraphs(self) -> None:
        result = check_paragraph_structure(_structure("One two three.\n\nFour five six."))
        assert result.warnings == []
        assert result.score == 1.0

    def test_low_confidence_paragraph(self) -> None:
        structure = _structure("One two three.")
        chapter = structure.chapters[0]
        weak = chapter.paragraphs[0].model_copy(update={"confidence": 0.3})
        structure = structure.model_copy(
            update={"chapters": [chapter.model_copy(update={"paragraphs": [weak]})]}
        )

        result = check_paragraph_structure(structure)
        assert _codes(result) == ["LOW_PARAGRAPH_CONFIDENCE"]
        assert result.warnings[0].location.paragraph == 0
        assert "0.30" in result.warnings[0].message
        assert result.score == pytest.approx(0.98)

    def test_paragraph_without_sentences(self) -> None:
        structure = _structure("One two three.")
        chapter = structure.chapters[0]
        hollow = chapter.paragraphs[0].model_copy(update={"sentences": []})
        structure = structure.model_copy(
            update={"chapters": [chapter.model_copy(update={"paragraphs": [hollow]})]}
        )

        result = check_paragraph_structure(structure)
        assert _codes(result) == ["EMPTY_PARAGRAPH"]
        assert result.is_valid is True


# ── Sentence rule ────────────────────────────────────────────────────────────


class TestSentenceStructure:
    def test_very_short_sentence(self) -> None:
        result = check_sentence_structure(_structure("Hi. This one is fine."))
        assert _codes(result) == ["VERY_SHORT_SENTENCE"]
        location = result.warnings[0].location
        assert (location.chapter, location.paragraph, location.sentence) == (0, 0, 0)

    def test_very_long_sentence(self) -> None:
        result = check_sentence_structure(_structure(_words(61)))
        assert _codes(result) == ["VERY_LONG_SENTENCE"]
        assert result.score == pytest.approx(0.99)

    def test_boundaries_are_accepted(self) -> None:
        result = check_sentence_structure(_structure(f"Two words. {_words(60)}"))
        assert result.warnings == []

    def test_zero_word_sentence_is_ignored(self) -> None:
        result = check_sentence_structure(_structure("42. Some more words here."))
        assert result.warnings == []


# ── Coherence rule ───────────────────────────────────────────────────────────


class TestStructureCoherence:
    def test_low_confidence_is_an_error(self) -> None:
        structure = _structure(_words(60)).model_copy(update={"confidence": 0.4})
        result = check_structure_coherence(structure)
        assert _codes(result) == ["LOW_OVERALL_CONFIDENCE"]
        assert result.is_valid is False
        assert result.score == pytest.approx(0.6)

    def test_medium_confidence_is_a_warning(self) -> None:
        structure = _structure(_words(60)).model_copy(update={"confidence": 0.65})
        result = check_structure_coherence(structure)
        assert _codes(result) == ["MEDIUM_OVERALL_CONFIDENCE"]
        assert result.is_valid is True
        assert result.score == pytest.approx(0.9)

    def test_inconsistent_lengths_single_warning(self) -> None:
        structure = _structure(_words(100), _words(100), _words(100), _words(1000))
        result = check_structure_coherence(structure)
        assert _codes(result) == ["INCONSISTENT_CHAPTER_LENGTHS"]
        assert "chapters 3" in result.warnings[0].message

    def test_consistent_lengths(self) -> None:
        structure = _structure(_words(100), _words(120), _words(90))
        assert check_structure_coherence(structure).warnings == []

    def test_outliers_need_two_chapters(self) -> None:
        assert chapter_length_outliers(_structure(_words(10))) == []

    def test_short_outlier(self) -> None:
        structure = _structure(_words(100), _words(100), _words(5))
        assert chapter_length_outliers(structure) == [2]


# ── Strict basic-structure rule ──────────────────────────────────────────────


class TestBasicStructure:
    def test_missing_title_and_chapters(self) -> None:
        result = check_basic_structure(DocumentStructure())
        assert _codes(result) == ["MISSING_TITLE", "NO_CHAPTERS"]
        assert all(e.severity == "critical" for e in result.errors)
        assert result.score == 0.0

    def test_complete_document(self) -> None:
        result = check_basic_structure(_structure(_words(10)))
        assert result.is_valid is True
        assert result.score == 1.0


class TestRulesArePure:
    def test_input_unchanged(self) -> None:
        structure = _structure(_words(5), "  ")
        before = structure.model_dump()
        for rule in (
            check_chapter_structure,
            check_paragraph_structure,
            check_sentence_structure,
            check_structure_coherence,
        ):
            rule(structure)
        assert structure.model_dump() == before
