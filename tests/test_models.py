"""Tests for data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from docstruct.models import (
    Chapter,
    CharRange,
    CorrectionOutcome,
    DocumentMetadata,
    DocumentStructure,
    Paragraph,
    RawChapter,
    RawDocument,
    RemainingIssue,
    Sentence,
    StructureCorrection,
    StructureValidationResult,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)


class TestCharRange:
    def test_length(self) -> None:
        assert CharRange(start=3, end=10).length == 7

    def test_empty_range_allowed(self) -> None:
        assert CharRange(start=5, end=5).length == 0

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            CharRange(start=10, end=3)

    def test_negative_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            CharRange(start=-1, end=3)

    def test_contains(self) -> None:
        outer = CharRange(start=0, end=20)
        assert outer.contains(CharRange(start=5, end=20))
        assert not outer.contains(CharRange(start=5, end=21))


class TestStructureModels:
    def test_models_are_frozen(self) -> None:
        sentence = Sentence(id="s", text="Hi.", position=0, char_range=CharRange(start=0, end=3))
        with pytest.raises(PydanticValidationError):
            sentence.text = "Bye."  # type: ignore[misc]

    def test_paragraph_defaults(self) -> None:
        paragraph = Paragraph(id="p", position=0, char_range=CharRange(start=0, end=0))
        assert paragraph.kind == "text"
        assert paragraph.confidence == 1.0
        assert paragraph.include_in_narration is True
        assert paragraph.sentences == []

    def test_paragraph_confidence_bounds(self) -> None:
        with pytest.raises(PydanticValidationError):
            Paragraph(
                id="p", position=0, char_range=CharRange(start=0, end=0), confidence=1.5
            )

    def test_chapter_defaults(self) -> None:
        chapter = Chapter(id="ch-0", position=0, char_range=CharRange(start=0, end=0))
        assert chapter.confidence is None
        assert chapter.element_counts == {}
        assert chapter.level == 1

    def test_document_structure_defaults(self) -> None:
        structure = DocumentStructure()
        assert structure.total_chapters == 0
        assert structure.metadata.language == "en"
        assert structure.processing_metrics is None

    def test_structure_serialization(self) -> None:
        structure = DocumentStructure(
            metadata=DocumentMetadata(title="Book", custom={"isbn": "123"}),
            confidence=0.8,
        )
        restored = DocumentStructure(**structure.model_dump())
        assert restored == structure


class TestRawModels:
    def test_raw_chapter_defaults(self) -> None:
        raw = RawChapter(text="Body")
        assert raw.title == ""
        assert raw.level == 1
        assert raw.source_offset is None

    def test_raw_document_defaults(self) -> None:
        raw = RawDocument()
        assert raw.chapters == []
        assert raw.metadata.title == ""


class TestValidationModels:
    def test_issue_subclasses(self) -> None:
        error = ValidationError(code="NO_CHAPTERS", message="none", severity="high")
        warning = ValidationWarning(code="SHORT_CHAPTER", message="short")
        assert error.location.describe() == "document"
        assert warning.severity == "medium"

    def test_invalid_severity_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ValidationWarning(code="X", message="y", severity="fatal")  # type: ignore[arg-type]

    def test_validation_result_score_bounds(self) -> None:
        with pytest.raises(PydanticValidationError):
            ValidationResult(is_valid=True, score=1.2)

    def test_structure_validation_result_timestamp(self) -> None:
        result = StructureValidationResult(is_valid=True, overall_score=1.0)
        assert isinstance(result.validated_at, datetime)
        assert result.needs_manual_review is False

    def test_correction_ids_are_unique(self) -> None:
        first = StructureCorrection(type="chapter_merge")
        second = StructureCorrection(type="chapter_merge")
        assert first.id != second.id

    def test_correction_fix_not_serialized(self) -> None:
        correction = StructureCorrection(type="chapter_split", fix=lambda s: s)
        assert "fix" not in correction.model_dump()

    def test_unknown_correction_type_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            StructureCorrection(type="rewrite")  # type: ignore[arg-type]

    def test_outcome_and_remaining_issue(self) -> None:
        outcome = CorrectionOutcome(correction_id="c1", outcome="failed", detail="boom")
        issue = RemainingIssue(type="chapter_merge", severity="high", description="boom")
        assert outcome.outcome == "failed"
        assert issue.location is None
