"""Data models for the document structure normalizer."""

from docstruct.models.document import (
    Chapter,
    CharRange,
    DocumentStructure,
    Paragraph,
    ProcessingMetrics,
    Sentence,
    TocEntry,
)
from docstruct.models.raw import DocumentMetadata, RawChapter, RawDocument
from docstruct.models.validation import (
    CorrectionOutcome,
    CorrectionResult,
    IssueLocation,
    RemainingIssue,
    StructureCorrection,
    StructureValidationResult,
    ValidationError,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)

__all__ = [
    "Chapter",
    "CharRange",
    "CorrectionOutcome",
    "CorrectionResult",
    "DocumentMetadata",
    "DocumentStructure",
    "IssueLocation",
    "Paragraph",
    "ProcessingMetrics",
    "RawChapter",
    "RawDocument",
    "RemainingIssue",
    "Sentence",
    "StructureCorrection",
    "StructureValidationResult",
    "TocEntry",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
    "ValidationWarning",
]
