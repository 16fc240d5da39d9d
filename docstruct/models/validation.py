"""Validation and correction result models."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from docstruct.models.document import DocumentStructure

Severity = Literal["low", "medium", "high", "critical", "error", "warning"]
RiskLevel = Literal["low", "medium", "high"]
CorrectionType = Literal[
    "chapter_split",
    "chapter_merge",
    "paragraph_adjust",
    "confidence_recalibrate",
    "boundary_move",
]


class IssueLocation(BaseModel):
    """Where in the hierarchy an issue was found. All indices optional."""

    model_config = ConfigDict(frozen=True)

    chapter: int | None = None
    paragraph: int | None = None
    sentence: int | None = None

    def describe(self) -> str:
        parts = [
            f"{name} {index}"
            for name, index in (
                ("chapter", self.chapter),
                ("paragraph", self.paragraph),
                ("sentence", self.sentence),
            )
            if index is not None
        ]
        return ", ".join(parts) or "document"


class ValidationIssue(BaseModel):
    """A single finding produced by a validation rule."""

    model_config = ConfigDict(frozen=True)

    code: str  # e.g. "NO_CHAPTERS", "SHORT_CHAPTER"
    message: str
    location: IssueLocation = Field(default_factory=IssueLocation)
    severity: Severity = "medium"


class ValidationError(ValidationIssue):
    """A hard finding; any error makes the structure invalid."""


class ValidationWarning(ValidationIssue):
    """An advisory finding; never affects validity."""


class ValidationResult(BaseModel):
    """Output of one validation rule."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    score: float = Field(default=1.0, ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class StructureValidationResult(BaseModel):
    """Aggregated output of every rule run by the validator."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    overall_score: float = Field(ge=0.0, le=1.0)
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    meets_confidence_threshold: bool = True
    has_too_many_warnings: bool = False
    needs_manual_review: bool = False
    recommendations: list[str] = Field(default_factory=list)
    rule_scores: dict[str, float] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    validated_at: datetime = Field(default_factory=datetime.now)


class StructureCorrection(BaseModel):
    """A proposed, independently applicable fix.

    When ``fix`` is set it replaces the built-in handler for ``type``. It
    receives the current structure and must return a new one.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: CorrectionType
    location: IssueLocation = Field(default_factory=IssueLocation)
    description: str = ""
    fix: Callable[[DocumentStructure], DocumentStructure] | None = Field(
        default=None, exclude=True
    )


class CorrectionOutcome(BaseModel):
    """How one correction resolved."""

    model_config = ConfigDict(frozen=True)

    correction_id: str
    outcome: Literal["applied", "failed"]
    detail: str = ""


class RemainingIssue(BaseModel):
    """An issue still open after corrections were applied."""

    model_config = ConfigDict(frozen=True)

    type: str
    severity: RiskLevel
    description: str
    location: str | None = None


class CorrectionResult(BaseModel):
    """Report of one apply-corrections batch."""

    model_config = ConfigDict(frozen=True)

    original_confidence: float
    corrected_confidence: float
    applied: list[StructureCorrection] = Field(default_factory=list)
    outcomes: list[CorrectionOutcome] = Field(default_factory=list)
    remaining_issues: list[RemainingIssue] = Field(default_factory=list)
    validation_passed: bool = False
    structure: DocumentStructure
