"""Structure validation and correction for normalized documents."""

import logging
from functools import partial

from docstruct.config import ValidationConfig
from docstruct.ingestion.confidence import recalibrate_confidence, score_chapters
from docstruct.models.document import DocumentStructure
from docstruct.models.validation import (
    CorrectionOutcome,
    CorrectionResult,
    RemainingIssue,
    StructureCorrection,
    StructureValidationResult,
    ValidationError,
    ValidationWarning,
)
from docstruct.validation.corrections import CORRECTION_HANDLERS
from docstruct.validation.registry import RuleRegistry
from docstruct.validation.rules import BUILTIN_RULES, STRICT_RULES, ValidationRule

logger = logging.getLogger(__name__)

# Warning codes that point at chapters worth merging or removing
CHAPTER_SIZE_WARNINGS = frozenset({"SHORT_CHAPTER", "EMPTY_CHAPTER"})
# Warnings this close to max_warnings trigger a structure review
WARNING_REVIEW_MARGIN = 5

RECOMMEND_FIX_ERRORS = "Fix structural errors before processing the document"
RECOMMEND_ADD_HEADERS = "Add chapter headers or section breaks to the document"
RECOMMEND_MERGE_SHORT = "Merge or remove very short or empty chapters"
RECOMMEND_REVIEW = "Review the document structure; many warnings were reported"
RECOMMEND_SPLIT = "Split the single long chapter into several chapters"
RECOMMEND_MERGE_SECTIONS = "Merge related sections; the document has very many chapters"


class StructureValidator:
    """Runs validation rules over a DocumentStructure and applies corrections.

    Built-in rules are registered at construction, bound to ``config``; with
    ``config.strict`` the basic-structure rule is added. Custom rules go into
    the same per-instance registry after the built-ins.

    Args:
        config: ValidationConfig with thresholds and score weights.
        registry: Optional pre-populated RuleRegistry; built-ins are added to it.
    """

    def __init__(
        self,
        config: ValidationConfig | None = None,
        registry: RuleRegistry | None = None,
    ) -> None:
        self.config = config or ValidationConfig()
        self.registry = registry if registry is not None else RuleRegistry()

        rules = dict(BUILTIN_RULES)
        if self.config.strict:
            rules.update(STRICT_RULES)
        for name, rule in rules.items():
            if name not in self.registry:
                self.registry.register(name, partial(rule, config=self.config))

    def register_rule(self, name: str, rule: ValidationRule) -> None:
        self.registry.register(name, rule)

    def unregister_rule(self, name: str) -> bool:
        return self.registry.unregister(name)

    def validate_structure(self, structure: DocumentStructure) -> StructureValidationResult:
        """Run every registered rule and merge the results.

        Errors and warnings are concatenated in rule order and the overall
        score is the mean of the rule scores.

        Args:
            structure: The document to check. Not modified.

        Returns:
            The merged result with derived flags and recommendations.
        """
        logger.debug(
            "Starting structure validation: %d chapters, %d rules",
            len(structure.chapters),
            len(self.registry),
        )

        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []
        rule_scores: dict[str, float] = {}

        for name, rule in self.registry.rules():
            result = rule(structure)
            errors.extend(result.errors)
            warnings.extend(result.warnings)
            rule_scores[name] = result.score

        overall_score = 1.0
        if rule_scores:
            overall_score = sum(rule_scores.values()) / len(rule_scores)

        validation = StructureValidationResult(
            is_valid=not errors,
            overall_score=overall_score,
            errors=errors,
            warnings=warnings,
            meets_confidence_threshold=overall_score >= self.config.min_confidence,
            has_too_many_warnings=len(warnings) > self.config.max_warnings,
            needs_manual_review=False,
            recommendations=self.generate_recommendations(errors, warnings, structure),
            rule_scores=rule_scores,
            metadata={"chapter_count": len(structure.chapters)},
        )

        logger.info(
            "Structure validation completed: valid=%s score=%.2f errors=%d warnings=%d",
            validation.is_valid,
            validation.overall_score,
            len(errors),
            len(warnings),
        )
        return validation

    def generate_recommendations(
        self,
        errors: list[ValidationError],
        warnings: list[ValidationWarning],
        structure: DocumentStructure,
    ) -> list[str]:
        """Derive ordered, de-duplicated advice from the findings."""
        recommendations: list[str] = []

        if errors:
            recommendations.append(RECOMMEND_FIX_ERRORS)

        if any(error.code == "NO_CHAPTERS" for error in errors):
            recommendations.append(RECOMMEND_ADD_HEADERS)

        size_warnings = [w for w in warnings if w.code in CHAPTER_SIZE_WARNINGS]
        if len(size_warnings) >= 2:
            recommendations.append(RECOMMEND_MERGE_SHORT)

        if len(warnings) > self.config.max_warnings - WARNING_REVIEW_MARGIN:
            recommendations.append(RECOMMEND_REVIEW)

        chapters = structure.chapters
        if (
            len(chapters) == 1
            and chapters[0].word_count > self.config.single_chapter_word_threshold
        ):
            recommendations.append(RECOMMEND_SPLIT)

        if len(chapters) > self.config.max_chapter_count:
            recommendations.append(RECOMMEND_MERGE_SECTIONS)

        return list(dict.fromkeys(recommendations))

    def apply_corrections(
        self,
        structure: DocumentStructure,
        corrections: list[StructureCorrection],
    ) -> CorrectionResult:
        """Apply corrections in order, each to the running corrected structure.

        A correction that raises, or returns something other than a
        DocumentStructure, is recorded as failed together with a
        high-severity remaining issue; the rest of the batch still runs. The
        corrected confidence is the rescored structure recalibrated for the
        number of applied corrections.

        Args:
            structure: The document to correct. Not modified.
            corrections: Corrections to try, in order.

        Returns:
            The outcome report, including the corrected structure.
        """
        current = structure
        applied: list[StructureCorrection] = []
        outcomes: list[CorrectionOutcome] = []
        remaining: list[RemainingIssue] = []

        for correction in corrections:
            try:
                if correction.fix is not None:
                    updated = correction.fix(current)
                else:
                    updated = CORRECTION_HANDLERS[correction.type](current, correction)
                if not isinstance(updated, DocumentStructure):
                    raise TypeError(
                        f"Correction returned {type(updated).__name__}, "
                        "expected DocumentStructure"
                    )
                current = updated
            except Exception as e:
                logger.warning(
                    "Correction %s (%s) failed: %s", correction.id, correction.type, e
                )
                outcomes.append(
                    CorrectionOutcome(
                        correction_id=correction.id, outcome="failed", detail=str(e)
                    )
                )
                remaining.append(
                    RemainingIssue(
                        type=correction.type,
                        severity="high",
                        description=f"Failed to apply correction: {e}",
                        location=correction.location.describe(),
                    )
                )
                continue

            applied.append(correction)
            outcomes.append(
                CorrectionOutcome(
                    correction_id=correction.id,
                    outcome="applied",
                    detail=correction.description,
                )
            )

        corrected_confidence = recalibrate_confidence(
            structure.confidence, score_chapters(current.chapters), len(applied)
        )
        if corrected_confidence != current.confidence:
            current = current.model_copy(update={"confidence": corrected_confidence})

        validation = self.validate_structure(current)

        logger.info(
            "Applied %d of %d corrections; confidence %.2f -> %.2f",
            len(applied),
            len(corrections),
            structure.confidence,
            corrected_confidence,
        )

        return CorrectionResult(
            original_confidence=structure.confidence,
            corrected_confidence=corrected_confidence,
            applied=applied,
            outcomes=outcomes,
            remaining_issues=remaining,
            validation_passed=validation.is_valid,
            structure=current,
        )
