"""Built-in structure validation rules.

Every rule takes a DocumentStructure and returns a ValidationResult without
side effects. Thresholds and score weights come from ValidationConfig.
"""

from collections.abc import Callable

from docstruct.config import ValidationConfig
from docstruct.models.document import DocumentStructure
from docstruct.models.validation import (
    IssueLocation,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

ValidationRule = Callable[[DocumentStructure], ValidationResult]

CONFIDENCE_DECIMAL_PLACES = 2


def calculate_score(
    errors: list[ValidationError],
    warnings: list[ValidationWarning],
    error_weight: float,
    warning_weight: float,
) -> float:
    """Score a rule result: ``max(0, 1 - errors*We - warnings*Ww)``."""
    return max(0.0, 1.0 - (len(errors) * error_weight + len(warnings) * warning_weight))


def _result(
    errors: list[ValidationError],
    warnings: list[ValidationWarning],
    error_weight: float,
    warning_weight: float,
) -> ValidationResult:
    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        score=calculate_score(errors, warnings, error_weight, warning_weight),
    )


def check_chapter_structure(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> ValidationResult:
    """Require at least one chapter; flag empty and very short chapters."""
    config = config or ValidationConfig()
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if not structure.chapters:
        errors.append(
            ValidationError(
                code="NO_CHAPTERS",
                message="Document has no chapters",
                severity="high",
            )
        )

    for index, chapter in enumerate(structure.chapters):
        if not chapter.paragraphs:
            warnings.append(
                ValidationWarning(
                    code="EMPTY_CHAPTER",
                    message=f'Chapter "{chapter.title}" has no content',
                    location=IssueLocation(chapter=index),
                    severity="medium",
                )
            )
        elif 0 < chapter.word_count < config.min_chapter_words:
            warnings.append(
                ValidationWarning(
                    code="SHORT_CHAPTER",
                    message=(
                        f'Chapter "{chapter.title}" is very short '
                        f"({chapter.word_count} words)"
                    ),
                    location=IssueLocation(chapter=index),
                    severity="low",
                )
            )

    return _result(
        errors, warnings, config.chapter_error_weight, config.chapter_warning_weight
    )


def check_paragraph_structure(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> ValidationResult:
    """Flag paragraphs without sentences or with low detection confidence."""
    config = config or ValidationConfig()
    warnings: list[ValidationWarning] = []

    for chapter_index, chapter in enumerate(structure.chapters):
        for paragraph_index, paragraph in enumerate(chapter.paragraphs):
            location = IssueLocation(chapter=chapter_index, paragraph=paragraph_index)

            if not paragraph.sentences:
                warnings.append(
                    ValidationWarning(
                        code="EMPTY_PARAGRAPH",
                        message="Paragraph has no sentences",
                        location=location,
                        severity="low",
                    )
                )

            if paragraph.confidence < config.min_paragraph_confidence:
                warnings.append(
                    ValidationWarning(
                        code="LOW_PARAGRAPH_CONFIDENCE",
                        message=(
                            "Paragraph has low confidence score "
                            f"({paragraph.confidence:.{CONFIDENCE_DECIMAL_PLACES}f})"
                        ),
                        location=location,
                        severity="medium",
                    )
                )

    return _result(
        [], warnings, config.paragraph_error_weight, config.paragraph_warning_weight
    )


def check_sentence_structure(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> ValidationResult:
    """Flag sentences outside the configured word-count bounds."""
    config = config or ValidationConfig()
    warnings: list[ValidationWarning] = []

    for chapter_index, chapter in enumerate(structure.chapters):
        for paragraph_index, paragraph in enumerate(chapter.paragraphs):
            for sentence_index, sentence in enumerate(paragraph.sentences):
                location = IssueLocation(
                    chapter=chapter_index,
                    paragraph=paragraph_index,
                    sentence=sentence_index,
                )
                if 0 < sentence.word_count < config.min_sentence_words:
                    warnings.append(
                        ValidationWarning(
                            code="VERY_SHORT_SENTENCE",
                            message=f"Sentence has very few words ({sentence.word_count})",
                            location=location,
                            severity="low",
                        )
                    )
                elif sentence.word_count > config.max_sentence_words:
                    warnings.append(
                        ValidationWarning(
                            code="VERY_LONG_SENTENCE",
                            message=f"Sentence has many words ({sentence.word_count})",
                            location=location,
                            severity="low",
                        )
                    )

    return _result(
        [], warnings, config.sentence_error_weight, config.sentence_warning_weight
    )


def check_structure_coherence(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> ValidationResult:
    """Check overall confidence and how evenly chapter lengths are spread."""
    config = config or ValidationConfig()
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    confidence = structure.confidence
    if confidence < config.low_confidence_threshold:
        errors.append(
            ValidationError(
                code="LOW_OVERALL_CONFIDENCE",
                message=(
                    "Document has low overall confidence "
                    f"({confidence:.{CONFIDENCE_DECIMAL_PLACES}f})"
                ),
                severity="high",
            )
        )
    elif confidence < config.medium_confidence_threshold:
        warnings.append(
            ValidationWarning(
                code="MEDIUM_OVERALL_CONFIDENCE",
                message=(
                    "Document has medium confidence "
                    f"({confidence:.{CONFIDENCE_DECIMAL_PLACES}f})"
                ),
                severity="medium",
            )
        )

    outliers = chapter_length_outliers(structure, config)
    if outliers:
        warnings.append(
            ValidationWarning(
                code="INCONSISTENT_CHAPTER_LENGTHS",
                message=(
                    f"{len(outliers)} chapters have unusual lengths "
                    f"(chapters {', '.join(str(i) for i in outliers)})"
                ),
                severity="low",
            )
        )

    return _result(
        errors, warnings, config.coherence_error_weight, config.coherence_warning_weight
    )


def chapter_length_outliers(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> list[int]:
    """Return indices of chapters far shorter or longer than the mean.

    A chapter is an outlier when its word count falls below
    ``mean * min_chapter_length_multiplier`` or above
    ``mean * max_chapter_length_multiplier``. Needs at least two chapters.
    """
    config = config or ValidationConfig()
    chapters = structure.chapters
    if len(chapters) < 2:
        return []

    mean = sum(c.word_count for c in chapters) / len(chapters)
    low = mean * config.min_chapter_length_multiplier
    high = mean * config.max_chapter_length_multiplier
    return [i for i, c in enumerate(chapters) if c.word_count < low or c.word_count > high]


def check_basic_structure(
    structure: DocumentStructure, config: ValidationConfig | None = None
) -> ValidationResult:
    """Strict-mode rule: a document must have a title and chapters."""
    errors: list[ValidationError] = []

    if not structure.metadata.title.strip():
        errors.append(
            ValidationError(
                code="MISSING_TITLE",
                message="Document must have a title",
                severity="critical",
            )
        )

    if not structure.chapters:
        errors.append(
            ValidationError(
                code="NO_CHAPTERS",
                message="Document must have at least one chapter",
                severity="critical",
            )
        )

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        score=1.0 if not errors else 0.0,
    )


BUILTIN_RULES: dict[str, Callable[..., ValidationResult]] = {
    "chapter_structure": check_chapter_structure,
    "paragraph_structure": check_paragraph_structure,
    "sentence_structure": check_sentence_structure,
    "structure_coherence": check_structure_coherence,
}

STRICT_RULES: dict[str, Callable[..., ValidationResult]] = {
    "basic_structure": check_basic_structure,
}
