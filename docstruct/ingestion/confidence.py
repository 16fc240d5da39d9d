"""Document-level confidence scoring.

The score is a pure function of a few structural metrics. A preliminary value
is built from base and bonus terms, then an ordered policy cascade picks the
base confidence (first matching policy wins), and finally a bonus for detected
structural elements is added. Nothing here clamps the final value; callers use
``clamp_confidence``.
"""

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from docstruct.models.document import Chapter

# Preliminary score
BASE_CONFIDENCE = 0.7
EXCELLENT_STRUCTURE_CHAPTER_THRESHOLD = 5
EXCELLENT_STRUCTURE_BONUS = 0.15
GOOD_STRUCTURE_CHAPTER_THRESHOLD = 3
GOOD_STRUCTURE_BONUS = 0.1
MINIMAL_STRUCTURE_BONUS = 0.05
GOOD_PARAGRAPH_DISTRIBUTION = (2, 10)
GOOD_SENTENCE_DISTRIBUTION = (2, 4)
GOOD_DISTRIBUTION_BONUS = 0.1
MINIMAL_DISTRIBUTION_BONUS = 0.05
COMPREHENSIVE_CONTENT_THRESHOLD = 500
COMPREHENSIVE_CONTENT_BONUS = 0.15
SUBSTANTIAL_CONTENT_THRESHOLD = 200
SUBSTANTIAL_CONTENT_BONUS = 0.1
MINIMAL_CONTENT_THRESHOLD = 100
MINIMAL_CONTENT_BONUS = 0.05

# Policy cascade
SINGLE_CHARACTER_CONFIDENCE = 0.8
MINIMAL_WORD_THRESHOLD = 3
EXTREMELY_MINIMAL_STRUCTURE_CONFIDENCE = 0.6
EXTREMELY_MINIMAL_CONFIDENCE = 0.2
NO_STRUCTURE_CONFIDENCE = 0.8
MINIMAL_STRUCTURE_CONTENT_THRESHOLD = 20
STRUCTURE_THRESHOLD = 10
STRUCTURE_WORD_THRESHOLD = 1
GOOD_STRUCTURE_CONFIDENCE = 0.85
REASONABLE_CONTENT_THRESHOLD = 20
REASONABLE_CONTENT_CONFIDENCE = 0.8
DEFAULT_NORMAL_CONTENT_CONFIDENCE = 0.75

# Element bonus
ELEMENT_BONUS = 0.1
DIVERSE_ELEMENT_KINDS = 2
MANY_ELEMENTS_THRESHOLD = 3

# Certainty given up per automated structural correction
CORRECTION_CONFIDENCE_PENALTY = 0.02


@dataclass(frozen=True)
class ConfidenceMetrics:
    """Structural metrics the confidence score is computed from."""

    word_count: int
    chapter_count: int
    total_paragraphs: int
    total_sentences: int = 0
    element_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ConfidencePolicy:
    """One cascade entry: when ``applies`` holds, ``resolve`` gives the base value.

    ``resolve`` receives the preliminary confidence so floors can be applied
    as ``max``/``min`` against it.
    """

    name: str
    applies: Callable[[ConfidenceMetrics], bool]
    resolve: Callable[[float], float]


CONFIDENCE_POLICIES: tuple[ConfidencePolicy, ...] = (
    ConfidencePolicy(
        name="single_character",
        applies=lambda m: m.word_count == 1,
        resolve=lambda current: SINGLE_CHARACTER_CONFIDENCE,
    ),
    ConfidencePolicy(
        name="extremely_minimal_no_structure",
        applies=lambda m: (
            m.word_count <= MINIMAL_WORD_THRESHOLD
            and m.chapter_count == 0
            and m.total_paragraphs == 0
        ),
        resolve=lambda current: min(current, EXTREMELY_MINIMAL_STRUCTURE_CONFIDENCE),
    ),
    ConfidencePolicy(
        name="extremely_minimal",
        applies=lambda m: m.word_count <= MINIMAL_WORD_THRESHOLD,
        resolve=lambda current: EXTREMELY_MINIMAL_CONFIDENCE,
    ),
    ConfidencePolicy(
        name="no_clear_structure",
        applies=lambda m: m.chapter_count == 0 and m.total_paragraphs <= 1,
        resolve=lambda current: max(current, NO_STRUCTURE_CONFIDENCE),
    ),
    ConfidencePolicy(
        name="minimal_structure",
        applies=lambda m: (
            m.chapter_count == 1
            and m.total_paragraphs == 1
            and m.word_count < MINIMAL_STRUCTURE_CONTENT_THRESHOLD
        ),
        resolve=lambda current: max(current, NO_STRUCTURE_CONFIDENCE),
    ),
    ConfidencePolicy(
        name="good_structure",
        applies=lambda m: (
            (
                m.word_count >= STRUCTURE_THRESHOLD
                and m.chapter_count > STRUCTURE_WORD_THRESHOLD
            )
            or m.chapter_count >= STRUCTURE_WORD_THRESHOLD + 1
        ),
        resolve=lambda current: max(current, GOOD_STRUCTURE_CONFIDENCE),
    ),
    ConfidencePolicy(
        name="reasonable_content",
        applies=lambda m: m.word_count >= REASONABLE_CONTENT_THRESHOLD,
        resolve=lambda current: max(current, REASONABLE_CONTENT_CONFIDENCE),
    ),
)


def structure_bonus(chapter_count: int) -> float:
    if chapter_count >= EXCELLENT_STRUCTURE_CHAPTER_THRESHOLD:
        return EXCELLENT_STRUCTURE_BONUS
    if chapter_count >= GOOD_STRUCTURE_CHAPTER_THRESHOLD:
        return GOOD_STRUCTURE_BONUS
    if chapter_count > 1:
        return MINIMAL_STRUCTURE_BONUS
    return 0.0


def distribution_bonus(metrics: ConfidenceMetrics) -> float:
    """Bonus for a plausible paragraphs-per-chapter and sentences-per-paragraph mix."""
    bonus = 0.0

    if metrics.total_paragraphs > 0 and metrics.chapter_count > 0:
        per_chapter = metrics.total_paragraphs / metrics.chapter_count
        low, high = GOOD_PARAGRAPH_DISTRIBUTION
        if low <= per_chapter <= high:
            bonus += GOOD_DISTRIBUTION_BONUS
        elif per_chapter >= 1:
            bonus += MINIMAL_DISTRIBUTION_BONUS

    if metrics.total_sentences > 0 and metrics.total_paragraphs > 0:
        per_paragraph = metrics.total_sentences / metrics.total_paragraphs
        low, high = GOOD_SENTENCE_DISTRIBUTION
        if low <= per_paragraph <= high:
            bonus += GOOD_DISTRIBUTION_BONUS
        elif per_paragraph >= 1:
            bonus += MINIMAL_DISTRIBUTION_BONUS

    return bonus


def content_size_bonus(word_count: int) -> float:
    if word_count > COMPREHENSIVE_CONTENT_THRESHOLD:
        return COMPREHENSIVE_CONTENT_BONUS
    if word_count > SUBSTANTIAL_CONTENT_THRESHOLD:
        return SUBSTANTIAL_CONTENT_BONUS
    if word_count > MINIMAL_CONTENT_THRESHOLD:
        return MINIMAL_CONTENT_BONUS
    return 0.0


def preliminary_confidence(metrics: ConfidenceMetrics) -> float:
    """Base score plus structure, distribution and size bonuses."""
    return (
        BASE_CONFIDENCE
        + structure_bonus(metrics.chapter_count)
        + distribution_bonus(metrics)
        + content_size_bonus(metrics.word_count)
    )


def matching_policy(
    metrics: ConfidenceMetrics,
    policies: Iterable[ConfidencePolicy] = CONFIDENCE_POLICIES,
) -> ConfidencePolicy | None:
    """Return the first policy whose predicate holds, or None."""
    for policy in policies:
        if policy.applies(metrics):
            return policy
    return None


def base_confidence(
    metrics: ConfidenceMetrics,
    policies: Iterable[ConfidencePolicy] = CONFIDENCE_POLICIES,
) -> float:
    """Run the policy cascade over the preliminary score.

    Args:
        metrics: Structural metrics of the document.
        policies: Ordered cascade; defaults to CONFIDENCE_POLICIES.

    Returns:
        The value of the first matching policy, or the normal-content floor.
    """
    current = preliminary_confidence(metrics)
    policy = matching_policy(metrics, policies)
    if policy is None:
        return max(current, DEFAULT_NORMAL_CONTENT_CONFIDENCE)
    return policy.resolve(current)


def element_bonus(element_counts: Mapping[str, int]) -> float:
    """Bonus for detected tables, code blocks, lists, quotes, links and images.

    Two or more distinct kinds earn the full bonus, a single kind half of it,
    and, independently, three or more elements in total another half.
    """
    present = {kind: count for kind, count in element_counts.items() if count > 0}
    bonus = 0.0

    if len(present) >= DIVERSE_ELEMENT_KINDS:
        bonus += ELEMENT_BONUS
    elif len(present) == 1:
        bonus += ELEMENT_BONUS / 2

    if sum(present.values()) >= MANY_ELEMENTS_THRESHOLD:
        bonus += ELEMENT_BONUS / 2

    return bonus


def score_confidence(metrics: ConfidenceMetrics) -> float:
    """Compute the unclamped document confidence for ``metrics``."""
    return base_confidence(metrics) + element_bonus(metrics.element_counts)


def clamp_confidence(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def metrics_from_chapters(chapters: list[Chapter]) -> ConfidenceMetrics:
    """Collect confidence metrics from built chapters."""
    element_counts: dict[str, int] = {}
    for chapter in chapters:
        for kind, count in chapter.element_counts.items():
            element_counts[kind] = element_counts.get(kind, 0) + count

    return ConfidenceMetrics(
        word_count=sum(c.word_count for c in chapters),
        chapter_count=len(chapters),
        total_paragraphs=sum(len(c.paragraphs) for c in chapters),
        total_sentences=sum(len(p.sentences) for c in chapters for p in c.paragraphs),
        element_counts=element_counts,
    )


def score_chapters(chapters: list[Chapter]) -> float:
    """Clamped confidence for a chapter list, as stored on DocumentStructure."""
    return clamp_confidence(score_confidence(metrics_from_chapters(chapters)))


def recalibrate_confidence(original: float, rescored: float, applied: int) -> float:
    """Confidence of a structure after ``applied`` automated corrections.

    Each applied correction lowers the rescored value by
    ``CORRECTION_CONFIDENCE_PENALTY``. A result that still equals ``original``
    is moved one more step away from it (downwards unless already at 0), so
    a corrected structure never reports its original score. With no applied
    corrections the rescored value is returned unchanged.

    Args:
        original: Confidence of the structure before corrections.
        rescored: Clamped score of the corrected structure.
        applied: Number of corrections that were applied.

    Returns:
        The corrected confidence in [0, 1].
    """
    if applied <= 0:
        return rescored

    corrected = clamp_confidence(rescored - applied * CORRECTION_CONFIDENCE_PENALTY)
    if math.isclose(corrected, original):
        if original >= CORRECTION_CONFIDENCE_PENALTY:
            corrected = original - CORRECTION_CONFIDENCE_PENALTY
        else:
            corrected = original + CORRECTION_CONFIDENCE_PENALTY
    return clamp_confidence(corrected)
