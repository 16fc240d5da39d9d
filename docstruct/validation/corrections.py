"""Built-in structural correction handlers.

Each handler takes the current structure and a correction and returns a new
DocumentStructure; the input is never modified. Handlers raise ValueError
when the correction's location does not fit the structure, which the
validator records as a failed outcome.
"""

import logging
from collections.abc import Callable

from docstruct.ingestion.assembler import build_structure
from docstruct.ingestion.segmenter import Segmenter
from docstruct.models.document import Chapter, CharRange, DocumentStructure, Paragraph
from docstruct.models.validation import StructureCorrection

logger = logging.getLogger(__name__)

CorrectionHandler = Callable[[DocumentStructure, StructureCorrection], DocumentStructure]

_element_detector = Segmenter()


def _chapter_index(structure: DocumentStructure, correction: StructureCorrection) -> int:
    index = correction.location.chapter
    if index is None:
        raise ValueError(f"{correction.type} correction needs a chapter location")
    if not 0 <= index < len(structure.chapters):
        raise ValueError(
            f"Chapter {index} out of range (document has {len(structure.chapters)})"
        )
    return index


def _paragraph_index(chapter: Chapter, correction: StructureCorrection) -> int:
    index = correction.location.paragraph
    if index is None:
        raise ValueError(f"{correction.type} correction needs a paragraph location")
    if not 0 <= index < len(chapter.paragraphs):
        raise ValueError(
            f"Paragraph {index} out of range "
            f"(chapter {chapter.position} has {len(chapter.paragraphs)})"
        )
    return index


def _renumber_paragraph(paragraph: Paragraph, chapter_id: str, position: int) -> Paragraph:
    paragraph_id = f"{chapter_id}-p{position}"
    if paragraph.id == paragraph_id and paragraph.position == position:
        return paragraph
    sentences = [
        s.model_copy(update={"id": f"{paragraph_id}-s{s.position}"})
        for s in paragraph.sentences
    ]
    return paragraph.model_copy(
        update={"id": paragraph_id, "position": position, "sentences": sentences}
    )


def rebuild_chapter(
    chapter: Chapter,
    paragraphs: list[Paragraph],
    char_range: CharRange | None = None,
    **updates,
) -> Chapter:
    """Return a copy of ``chapter`` holding ``paragraphs`` with totals recomputed.

    Paragraph and sentence ids are regenerated from the chapter id, so moved
    content follows the id hierarchy of the chapter it lands in.
    """
    chapter_id = updates.get("id", chapter.id)
    renumbered = [
        _renumber_paragraph(p, chapter_id, i) for i, p in enumerate(paragraphs)
    ]
    confidence = None
    if renumbered:
        confidence = sum(p.confidence for p in renumbered) / len(renumbered)

    raw_text = "\n\n".join(p.raw_text for p in renumbered)
    return chapter.model_copy(
        update={
            "paragraphs": renumbered,
            "char_range": char_range or chapter.char_range,
            "word_count": sum(p.word_count for p in renumbered),
            "estimated_duration": sum(p.estimated_duration for p in renumbered),
            "confidence": confidence,
            "element_counts": _element_detector.detect_elements(raw_text, renumbered),
            **updates,
        }
    )


def rebuild_structure(
    structure: DocumentStructure, chapters: list[Chapter]
) -> DocumentStructure:
    """Renumber chapters and recompute every document-level total."""
    renumbered = [
        c if c.position == i else c.model_copy(update={"position": i})
        for i, c in enumerate(chapters)
    ]
    return build_structure(
        structure.metadata, renumbered, structure.processing_metrics
    )


def merge_chapter(
    structure: DocumentStructure, correction: StructureCorrection
) -> DocumentStructure:
    """Merge chapter i into its predecessor (into its successor when i == 0)."""
    index = _chapter_index(structure, correction)
    chapters = list(structure.chapters)
    if len(chapters) < 2:
        raise ValueError("Cannot merge the only chapter of a document")

    first_index = index - 1 if index > 0 else 0
    first, second = chapters[first_index], chapters[first_index + 1]
    merged = rebuild_chapter(
        first,
        first.paragraphs + second.paragraphs,
        char_range=CharRange(start=first.char_range.start, end=second.char_range.end),
        title=first.title or second.title,
    )

    chapters[first_index : first_index + 2] = [merged]
    logger.debug("Merged chapters %d and %d", first_index, first_index + 1)
    return rebuild_structure(structure, chapters)


def split_chapter(
    structure: DocumentStructure, correction: StructureCorrection
) -> DocumentStructure:
    """Split chapter i so that paragraph p starts a new chapter."""
    index = _chapter_index(structure, correction)
    chapter = structure.chapters[index]
    at = _paragraph_index(chapter, correction)
    if at == 0:
        raise ValueError("Cannot split a chapter before its first paragraph")

    boundary = chapter.paragraphs[at].char_range.start
    head = rebuild_chapter(
        chapter,
        chapter.paragraphs[:at],
        char_range=CharRange(start=chapter.char_range.start, end=boundary),
    )
    tail = rebuild_chapter(
        chapter,
        chapter.paragraphs[at:],
        char_range=CharRange(start=boundary, end=chapter.char_range.end),
        id=f"{chapter.id}-{at}",
        title=f"{chapter.title} (continued)" if chapter.title else "",
    )

    chapters = list(structure.chapters)
    chapters[index : index + 1] = [head, tail]
    logger.debug("Split chapter %d before paragraph %d", index, at)
    return rebuild_structure(structure, chapters)


def remove_paragraph(
    structure: DocumentStructure, correction: StructureCorrection
) -> DocumentStructure:
    """Drop paragraph p of chapter i."""
    index = _chapter_index(structure, correction)
    chapter = structure.chapters[index]
    at = _paragraph_index(chapter, correction)

    paragraphs = chapter.paragraphs[:at] + chapter.paragraphs[at + 1 :]
    chapters = list(structure.chapters)
    chapters[index] = rebuild_chapter(chapter, paragraphs)
    logger.debug("Removed paragraph %d of chapter %d", at, index)
    return rebuild_structure(structure, chapters)


def move_boundary(
    structure: DocumentStructure, correction: StructureCorrection
) -> DocumentStructure:
    """Move the first paragraph of chapter i to the end of chapter i-1."""
    index = _chapter_index(structure, correction)
    if index == 0:
        raise ValueError("The first chapter has no predecessor to move content into")
    previous, chapter = structure.chapters[index - 1], structure.chapters[index]
    if not chapter.paragraphs:
        raise ValueError(f"Chapter {index} has no paragraph to move")

    moved, rest = chapter.paragraphs[0], chapter.paragraphs[1:]
    boundary = rest[0].char_range.start if rest else chapter.char_range.end

    chapters = list(structure.chapters)
    chapters[index - 1] = rebuild_chapter(
        previous,
        previous.paragraphs + [moved],
        char_range=CharRange(start=previous.char_range.start, end=boundary),
    )
    chapters[index] = rebuild_chapter(
        chapter,
        rest,
        char_range=CharRange(start=boundary, end=chapter.char_range.end),
    )
    logger.debug("Moved first paragraph of chapter %d into chapter %d", index, index - 1)
    return rebuild_structure(structure, chapters)


def recalibrate_confidence(
    structure: DocumentStructure, correction: StructureCorrection
) -> DocumentStructure:
    """No structural change; the corrected confidence is recomputed afterwards."""
    return rebuild_structure(structure, list(structure.chapters))


CORRECTION_HANDLERS: dict[str, CorrectionHandler] = {
    "chapter_merge": merge_chapter,
    "chapter_split": split_chapter,
    "paragraph_adjust": remove_paragraph,
    "boundary_move": move_boundary,
    "confidence_recalibrate": recalibrate_confidence,
}
