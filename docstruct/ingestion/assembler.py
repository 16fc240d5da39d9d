"""Assembly of segmented chapters into a DocumentStructure."""

import logging
from datetime import datetime
from functools import reduce

from docstruct.config import SegmentationConfig
from docstruct.ingestion.confidence import score_chapters
from docstruct.ingestion.segmenter import Segmenter
from docstruct.models.document import (
    Chapter,
    DocumentStructure,
    ProcessingMetrics,
    TocEntry,
)
from docstruct.models.raw import DocumentMetadata, RawChapter, RawDocument

logger = logging.getLogger(__name__)


def segment_chapters(
    segmenter: Segmenter, raw_chapters: list[RawChapter], start_offset: int = 0
) -> list[Chapter]:
    """Segment chapters in source order, threading the running offset.

    Each step receives the offset where the previous chapter ended and
    returns the next one, so no chapter can start before its predecessor
    ends.

    Args:
        segmenter: The segmenter to run per chapter.
        raw_chapters: Chapters as handed over by the adapter.
        start_offset: Source offset of the first chapter.

    Returns:
        Chapters with positions 0..n-1.
    """

    def step(
        acc: tuple[tuple[Chapter, ...], int], raw: RawChapter
    ) -> tuple[tuple[Chapter, ...], int]:
        chapters, offset = acc
        chapter, next_offset = segmenter.segment_chapter(
            raw, position=len(chapters), offset=offset
        )
        return (*chapters, chapter), next_offset

    chapters, _ = reduce(step, raw_chapters, ((), start_offset))
    return list(chapters)


def build_table_of_contents(chapters: list[Chapter]) -> list[TocEntry]:
    return [
        TocEntry(
            title=chapter.title or f"Chapter {chapter.position + 1}",
            level=chapter.level,
            chapter_position=chapter.position,
        )
        for chapter in chapters
    ]


def build_structure(
    metadata: DocumentMetadata,
    chapters: list[Chapter],
    processing_metrics: ProcessingMetrics | None = None,
) -> DocumentStructure:
    """Aggregate chapter totals and confidence into a DocumentStructure.

    Totals are sums of the chapter-level values, never recounted from text.

    Args:
        metadata: Document metadata.
        chapters: Fully built chapters in document order.
        processing_metrics: Optional timing information.

    Returns:
        A new DocumentStructure.
    """
    return DocumentStructure(
        metadata=metadata,
        chapters=chapters,
        table_of_contents=build_table_of_contents(chapters),
        total_paragraphs=sum(len(c.paragraphs) for c in chapters),
        total_sentences=sum(len(p.sentences) for c in chapters for p in c.paragraphs),
        total_word_count=sum(c.word_count for c in chapters),
        estimated_total_duration=sum(c.estimated_duration for c in chapters),
        confidence=score_chapters(chapters),
        processing_metrics=processing_metrics,
    )


class DocumentAssembler:
    """Turns an adapter's RawDocument into the canonical DocumentStructure.

    Args:
        config: SegmentationConfig used when no segmenter is injected.
        segmenter: Optional pre-built Segmenter (e.g. with a custom word counter).
    """

    def __init__(
        self,
        config: SegmentationConfig | None = None,
        segmenter: Segmenter | None = None,
    ) -> None:
        self._segmenter = segmenter or Segmenter(config=config)

    def assemble(self, raw_document: RawDocument) -> DocumentStructure:
        """Segment every chapter and build the document structure.

        Args:
            raw_document: Metadata and raw chapters from a format adapter.

        Returns:
            The normalized DocumentStructure.
        """
        started_at = datetime.now()

        chapters = segment_chapters(self._segmenter, raw_document.chapters)

        processing_errors = [
            f"Chapter {chapter.position} ({chapter.title!r}) produced no paragraphs"
            for chapter in chapters
            if not chapter.paragraphs
        ]
        for message in processing_errors:
            logger.warning(message)

        source_length = raw_document.source_length
        if not source_length:
            source_length = chapters[-1].char_range.end if chapters else 0

        finished_at = datetime.now()
        metrics = ProcessingMetrics(
            parse_start_time=started_at,
            parse_end_time=finished_at,
            parse_duration_ms=(finished_at - started_at).total_seconds() * 1000,
            source_length=source_length,
            processing_errors=processing_errors,
        )

        structure = build_structure(raw_document.metadata, chapters, metrics)

        logger.info(
            "Assembled %r: %d chapters, %d paragraphs, %d words, confidence %.2f",
            raw_document.metadata.title,
            len(chapters),
            structure.total_paragraphs,
            structure.total_word_count,
            structure.confidence,
        )
        return structure
