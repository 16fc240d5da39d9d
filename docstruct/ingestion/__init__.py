"""Document ingestion: segmentation, confidence scoring and assembly."""

from docstruct.ingestion.assembler import DocumentAssembler, build_structure
from docstruct.ingestion.confidence import (
    ConfidenceMetrics,
    clamp_confidence,
    score_chapters,
    score_confidence,
)
from docstruct.ingestion.parser import TextDocumentParser
from docstruct.ingestion.segmenter import Segmenter
from docstruct.ingestion.tokenizer import WhitespaceWordCounter, WordCounter, count_words

__all__ = [
    "ConfidenceMetrics",
    "DocumentAssembler",
    "Segmenter",
    "TextDocumentParser",
    "WhitespaceWordCounter",
    "WordCounter",
    "build_structure",
    "clamp_confidence",
    "count_words",
    "score_chapters",
    "score_confidence",
]
