"""Position-tracked segmentation of chapter text into paragraphs and sentences."""

import logging
import re
from dataclasses import dataclass

from docstruct.config import SegmentationConfig
from docstruct.ingestion.tokenizer import WhitespaceWordCounter, WordCounter
from docstruct.models.document import (
    Chapter,
    CharRange,
    Paragraph,
    ParagraphKind,
    Sentence,
)
from docstruct.models.raw import RawChapter

logger = logging.getLogger(__name__)

# Block-level markup an adapter may leave in place, mapped to paragraph kinds.
BLOCK_TAG_KINDS: dict[str, ParagraphKind] = {
    "p": "text",
    "li": "list_item",
    "blockquote": "quote",
    "pre": "code",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "td": "table",
    "th": "table",
}

BLOCK_PATTERN = re.compile(
    r"<(p|li|blockquote|pre|h[1-6]|td|th)\b[^>]*>(.*?)</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
ANY_TAG_PATTERN = re.compile(r"<[^>]+>")
# Elements whose content is never narrated text.
NON_CONTENT_PATTERN = re.compile(
    r"<(head|script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
BLANK_LINE_PATTERN = re.compile(r"\n\s*\n")
NEWLINE_PATTERN = re.compile(r"\r?\n")

# Terminal punctuation run, optional closing quotes/brackets, then whitespace.
SENTENCE_END_PATTERN = re.compile(r"[.!?]+[\"'”’)\]]*(?=\s)")
TERMINAL_PUNCTUATION = ".!?"
CLOSING_CHARS = "\"'”’)]"

INLINE_FORMATTING_PATTERN = re.compile(
    r"<(?:em|strong|b|i|u|code|a|span|sup|sub|mark)\b"
    r"|\*\*|__|`"
    r"|\[[^\]]+\]\([^)]+\)",
    re.IGNORECASE,
)

# Markdown conventions used to classify plain-text blocks.
HEADING_PATTERN = re.compile(r"^#{1,6}\s")
LIST_ITEM_PATTERN = re.compile(r"^(?:[-*+]|\d+[.)])\s")
FENCE_PATTERN = re.compile(r"^(?:```|~~~)")

# Element detection for the confidence bonus.
IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\([^)]+\)|<img\b", re.IGNORECASE)
LINK_PATTERN = re.compile(r"(?<!!)\[[^\]]*\]\([^)]+\)|<a\s[^>]*href", re.IGNORECASE)
KIND_ELEMENTS: dict[str, str] = {
    "table": "table",
    "code": "code",
    "list_item": "list",
    "quote": "quote",
}

# Paragraph confidence by the boundary strategy that produced it.
STRATEGY_CONFIDENCE: dict[str, float] = {
    "markup": 0.95,
    "markup_gap": 0.75,
    "blank_line": 0.9,
    "line": 0.75,
    "whole": 0.6,
}

NARRATION_EXCLUDED_KINDS = frozenset({"code", "table"})


@dataclass(frozen=True)
class _Block:
    """A trimmed paragraph candidate, in chapter-local offsets."""

    start: int
    end: int
    kind: ParagraphKind
    strategy: str


def _trimmed_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink ``[start, end)`` so it has no leading or trailing whitespace."""
    piece = text[start:end]
    stripped = piece.strip()
    if not stripped:
        return start, start
    lead = len(piece) - len(piece.lstrip())
    return start + lead, start + lead + len(stripped)


def _spans_between(text: str, separator: re.Pattern[str]) -> list[tuple[int, int]]:
    """Return the spans of ``text`` lying between matches of ``separator``."""
    spans: list[tuple[int, int]] = []
    pos = 0
    for match in separator.finditer(text):
        spans.append((pos, match.start()))
        pos = match.end()
    spans.append((pos, len(text)))
    return spans


def classify_block(piece: str) -> ParagraphKind:
    """Guess a paragraph kind from Markdown conventions.

    Args:
        piece: The untrimmed block text (indentation matters for code).

    Returns:
        The paragraph kind.
    """
    lines = [line for line in piece.splitlines() if line.strip()]
    if not lines:
        return "text"

    first = lines[0].strip()
    if FENCE_PATTERN.match(first):
        return "code"
    if all(line.startswith(("    ", "\t")) for line in lines):
        return "code"
    if all(line.strip().startswith("|") for line in lines):
        return "table"
    if HEADING_PATTERN.match(first):
        return "heading"
    if first.startswith(">"):
        return "quote"
    if LIST_ITEM_PATTERN.match(first):
        return "list_item"
    return "text"


class Segmenter:
    """Splits chapter text into paragraphs and sentences anchored to the source.

    Paragraph boundaries are tried in priority order, and the first strategy
    yielding more than one non-empty block wins:

    1. Block markup preserved by the adapter (``<p>``, ``<li>`` ...), with
       any text between or around the tags kept as paragraphs of its own
    2. Blank-line-separated blocks
    3. Single-newline-separated lines
    4. The whole chapter as one paragraph

    All offsets are absolute: ``offset`` is where the chapter text starts in
    the original source.

    Args:
        config: SegmentationConfig with seconds_per_word and id_prefix.
        word_counter: Word-count policy; defaults to WhitespaceWordCounter.
    """

    def __init__(
        self,
        config: SegmentationConfig | None = None,
        word_counter: WordCounter | None = None,
    ) -> None:
        self._config = config or SegmentationConfig()
        self._word_counter = word_counter or WhitespaceWordCounter()

    def segment_chapter(
        self, raw: RawChapter, position: int, offset: int
    ) -> tuple[Chapter, int]:
        """Segment one raw chapter starting at or after ``offset``.

        Args:
            raw: The chapter record from the adapter.
            position: 0-based chapter position in the document.
            offset: End of the previous chapter in the source.

        Returns:
            The built Chapter and the offset where the next chapter may start.
        """
        start = offset
        if raw.source_offset is not None and raw.source_offset > offset:
            start = raw.source_offset
        end = start + len(raw.text)

        chapter_id = f"{self._config.id_prefix}-{position}"
        paragraphs = self.segment(raw.text, offset=start, chapter_id=chapter_id)

        confidence = None
        if paragraphs:
            confidence = sum(p.confidence for p in paragraphs) / len(paragraphs)

        chapter = Chapter(
            id=chapter_id,
            title=raw.title.strip(),
            level=raw.level,
            depth=max(raw.level - 1, 0),
            paragraphs=paragraphs,
            position=position,
            char_range=CharRange(start=start, end=end),
            word_count=sum(p.word_count for p in paragraphs),
            estimated_duration=sum(p.estimated_duration for p in paragraphs),
            confidence=confidence,
            element_counts=self.detect_elements(raw.text, paragraphs),
        )

        logger.debug(
            "Segmented chapter %d (%r): %d paragraphs, %d words",
            position,
            chapter.title,
            len(paragraphs),
            chapter.word_count,
        )
        return chapter, end

    def segment(
        self, text: str, offset: int = 0, chapter_id: str = "ch-0"
    ) -> list[Paragraph]:
        """Split text into paragraphs, each carrying its sentences.

        Args:
            text: Raw chapter text.
            offset: Absolute source offset of ``text[0]``.
            chapter_id: Prefix for generated paragraph and sentence IDs.

        Returns:
            Non-empty paragraphs in source order. Empty for blank text.
        """
        if not text.strip():
            return []

        paragraphs: list[Paragraph] = []
        for block in self._detect_blocks(text):
            paragraph = self._build_paragraph(
                text=text,
                block=block,
                offset=offset,
                paragraph_id=f"{chapter_id}-p{len(paragraphs)}",
                position=len(paragraphs),
            )
            if paragraph is not None:
                paragraphs.append(paragraph)

        return paragraphs

    def split_sentences(self, text: str) -> list[tuple[int, int, str]]:
        """Split one paragraph's text into sentence spans.

        A run of terminal punctuation followed by whitespace ends a sentence.
        A trailing fragment without terminal punctuation gets a ``.``
        appended to its text; its span still covers only source characters.

        Args:
            text: Paragraph text (local offsets).

        Returns:
            ``(start, end, sentence_text)`` tuples in local offsets.
        """
        sentences: list[tuple[int, int, str]] = []
        last = 0

        for match in SENTENCE_END_PATTERN.finditer(text):
            start, end = _trimmed_span(text, last, match.end())
            if end > start:
                sentences.append((start, end, text[start:end]))
            last = match.end()

        start, end = _trimmed_span(text, last, len(text))
        if end > start:
            fragment = text[start:end]
            visible = ANY_TAG_PATTERN.sub("", fragment).rstrip()
            if visible.rstrip(CLOSING_CHARS)[-1:] not in TERMINAL_PUNCTUATION:
                fragment += "."
            sentences.append((start, end, fragment))

        return sentences

    def detect_elements(
        self, text: str, paragraphs: list[Paragraph]
    ) -> dict[str, int]:
        """Count structural elements (tables, code, lists, quotes, links, images).

        Args:
            text: Raw chapter text.
            paragraphs: Paragraphs already segmented from ``text``.

        Returns:
            Element kind mapped to occurrence count; kinds not seen are absent.
        """
        counts: dict[str, int] = {}
        for paragraph in paragraphs:
            element = KIND_ELEMENTS.get(paragraph.kind)
            if element:
                counts[element] = counts.get(element, 0) + 1

        links = len(LINK_PATTERN.findall(text))
        images = len(IMAGE_PATTERN.findall(text))
        if links:
            counts["link"] = links
        if images:
            counts["image"] = images
        return counts

    def _detect_blocks(self, text: str) -> list[_Block]:
        """Pick paragraph blocks using the first strategy that splits the text."""
        markup = self._markup_blocks(text)
        if len(markup) > 1:
            return markup

        for separator, strategy in (
            (BLANK_LINE_PATTERN, "blank_line"),
            (NEWLINE_PATTERN, "line"),
        ):
            blocks = self._separated_blocks(text, separator, strategy)
            if len(blocks) > 1:
                return blocks

        start, end = _trimmed_span(text, 0, len(text))
        return [_Block(start, end, classify_block(text), "whole")]

    def _markup_blocks(self, text: str) -> list[_Block]:
        """Blocks from block-level tags plus the visible text between them.

        Returns an empty list when the text has no block tags at all.
        """
        blocks: list[_Block] = []
        matches = list(BLOCK_PATTERN.finditer(text))
        if not matches:
            return blocks

        pos = 0
        for match in matches:
            blocks.extend(self._gap_blocks(text, pos, match.start()))
            pos = match.end()

            start, end = _trimmed_span(text, match.start(2), match.end(2))
            if not ANY_TAG_PATTERN.sub("", text[start:end]).strip():
                continue
            kind = BLOCK_TAG_KINDS[match.group(1).lower()]
            blocks.append(_Block(start, end, kind, "markup"))

        blocks.extend(self._gap_blocks(text, pos, len(text)))
        return blocks

    def _gap_blocks(self, text: str, gap_start: int, gap_end: int) -> list[_Block]:
        """Paragraphs for untagged text lying outside block elements."""
        blocks: list[_Block] = []
        gap = text[gap_start:gap_end]
        for span_start, span_end in _spans_between(gap, NON_CONTENT_PATTERN):
            start, end = _trimmed_span(text, gap_start + span_start, gap_start + span_end)
            if ANY_TAG_PATTERN.sub(" ", text[start:end]).strip():
                blocks.append(
                    _Block(start, end, classify_block(text[start:end]), "markup_gap")
                )
        return blocks

    def _separated_blocks(
        self, text: str, separator: re.Pattern[str], strategy: str
    ) -> list[_Block]:
        blocks: list[_Block] = []
        for span_start, span_end in _spans_between(text, separator):
            start, end = _trimmed_span(text, span_start, span_end)
            if end > start:
                kind = classify_block(text[span_start:span_end])
                blocks.append(_Block(start, end, kind, strategy))
        return blocks

    def _build_paragraph(
        self,
        text: str,
        block: _Block,
        offset: int,
        paragraph_id: str,
        position: int,
    ) -> Paragraph | None:
        raw_text = text[block.start : block.end]
        sentences = [
            self._build_sentence(
                sentence_text=sentence_text,
                start=offset + block.start + start,
                end=offset + block.start + end,
                sentence_id=f"{paragraph_id}-s{index}",
                position=index,
            )
            for index, (start, end, sentence_text) in enumerate(
                self.split_sentences(raw_text)
            )
        ]

        if not sentences:
            return None

        return Paragraph(
            id=paragraph_id,
            kind=block.kind,
            sentences=sentences,
            position=position,
            char_range=CharRange(start=offset + block.start, end=offset + block.end),
            word_count=sum(s.word_count for s in sentences),
            estimated_duration=sum(s.estimated_duration for s in sentences),
            raw_text=raw_text,
            confidence=STRATEGY_CONFIDENCE[block.strategy],
            include_in_narration=block.kind not in NARRATION_EXCLUDED_KINDS,
        )

    def _build_sentence(
        self,
        sentence_text: str,
        start: int,
        end: int,
        sentence_id: str,
        position: int,
    ) -> Sentence:
        # Inline tags are markup, not words
        word_count = self._word_counter.count(ANY_TAG_PATTERN.sub(" ", sentence_text))
        return Sentence(
            id=sentence_id,
            text=sentence_text,
            position=position,
            char_range=CharRange(start=start, end=end),
            word_count=word_count,
            estimated_duration=word_count * self._config.seconds_per_word,
            has_formatting=bool(INLINE_FORMATTING_PATTERN.search(sentence_text)),
        )
