"""Plain-text, Markdown and HTML adapter producing raw chapter records."""

import logging
import re
from pathlib import Path

import chardet

from docstruct.models.raw import DocumentMetadata, RawChapter, RawDocument

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, str] = {
    ".txt": "txt",
    ".md": "markdown",
    ".markdown": "markdown",
    ".html": "html",
    ".htm": "html",
    ".xhtml": "html",
}

ATX_HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
HTML_TITLE_PATTERN = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
HTML_H1_PATTERN = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r"<[^>]+>")

# Number of heading levels, counted from the shallowest one found, that start a chapter
CHAPTER_HEADING_DEPTH = 2


class TextDocumentParser:
    """Reads text-based documents into a RawDocument.

    Markdown ATX headings split the document into chapters; HTML is passed
    through as a single chapter with its block markup preserved so the
    segmenter can use it for paragraph boundaries. Binary formats (EPUB,
    PDF) are handled by other adapters.
    """

    def parse(self, file_path: str | Path) -> RawDocument:
        """Parse a file into raw chapters and metadata.

        Args:
            file_path: Path to the document.

        Returns:
            A RawDocument whose chapter offsets point into the decoded text.

        Raises:
            FileNotFoundError: If file_path does not exist.
            ValueError: If the file format is not supported.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        file_format = self._detect_format(path)
        text = self._read_text(path)

        if file_format == "html":
            title = self._extract_html_title(text) or path.stem
            chapters = [RawChapter(title=title, text=text, level=1, source_offset=0)]
        else:
            chapters = self.split_chapters(text)
            title = self._extract_title(text, chapters, path)
            if len(chapters) == 1 and not chapters[0].title:
                chapters = [chapters[0].model_copy(update={"title": title})]

        metadata = DocumentMetadata(
            title=title,
            language=self._detect_language(text),
            custom={"source_path": str(path)},
        )

        logger.info("Parsed %s (%s): %d chapters", path, file_format, len(chapters))

        return RawDocument(
            metadata=metadata,
            chapters=chapters,
            source_length=len(text),
            source_path=str(path),
            file_format=file_format,
        )

    def split_chapters(self, text: str) -> list[RawChapter]:
        """Split Markdown or plain text into chapters at ATX headings.

        Headings within ``CHAPTER_HEADING_DEPTH`` levels of the shallowest
        heading start a new chapter; deeper ones stay inside the chapter
        text. Non-blank text before the first heading becomes an untitled
        chapter.

        Args:
            text: The decoded document text.

        Returns:
            Raw chapters with ``source_offset`` set to their text offset.
        """
        if not text.strip():
            return []

        headings = list(ATX_HEADING_PATTERN.finditer(text))
        if not headings:
            return [RawChapter(title="", text=text, level=1, source_offset=0)]

        top_level = min(len(m.group(1)) for m in headings)
        chapter_headings = [
            m for m in headings if len(m.group(1)) < top_level + CHAPTER_HEADING_DEPTH
        ]

        chapters: list[RawChapter] = []
        preamble = text[: chapter_headings[0].start()]
        if preamble.strip():
            chapters.append(RawChapter(title="", text=preamble, level=1, source_offset=0))

        for i, heading in enumerate(chapter_headings):
            body_start = heading.end()
            if i + 1 < len(chapter_headings):
                body_end = chapter_headings[i + 1].start()
            else:
                body_end = len(text)

            chapters.append(
                RawChapter(
                    title=heading.group(2).strip(),
                    text=text[body_start:body_end],
                    level=len(heading.group(1)) - top_level + 1,
                    source_offset=body_start,
                )
            )

        return chapters

    def _detect_format(self, file_path: Path) -> str:
        """Determine file format from extension.

        Raises:
            ValueError: If extension is not supported.
        """
        ext = file_path.suffix.lower()
        if ext not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported file format: '{ext}'. "
                f"Supported: {', '.join(SUPPORTED_FORMATS.keys())}"
            )
        return SUPPORTED_FORMATS[ext]

    def _read_text(self, file_path: Path) -> str:
        """Read a text file, trying UTF-8 first and falling back to chardet.

        Args:
            file_path: Path to the text file.

        Returns:
            The file content as a string.
        """
        try:
            return file_path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError:
            pass

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence") or 0

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode %s as %s, replacing bad bytes", file_path, encoding)
            return raw_bytes.decode("utf-8", errors="replace")

    def _extract_title(
        self, text: str, chapters: list[RawChapter], file_path: Path
    ) -> str:
        """Pick a document title.

        Uses the first top-level heading when there is exactly one, else the
        first short line that is mostly letters, else the filename.
        """
        headings = ATX_HEADING_PATTERN.findall(text)
        top_headings = [title for hashes, title in headings if len(hashes) == 1]
        if len(top_headings) == 1:
            return top_headings[0].strip()

        for line in text.strip().split("\n")[:5]:
            stripped = line.strip().lstrip("#").strip()
            if stripped and len(stripped) <= 100:
                letters = sum(ch.isalpha() for ch in stripped)
                if letters / len(stripped) > 0.5:
                    return stripped

        return file_path.stem

    def _extract_html_title(self, text: str) -> str:
        for pattern in (HTML_TITLE_PATTERN, HTML_H1_PATTERN):
            match = pattern.search(text)
            if match:
                title = TAG_PATTERN.sub("", match.group(1)).strip()
                if title:
                    return title
        return ""

    def _detect_language(self, text: str) -> str:
        """Classify the text as Latin-script ("en") or undetermined ("und").

        Args:
            text: The text to analyze.

        Returns:
            "en" when more than 60% of letters are ASCII Latin, else "und".
        """
        letters = [ch for ch in text if ch.isalpha()]
        if not letters:
            return "und"

        latin = sum(1 for ch in letters if ch.isascii())
        return "en" if latin / len(letters) > 0.6 else "und"
