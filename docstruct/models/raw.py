"""Raw chapter records handed over by format adapters."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentMetadata(BaseModel):
    """Document-level metadata extracted by a format adapter."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    author: str = ""
    language: str = "en"
    publisher: str = ""
    identifier: str = ""
    date: str = ""
    custom: dict[str, Any] = Field(default_factory=dict)


class RawChapter(BaseModel):
    """One chapter as extracted from the source, before segmentation.

    ``text`` may still carry light block markup (``<p>``, ``<li>`` ...) when
    the adapter preserved it. ``source_offset`` is a hint for where the
    chapter starts in the original source; the assembler never places a
    chapter before the end of the previous one.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    text: str
    level: int = 1  # 1 = top-level chapter
    source_offset: int | None = None


class RawDocument(BaseModel):
    """Everything an adapter produces for one source document."""

    model_config = ConfigDict(frozen=True)

    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    chapters: list[RawChapter] = Field(default_factory=list)
    source_length: int = 0
    source_path: str = ""
    file_format: str = ""  # "epub", "pdf", "markdown", "txt", "html"
