"""Local file content provider.

Reads a file from disk and returns its text, dispatching on the file
extension:

    .txt / .md  -- decoded as UTF-8
    .csv        -- one block per row, each cell rendered ``column: value``
    .pdf        -- page text extracted with PyMuPDF, pages joined by blank lines
    .vtt        -- normalized by :class:`SubtitleParser` into timestamped lines

All disk and PDF work runs in a worker thread via ``asyncio.to_thread``
so the event loop stays responsive while a batch job reads many files.
"""

from __future__ import annotations

import asyncio
import csv
import io
from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from ragcore.interfaces.content_provider import IContentProvider
from ragcore.services.ingestion.subtitle_parser import SubtitleParser
from ragcore.utils.errors import ContentUnavailableError, UnsupportedContentTypeError

logger = structlog.get_logger(logger_name=__name__)

SUPPORTED_EXTENSIONS = frozenset({".txt", ".md", ".csv", ".pdf", ".vtt"})


def extract_pdf_text(source: str | bytes) -> str:
    """Return the text of every page of a PDF, blank-line separated.

    *source* is either a filesystem path or the raw PDF bytes (e.g. a
    downloaded document).  Pages without a text layer are skipped.
    """
    if isinstance(source, bytes):
        doc = fitz.open(stream=source, filetype="pdf")
    else:
        doc = fitz.open(source)
    try:
        pages = [doc[i].get_text("text").strip() for i in range(len(doc))]
    finally:
        doc.close()
    return "\n\n".join(page for page in pages if page)


def _render_csv(raw: str) -> str:
    reader = csv.DictReader(io.StringIO(raw))
    rows: list[str] = []
    for row in reader:
        lines = [
            f"{(column or '').strip()}: {(value or '').strip()}"
            for column, value in row.items()
            if column is not None
        ]
        rows.append("\n".join(lines))
    return "\n\n".join(rows)


class FileContentProvider(IContentProvider):
    """Loads supported document formats from the local filesystem."""

    def __init__(self, subtitle_parser: SubtitleParser | None = None) -> None:
        self._subtitle_parser = subtitle_parser or SubtitleParser()

    async def load(self, location: str) -> str:
        path = Path(location)
        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise UnsupportedContentTypeError(
                message=f"Unsupported file type {suffix or '(none)'!r} for {path.name}",
                provider_name=self.get_provider_name(),
            )
        if not path.is_file():
            raise ContentUnavailableError(
                message=f"File not found: {location}",
                provider_name=self.get_provider_name(),
            )

        try:
            if suffix == ".vtt":
                text = await self._subtitle_parser.parse_file(str(path))
            elif suffix == ".pdf":
                text = await asyncio.to_thread(extract_pdf_text, str(path))
            else:
                raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
                text = _render_csv(raw) if suffix == ".csv" else raw
        except (OSError, UnicodeDecodeError, csv.Error, RuntimeError) as exc:
            # PyMuPDF reports corrupt documents as RuntimeError subclasses.
            raise ContentUnavailableError(
                message=f"Could not read {path.name}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("file_loaded", path=str(path), extension=suffix, text_length=len(text))
        return text

    def supports(self, location: str) -> bool:
        return Path(location).suffix.lower() in SUPPORTED_EXTENSIONS

    def get_provider_name(self) -> str:
        return "file"
