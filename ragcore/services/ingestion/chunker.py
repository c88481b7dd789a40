"""Fixed-size character windows with overlap.

Splits source text into :class:`~ragcore.models.rag.Chunk` objects sized
for embedding models.  The walk is purely positional:

1. Normalize ``\\r\\n`` and lone ``\\r`` to ``\\n``.
2. Take the window ``[start, min(start + chunk_size, len))``.
3. Strip it; keep it only if something is left.
4. Stop once a window reaches the end of the text, otherwise continue
   from ``end - overlap``.

Consecutive windows share ``overlap`` characters so a sentence cut at a
boundary is still whole in at least one chunk.  The same input and
parameters always produce the same output.
"""

from __future__ import annotations

import re

import structlog

from ragcore.models.rag import Chunk, SourceType, chunk_id_for
from ragcore.utils.errors import InvalidConfigurationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200
SUBTITLE_CHUNK_SIZE = 500
SUBTITLE_OVERLAP = 50

_LINE_ENDINGS = re.compile(r"\r\n?")


def _validate(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise InvalidConfigurationError(message=f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise InvalidConfigurationError(message=f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise InvalidConfigurationError(
            message=f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def split_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> list[str]:
    """Split *text* into stripped, non-empty windows of at most *chunk_size* chars.

    Raises
    ------
    InvalidConfigurationError
        If ``chunk_size <= 0``, ``overlap < 0`` or ``overlap >= chunk_size``.
    """
    _validate(chunk_size, overlap)
    if not text:
        return []

    normalized = _LINE_ENDINGS.sub("\n", text)
    length = len(normalized)

    pieces: list[str] = []
    start = 0
    while start < length:
        end = min(start + chunk_size, length)
        piece = normalized[start:end].strip()
        if piece:
            pieces.append(piece)
        if end == length:
            break
        start = end - overlap
    return pieces


class TextChunker:
    """Splits text into overlapping windows and wraps them as :class:`Chunk`.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 1000).
    overlap:
        Characters shared by consecutive chunks (default 200).
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> None:
        _validate(chunk_size, overlap)
        self._chunk_size = chunk_size
        self._overlap = overlap

    @classmethod
    def for_source_type(
        cls,
        source_type: SourceType,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_OVERLAP,
        subtitle_chunk_size: int = SUBTITLE_CHUNK_SIZE,
        subtitle_overlap: int = SUBTITLE_OVERLAP,
    ) -> TextChunker:
        """Return a chunker with the window policy for *source_type*.

        Subtitle text is dense with timestamps, so it gets smaller windows.
        """
        if source_type == SourceType.VTT:
            return cls(chunk_size=subtitle_chunk_size, overlap=subtitle_overlap)
        return cls(chunk_size=chunk_size, overlap=overlap)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    def split(self, text: str) -> list[str]:
        return split_text(text, self._chunk_size, self._overlap)

    def chunk(
        self,
        text: str,
        source_key: str,
        source_type: SourceType,
        source_name: str = "",
        metadata: dict[str, str] | None = None,
    ) -> list[Chunk]:
        """Split *text* and attach source identity and index to every piece."""
        extra = dict(metadata or {})
        chunks = [
            Chunk(
                chunk_id=chunk_id_for(source_key, index),
                text=piece,
                index=index,
                source_key=source_key,
                source_type=source_type,
                source_name=source_name or source_key,
                metadata=extra,
            )
            for index, piece in enumerate(self.split(text))
        ]

        logger.debug(
            "text_chunked",
            source_key=source_key,
            input_length=len(text),
            chunk_size=self._chunk_size,
            overlap=self._overlap,
            total_chunks=len(chunks),
        )
        return chunks
