"""Document ingestion pipeline for the ragcore knowledge base.

Orchestrates **load -> chunk -> embed -> store -> register** for one origin.

1. **Load** -- content providers read files (.txt/.md/.csv/.pdf/.vtt) and
   fetch web pages; caption tracks pass through :mod:`subtitle_parser`.
2. **Chunk** (chunker.py / TextChunker) -- fixed-size overlapping windows,
   1000/200 characters for generic text and 500/50 for subtitles.
3. **Embed** (via IEmbeddingProvider) -- one vector per chunk.
4. **Store** (via IVectorStoreProvider) -- replaces earlier chunks of the
   same source key, then upserts.
5. **Register** (SourceRegistry) -- remembers the source's display details.
"""

from ragcore.services.ingestion.chunker import TextChunker, split_text
from ragcore.services.ingestion.ingestion_service import IngestionService
from ragcore.services.ingestion.subtitle_parser import SubtitleParser, parse_vtt

__all__ = [
    "IngestionService",
    "SubtitleParser",
    "TextChunker",
    "parse_vtt",
    "split_text",
]
