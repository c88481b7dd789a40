"""Unit tests for the fixed-window text chunker."""

from __future__ import annotations

import pytest

from ragcore.models.rag import SourceType, chunk_id_for
from ragcore.services.ingestion.chunker import TextChunker, split_text
from ragcore.utils.errors import InvalidConfigurationError


class TestSplitText:
    def test_long_run_yields_overlapping_windows(self) -> None:
        text = "A" * 2500
        chunks = split_text(text, chunk_size=1000, overlap=200)

        # Windows start at 0, 800 and 1600; the last one reaches the end.
        assert [len(c) for c in chunks] == [1000, 1000, 900]
        assert chunks[0] == text[0:1000]
        assert chunks[1] == text[800:1800]
        assert chunks[2] == text[1600:2500]

    def test_output_is_deterministic(self) -> None:
        text = "The quick brown fox jumps over the lazy dog. " * 80
        first = split_text(text, 300, 50)
        second = split_text(text, 300, 50)
        assert first == second

    def test_consecutive_chunks_share_overlap(self) -> None:
        text = "abcdefghij" * 50
        chunks = split_text(text, chunk_size=100, overlap=30)

        for previous, current in zip(chunks, chunks[1:]):
            assert current[:30] == previous[-30:]
        rebuilt = chunks[0] + "".join(c[30:] for c in chunks[1:])
        assert rebuilt == text

    def test_no_empty_chunks(self) -> None:
        text = "start" + " " * 400 + "\n\n\n" + " " * 300 + "end"
        chunks = split_text(text, chunk_size=100, overlap=10)

        assert chunks
        assert all(c.strip() == c and c for c in chunks)
        assert chunks[0] == "start"
        assert chunks[-1] == "end"

    def test_text_of_exactly_one_window(self) -> None:
        assert split_text("x" * 1000, 1000, 200) == ["x" * 1000]

    def test_short_text_is_single_chunk(self) -> None:
        assert split_text("  hello world  ", 1000, 200) == ["hello world"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\r\n\t"])
    def test_blank_text_yields_nothing(self, text: str) -> None:
        assert split_text(text, 100, 10) == []

    def test_line_endings_are_normalized(self) -> None:
        assert split_text("a\r\nb\rc", 100, 10) == ["a\nb\nc"]

    @pytest.mark.parametrize(
        ("chunk_size", "overlap"),
        [(0, 0), (-5, 0), (10, -1), (10, 10), (10, 11)],
    )
    def test_invalid_parameters_are_rejected(self, chunk_size: int, overlap: int) -> None:
        with pytest.raises(InvalidConfigurationError):
            split_text("some text", chunk_size, overlap)


class TestTextChunker:
    def test_constructor_validates(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            TextChunker(chunk_size=100, overlap=100)

    def test_defaults(self) -> None:
        chunker = TextChunker()
        assert chunker.chunk_size == 1000
        assert chunker.overlap == 200

    def test_for_source_type_uses_subtitle_windows_for_vtt(self) -> None:
        vtt = TextChunker.for_source_type(SourceType.VTT)
        generic = TextChunker.for_source_type(SourceType.FILE)

        assert (vtt.chunk_size, vtt.overlap) == (500, 50)
        assert (generic.chunk_size, generic.overlap) == (1000, 200)

    def test_chunk_attaches_identity_and_index(self) -> None:
        chunker = TextChunker(chunk_size=50, overlap=10)
        chunks = chunker.chunk(
            "word " * 40,
            source_key="notes.txt",
            source_type=SourceType.FILE,
            metadata={"created_at": "2024-01-01T00:00:00+00:00"},
        )

        assert len(chunks) > 1
        assert [c.index for c in chunks] == list(range(len(chunks)))
        for c in chunks:
            assert c.source_key == "notes.txt"
            assert c.source_type == SourceType.FILE
            assert c.source_name == "notes.txt"
            assert c.chunk_id == chunk_id_for("notes.txt", c.index)
            assert c.metadata == {"created_at": "2024-01-01T00:00:00+00:00"}
            assert len(c.text) <= 50

    def test_chunk_ids_are_stable_across_runs(self) -> None:
        chunker = TextChunker(chunk_size=50, overlap=10)
        first = chunker.chunk("alpha beta gamma " * 10, "k", SourceType.TEXT)
        second = chunker.chunk("alpha beta gamma " * 10, "k", SourceType.TEXT)
        assert [c.chunk_id for c in first] == [c.chunk_id for c in second]
