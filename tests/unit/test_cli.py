"""Unit tests for the ingestion CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from ragcore.cli.ingest import _build_parser, _expand_batch_inputs, main
from ragcore.config.settings import Settings
from ragcore.main import build_components
from ragcore.providers.vector_store.memory_provider import InMemoryVectorStore
from ragcore.utils.errors import VectorStoreError
from tests.conftest import FakeEmbeddingProvider


def _run(argv: list[str]) -> int:
    # Logging output would otherwise be bound to this test's capture stream.
    with patch("ragcore.utils.logging.configure_logging"), pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def _components_factory(store: InMemoryVectorStore):
    def factory(_settings: Settings) -> dict[str, Any]:
        return build_components(
            Settings(_env_file=None, vector_store_backend="memory", batch_group_pause=0),
            embedding_provider=FakeEmbeddingProvider(),
            vector_store=store,
        )

    return factory


class TestParser:
    def test_subcommands(self) -> None:
        parser = _build_parser()

        args = parser.parse_args(["text", "hello", "--name", "greeting", "--vtt"])
        assert (args.command, args.text, args.name, args.vtt) == ("text", "hello", "greeting", True)

        args = parser.parse_args(["query", "refunds", "-k", "3"])
        assert (args.command, args.query, args.k) == ("query", "refunds", 3)

        args = parser.parse_args(["batch", "a.txt", "https://example.com"])
        assert args.inputs == ["a.txt", "https://example.com"]

    def test_no_command_exits_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestExpandBatchInputs:
    def test_directories_expand_to_supported_files(self, tmp_path: Path) -> None:
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "skip.docx").write_text("x")
        (tmp_path / "nested").mkdir()

        expanded = _expand_batch_inputs([str(tmp_path), "https://example.com/x", "loose.pdf"])

        assert expanded == [
            str(tmp_path / "a.txt"),
            str(tmp_path / "b.md"),
            "https://example.com/x",
            "loose.pdf",
        ]


class TestCommands:
    @pytest.fixture()
    def store(self) -> InMemoryVectorStore:
        return InMemoryVectorStore()

    def test_text_then_sources_then_query(
        self, store: InMemoryVectorStore, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("ragcore.cli.ingest._build_components", side_effect=_components_factory(store)):
            assert _run(["text", "Refunds take five business days.", "--name", "refunds"]) == 0
            assert "Chunks stored:  1" in capsys.readouterr().out

            assert _run(["sources"]) == 0
            out = capsys.readouterr().out
            assert "refunds" in out
            assert "1 source(s)" in out

            assert _run(["query", "refunds business days", "-k", "1"]) == 0
            assert "[1] refunds #1" in capsys.readouterr().out

    def test_file_and_delete(
        self, store: InMemoryVectorStore, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "policy.md"
        path.write_text("Laptops are replaced every three years.", encoding="utf-8")

        with patch("ragcore.cli.ingest._build_components", side_effect=_components_factory(store)):
            assert _run(["file", str(path)]) == 0
            assert _run(["delete", "policy.md"]) == 0
            assert _run(["delete", "policy.md"]) == 1

        assert "No source matching 'policy.md'." in capsys.readouterr().out

    def test_batch(
        self, store: InMemoryVectorStore, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "a.txt").write_text("Alpha document.", encoding="utf-8")
        (tmp_path / "b.txt").write_text("Beta document.", encoding="utf-8")

        with patch("ragcore.cli.ingest._build_components", side_effect=_components_factory(store)):
            code = _run(["batch", str(tmp_path), str(tmp_path / "missing.txt")])

        out = capsys.readouterr().out
        assert code == 0
        assert "Job completed" in out
        assert "Successful:  2" in out
        assert "Failed:      1" in out
        assert "missing.txt" in out

    def test_errors_are_reported(self, store: InMemoryVectorStore, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("ragcore.cli.ingest._build_components", side_effect=_components_factory(store)):
            assert _run(["query", "   "]) == 1

        assert "Error:" in capsys.readouterr().err

    def test_backend_open_failure_is_reported(self, capsys: pytest.CaptureFixture[str]) -> None:
        failure = VectorStoreError(message="Could not open ChromaDB collection 'x'", provider_name="chromadb")
        with patch("ragcore.cli.ingest._build_components", side_effect=failure):
            assert _run(["sources"]) == 1

        assert "Error: [chromadb] Could not open ChromaDB collection 'x'" in capsys.readouterr().err

    def test_sources_empty_with_memory_backend(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("VECTOR_STORE_BACKEND", "memory")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert _run(["sources"]) == 0
        assert "No sources stored." in capsys.readouterr().out
