"""Unit tests for the file and web content providers."""

from __future__ import annotations

from pathlib import Path

import fitz
import httpx
import pytest

from ragcore.providers.content.file_content_provider import FileContentProvider, extract_pdf_text
from ragcore.providers.content.web_content_provider import WebContentProvider, is_url
from ragcore.utils.errors import ContentUnavailableError, UnsupportedContentTypeError


def _pdf_bytes(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ======================================================================
# FileContentProvider
# ======================================================================


class TestFileContentProvider:
    @pytest.fixture()
    def provider(self) -> FileContentProvider:
        return FileContentProvider()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["notes.txt", "README.md"])
    async def test_plain_text(self, provider: FileContentProvider, tmp_path: Path, name: str) -> None:
        path = tmp_path / name
        path.write_text("# Title\n\nBody text.", encoding="utf-8")
        assert await provider.load(str(path)) == "# Title\n\nBody text."

    @pytest.mark.asyncio
    async def test_csv_rows(self, provider: FileContentProvider, tmp_path: Path) -> None:
        path = tmp_path / "staff.csv"
        path.write_text("name,role\nAlice,Engineer\nBob, Designer \n", encoding="utf-8")

        assert await provider.load(str(path)) == (
            "name: Alice\nrole: Engineer\n\nname: Bob\nrole: Designer"
        )

    @pytest.mark.asyncio
    async def test_vtt_is_normalized(self, provider: FileContentProvider, tmp_path: Path) -> None:
        path = tmp_path / "clip.vtt"
        path.write_text("WEBVTT\n\n00:00:01.000 --> 00:00:02.000\n<b>Hi</b> there\n", encoding="utf-8")

        assert await provider.load(str(path)) == "[00:00:01.000 --> 00:00:02.000] Hi there"

    @pytest.mark.asyncio
    async def test_pdf_pages(self, provider: FileContentProvider, tmp_path: Path) -> None:
        path = tmp_path / "handbook.pdf"
        path.write_bytes(_pdf_bytes("First page text", "Second page text"))

        text = await provider.load(str(path))

        assert "First page text" in text
        assert "Second page text" in text
        assert "\n\n" in text

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, provider: FileContentProvider, tmp_path: Path) -> None:
        path = tmp_path / "slides.pptx"
        path.write_bytes(b"binary")

        with pytest.raises(UnsupportedContentTypeError):
            await provider.load(str(path))

    @pytest.mark.asyncio
    async def test_missing_file(self, provider: FileContentProvider, tmp_path: Path) -> None:
        with pytest.raises(ContentUnavailableError, match="File not found"):
            await provider.load(str(tmp_path / "gone.txt"))

    @pytest.mark.asyncio
    async def test_undecodable_text(self, provider: FileContentProvider, tmp_path: Path) -> None:
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"caf\xe9 \xff\xfe")

        with pytest.raises(ContentUnavailableError):
            await provider.load(str(path))

    def test_supports(self, provider: FileContentProvider) -> None:
        assert provider.supports("a.PDF")
        assert provider.supports("talk.vtt")
        assert not provider.supports("a.docx")
        assert provider.get_provider_name() == "file"

    def test_extract_pdf_text_from_bytes(self) -> None:
        assert "Only page" in extract_pdf_text(_pdf_bytes("Only page"))


# ======================================================================
# WebContentProvider
# ======================================================================


_ARTICLE = """<html><head><title>Refunds</title></head><body>
<nav>Home | About | Contact</nav>
<article>
<h1>Refund policy</h1>
<p>Refunds are processed within five business days after the returned item
reaches our warehouse. Store credit is issued immediately on request.</p>
<p>Items bought on clearance cannot be refunded, but they can be exchanged for
a different size within thirty days of purchase.</p>
</article>
</body></html>"""


class TestWebContentProvider:
    def test_is_url(self) -> None:
        assert is_url("https://example.com")
        assert is_url("http://example.com/a.pdf")
        assert not is_url("docs/a.txt")
        assert not is_url("ftp://example.com")

    @pytest.mark.asyncio
    async def test_html_article(self) -> None:
        provider = WebContentProvider(http_client=_client(lambda r: httpx.Response(200, html=_ARTICLE)))

        text = await provider.load("https://example.com/refunds")

        assert "five business days" in text

    @pytest.mark.asyncio
    async def test_fallback_drops_scripts(self) -> None:
        html = "<html><body><script>var x = 1;</script><div>Hi</div></body></html>"
        provider = WebContentProvider(http_client=_client(lambda r: httpx.Response(200, html=html)))

        text = await provider.load("https://example.com/app")

        assert "Hi" in text
        assert "var x" not in text

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        provider = WebContentProvider(http_client=_client(lambda r: httpx.Response(404)))

        with pytest.raises(ContentUnavailableError, match="HTTP 404 for https://example.com/x"):
            await provider.load("https://example.com/x")

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        provider = WebContentProvider(http_client=_client(handler))

        with pytest.raises(ContentUnavailableError, match="Timeout"):
            await provider.load("https://example.com/slow")

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider = WebContentProvider(http_client=_client(handler))

        with pytest.raises(ContentUnavailableError) as exc_info:
            await provider.load("https://example.com/down")
        assert exc_info.value.provider_name == "web"

    @pytest.mark.asyncio
    async def test_pdf_url(self) -> None:
        pdf = _pdf_bytes("Remote handbook page")
        provider = WebContentProvider(
            http_client=_client(
                lambda r: httpx.Response(200, content=pdf, headers={"content-type": "application/pdf"})
            )
        )

        text = await provider.load("https://example.com/download?id=7")

        assert "Remote handbook page" in text

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self) -> None:
        client = _client(lambda r: httpx.Response(200, html=_ARTICLE))
        provider = WebContentProvider(http_client=client)

        await provider.aclose()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_own_client(self) -> None:
        provider = WebContentProvider()
        await provider.aclose()
        assert provider._client.is_closed
