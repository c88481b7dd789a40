"""Web page content provider using httpx and trafilatura.

Fetches a URL and extracts the readable main text.  trafilatura strips
navigation, ads and boilerplate; when it finds nothing (script-heavy or
unusual markup) the visible text of the page body is taken with
BeautifulSoup instead.  URLs that point at a PDF are downloaded and their
page text extracted with PyMuPDF.
"""

from __future__ import annotations

import asyncio
from urllib.parse import urlparse

import httpx
import structlog
import trafilatura
from bs4 import BeautifulSoup

from ragcore.interfaces.content_provider import IContentProvider
from ragcore.providers.content.file_content_provider import extract_pdf_text
from ragcore.utils.errors import ContentUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 10.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ragcore/0.1)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/pdf;q=0.8,*/*;q=0.7",
}
_NON_CONTENT_TAGS = ("script", "style", "noscript", "template", "svg")


def is_url(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def _is_pdf(url: str, response: httpx.Response) -> bool:
    if urlparse(url).path.lower().endswith(".pdf"):
        return True
    return response.headers.get("content-type", "").lower().startswith("application/pdf")


def _html_to_text(html: str) -> str:
    text = trafilatura.extract(html, include_comments=False, include_tables=True)
    if text:
        return text

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    root = soup.body or soup
    lines = (line.strip() for line in root.get_text("\n").splitlines())
    return "\n".join(line for line in lines if line)


class WebContentProvider(IContentProvider):
    """Page text extraction backed by httpx + trafilatura."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # IContentProvider implementation
    # ------------------------------------------------------------------

    async def load(self, location: str) -> str:
        """Fetch *location* and return its readable text."""
        try:
            response = await self._client.get(location)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ContentUnavailableError(
                message=f"Timeout fetching {location}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise ContentUnavailableError(
                message=f"HTTP {exc.response.status_code} for {location}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ContentUnavailableError(
                message=f"HTTP error fetching {location}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if _is_pdf(location, response):
            try:
                text = await asyncio.to_thread(extract_pdf_text, response.content)
            except RuntimeError as exc:
                raise ContentUnavailableError(
                    message=f"Could not parse PDF from {location}: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            kind = "pdf"
        else:
            text = _html_to_text(response.text)
            kind = "html"

        if not text:
            logger.warning("web_extraction_empty", url=location, kind=kind)
        else:
            logger.info("web_page_extracted", url=location, kind=kind, text_length=len(text))
        return text

    def supports(self, location: str) -> bool:
        return is_url(location)

    def get_provider_name(self) -> str:
        return "web"

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()
