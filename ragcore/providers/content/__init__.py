"""Raw content providers: turn a file path or URL into plain text.

    FileContentProvider -- .txt/.md, .csv, .pdf (PyMuPDF) and .vtt subtitles
    WebContentProvider  -- HTML pages (httpx + trafilatura, BeautifulSoup
                           fallback) and remote PDFs
"""

from ragcore.providers.content.file_content_provider import FileContentProvider
from ragcore.providers.content.web_content_provider import WebContentProvider

__all__ = ["FileContentProvider", "WebContentProvider"]
