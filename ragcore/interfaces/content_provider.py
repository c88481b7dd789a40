"""Abstract base class for raw-content acquisition.

A content provider turns an origin (a local path or a URL) into plain
text.  Chunking, embedding and storage happen later in
:class:`~ragcore.services.ingestion.ingestion_service.IngestionService`;
providers only read and extract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (ragcore/providers/content/):
#   FileContentProvider  -- .txt/.md, .csv, .pdf (PyMuPDF), .vtt
#   WebContentProvider   -- HTML via httpx + trafilatura, remote PDFs
class IContentProvider(ABC):
    """Contract for reading raw text from a file or a web page."""

    @abstractmethod
    async def load(self, location: str) -> str:
        """Return the extracted plain text found at *location*.

        Parameters
        ----------
        location:
            A filesystem path or an ``http(s)://`` URL, depending on the
            implementation.

        Returns
        -------
        str
            Extracted text.  May be empty when the origin has no text; the
            caller decides whether that is an error.

        Raises
        ------
        ragcore.utils.errors.ContentUnavailableError
            If the origin cannot be read or fetched.
        ragcore.utils.errors.UnsupportedContentTypeError
            If no loader exists for the origin's format.
        """

    @abstractmethod
    def supports(self, location: str) -> bool:
        """Return ``True`` if this provider knows how to load *location*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"file"`` or ``"web"``."""
