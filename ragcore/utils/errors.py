"""Custom exception hierarchy for ragcore.

All application exceptions inherit from :class:`RagCoreError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "chromadb", "web") caused the failure.

The hierarchy is organized by pipeline stage:

    RagCoreError  (base -- catch-all for any ragcore error)
    +-- InvalidConfigurationError  (bad chunker / coordinator parameters)
    +-- ContentUnavailableError    (file read or URL fetch failure)
    |   +-- UnsupportedContentTypeError (no loader for the file extension)
    +-- NoExtractableContentError  (source produced no usable text)
    +-- EmbeddingUnavailableError  (embedding API transport / quota failure)
    +-- VectorStoreError           (vector-store backend failure)
    +-- DimensionMismatchError     (vectors of unequal length compared)
    +-- InvalidQueryError          (empty query or bad result count)
    +-- IngestionError             (wraps any of the above for one origin)
    +-- JobFaultError              (batch coordinator fault)

Per-item failures inside a batch job are caught as :class:`IngestionError`
and recorded on the job; they never propagate to sibling items.
"""


class RagCoreError(Exception):
    """Base exception for all ragcore errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for
    structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class InvalidConfigurationError(RagCoreError):
    """Raised when chunking or batching parameters are invalid."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Content acquisition errors
# ---------------------------------------------------------------------------

class ContentUnavailableError(RagCoreError):
    """Raised when a file cannot be read or a URL cannot be fetched."""

    def __init__(
        self,
        message: str = "Content is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedContentTypeError(ContentUnavailableError):
    """Raised when no loader exists for a file's extension."""

    def __init__(
        self,
        message: str = "Unsupported content type",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoExtractableContentError(RagCoreError):
    """Raised when a source yields empty or whitespace-only text."""

    def __init__(
        self,
        message: str = "No extractable content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Embedding / vector-store errors
# ---------------------------------------------------------------------------

class EmbeddingUnavailableError(RagCoreError):
    """Raised when the embedding gateway fails or returns a malformed response."""

    def __init__(
        self,
        message: str = "Embedding service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(RagCoreError):
    """Raised when a vector-store backend operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DimensionMismatchError(RagCoreError):
    """Raised when two embedding vectors of different length are compared."""

    def __init__(
        self,
        message: str = "Embedding dimension mismatch",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidQueryError(RagCoreError):
    """Raised when a retrieval query is empty or asks for no results."""

    def __init__(
        self,
        message: str = "Invalid query",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration errors
# ---------------------------------------------------------------------------

class IngestionError(RagCoreError):
    """Raised when ingesting a single origin fails at any stage.

    The underlying error is chained as ``__cause__``; its message is kept
    verbatim so callers see exactly what failed.
    """

    def __init__(
        self,
        message: str = "Ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class JobFaultError(RagCoreError):
    """Raised when the batch coordinator itself cannot continue a job."""

    def __init__(
        self,
        message: str = "Batch job coordinator fault",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
