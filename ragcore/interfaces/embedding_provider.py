"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into fixed-length vectors.  The
default implementation wraps OpenAI ``text-embedding-3-large``; any
OpenAI-compatible endpoint or local model can be slotted in behind the
same interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider  -- text-embedding-3-large (requires API key)
# Located in: ragcore/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and retrieval.

    Vectors produced here are stored by
    :class:`~ragcore.interfaces.vector_store_provider.IVectorStoreProvider`
    and compared at query time, so every vector from one provider instance
    must have the same length.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.  Implementations should
            split the batch internally if the underlying API has a per-call
            limit.

        Returns
        -------
        list[list[float]]
            Embedding vectors corresponding positionally to *texts*.

        Raises
        ------
        ragcore.utils.errors.EmbeddingUnavailableError
            If the embedding API call fails or returns a malformed response.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text (e.g. a query)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the length of the vectors this provider produces.

        Example values: ``3072`` (``text-embedding-3-large``),
        ``1536`` (``text-embedding-3-small``).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai-text-embedding-3-large"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""

    def supports_batching(self) -> bool:
        """Return ``True`` when :meth:`embed` sends many texts in one request.

        The ingestion pipeline embeds a whole document in a single
        :meth:`embed` call when this is ``True`` and falls back to one
        :meth:`embed_single` call per chunk otherwise.
        """
        return True
