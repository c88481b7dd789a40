"""Embedding provider implementations.

Embeddings convert text into numeric vectors that capture semantic meaning.
They are stored in the vector store and compared at query time.

    OpenAIEmbeddingProvider -- text-embedding-3-large (3072 dims) by default;
        any OpenAI-compatible endpoint via ``OPENAI_BASE_URL``.
"""

from ragcore.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
