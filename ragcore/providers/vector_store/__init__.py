"""Vector store provider implementations.

    ChromaDBProvider     -- persistent, on-disk collection at CHROMADB_PERSIST_DIR
                            with cosine-space HNSW search.
    InMemoryVectorStore  -- exact cosine ranking over an in-process list; the
                            local fallback when no vector database is configured.

To swap in another vector database (Qdrant, Pinecone), implement
IVectorStoreProvider and select it in ragcore/main.py.
"""

from ragcore.providers.vector_store.chromadb_provider import ChromaDBProvider
from ragcore.providers.vector_store.memory_provider import InMemoryVectorStore

__all__ = ["ChromaDBProvider", "InMemoryVectorStore"]
