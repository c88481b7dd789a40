"""Public interface definitions for the external services ragcore talks to.

The embedding model, the vector database and raw content acquisition are
reached only through the abstract base classes defined here.  Concrete
adapters implement these interfaces and are wired together in
:func:`ragcore.main.build_components`, so unit tests can inject fakes and a
backend can be swapped by changing one constructor call.

CONCRETE PROVIDER MAP:
    Interface                  ->  Concrete implementations (ragcore/providers/)
    -------------------------------------------------------------------------
    IEmbeddingProvider         ->  OpenAIEmbeddingProvider
    IVectorStoreProvider       ->  ChromaDBProvider, InMemoryVectorStore
    IContentProvider           ->  FileContentProvider, WebContentProvider
"""

from ragcore.interfaces.content_provider import IContentProvider
from ragcore.interfaces.embedding_provider import IEmbeddingProvider
from ragcore.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IContentProvider",
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
