"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from two sources, in priority order:

  1. **Environment variables** -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** -- key=value lines in the project root ``.env`` file

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``; defaults apply
when neither source sets a value.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ragcore settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, vLLM, ...)
    openai_embedding_model: str = "text-embedding-3-large"

    # === Vector store ===
    # "memory" keeps everything in-process (lost on exit); "chromadb" persists to disk.
    vector_store_backend: Literal["chromadb", "memory"] = "chromadb"
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "myrag-collection"

    # === Chunking ===
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    # Subtitle text is timestamp-dense; smaller windows retrieve better.
    subtitle_chunk_size: int = Field(default=500, gt=0)
    subtitle_chunk_overlap: int = Field(default=50, ge=0)

    # === Batch jobs ===
    batch_group_size: int = Field(default=5, gt=0)
    batch_group_pause: float = Field(default=0.1, ge=0.0)  # seconds between groups

    # === Retrieval ===
    retrieval_top_k: int = Field(default=10, gt=0)

    # === Content fetching ===
    http_timeout: float = 10.0

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
