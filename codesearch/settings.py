# codesearch/settings.py
import os
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Code Search")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # vector index; "none" means semantic search is not configured
    INDEX_BACKEND: Literal["none", "faiss", "qdrant"] = "none"
    FAISS_PATH: str | None = None
    PAYLOADS_PATH: str | None = None  # defaults to <FAISS_PATH>.payloads.jsonl
    QDRANT_URL: str | None = None
    QDRANT_COLLECTION: str = "documents"
    QDRANT_API_KEY: str | None = None

    # query embeddings
    EMBED_BACKEND: Literal["ollama", "sentence-transformers"] = "ollama"
    OLLAMA_HOST: str = "http://localhost:11434"
    EMBED_MODEL: str = "bge-m3:latest"
    EMBED_TIMEOUT: float = 30.0

    # retrieval / dedup tuning
    OVERFETCH_MULTIPLIER: int = Field(default=4, ge=1)
    DEDUP_THRESHOLD: float = Field(default=0.96, gt=0.0, le=1.0)
    DEDUP_SUPPRESS_OVERLAPS: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME


settings = Settings()
