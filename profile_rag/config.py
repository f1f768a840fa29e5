import os

from pydantic import BaseModel, ConfigDict, Field


def _env(name: str, default: str | None = None):
    return lambda: os.getenv(name, default)


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # knowledge base
    knowledge_base_path: str = Field(default_factory=_env("PROFILE_RAG_KNOWLEDGE_BASE", "data/profile.json"))

    # index provider
    index_backend: str = Field(default_factory=_env("PROFILE_RAG_INDEX_BACKEND", "upstash"))  # "upstash" or "local"
    upstash_url: str | None = Field(default_factory=_env("UPSTASH_VECTOR_REST_URL"))
    upstash_token: str | None = Field(default_factory=_env("UPSTASH_VECTOR_REST_TOKEN"))

    # local index (FAISS + sqlite), only used when index_backend == "local"
    sqlite_path: str = "store/chunks.sqlite3"
    faiss_index_path: str = "store/index.faiss"
    embedding_model_name: str = "sentence-transformers/all-MiniLM-L6-v2"

    # generation provider
    generation_backend: str = Field(default_factory=_env("PROFILE_RAG_GENERATION_BACKEND", "groq"))  # "groq" or "gemini"
    groq_api_key: str | None = Field(default_factory=_env("GROQ_API_KEY"))
    groq_model: str = "llama-3.1-8b-instant"
    gemini_model: str = "gemini-2.5-flash"

    # retrieval
    default_top_k: int = 6

    # Q&A wants near-deterministic output, articles want room to write
    answer_temperature: float = 0.1
    answer_max_tokens: int = 500
    article_temperature: float = 0.7
    article_max_tokens: int = 1200


def get_settings() -> Settings:
    return Settings()
