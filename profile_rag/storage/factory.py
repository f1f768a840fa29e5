from profile_rag.config import Settings
from profile_rag.exceptions import ConfigurationError
from profile_rag.logger import get_logger
from profile_rag.storage.index import IndexProvider

log = get_logger()


def build_index_provider(settings: Settings) -> IndexProvider:
    backend = (settings.index_backend or "").lower()

    if backend == "upstash":
        from profile_rag.storage.upstash_index import UpstashIndexProvider

        log.info("Using Upstash Vector index at %s", settings.upstash_url)
        return UpstashIndexProvider.from_settings(settings)

    if backend == "local":
        # pulls in faiss + sentence-transformers, so only import on demand
        from profile_rag.storage.faiss_index import LocalIndexProvider

        log.info(
            "Using local FAISS index: faiss=%s sqlite=%s model=%s",
            settings.faiss_index_path,
            settings.sqlite_path,
            settings.embedding_model_name,
        )
        return LocalIndexProvider.from_settings(settings)

    raise ConfigurationError(
        f"Unknown index_backend: {settings.index_backend!r}. Must be 'upstash' or 'local'."
    )
