"""Upstash Vector index provider.

The index is created with a built-in embedding model, so records carry raw
text in `data` and Upstash embeds both records and queries server side.
"""

from typing import List

from upstash_vector import AsyncIndex, Vector

from profile_rag.config import Settings
from profile_rag.exceptions import ConfigurationError
from profile_rag.logger import get_logger
from profile_rag.models import IndexRecord, ProviderHit

log = get_logger()


class UpstashIndexProvider:
    def __init__(self, url: str, token: str, index: AsyncIndex | None = None):
        self.url = url
        self._index = index or AsyncIndex(url=url, token=token)

    @classmethod
    def from_settings(cls, settings: Settings) -> "UpstashIndexProvider":
        if not settings.upstash_url or not settings.upstash_token:
            raise ConfigurationError(
                "Upstash backend needs UPSTASH_VECTOR_REST_URL and UPSTASH_VECTOR_REST_TOKEN"
            )
        return cls(settings.upstash_url, settings.upstash_token)

    async def upsert(self, records: List[IndexRecord]) -> None:
        vectors = [Vector(id=r.id, data=r.data, metadata=r.metadata) for r in records]
        await self._index.upsert(vectors=vectors)
        log.debug("Upstash upsert accepted %d records", len(vectors))

    async def query(self, data: str, top_k: int, include_metadata: bool = True) -> List[ProviderHit]:
        results = await self._index.query(data=data, top_k=top_k, include_metadata=include_metadata)
        return [
            ProviderHit(id=str(r.id), score=float(r.score), metadata=r.metadata or None)
            for r in results
        ]

    async def close(self) -> None:
        await self._index.close()
