from typing import List, Protocol

from profile_rag.exceptions import IndexIngestionError, InputValidationError
from profile_rag.logger import get_logger
from profile_rag.models import Chunk, IndexRecord, ProviderHit, RetrievedChunk, SearchOutcome

log = get_logger()


class IndexProvider(Protocol):
    """Anything that can store text records and rank them against a query."""

    async def upsert(self, records: List[IndexRecord]) -> None: ...

    async def query(self, data: str, top_k: int, include_metadata: bool = True) -> List[ProviderHit]: ...

    async def close(self) -> None: ...


def _to_retrieved(hit: ProviderHit) -> RetrievedChunk:
    meta = hit.metadata or {}
    return RetrievedChunk(
        id=hit.id,
        path=str(meta.get("path") or ""),
        text=str(meta.get("text") or ""),
        score=hit.score,
    )


class IndexAdapter:
    """
    Core-facing side of the vector index:
    - ingest(): chunk list -> one bulk upsert
    - search(): question -> ranked RetrievedChunk list, wrapped in a SearchOutcome

    Duplicate-initialization guarding is the caller's job, not ours.
    """

    def __init__(self, provider: IndexProvider):
        self.provider = provider

    async def ingest(self, chunks: List[Chunk]) -> int:
        records = [IndexRecord.from_chunk(c) for c in chunks]
        if not records:
            log.warning("ingest() called with no chunks; nothing to upsert.")
            return 0

        log.info("Upserting %d records to %s", len(records), type(self.provider).__name__)
        try:
            await self.provider.upsert(records)
        except Exception as exc:
            log.error("Index upsert failed: %s", exc)
            raise IndexIngestionError(
                f"Upsert of {len(records)} records failed",
                details={"error": str(exc)},
            ) from exc

        return len(records)

    async def search(self, query: str, limit: int) -> SearchOutcome:
        """
        Similarity search in provider rank order.
        Provider failures are logged and reported as a degraded outcome, never raised.
        """
        if limit < 1:
            raise InputValidationError("limit must be >= 1", field="limit", details={"limit": limit})

        try:
            hits = await self.provider.query(data=query, top_k=limit, include_metadata=True)
            results = [_to_retrieved(h) for h in hits]
        except Exception as exc:
            log.error("Vector search failed: %s", exc)
            return SearchOutcome.failed(str(exc) or type(exc).__name__)

        log.debug("search(%r, limit=%d) -> %d hits", query, limit, len(results))
        return SearchOutcome.ok(results)
