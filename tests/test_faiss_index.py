"""Tests for the local FAISS + SQLite index with a deterministic fake embedder."""

import numpy as np
import pytest

from profile_rag.models import IndexRecord
from profile_rag.storage.faiss_index import LocalIndexProvider

VOCAB = ["python", "kafka", "lisbon", "portugal", "mentoring", "salary"]


class KeywordEmbedder:
    """One dimension per vocabulary word, L2-normalized like the real embedder."""

    def _encode(self, texts):
        vecs = np.zeros((len(texts), len(VOCAB)), dtype=np.float32)
        for row, text in enumerate(texts):
            lowered = text.lower()
            for col, word in enumerate(VOCAB):
                if word in lowered:
                    vecs[row, col] = 1.0
        norms = np.linalg.norm(vecs, axis=1, keepdims=True) + 1e-9
        return (vecs / norms).astype(np.float32)

    def embed_records(self, records):
        return self._encode([r.data for r in records])

    def embed_query(self, text):
        return self._encode([text])


def record(rid: str, path: str, text: str) -> IndexRecord:
    return IndexRecord(id=rid, data=f"{path}: {text}", metadata={"path": path, "text": text})


@pytest.fixture
def provider(tmp_path):
    return LocalIndexProvider(
        sqlite_path=tmp_path / "store" / "records.sqlite3",
        faiss_index_path=tmp_path / "store" / "index.faiss",
        embedder=KeywordEmbedder(),
    )


@pytest.mark.asyncio
async def test_query_on_empty_store_returns_nothing(provider):
    assert await provider.query("python", top_k=3) == []


@pytest.mark.asyncio
async def test_upsert_then_query_ranks_best_match_first(provider):
    await provider.upsert(
        [
            record("a", "skills", "Python | Kafka"),
            record("b", "location.city", "Lisbon"),
            record("c", "interview_prep.strengths", "mentoring"),
        ]
    )

    hits = await provider.query("Does she live in Lisbon?", top_k=2)

    assert hits[0].id == "b"
    assert hits[0].metadata == {"path": "location.city", "text": "Lisbon"}
    assert hits[0].score == pytest.approx(1.0, abs=1e-3)
    assert len(hits) == 2


@pytest.mark.asyncio
async def test_upsert_same_id_replaces_instead_of_duplicating(provider):
    await provider.upsert([record("a", "skills", "Python"), record("b", "location.city", "Lisbon")])
    await provider.upsert([record("a", "skills", "Kafka")])

    hits = await provider.query("kafka", top_k=5)

    assert provider.index.ntotal == 2
    assert hits[0].id == "a"
    assert hits[0].metadata["text"] == "Kafka"
    assert [h.id for h in hits].count("a") == 1


@pytest.mark.asyncio
async def test_repeated_id_in_one_batch_keeps_last_record(provider):
    await provider.upsert([record("x", "skills", "python"), record("x", "skills", "python kafka")])

    hits = await provider.query("python", top_k=5)

    assert provider.index.ntotal == 1
    assert [h.id for h in hits] == ["x"]
    assert hits[0].metadata["text"] == "python kafka"


@pytest.mark.asyncio
async def test_index_is_reloaded_from_disk(provider, tmp_path):
    await provider.upsert([record("a", "compensation.expected_salary_eur", "salary 85000")])
    await provider.close()

    reopened = LocalIndexProvider(
        sqlite_path=tmp_path / "store" / "records.sqlite3",
        faiss_index_path=tmp_path / "store" / "index.faiss",
        embedder=KeywordEmbedder(),
    )
    hits = await reopened.query("salary expectations", top_k=1, include_metadata=False)

    assert [h.id for h in hits] == ["a"]
    assert hits[0].metadata is None
