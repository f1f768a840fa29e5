"""
Shared fixtures: in-memory index / generation providers and settings that
never read credentials from the environment.
"""

import asyncio
import os
import tempfile

# keep test runs from writing into ./logs; must happen before profile_rag.logger is imported
os.environ.setdefault("PROFILE_RAG_LOG_DIR", tempfile.mkdtemp(prefix="profile_rag_logs_"))

import pytest

from profile_rag.config import Settings
from profile_rag.models import ProviderHit, RetrievedChunk


class FakeIndexProvider:
    """Records upserts; answers queries with canned hits or a canned failure."""

    def __init__(self, hits=None, query_error=None, upsert_error=None, upsert_delay=0.0):
        self.hits = hits or []
        self.query_error = query_error
        self.upsert_error = upsert_error
        self.upsert_delay = upsert_delay
        self.upserts = []
        self.queries = []
        self.closed = False

    async def upsert(self, records):
        if self.upsert_delay:
            await asyncio.sleep(self.upsert_delay)
        if self.upsert_error:
            raise self.upsert_error
        self.upserts.append(list(records))

    async def query(self, data, top_k, include_metadata=True):
        self.queries.append({"data": data, "top_k": top_k, "include_metadata": include_metadata})
        if self.query_error:
            raise self.query_error
        return self.hits[:top_k]

    async def close(self):
        self.closed = True


class FakeGenerationProvider:
    """Counts calls and keeps the messages it was sent."""

    model = "fake-model"

    def __init__(self, reply="Generated text.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.closed = False

    async def complete(self, messages, model, temperature, max_tokens):
        self.calls.append(
            {"messages": messages, "model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.error:
            raise self.error
        return self.reply

    async def close(self):
        self.closed = True


def make_chunk(path: str, score: float, text: str = "some text") -> RetrievedChunk:
    return RetrievedChunk(id=f"id-{path}", path=path, text=text, score=score)


def make_hit(path: str, score: float, text: str = "some text") -> ProviderHit:
    return ProviderHit(id=f"id-{path}", score=score, metadata={"path": path, "text": text})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        knowledge_base_path="data/profile.json",
        index_backend="local",
        upstash_url=None,
        upstash_token=None,
        generation_backend="groq",
        groq_api_key=None,
    )


@pytest.fixture
def fake_index() -> FakeIndexProvider:
    return FakeIndexProvider(
        hits=[
            make_hit("skills", 0.91, "Python | PostgreSQL"),
            make_hit("experience[0].role", 0.72, "Senior Backend Engineer"),
            make_hit("location.city", 0.55, "Lisbon"),
            make_hit("headline", 0.41, "Backend engineer"),
        ]
    )


@pytest.fixture
def fake_llm() -> FakeGenerationProvider:
    return FakeGenerationProvider()
