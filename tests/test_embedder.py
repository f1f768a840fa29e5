"""Tests for the sentence-transformers embedder with the model class replaced."""

import numpy as np
import pytest

from profile_rag.embeddings import embedder as embedder_module
from profile_rag.embeddings.embedder import Embedder
from profile_rag.models import IndexRecord


class FakeSentenceTransformer:
    instances = []

    def __init__(self, model_name):
        self.model_name = model_name
        self.encode_calls = []
        FakeSentenceTransformer.instances.append(self)

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, texts, **kwargs):
        self.encode_calls.append((list(texts), kwargs))
        return np.array([[float(len(t)), 1.0, 0.0] for t in texts], dtype=np.float64)


@pytest.fixture
def embedder(monkeypatch):
    FakeSentenceTransformer.instances = []
    monkeypatch.setattr(embedder_module, "SentenceTransformer", FakeSentenceTransformer)
    return Embedder(model_name="all-MiniLM-L6-v2", batch_size=8)


def test_model_is_loaded_lazily_and_once(embedder):
    assert FakeSentenceTransformer.instances == []

    embedder.embed_query("skills?")
    embedder.embed_query("location?")

    assert len(FakeSentenceTransformer.instances) == 1
    assert FakeSentenceTransformer.instances[0].model_name == "all-MiniLM-L6-v2"


def test_records_are_embedded_from_their_data_text(embedder):
    records = [
        IndexRecord(id="a", data="skills: Python", metadata={"path": "skills", "text": "Python"}),
        IndexRecord(id="b", data="location.city: Lisbon", metadata={"path": "location.city", "text": "Lisbon"}),
    ]

    vecs = embedder.embed_records(records)

    texts, kwargs = FakeSentenceTransformer.instances[0].encode_calls[0]
    assert texts == ["skills: Python", "location.city: Lisbon"]
    assert kwargs["normalize_embeddings"] is True
    assert kwargs["batch_size"] == 8
    assert vecs.shape == (2, 3)
    assert vecs.dtype == np.float32
    assert vecs.flags["C_CONTIGUOUS"]


def test_query_is_a_single_row_matrix(embedder):
    vec = embedder.embed_query("Where does Jordan live?")

    assert vec.shape == (1, 3)
    assert vec.dtype == np.float32


def test_empty_batch_skips_encoding(embedder):
    vecs = embedder.embed_records([])

    assert vecs.shape == (0, 3)
    assert FakeSentenceTransformer.instances[0].encode_calls == []
