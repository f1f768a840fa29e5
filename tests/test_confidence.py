import pytest

from conftest import make_chunk
from profile_rag.models import Confidence
from profile_rag.retrieval.confidence import classify, evidence_paths


def test_empty_ranking_is_low_with_no_evidence():
    assert classify([]) == (Confidence.LOW, [])


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.95, Confidence.HIGH),
        (0.8, Confidence.HIGH),
        (0.7999, Confidence.MEDIUM),
        (0.6, Confidence.MEDIUM),
        (0.599, Confidence.LOW),
        (0.0, Confidence.LOW),
    ],
)
def test_threshold_boundaries(score, expected):
    confidence, _ = classify([make_chunk("a", score)])
    assert confidence is expected


def test_evidence_is_top_three_in_given_order():
    ranked = [make_chunk(p, s) for p, s in [("a", 0.5), ("b", 0.9), ("c", 0.7), ("d", 0.99)]]

    confidence, evidence = classify(ranked)

    # no re-sorting: the first entry decides, even if a later one scores higher
    assert confidence is Confidence.LOW
    assert evidence_paths(evidence) == ["a", "b", "c"]


def test_fewer_than_three_chunks():
    _, evidence = classify([make_chunk("only", 0.81)])
    assert evidence_paths(evidence) == ["only"]


def test_confidence_serializes_as_plain_string():
    assert Confidence.MEDIUM.value == "medium"
    assert Confidence.MEDIUM == "medium"
