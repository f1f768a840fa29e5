from typing import List, Tuple

from profile_rag.models import Confidence, RetrievedChunk

HIGH_THRESHOLD = 0.8
MEDIUM_THRESHOLD = 0.6
EVIDENCE_LIMIT = 3


def confidence_for_score(score: float) -> Confidence:
    if score >= HIGH_THRESHOLD:
        return Confidence.HIGH
    if score >= MEDIUM_THRESHOLD:
        return Confidence.MEDIUM
    return Confidence.LOW


def classify(ranked: List[RetrievedChunk]) -> Tuple[Confidence, List[RetrievedChunk]]:
    """
    Confidence comes from the top hit alone; evidence is the first three hits
    in the order the index returned them (no re-sorting).
    """
    if not ranked:
        return Confidence.LOW, []

    evidence = list(ranked[:EVIDENCE_LIMIT])
    return confidence_for_score(evidence[0].score), evidence


def evidence_paths(chunks: List[RetrievedChunk]) -> List[str]:
    return [c.path for c in chunks]
