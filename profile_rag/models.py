from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

# Anything json.load() can hand back.
JsonValue = Union[str, int, float, bool, None, List["JsonValue"], Dict[str, "JsonValue"]]


class Chunk(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    path: str
    text: str
    id: str


class IndexRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    data: str  # what the index provider embeds
    metadata: Dict[str, str]

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "IndexRecord":
        return cls(
            id=chunk.id,
            data=f"{chunk.path}: {chunk.text}",
            metadata={"path": chunk.path, "text": chunk.text},
        )


class ProviderHit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    score: float
    metadata: Optional[Dict[str, Any]] = None


class RetrievedChunk(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    path: str
    text: str
    score: float  # provider similarity, treated as roughly 0..1


class SearchOutcome(BaseModel):
    """Result of a similarity search. A failed search is "degraded", never raised."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["ok", "degraded"]
    hits: List[RetrievedChunk] = []
    reason: Optional[str] = None

    @classmethod
    def ok(cls, hits: List[RetrievedChunk]) -> "SearchOutcome":
        return cls(status="ok", hits=hits)

    @classmethod
    def failed(cls, reason: str) -> "SearchOutcome":
        return cls(status="degraded", hits=[], reason=reason)

    @property
    def degraded(self) -> bool:
        return self.status == "degraded"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SynthesisResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    answer: str
    confidence: Confidence
    evidence: List[str]  # paths of the chunks shown to the generator, in rank order


class ArticleRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    project_title: str = ""
    project_date: str = ""
    club: str = ""
    narrative: str = ""

    @field_validator("project_title", "project_date", "club", "narrative", mode="before")
    @classmethod
    def _none_to_blank(cls, v):
        return "" if v is None else v

    def is_blank(self) -> bool:
        return not (self.project_title or self.project_date or self.club or self.narrative)


class AssistantResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    question: str
    answer: str
    confidence: Confidence
    evidence: List[str]
    matches: List[RetrievedChunk]
    degraded: bool = False
