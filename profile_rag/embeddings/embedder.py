from typing import List

import numpy as np
from pydantic import BaseModel, ConfigDict, PrivateAttr
from sentence_transformers import SentenceTransformer

from profile_rag.logger import get_logger
from profile_rag.models import IndexRecord

log = get_logger()


class Embedder(BaseModel):
    """
    Sentence-transformers encoder for the local index backend.

    Records are embedded from their `data` text ("path: text") and queries
    from the raw question. Vectors are L2-normalized, so FAISS inner product
    equals cosine similarity and scores land in the same range as Upstash's.
    Every method returns a 2-D float32 matrix, the shape FAISS expects.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    model_name: str
    batch_size: int = 32

    _model: SentenceTransformer | None = PrivateAttr(default=None)

    @property
    def model(self) -> SentenceTransformer:
        # loading the weights is slow; defer until the first embed call
        if self._model is None:
            log.info("Loading embedding model %s", self.model_name)
            self._model = SentenceTransformer(self.model_name)
        return self._model

    @property
    def dimension(self) -> int:
        return int(self.model.get_sentence_embedding_dimension())

    def _encode(self, texts: List[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, self.dimension), dtype=np.float32)
        vecs = self.model.encode(
            texts,
            batch_size=self.batch_size,
            convert_to_numpy=True,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        return np.ascontiguousarray(vecs, dtype=np.float32).reshape(len(texts), -1)

    def embed_records(self, records: List[IndexRecord]) -> np.ndarray:
        return self._encode([r.data for r in records])

    def embed_query(self, text: str) -> np.ndarray:
        return self._encode([text])
