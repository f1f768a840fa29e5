from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Dict, List, Tuple

import faiss
import numpy as np

from profile_rag.config import Settings
from profile_rag.embeddings.embedder import Embedder
from profile_rag.logger import get_logger
from profile_rag.models import IndexRecord, ProviderHit

log = get_logger()


class LocalIndexProvider:
    """
    Self-hosted index provider:
    - SQLite: record id, embedded text, metadata (JSON)
    - FAISS:  IndexIDMap2 over inner product, keyed by SQLite row id

    Upserting an id that already exists replaces its vector and metadata.
    Blocking FAISS/SQLite/embedding work runs in a worker thread.
    """

    def __init__(self, sqlite_path: Path, faiss_index_path: Path, embedder: Embedder):
        self.sqlite_path = Path(sqlite_path)
        self.faiss_index_path = Path(faiss_index_path)
        self.embedder = embedder

        self.index: faiss.IndexIDMap2 | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocalIndexProvider":
        return cls(
            sqlite_path=Path(settings.sqlite_path),
            faiss_index_path=Path(settings.faiss_index_path),
            embedder=Embedder(model_name=settings.embedding_model_name),
        )

    # -----------------------------------------
    # internals
    # -----------------------------------------

    def _connect(self) -> sqlite3.Connection:
        self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.sqlite_path), check_same_thread=False)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS records (
                row_id INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT UNIQUE NOT NULL,
                data TEXT,
                metadata TEXT
            )
            """
        )
        return conn

    def _ensure_index_loaded(self):
        if self.index is not None:
            return
        if self.faiss_index_path.exists():
            log.debug("Loading FAISS index from %s", self.faiss_index_path)
            self.index = faiss.read_index(str(self.faiss_index_path))

    def _persist(self):
        self.faiss_index_path.parent.mkdir(parents=True, exist_ok=True)
        faiss.write_index(self.index, str(self.faiss_index_path))

    # -----------------------------------------
    # upsert
    # -----------------------------------------

    def _upsert_sync(self, records: List[IndexRecord]):
        # one vector per id: a repeated id in the batch keeps its last record
        records = list({r.id: r for r in records}.values())
        embeddings = self.embedder.embed_records(records)

        with self._lock:
            self._ensure_index_loaded()
            if self.index is None:
                self.index = faiss.IndexIDMap2(faiss.IndexFlatIP(embeddings.shape[1]))

            conn = self._connect()
            try:
                cur = conn.cursor()
                row_ids: List[int] = []
                replaced: List[int] = []
                for rec in records:
                    meta = json.dumps(rec.metadata, ensure_ascii=False)
                    cur.execute("SELECT row_id FROM records WHERE id = ?", (rec.id,))
                    row = cur.fetchone()
                    if row:
                        cur.execute(
                            "UPDATE records SET data = ?, metadata = ? WHERE row_id = ?",
                            (rec.data, meta, row[0]),
                        )
                        replaced.append(int(row[0]))
                        row_ids.append(int(row[0]))
                    else:
                        cur.execute(
                            "INSERT INTO records (id, data, metadata) VALUES (?, ?, ?)",
                            (rec.id, rec.data, meta),
                        )
                        row_ids.append(int(cur.lastrowid))
                conn.commit()
            finally:
                conn.close()

            if replaced:
                self.index.remove_ids(np.array(replaced, dtype="int64"))
            self.index.add_with_ids(embeddings, np.array(row_ids, dtype="int64"))
            self._persist()

        log.info(
            "Local index upsert: %d records (%d replaced), %d vectors total",
            len(records),
            len(replaced),
            self.index.ntotal,
        )

    async def upsert(self, records: List[IndexRecord]) -> None:
        await asyncio.to_thread(self._upsert_sync, records)

    # -----------------------------------------
    # query
    # -----------------------------------------

    def _fetch_rows(self, row_ids: List[int]) -> Dict[int, Tuple[str, str]]:
        conn = self._connect()
        try:
            placeholders = ",".join(["?"] * len(row_ids))
            rows = conn.execute(
                f"SELECT row_id, id, metadata FROM records WHERE row_id IN ({placeholders})",
                row_ids,
            ).fetchall()
        finally:
            conn.close()
        return {int(rid): (cid, meta) for rid, cid, meta in rows}

    def _query_sync(self, data: str, top_k: int, include_metadata: bool) -> List[ProviderHit]:
        with self._lock:
            self._ensure_index_loaded()
            if self.index is None or self.index.ntotal == 0:
                return []

            q_vec = self.embedder.embed_query(data)
            D, I = self.index.search(q_vec, top_k)

        found = [(float(score), int(rid)) for score, rid in zip(D[0], I[0]) if rid != -1]
        if not found:
            return []

        rows = self._fetch_rows([rid for _, rid in found])

        hits: List[ProviderHit] = []
        for score, rid in found:
            if rid not in rows:
                continue
            cid, meta = rows[rid]
            hits.append(
                ProviderHit(
                    id=cid,
                    score=score,
                    metadata=json.loads(meta) if include_metadata and meta else None,
                )
            )
        return hits

    async def query(self, data: str, top_k: int, include_metadata: bool = True) -> List[ProviderHit]:
        return await asyncio.to_thread(self._query_sync, data, top_k, include_metadata)

    async def close(self) -> None:
        # connections are short-lived; only drop the in-memory index
        self.index = None
