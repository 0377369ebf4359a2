"""
Vector store: in-memory vector index over document nodes.

Responsibility: Split documents into nodes, embed them (OpenAI), and answer
top-k cosine-similarity searches with numpy. Lives for as long as its owner
keeps it; nothing is persisted.
"""

import logging
from typing import Callable

import numpy as np

from app.core.config import CHUNK_OVERLAP, CHUNK_SIZE, SIMILARITY_TOP_K
from app.ingest.loader import Document
from app.services.embeddings import embed_texts
from app.services.query_engine import RetrieverQueryEngine
from app.services.text_processing import split_documents

logger = logging.getLogger(__name__)

Embedder = Callable[[list[str]], list[list[float]]]


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return matrix / norms


class VectorIndex:
    """Nodes with a row-normalized embedding matrix, searched by cosine similarity."""

    def __init__(self, nodes: list[dict], embeddings: list[list[float]], embedder: Embedder | None = None) -> None:
        if len(nodes) != len(embeddings):
            raise ValueError(f"nodes ({len(nodes)}) and embeddings ({len(embeddings)}) differ in length")
        self.nodes = nodes
        self.embeddings = (
            _unit_rows(np.asarray(embeddings, dtype=np.float64)) if nodes else np.empty((0, 0))
        )
        self._embed = embedder or embed_texts

    @classmethod
    def from_documents(
        cls,
        documents: list[Document],
        embedder: Embedder | None = None,
        chunk_size: int = CHUNK_SIZE,
        overlap: int = CHUNK_OVERLAP,
    ) -> "VectorIndex":
        """Chunk and embed documents into a new index."""
        embedder = embedder or embed_texts
        nodes = split_documents(documents, chunk_size=chunk_size, overlap=overlap)
        embeddings = embedder([n["text"] for n in nodes]) if nodes else []
        logger.info("[vector_store:from_documents] OUT documents=%d nodes=%d", len(documents), len(nodes))
        return cls(nodes, embeddings, embedder)

    def __len__(self) -> int:
        return len(self.nodes)

    def search(self, query: str, top_k: int = SIMILARITY_TOP_K) -> list[dict]:
        """
        Embed query and return the top_k nodes by cosine similarity, best first.
        Each result is the node dict plus "score". Equal scores keep node order.
        """
        logger.info("[vector_store:search] IN  query=%r top_k=%d nodes=%d", query, top_k, len(self.nodes))
        if not query or not query.strip() or not self.nodes or top_k <= 0:
            return []
        vectors = self._embed([query.strip()])
        if not vectors:
            logger.warning("[vector_store:search] embedder returned no vector")
            return []
        qvec = _unit_rows(np.asarray(vectors[:1], dtype=np.float64))[0]
        scores = self.embeddings @ qvec
        order = np.argsort(-scores, kind="stable")[:top_k]
        results = [{**self.nodes[i], "score": float(scores[i])} for i in order]
        logger.info("[vector_store:search] OUT results=%d sources=%s scores=%s",
                    len(results),
                    [r["metadata"].get("source") for r in results],
                    [round(r["score"], 4) for r in results])
        return results

    def as_query_engine(self, top_k: int = SIMILARITY_TOP_K) -> RetrieverQueryEngine:
        return RetrieverQueryEngine(self, top_k=top_k)
