"""
Embeddings: OpenAI embeddings API, batched and normalized for cosine similarity.
"""

import logging

import numpy as np
from openai import OpenAI

from app.core.config import (
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    OPENAI_EMBED_MODEL,
    require_openai_key,
)

logger = logging.getLogger(__name__)


def _normalize(vec: list[float]) -> list[float]:
    arr = np.asarray(vec, dtype=np.float64)
    norm = np.linalg.norm(arr)
    if norm == 0:
        norm = 1.0
    return (arr / norm).tolist()


def embed_texts(texts: list[str], batch_size: int | None = None) -> list[list[float]]:
    """
    Batch embed texts with the configured OpenAI embedding model.

    Returns one unit-length vector per input text, in input order.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    client = OpenAI(api_key=require_openai_key(), timeout=EMBED_API_TIMEOUT)
    all_embeddings: list[list[float]] = []
    for i in range(0, len(texts), batch_size):
        batch = texts[i : i + batch_size]
        response = client.embeddings.create(model=OPENAI_EMBED_MODEL, input=batch)
        # API returns items with an index; keep input order
        for item in sorted(response.data, key=lambda d: d.index):
            all_embeddings.append(_normalize(list(item.embedding)))
    logger.info("[embeddings:embed_texts] OUT texts=%d model=%s", len(texts), OPENAI_EMBED_MODEL)
    return all_embeddings


def embed_query(text: str) -> list[float]:
    vectors = embed_texts([text])
    return vectors[0] if vectors else []
