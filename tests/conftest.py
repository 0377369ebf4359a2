"""
Shared fixtures. Seeds a fake OPENAI_API_KEY so the app starts; nothing here
talks to OpenAI (LLM, embeddings and engine builders are patched per test).
"""

import os

os.environ.setdefault("OPENAI_API_KEY", "sk-test")

import pytest

from app.ingest.loader import Document
from app.services.vector_store import VectorIndex

VOCAB = ["zig", "jackson", "award", "bridge", "collapse", "ship", "sum"]


def fake_embed(texts: list[str]) -> list[list[float]]:
    """Bag-of-words over a tiny vocabulary, normalized (empty → unit vector on a spare axis)."""
    out = []
    for text in texts:
        words = text.lower().replace(".", " ").replace("?", " ").split()
        vec = [float(words.count(w)) for w in VOCAB] + [0.0]
        norm = sum(x * x for x in vec) ** 0.5
        if norm == 0:
            vec[-1], norm = 1.0, 1.0
        out.append([x / norm for x in vec])
    return out


@pytest.fixture
def documents() -> list[Document]:
    return [
        Document(text="Zig Jackson won an award for photography.", metadata={"source": "zig.txt"}),
        Document(text="The bridge collapse happened after a ship struck it.", metadata={"source": "bridge.txt"}),
    ]


@pytest.fixture
def index(documents) -> VectorIndex:
    return VectorIndex.from_documents(documents, embedder=fake_embed)


@pytest.fixture
def fake_embedder():
    return fake_embed
