"""
Text processing for indexing: cleaning, chunking, and document → node splitting.

Nodes are plain dicts: {"text": str, "metadata": {"source": str, "chunk_id": int}}.
"""

import logging
import re
import unicodedata

from app.ingest.loader import Document

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def clean_text(text: str) -> str:
    """
    Normalize raw document text: NFKC, strip each line, drop consecutive
    duplicate lines, and keep at most one blank line between paragraphs.
    """
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    out: list[str] = []
    previous: str | None = None
    for line in (raw.strip() for raw in text.splitlines()):
        if line == previous:
            continue
        previous = line
        if line == "" and (not out or out[-1] == ""):
            continue
        out.append(line)
    return "\n".join(out).strip()


def _tail_for_overlap(parts: list[str], overlap: int) -> list[str]:
    """Trailing pieces of parts whose joined length (with separators) fits in overlap."""
    tail: list[str] = []
    size = 0
    for piece in reversed(parts):
        if size + len(piece) + 1 > overlap:
            break
        tail.append(piece)
        size += len(piece) + 1
    tail.reverse()
    return tail


def _joined_len(parts: list[str]) -> int:
    return sum(len(p) for p in parts) + max(0, len(parts) - 1)


def chunk_text(text: str, chunk_size: int = 1024, overlap: int = 20) -> list[str]:
    """
    Split text into sentence-aware chunks of at most chunk_size characters.

    Consecutive chunks share up to overlap characters of whole sentences (or
    words, for sentences longer than chunk_size). Words longer than chunk_size
    are cut at chunk boundaries.
    """
    if not text or not text.strip():
        return []
    text = text.strip()
    if len(text) <= chunk_size:
        return [text]

    units = [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]
    if not units:
        units = text.split()

    chunks: list[str] = []
    current: list[str] = []

    def flush() -> None:
        nonlocal current
        if current:
            chunks.append(" ".join(current))
            current = _tail_for_overlap(current, overlap)

    for unit in units:
        pieces = unit.split() if len(unit) > chunk_size else [unit]
        for piece in pieces:
            # A word longer than chunk_size fills what is left of the chunk, then whole chunks
            while len(piece) > chunk_size:
                room = chunk_size - _joined_len(current) - (1 if current else 0)
                if room <= 0:
                    flush()
                    current = []
                    room = chunk_size
                current.append(piece[:room])
                piece = piece[room:]
                flush()
            sep = 1 if current else 0
            if _joined_len(current) + sep + len(piece) > chunk_size:
                flush()
                # Overlap tail plus this piece can still overflow; start fresh then
                if _joined_len(current) + 1 + len(piece) > chunk_size:
                    current = []
            current.append(piece)

    if current:
        chunks.append(" ".join(current))

    return chunks


def split_documents(
    documents: list[Document], chunk_size: int = 1024, overlap: int = 20
) -> list[dict]:
    """
    Clean and chunk each document into nodes carrying source and chunk_id metadata.
    """
    nodes: list[dict] = []
    for doc in documents:
        chunks = chunk_text(clean_text(doc.text), chunk_size=chunk_size, overlap=overlap)
        for i, chunk in enumerate(chunks):
            nodes.append({
                "text": chunk,
                "metadata": {"source": doc.source, "chunk_id": i},
            })
        logger.info("[text_processing:split_documents] %s → %d chunks", doc.source, len(chunks))
    return nodes
