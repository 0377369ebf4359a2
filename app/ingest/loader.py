# Directory document loader. No embeddings, no chunking.
# Supports .txt, .md, .csv, .pdf, .xlsx. Single place for "file/bytes → text".

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from app.core.config import ALLOWED_EXTENSIONS
from app.core.errors import DocumentsNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Document:
    """Text of one loaded file plus metadata (source = file name)."""

    text: str
    metadata: dict = field(default_factory=dict)

    @property
    def source(self) -> str:
        return self.metadata.get("source", "")


def bytes_to_text(raw: bytes, filename: str) -> str:
    """
    Convert raw file bytes to text by extension. Plain-text formats are decoded
    as UTF-8; PDFs and spreadsheets go through pypdf and pandas.
    """
    ext = Path(filename).suffix.lower() if filename else ""
    if ext == ".pdf":
        return _read_pdf(raw)
    if ext == ".xlsx":
        return _read_excel(raw)
    return raw.decode("utf-8", errors="replace")


def _read_pdf(raw: bytes) -> str:
    from pypdf import PdfReader
    reader = PdfReader(io.BytesIO(raw))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _read_excel(raw: bytes) -> str:
    import pandas as pd
    df = pd.read_excel(io.BytesIO(raw), sheet_name=None, header=None)
    parts = []
    for sheet_df in df.values():
        parts.append(sheet_df.astype(str).to_csv(sep=" ", index=False, header=False))
    return "\n\n".join(parts)


def load_directory(directory: str | Path) -> list[Document]:
    """
    Read every supported file under directory (recursively, sorted by path).

    Unreadable or empty files are skipped with a warning.

    Raises:
        DocumentsNotFoundError: If the directory does not exist or yields no documents.
    """
    root = Path(directory)
    logger.info("[loader:load_directory] IN  directory=%s", root)
    if not root.is_dir():
        raise DocumentsNotFoundError(str(root), "directory not found")

    documents: list[Document] = []
    for path in sorted(p for p in root.rglob("*") if p.is_file()):
        if path.suffix.lower() not in ALLOWED_EXTENSIONS:
            logger.debug("[loader:load_directory] skip unsupported %s", path.name)
            continue
        try:
            text = bytes_to_text(path.read_bytes(), path.name)
        except Exception as e:
            logger.warning("[loader:load_directory] failed to read %s: %s", path, e)
            continue
        if not text.strip():
            logger.warning("[loader:load_directory] empty document %s", path)
            continue
        documents.append(Document(text=text, metadata={"source": path.name, "path": str(path)}))

    if not documents:
        raise DocumentsNotFoundError(str(root))
    logger.info("[loader:load_directory] OUT documents=%d sources=%s",
                len(documents), [d.source for d in documents])
    return documents
