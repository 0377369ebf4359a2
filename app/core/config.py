"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

from app.core.errors import ConfigurationError

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


# Server
PORT: int = _env_int("PORT", 3000)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
] or ["*"]

WELCOME_MESSAGE: str = "Welcome to the Llama Server!"

# Query pipeline: "router" (two sources behind a router) or "single" (one index over DATA_DIR)
QUERY_MODES: tuple[str, ...] = ("router", "single")
QUERY_MODE: str = os.getenv("QUERY_MODE", "router").strip().lower() or "router"
USE_AGENT: bool = _env_bool("USE_AGENT", True)
# Off by default: every request re-reads and re-indexes the documents
CACHE_INDEXES: bool = _env_bool("CACHE_INDEXES", False)

# Document directories (relative to the working directory)
DATA_DIR: str = os.getenv("DATA_DIR", "./data").strip() or "./data"
ENTERTAINMENT_DATA_DIR: str = (
    os.getenv("ENTERTAINMENT_DATA_DIR", "./data/entertainment").strip() or "./data/entertainment"
)
NEWS_DATA_DIR: str = os.getenv("NEWS_DATA_DIR", "./data/news").strip() or "./data/news"

ENTERTAINMENT_TITLE: str = "Zig Jackson - Wikipedia"
NEWS_TITLE: str = "The Francis Scott Key Bridge collapse"

# (directory, routing description) for each router source
ROUTER_SOURCES: list[tuple[str, str]] = [
    (ENTERTAINMENT_DATA_DIR, "Useful for questions about Zig Jackson"),
    (NEWS_DATA_DIR, "Useful for questions about the Francis Scott Key Bridge collapse"),
]

# Agent tool wrapping the query engine
QUERY_TOOL_NAME: str = "zig_jackson_and_francis_scott_key_bridge_collapse"
QUERY_TOOL_DESCRIPTION: str = (
    f"A tool that can answer questions about {ENTERTAINMENT_TITLE} and {NEWS_TITLE}"
)
SINGLE_QUERY_TOOL_NAME: str = "document_query_engine"
SINGLE_QUERY_TOOL_DESCRIPTION: str = "A tool that can answer questions about the loaded documents"

# Allowed file extensions for document loading
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md", ".csv", ".pdf", ".xlsx"})

# Chunking defaults (tuning these affects retrieval quality)
CHUNK_SIZE: int = 1024
CHUNK_OVERLAP: int = 20
SIMILARITY_TOP_K: int = _env_int("SIMILARITY_TOP_K", 2)

# OpenAI (LLM + embeddings)
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small").strip() or "text-embedding-3-small"
)
EMBED_BATCH_SIZE: int = 64

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0

# Agent loop
MAX_AGENT_ROUNDS: int = 10
AGENT_MAX_TOKENS: int = 512
SYNTHESIS_MAX_TOKENS: int = 512


def require_openai_key() -> str:
    """
    Return the OpenAI API key from the environment (re-read on every call so the
    startup check sees the live environment). Raises ConfigurationError if absent.
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise ConfigurationError("No OpenAI API key provided")
    return key


def require_query_mode() -> str:
    """Return QUERY_MODE if it names a known pipeline. Raises ConfigurationError otherwise."""
    if QUERY_MODE not in QUERY_MODES:
        raise ConfigurationError(f"Unknown QUERY_MODE {QUERY_MODE!r}; expected 'single' or 'router'")
    return QUERY_MODE
