"""
Agent service: build the query pipeline and answer one query.

Responsibility: Load and index the configured documents, build a single or
router query engine, optionally wrap it in the tool-calling agent, and return
the answer text. Called by the API; no HTTP here.
"""

import logging
import threading

from app.agent.graph import RouterQueryEngine
from app.agent.runner import run_agent
from app.agent.tools import SUM_NUMBERS_TOOL, query_engine_tool
from app.core import config
from app.core.errors import ConfigurationError
from app.ingest.loader import load_directory
from app.services.query_engine import QueryEngine, QueryEngineTool
from app.services.vector_store import VectorIndex

logger = logging.getLogger(__name__)

AGENT_SUFFIX = " Use a tool."

_cache: dict[str, QueryEngine] = {}
_cache_lock = threading.Lock()


def build_index(directory: str) -> VectorIndex:
    documents = load_directory(directory)
    return VectorIndex.from_documents(documents)


def build_query_engine(mode: str | None = None) -> QueryEngine:
    """
    Build the query engine for mode ("single" or "router"), re-reading and
    re-indexing the documents from disk.
    """
    mode = (mode or config.QUERY_MODE).strip().lower()
    logger.info("[agent_service:build_query_engine] IN  mode=%s", mode)
    if mode == "single":
        return build_index(config.DATA_DIR).as_query_engine(top_k=config.SIMILARITY_TOP_K)
    if mode == "router":
        tools = [
            QueryEngineTool(
                query_engine=build_index(directory).as_query_engine(top_k=config.SIMILARITY_TOP_K),
                description=description,
            )
            for directory, description in config.ROUTER_SOURCES
        ]
        return RouterQueryEngine.from_defaults(query_engine_tools=tools)
    raise ConfigurationError(f"Unknown QUERY_MODE {mode!r}; expected 'single' or 'router'")


def get_query_engine(mode: str | None = None) -> QueryEngine:
    """Return a fresh engine, or the memoized one when CACHE_INDEXES is on."""
    if not config.CACHE_INDEXES:
        return build_query_engine(mode)
    key = (mode or config.QUERY_MODE).strip().lower()
    with _cache_lock:
        if key not in _cache:
            _cache[key] = build_query_engine(key)
            logger.info("[agent_service:get_query_engine] cached engine for mode=%s", key)
        return _cache[key]


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()


def answer_query(query: str, mode: str | None = None, use_agent: bool | None = None) -> str:
    """
    Answer query with the configured pipeline and return the response text.
    With the agent on, the query is sent as "<query> Use a tool." alongside the
    query-engine tool and the sum tool.
    """
    if not query or not str(query).strip():
        raise ValueError("query is required")
    mode = (mode or config.QUERY_MODE).strip().lower()
    use_agent = config.USE_AGENT if use_agent is None else use_agent
    logger.info("[agent_service:answer_query] IN  query=%r mode=%s use_agent=%s", query, mode, use_agent)

    engine = get_query_engine(mode)
    if not use_agent:
        answer = str(engine.query(query))
        logger.info("[agent_service:answer_query] OUT (engine) answer_len=%d", len(answer))
        return answer

    if mode == "router":
        name, description = config.QUERY_TOOL_NAME, config.QUERY_TOOL_DESCRIPTION
    else:
        name, description = config.SINGLE_QUERY_TOOL_NAME, config.SINGLE_QUERY_TOOL_DESCRIPTION
    tools = [query_engine_tool(engine, name, description), SUM_NUMBERS_TOOL]
    result = run_agent(f"{query}{AGENT_SUFFIX}", tools)
    logger.info("[agent_service:answer_query] OUT (agent) tools_used=%s answer_len=%d",
                result["tools_used"], len(result["answer"]))
    return result["answer"]
