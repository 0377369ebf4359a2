"""
Query engines: answer a natural-language query against an indexed document set.

RetrieverQueryEngine retrieves the top-k nodes from a VectorIndex and has the
LLM synthesize an answer from them. Routing between engines lives in
app.agent.graph.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from app.agent.llm import complete
from app.core.config import SIMILARITY_TOP_K, SYNTHESIS_MAX_TOKENS

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "Empty Response"

QA_PROMPT = """Context information is below.
---------------------
{context}
---------------------
Given the context information and not prior knowledge, answer the query.
Query: {query}
Answer: """


@dataclass
class EngineResponse:
    """Answer text plus the nodes it was synthesized from."""

    response: str
    source_nodes: list[dict] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return self.response


class QueryEngine(Protocol):
    def query(self, query: str) -> EngineResponse: ...


def _normalize_context_for_llm(text: str) -> str:
    """Replace PDF bullet/control chars (e.g. \\x7f) with space so the LLM sees readable text."""
    if not text:
        return text
    return text.replace("\x7f", " ").replace("\x00", " ").strip()


class RetrieverQueryEngine:
    """Retrieve from a vector index, then synthesize with the LLM."""

    def __init__(self, index, top_k: int = SIMILARITY_TOP_K) -> None:
        self.index = index
        self.top_k = top_k

    def retrieve(self, query: str) -> list[dict]:
        return self.index.search(query, top_k=self.top_k)

    def query(self, query: str) -> EngineResponse:
        logger.info("[query_engine:query] IN  query=%r top_k=%d", query, self.top_k)
        nodes = self.retrieve(query)
        if not nodes:
            logger.info("[query_engine:query] OUT no nodes retrieved")
            return EngineResponse(response=EMPTY_RESPONSE)
        context = _normalize_context_for_llm("\n\n".join(n.get("text") or "" for n in nodes))
        prompt = QA_PROMPT.format(context=context, query=query)
        answer = complete(prompt, max_tokens=SYNTHESIS_MAX_TOKENS).strip()
        logger.info("[query_engine:query] OUT answer_len=%d sources=%s",
                    len(answer), [n["metadata"].get("source") for n in nodes])
        return EngineResponse(response=answer or EMPTY_RESPONSE, source_nodes=nodes)


@dataclass
class QueryEngineTool:
    """A query engine paired with the description used to route (or offer it as a tool)."""

    query_engine: QueryEngine
    description: str
