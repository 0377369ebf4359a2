"""
LangGraph router: select_engine → run_engine → END.

The LLM picks one of several query engines from their descriptions (single
selection); the chosen engine answers the query.
"""

import logging
import re
from typing import TypedDict

from langgraph.graph import END, StateGraph

from app.agent.llm import complete
from app.services.query_engine import EMPTY_RESPONSE, EngineResponse, QueryEngineTool

logger = logging.getLogger(__name__)

SELECTOR_PROMPT = """Some choices are given below. It is provided in a numbered list (1 to {num_choices}), where each item in the list corresponds to a summary.
---------------------
{choices}
---------------------
Using only the choices above and not prior knowledge, return the choice that is most relevant to the question: '{query}'
Answer with the choice number only, followed by a short reason on the next line.
"""

_FIRST_INT = re.compile(r"\d+")


class RouterState(TypedDict):
    query: str
    selected: int
    reason: str
    response: EngineResponse | None


def parse_selection(raw: str, num_choices: int) -> tuple[int, str]:
    """
    Return (zero-based index, reason) from a selector answer. Falls back to the
    first choice when no number in range is found.
    """
    match = _FIRST_INT.search(raw or "")
    if match:
        choice = int(match.group()) - 1
        if 0 <= choice < num_choices:
            reason = (raw[match.end():] or "").strip(" .:-\n")
            return choice, reason
    logger.warning("[graph:parse_selection] unusable selection %r; defaulting to choice 1", raw)
    return 0, "default"


class RouterQueryEngine:
    """Routes each query to exactly one of its engines."""

    def __init__(self, query_engine_tools: list[QueryEngineTool]) -> None:
        if not query_engine_tools:
            raise ValueError("RouterQueryEngine needs at least one query engine tool")
        self.tools = query_engine_tools
        self._graph = self._build_graph()

    @classmethod
    def from_defaults(cls, query_engine_tools: list[QueryEngineTool]) -> "RouterQueryEngine":
        return cls(query_engine_tools)

    def _select_engine(self, state: RouterState) -> dict:
        """Node 1: LLM single selector over the numbered engine descriptions."""
        query = state.get("query") or ""
        if len(self.tools) == 1:
            return {"selected": 0, "reason": "only choice"}
        choices = "\n".join(f"({i + 1}) {t.description}" for i, t in enumerate(self.tools))
        prompt = SELECTOR_PROMPT.format(num_choices=len(self.tools), choices=choices, query=query)
        raw = complete(prompt, max_tokens=64)
        logger.info("[graph:select_engine] llm_raw=%r", raw)
        selected, reason = parse_selection(raw, len(self.tools))
        logger.info("[graph:select_engine] OUT selected=%d description=%r",
                    selected + 1, self.tools[selected].description)
        return {"selected": selected, "reason": reason}

    def _run_engine(self, state: RouterState) -> dict:
        """Node 2: Query the selected engine."""
        selected = state.get("selected") or 0
        tool = self.tools[selected]
        logger.info("[graph:run_engine] IN  engine=%d query=%r", selected + 1, state.get("query"))
        response = tool.query_engine.query(state.get("query") or "")
        response.metadata["selected"] = selected
        response.metadata["reason"] = state.get("reason", "")
        return {"response": response}

    def _build_graph(self):
        graph = StateGraph(RouterState)
        graph.add_node("select_engine", self._select_engine)
        graph.add_node("run_engine", self._run_engine)
        graph.set_entry_point("select_engine")
        graph.add_edge("select_engine", "run_engine")
        graph.add_edge("run_engine", END)
        return graph.compile()

    def query(self, query: str) -> EngineResponse:
        logger.info("[router:query] START query=%r engines=%d", query, len(self.tools))
        initial: RouterState = {"query": query, "selected": 0, "reason": "", "response": None}
        final = self._graph.invoke(initial)
        response = final.get("response")
        if response is None:
            return EngineResponse(response=EMPTY_RESPONSE)
        logger.info("[router:query] END selected=%s answer_len=%d",
                    response.metadata.get("selected"), len(response.response))
        return response
