"""
Agentic mode: OpenAI tool-calling loop over a set of FunctionTools.
"""

import json
import logging

from app.agent.llm import chat, chat_with_tools
from app.agent.tools import FunctionTool, execute_tool
from app.core.config import AGENT_MAX_TOKENS, MAX_AGENT_ROUNDS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant with access to a set of tools. Use the document tool for questions "
    "about the indexed documents and the arithmetic tool for sums. Provide a clear final answer once "
    "you have the information you need."
)


def run_agent(
    message: str,
    tools: list[FunctionTool],
    max_rounds: int = MAX_AGENT_ROUNDS,
) -> dict:
    """
    Run the tool-calling loop until the model answers without tool calls.

    Returns {"answer": str, "tools_used": list[str]}. After max_rounds of tool
    calls the model is asked once more, without tools, for a final answer.
    """
    if not message or not str(message).strip():
        raise ValueError("message is required")
    logger.info("[run_agent] START message=%r tools=%s", message, [t.name for t in tools])

    messages: list[dict] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": message},
    ]
    schemas = [t.to_openai() for t in tools]
    tools_used: list[str] = []

    for round_no in range(max_rounds):
        content, tool_calls = chat_with_tools(messages, schemas, max_tokens=AGENT_MAX_TOKENS)
        if not tool_calls:
            answer = (content or "").strip()
            logger.info("[run_agent] END rounds=%d tools_used=%s answer_len=%d",
                        round_no + 1, tools_used, len(answer))
            return {"answer": answer, "tools_used": tools_used}

        messages.append({
            "role": "assistant",
            "content": content or "",
            "tool_calls": [
                {"id": tc["id"], "type": "function",
                 "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})}}
                for tc in tool_calls
            ],
        })
        for tc in tool_calls:
            name = tc.get("name", "")
            result = execute_tool(tools, name, tc.get("arguments") or {})
            logger.info("[run_agent] tool=%s result_len=%d", name, len(result))
            tools_used.append(name)
            messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})

    logger.warning("[run_agent] max_rounds=%d reached; asking for a final answer", max_rounds)
    answer = chat(messages, max_tokens=AGENT_MAX_TOKENS)
    return {"answer": answer, "tools_used": tools_used}
