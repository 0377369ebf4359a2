"""
Agent LLM: OpenAI chat completions for answer synthesis, routing and tool calling.
"""

import json
import logging
from typing import Any

from openai import OpenAI

from app.core.config import LLM_API_TIMEOUT, OPENAI_LLM_MODEL, require_openai_key

logger = logging.getLogger(__name__)


def get_client() -> OpenAI:
    """OpenAI client for the configured key. Raises ConfigurationError when the key is missing."""
    return OpenAI(api_key=require_openai_key(), timeout=LLM_API_TIMEOUT)


def complete(prompt: str, max_tokens: int = 256) -> str:
    """Single-turn completion. Returns generated text (empty string if the model returned none)."""
    logger.info("[llm:complete] IN  prompt_len=%d max_tokens=%d", len(prompt), max_tokens)
    logger.debug("[llm:complete] prompt_sample=%r", prompt[:500])
    out = chat([{"role": "user", "content": prompt}], max_tokens=max_tokens)
    logger.info("[llm:complete] OUT response_len=%d", len(out))
    return out


def chat(messages: list[dict[str, Any]], max_tokens: int = 512) -> str:
    """Chat completion without tools. Returns the assistant text."""
    response = get_client().chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    return (msg.content or "").strip()


def chat_with_tools(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]],
    max_tokens: int = 512,
) -> tuple[str | None, list[dict[str, Any]] | None]:
    """
    Call OpenAI chat with tools. Used by the agent loop.
    Returns (content, tool_calls). If tool_calls is non-empty, caller should execute
    them and call again with tool results; if content is set and no tool_calls, that's the final answer.
    Tool call arguments are decoded from JSON; undecodable arguments become {}.
    """
    response = get_client().chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        tools=tools,
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    if not msg:
        return None, None
    content = (getattr(msg, "content", None) or "").strip() or None
    raw_tool_calls = getattr(msg, "tool_calls", None) or []
    tool_calls = []
    for tc in raw_tool_calls:
        fid = getattr(tc, "id", None) or ""
        fn = getattr(tc, "function", None)
        if not fn:
            continue
        fname = getattr(fn, "name", None) or ""
        fargs = getattr(fn, "arguments", None) or "{}"
        try:
            args = json.loads(fargs) if isinstance(fargs, str) else fargs
        except json.JSONDecodeError:
            logger.warning("[llm:chat_with_tools] bad arguments for %s: %r", fname, fargs)
            args = {}
        tool_calls.append({"id": fid, "name": fname, "arguments": args})
    if tool_calls:
        logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t["name"] for t in tool_calls])
    if content:
        logger.info("[llm:chat_with_tools] OUT content_len=%d", len(content))
    return content, tool_calls if tool_calls else None
