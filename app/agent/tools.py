"""
Agent tools: definitions and execution for tool-calling mode.

Tools: the document query engine (exposed per request) and sum_numbers.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class FunctionTool:
    """A callable exposed to the model in OpenAI function-calling format."""

    name: str
    description: str
    parameters: dict[str, Any]
    fn: Callable[..., Any]

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def call(self, arguments: dict[str, Any]) -> str:
        result = self.fn(**(arguments or {}))
        if isinstance(result, str):
            return result
        return json.dumps(result, default=str)


def sum_numbers(a: float, b: float) -> float:
    return a + b


SUM_NUMBERS_TOOL = FunctionTool(
    name="sumNumbers",
    description="Use this function to sum two numbers",
    parameters={
        "type": "object",
        "properties": {
            "a": {"type": "number", "description": "The first number"},
            "b": {"type": "number", "description": "The second number"},
        },
        "required": ["a", "b"],
    },
    fn=sum_numbers,
)


def query_engine_tool(query_engine, name: str, description: str) -> FunctionTool:
    """Expose a query engine as a tool taking one natural-language input."""

    def _query(input: str) -> str:
        return str(query_engine.query(input))

    return FunctionTool(
        name=name,
        description=description,
        parameters={
            "type": "object",
            "properties": {
                "input": {
                    "type": "string",
                    "description": "The natural-language question to ask the documents",
                }
            },
            "required": ["input"],
        },
        fn=_query,
    )


def execute_tool(tools: list[FunctionTool], name: str, arguments: dict[str, Any]) -> str:
    """
    Execute a tool by name with the given arguments. Returns a string result for the LLM;
    unknown tools and tool failures are reported as text so the model can recover.
    """
    args = arguments or {}
    logger.info("[tools] execute_tool name=%r arguments=%r", name, args)
    for tool in tools:
        if tool.name == name:
            try:
                return tool.call(args)
            except Exception as e:
                logger.warning("[tools] %s failed: %s", name, e)
                return f"Error: {e}"
    return f"Unknown tool: {name}"
