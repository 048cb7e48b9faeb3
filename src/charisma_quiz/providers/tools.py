"""
Format converters for structured-output schemas.

Each provider API spells "fill this JSON schema" differently; these helpers
turn a ToolDefinition into the shape each one expects.
"""

from typing import Dict, Any, List, Optional
from .base import ToolDefinition, ToolCallError


def to_anthropic_tool(tool: ToolDefinition) -> Dict[str, Any]:
    """Convert ToolDefinition to Anthropic's tool format."""
    return {
        "name": tool.name,
        "description": tool.description,
        "input_schema": tool.parameters
    }


def to_openai_tool(tool: ToolDefinition) -> Dict[str, Any]:
    """Convert ToolDefinition to OpenAI's tool format (also used by DeepSeek and Workers AI)."""
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters
        }
    }


# Keywords the Gemini response_schema (an OpenAPI subset) understands
_GEMINI_SCHEMA_KEYS = {"type", "properties", "items", "required", "description", "enum"}


def to_gemini_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strip a JSON Schema down to the subset Gemini accepts as response_schema.

    Keywords such as minimum/maximum/minItems are dropped recursively.
    """
    result: Dict[str, Any] = {}
    for key, value in schema.items():
        if key not in _GEMINI_SCHEMA_KEYS:
            continue
        if key == "properties":
            result[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            result[key] = to_gemini_schema(value)
        else:
            result[key] = value
    return result


def tools_to_anthropic(tools: List[ToolDefinition]) -> List[Dict[str, Any]]:
    """Convert list of tools to Anthropic format."""
    return [to_anthropic_tool(t) for t in tools]


def tools_to_openai(tools: List[ToolDefinition]) -> List[Dict[str, Any]]:
    """Convert list of tools to OpenAI format."""
    return [to_openai_tool(t) for t in tools]


def select_tool(tools: List[ToolDefinition], tool_choice: Optional[str]) -> ToolDefinition:
    """Pick the single schema a JSON-mode request can carry."""
    if not tools:
        raise ToolCallError("No schema supplied for structured output")
    if tool_choice and tool_choice not in ("auto", "any"):
        for tool in tools:
            if tool.name == tool_choice:
                return tool
        raise ToolCallError(f"Unknown schema requested: {tool_choice}")
    return tools[0]
