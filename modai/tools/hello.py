"""Hello tool"""
from typing import Any, Dict

from modai.protocol import ToolResult

TOOL_DEF = {
    "name": "hello",
    "description": "Returns a friendly hello message.",
    "example": "hello(name='world')",
}


def execute(args: Dict[str, Any]) -> ToolResult:
    name = args.get("name") or "world"
    return ToolResult.ok({"message": f"Hello, {name}! 👋"})
