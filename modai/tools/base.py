"""Tool contract and the wrapper for module-style tools"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable

from modai.exceptions import ToolArgumentError
from modai.protocol import ToolMetadata, ToolResult


class Tool(ABC):
    """Something a directive can name. ``execute`` returns failures, it does not raise them."""

    metadata: ToolMetadata

    @property
    def name(self) -> str:
        return self.metadata.name

    @abstractmethod
    def execute(self, args: Dict[str, Any]) -> ToolResult:
        ...


class FunctionTool(Tool):
    """Adapts a module exposing ``TOOL_DEF`` and ``execute(args)`` to the Tool contract"""

    def __init__(self, definition: Dict[str, Any], func: Callable[[Dict[str, Any]], Any]):
        self.metadata = ToolMetadata(
            name=definition["name"],
            description=definition.get("description", ""),
            example=definition.get("example", ""),
        )
        self.func = func

    def execute(self, args: Dict[str, Any]) -> ToolResult:
        try:
            return ToolResult.coerce(self.func(args))
        except ToolArgumentError as e:
            return ToolResult.fail(str(e))


def require_args(args: Dict[str, Any], required: Iterable[str]) -> None:
    for key in required:
        if key not in args:
            raise ToolArgumentError(key)
