"""Wire-level types shared by the extractor, the loop and the tools.

A directive is the JSON object a model embeds in its reply to ask for a tool:

    {"protocol":"modai","tool":"<name>","arguments":{...}}

Everything here is plain data. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

PROTOCOL = "modai"

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Directive:
    """A tool call recovered from model output."""

    tool: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    protocol: str = PROTOCOL

    @classmethod
    def from_mapping(cls, obj: Any) -> Optional["Directive"]:
        """Build a directive from a parsed object, or None if it does not qualify."""
        if not isinstance(obj, Mapping):
            return None
        if obj.get("protocol") != PROTOCOL:
            return None
        tool = obj.get("tool")
        if not isinstance(tool, str) or not tool:
            return None
        arguments = obj.get("arguments")
        if not isinstance(arguments, Mapping):
            return None
        return cls(tool=tool, arguments=dict(arguments))

    def to_dict(self) -> Dict[str, Any]:
        return {"protocol": self.protocol, "tool": self.tool, "arguments": dict(self.arguments)}


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool invocation."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, data: Any = None) -> "ToolResult":
        return cls(success=False, data=data, error=error)

    @classmethod
    def coerce(cls, value: Any) -> "ToolResult":
        """Normalize whatever a tool returned into a ToolResult.

        Plugins may return a ToolResult, a dict carrying a boolean ``success``
        key, or any other payload (treated as successful data).
        """
        if isinstance(value, ToolResult):
            return value
        if isinstance(value, Mapping) and isinstance(value.get("success"), bool):
            if value["success"]:
                return cls.ok(dict(value))
            error = value.get("error") or value.get("stderr") or value.get("output") or "Tool reported failure"
            return cls.fail(str(error), data=dict(value))
        return cls.ok(value)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ToolMetadata:
    """What the system prompt tells the model about a tool."""

    name: str
    description: str
    example: str = ""


@dataclass(frozen=True)
class Rejection:
    """A candidate object the extractor dropped, and the tier that gave up on it."""

    start: int
    end: int
    candidate: str
    tier: str
    reason: str

    @property
    def span(self) -> Tuple[int, int]:
        return self.start, self.end
