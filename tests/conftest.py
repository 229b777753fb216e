"""Shared fixtures: stub provider, stub tools and a temporary plugin store."""

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from modai.managers import PluginStore, ToolManager
from modai.protocol import ConversationTurn, ToolMetadata, ToolResult
from modai.tools.base import Tool
from modai.utils.event_log import EventLog


def directive(tool: str, **arguments: Any) -> str:
    return json.dumps({"protocol": "modai", "tool": tool, "arguments": arguments})


class StubProvider:
    """Replays canned responses and records every call it receives."""

    def __init__(self, responses: Union[Sequence[str], Callable[[int], str]]):
        self.responses = responses
        self.calls: List[Dict[str, Any]] = []

    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        self.calls.append({"message": message, "system_prompt": system_prompt, "history": list(history)})
        if callable(self.responses):
            return self.responses(len(self.calls))
        return self.responses[len(self.calls) - 1]


class StubTool(Tool):
    """Records its invocations and answers with ``result`` (or raises ``error``)."""

    def __init__(self, name: str, result: Optional[ToolResult] = None, error: Optional[Exception] = None):
        self.metadata = ToolMetadata(name=name, description=f"Stub {name}", example=f"{name}(x=1)")
        self.result = result if result is not None else ToolResult.ok({"echo": name})
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def execute(self, args: Dict[str, Any]) -> ToolResult:
        self.calls.append(args)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def event_log() -> EventLog:
    return EventLog(keep=True)


@pytest.fixture
def echo_tool() -> StubTool:
    return StubTool("echo")


@pytest.fixture
def registry(echo_tool) -> ToolManager:
    return ToolManager([echo_tool])


@pytest.fixture
def store(tmp_path) -> PluginStore:
    return PluginStore(tmp_path / "plugins")
