"""Agentic loop: generate, extract directives, execute them, feed results back"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from modai.config import MAX_TURNS
from modai.managers import ConversationManager, ToolManager
from modai.parsers import DirectiveParser
from modai.protocol import Directive, Rejection, ToolResult
from modai.utils.event_log import EventLog
from .prompts import build_system_prompt, context_line, followup_message, initial_message

CANCELLED_ERROR = "Tool execution cancelled by user."


class LoopState(Enum):
    AWAITING_RESPONSE = "awaiting_response"
    EXTRACTING = "extracting"
    EXECUTING = "executing"
    BUILDING_FOLLOWUP = "building_followup"
    DONE = "done"
    ABORTED_MAX_TURNS = "aborted_max_turns"


@dataclass(frozen=True)
class ToolRun:
    directive: Directive
    result: ToolResult


@dataclass
class LoopOutcome:
    """
    What one ``handle_chat`` call ended with.

    ``response`` is the stripped final answer when ``state`` is DONE, and the
    last raw model response when the turn bound cut the loop short
    (``truncated`` is then True).
    """
    state: LoopState
    response: str
    turns: int
    tool_runs: List[ToolRun] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return self.state is LoopState.ABORTED_MAX_TURNS


class AgenticLoop:
    """
    Drives one conversation session against a provider and a tool registry.

    ``confirm(directive) -> bool`` gates each tool call when given;
    ``on_tool_result(directive, result)`` is called after every call so a
    front end can render progress. History is owned by this instance.
    """

    def __init__(self, provider, tools: ToolManager, system_prompt: Optional[str] = None,
                 max_turns: int = MAX_TURNS,
                 confirm: Optional[Callable[[Directive], bool]] = None,
                 on_tool_result: Optional[Callable[[Directive, ToolResult], None]] = None,
                 event_log: Optional[EventLog] = None):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.provider = provider
        self.tools = tools
        self._system_prompt = system_prompt
        self.max_turns = max_turns
        self.confirm = confirm
        self.on_tool_result = on_tool_result
        self.event_log = event_log or EventLog()
        self.conversation = ConversationManager()
        self.parser = DirectiveParser(on_reject=self._log_rejection)
        self.state = LoopState.AWAITING_RESPONSE

    @property
    def system_prompt(self) -> str:
        # Rebuilt on every call so tools installed mid-session are advertised
        return self._system_prompt or build_system_prompt(self.tools.list())

    def _log_rejection(self, rejection: Rejection):
        self.event_log.log_event("directive_rejected", {
            "tier": rejection.tier,
            "reason": rejection.reason,
            "span": list(rejection.span),
            "candidate": rejection.candidate[:500],
        })

    def _ask(self, message: str) -> str:
        """One provider call; history is what came before ``message``"""
        self.state = LoopState.AWAITING_RESPONSE
        response = self.provider.generate_response(message, self.system_prompt, self.conversation.get_turns())
        self.conversation.add_user_message(message)
        self.conversation.add_assistant_message(response)
        self.event_log.log_event("provider_response", {"content": response[:2000], "length": len(response)})
        return response

    def execute_directive(self, directive: Directive) -> ToolResult:
        """Resolve and run a single directive; never raises for tool failures"""
        tool = self.tools.get(directive.tool)
        if tool is None:
            return ToolResult.fail(f"Unknown tool: {directive.tool}")
        try:
            result = tool.execute(dict(directive.arguments))
        except Exception as e:
            return ToolResult.fail(f"{type(e).__name__}: {e}")
        return ToolResult.coerce(result)

    def _run(self, directive: Directive) -> ToolResult:
        self.event_log.log_event("tool_call", {"tool": directive.tool, "arguments": directive.arguments})
        if self.confirm is not None and not self.confirm(directive):
            result = ToolResult.fail(CANCELLED_ERROR)
        else:
            result = self.execute_directive(directive)
        self.event_log.log_event("tool_result", {"tool": directive.tool, **result.to_dict()})
        if self.on_tool_result is not None:
            self.on_tool_result(directive, result)
        return result

    def handle_chat(self, message: str) -> LoopOutcome:
        """
        Run the loop for one user message.

        Provider errors propagate to the caller. Running out of turns is not
        an error: the outcome comes back in ABORTED_MAX_TURNS.
        """
        self.event_log.log_event("chat_start", {"message": message[:2000]})
        tool_runs: List[ToolRun] = []
        response = self._ask(initial_message(message))

        for turn in range(self.max_turns):
            self.state = LoopState.EXTRACTING
            directives = self.parser.extract_all(response)

            if not directives:
                self.state = LoopState.DONE
                final = self.parser.strip_all(response)
                self.event_log.log_event("chat_done", {"turns": turn + 1, "tool_runs": len(tool_runs)})
                return LoopOutcome(LoopState.DONE, final, turn + 1, tool_runs)

            self.state = LoopState.EXECUTING
            lines = []
            for directive in directives:
                result = self._run(directive)
                tool_runs.append(ToolRun(directive, result))
                lines.append(context_line(directive, result))

            self.state = LoopState.BUILDING_FOLLOWUP
            response = self._ask(followup_message(response, lines))

        self.state = LoopState.ABORTED_MAX_TURNS
        self.event_log.log_event("max_turns_reached", {"turns": self.max_turns, "tool_runs": len(tool_runs)})
        return LoopOutcome(LoopState.ABORTED_MAX_TURNS, response, self.max_turns, tool_runs)

    def reset(self):
        self.conversation = ConversationManager()
        self.state = LoopState.AWAITING_RESPONSE
