"""Prompt text sent to the model"""
from typing import Iterable, List

from modai.protocol import Directive, ToolMetadata, ToolResult
from modai.utils.formatting import to_json

MODAI_DESCRIPTION = """Modai is a powerful, extensible AI framework designed to empower large language models (LLMs) with the ability to interact with the real world through tools. It provides a structured protocol for LLMs to request and execute actions, process their results, and integrate them seamlessly into their responses.

Key features of Modai:
- **Tool Execution**: LLMs can call external functions or APIs (tools) by outputting a specific JSON format.
- **Protocol-driven**: Uses a "modai" protocol for tool requests, ensuring clear communication between the LLM and the framework.
- **Contextual Awareness**: Automatically incorporates tool execution results back into the conversation context for more informed responses.
- **Extensible**: Easily integrate new tools and providers to expand the LLM's capabilities.

When you need to use a tool, respond with a JSON object in this format:
{"protocol":"modai","tool":"TOOL_NAME","arguments":{"param":"value"}}"""


def build_system_prompt(tools: Iterable[ToolMetadata]) -> str:
    listing = "\n".join(f"- {tool.name}: {tool.description} Example: {tool.example}" for tool in tools)
    return (
        "You are an AI assistant that can execute tools through the Modai protocol.\n"
        f"{MODAI_DESCRIPTION}\n\n"
        "Available tools:\n"
        f"{listing}\n\n"
        "After executing a tool, continue your response naturally."
    )


def initial_message(user_message: str) -> str:
    return (
        "You are an AI agent. When the user asks for multiple actions, provide all the "
        f"tool calls in a single response. User request: {user_message}"
    )


def context_line(directive: Directive, result: ToolResult) -> str:
    """One line of follow-up context for an executed directive"""
    arguments = to_json(directive.arguments)
    if result.success:
        output = to_json(result.data, indent=2)
        return f"You executed {directive.tool} tool with these parameters: {arguments}. The result was: {output}"
    return f"Tool {directive.tool} failed with these parameters: {arguments}. The error was: {result.error}"


def followup_message(response: str, lines: List[str]) -> str:
    joined = "\n".join(lines)
    return (
        f'You are in an agentic loop. You previously said: "{response}"\n\n'
        f"This led to tool executions with the following results:\n{joined}\n\n"
        "Now, decide the next step. You can call more tools or provide a final response to the user."
    )
