"""Agentic loop package"""
from .loop import CANCELLED_ERROR, AgenticLoop, LoopOutcome, LoopState, ToolRun
from .prompts import build_system_prompt, context_line, followup_message, initial_message

__all__ = [
    'AgenticLoop', 'LoopOutcome', 'LoopState', 'ToolRun', 'CANCELLED_ERROR',
    'build_system_prompt', 'context_line', 'followup_message', 'initial_message',
]
