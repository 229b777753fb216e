"""Modai: let a model run tools by embedding directives in its replies"""
from modai.protocol import PROTOCOL, Directive, ToolResult, ConversationTurn, ToolMetadata, Rejection
from modai.parsers import DirectiveParser, extract_all, strip_all
from modai.agent import AgenticLoop, LoopOutcome, LoopState, ToolRun

__version__ = "0.1.0"

__all__ = [
    'PROTOCOL', 'Directive', 'ToolResult', 'ConversationTurn', 'ToolMetadata', 'Rejection',
    'DirectiveParser', 'extract_all', 'strip_all',
    'AgenticLoop', 'LoopOutcome', 'LoopState', 'ToolRun',
]
