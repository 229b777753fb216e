"""Utilities for formatting output"""
import json
from typing import Any

from modai.config import Colors


def truncate_text(text: str, max_length: int = 500) -> str:
    """Truncate text to max_length and add ellipsis if needed"""
    if len(text) <= max_length:
        return text
    return text[:max_length] + f"\n... (truncated, {len(text) - max_length} more characters)"


def to_json(value: Any, indent: int = None) -> str:
    """JSON for prompts and display; non-serializable values fall back to str()"""
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def format_block(title: str, body: str, color: str = Colors.CYAN, max_length: int = 800) -> str:
    """Titled block for terminal output"""
    rule = "─" * 70
    return f"{color}{rule}\n[{title}]{Colors.RESET}\n{truncate_text(body, max_length)}\n{color}{rule}{Colors.RESET}"

