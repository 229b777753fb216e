"""Modai exception hierarchy.

All modai-specific exceptions inherit from ModaiError.
"""

from typing import Optional


class ModaiError(Exception):
    """Base exception for all modai errors."""


class ProviderError(ModaiError):
    """Raised when a model provider call fails (transport, HTTP status or payload shape)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PluginError(ModaiError):
    """Raised when a plugin manifest cannot be read, written or installed."""


class ToolArgumentError(ModaiError):
    """Raised when a directive is missing arguments a tool requires."""

    def __init__(self, missing: str) -> None:
        self.missing = missing
        super().__init__(f"Missing required argument: {missing}")
