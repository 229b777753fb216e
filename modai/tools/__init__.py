"""Built-in tools and plugin management tools"""
from typing import List

from .base import FunctionTool, Tool, require_args
from . import api_tool, dicing, exec_tool, file_tool, hello, python_tool
from .plugins import (
    GitHubClient,
    InstallTool,
    ListTool,
    UninstallTool,
    UpdateTool,
    get_plugin_tools,
)

BUILTIN_MODULES = [exec_tool, file_tool, dicing, hello, python_tool, api_tool]


def get_tools() -> List[Tool]:
    """One FunctionTool per built-in module"""
    return [FunctionTool(module.TOOL_DEF, module.execute) for module in BUILTIN_MODULES]


__all__ = [
    'Tool', 'FunctionTool', 'require_args', 'get_tools', 'get_plugin_tools',
    'GitHubClient', 'InstallTool', 'UpdateTool', 'UninstallTool', 'ListTool',
    'BUILTIN_MODULES',
]
