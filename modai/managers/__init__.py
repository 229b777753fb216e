"""Manager module exports"""
from .conversation_manager import ConversationManager
from .plugin_store import PluginManifest, PluginStore
from .tool_manager import Loaded, LoadFailure, LoadResult, ToolManager

__all__ = [
    'ConversationManager', 'PluginManifest', 'PluginStore',
    'Loaded', 'LoadFailure', 'LoadResult', 'ToolManager',
]
