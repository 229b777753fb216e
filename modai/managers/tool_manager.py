"""Tool registry and plugin loading"""
import importlib.util
from typing import Dict, Iterable, List, Optional

from modai.exceptions import PluginError
from modai.protocol import ToolMetadata
from modai.tools.base import FunctionTool, Tool
from .plugin_store import Loaded, LoadFailure, LoadResult, PluginManifest, PluginStore


class ToolManager:
    """Maps tool names to Tool instances"""

    def __init__(self, tools: Iterable[Tool] = ()):
        self.tools: Dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool, name: Optional[str] = None):
        """Register a tool under its metadata name (or ``name``); replaces any previous tool"""
        self.tools[name or tool.metadata.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self.tools.get(name)

    def unregister(self, name: str) -> bool:
        return self.tools.pop(name, None) is not None

    def list(self) -> List[ToolMetadata]:
        return [tool.metadata for tool in self.tools.values()]

    def names(self) -> List[str]:
        return list(self.tools)

    def __contains__(self, name: str) -> bool:
        return name in self.tools

    def __len__(self) -> int:
        return len(self.tools)

    def load_plugins(self, store: PluginStore) -> List[LoadResult]:
        """
        Load every installed plugin from ``store``.

        Every manifest produces exactly one result; loaded tools are also
        registered. Broken plugins come back as LoadFailure so the caller can
        report them.
        """
        results: List[LoadResult] = []
        for name in store.manifest_names():
            try:
                manifest = store.read_manifest(name)
            except PluginError as e:
                results.append(LoadFailure(name, str(e)))
                continue
            if manifest is None:
                results.append(LoadFailure(name, "Manifest disappeared while loading"))
                continue
            results.append(self.reload_plugin(store, manifest))
        return results

    def reload_plugin(self, store: PluginStore, manifest: PluginManifest) -> LoadResult:
        """Load one plugin and register it, replacing any previous version"""
        result = self.load_plugin(store, manifest)
        if isinstance(result, Loaded):
            self.register(result.tool)
        return result

    def load_plugin(self, store: PluginStore, manifest: PluginManifest) -> LoadResult:
        """Import one plugin's entry file; it must define TOOL_DEF and execute(args)"""
        try:
            entry = store.path_for(manifest.entry)
        except PluginError as e:
            return LoadFailure(manifest.name, str(e))
        if not entry.is_file():
            return LoadFailure(manifest.name, f"Entry point '{manifest.entry}' not found")

        module_name = f"modai_plugin_{manifest.name}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, str(entry))
            if spec is None or spec.loader is None:
                return LoadFailure(manifest.name, f"Could not create module spec for '{entry}'")
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except SyntaxError as e:
            return LoadFailure(manifest.name, f"SyntaxError at line {e.lineno}: {e.msg}")
        except Exception as e:
            return LoadFailure(manifest.name, f"{type(e).__name__}: {e}")

        tool_def = getattr(module, "TOOL_DEF", None)
        execute = getattr(module, "execute", None)
        if not isinstance(tool_def, dict):
            return LoadFailure(manifest.name, "Module does not define a TOOL_DEF dict")
        if not callable(execute):
            return LoadFailure(manifest.name, "Module does not define an execute() function")

        definition = dict(tool_def)
        definition.setdefault("name", manifest.name)
        return Loaded(manifest.name, FunctionTool(definition, execute))
