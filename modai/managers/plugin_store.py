"""On-disk state for installed plugin tools"""
import json
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from modai.exceptions import PluginError

MANIFEST_SUFFIX = ".tool.json"
REMOTE_MANIFEST = "modai.tool.json"
_NAME_RE = re.compile(r"[\w.-]+")


def check_plugin_name(name: str) -> str:
    """Plugin names become file names in the store, so they must be a single safe path component"""
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name) or ".." in name:
        raise PluginError(f"Invalid plugin name: {name!r}")
    return name


@dataclass(frozen=True)
class Loaded:
    """A plugin that imported and registered cleanly"""
    name: str
    tool: Any


@dataclass(frozen=True)
class LoadFailure:
    """A plugin that could not be loaded, and why"""
    name: str
    reason: str


LoadResult = Union[Loaded, LoadFailure]


@dataclass
class PluginManifest:
    """Contents of a ``<name>.tool.json`` file"""
    name: str
    version: str = "0.0.0"
    owner: str = ""
    repo: str = ""
    entry: str = ""
    files: List[str] = field(default_factory=list)
    dirs: List[str] = field(default_factory=list)
    pip_deps: List[str] = field(default_factory=list)

    def __post_init__(self):
        check_plugin_name(self.name)
        if not self.entry:
            self.entry = f"{self.name}.py"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PluginManifest":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str) or not data["name"]:
            raise PluginError("Plugin manifest must be an object with a non-empty 'name'")
        return cls(
            name=data["name"],
            version=str(data.get("version", "0.0.0")),
            owner=str(data.get("owner", "")),
            repo=str(data.get("repo", "")),
            entry=str(data.get("entry") or data.get("main") or f"{data['name']}.py"),
            files=list(data.get("files", [])),
            dirs=list(data.get("dirs", [])),
            pip_deps=list(data.get("pipDeps", data.get("pip_deps", []))),
        )

    @classmethod
    def from_json(cls, text: str) -> "PluginManifest":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PluginError(f"Invalid plugin manifest JSON: {e.msg} at position {e.pos}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "owner": self.owner,
            "repo": self.repo,
            "entry": self.entry,
            "files": self.files,
            "dirs": self.dirs,
            "pipDeps": self.pip_deps,
        }


class PluginStore:
    """
    Directory holding installed plugins and their manifests.

    Everything that touches the plugin directory goes through here, so the
    registry and the install/update/uninstall tools can be pointed at a
    temporary directory in tests.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def manifest_path(self, name: str) -> Path:
        return self.root / f"{check_plugin_name(name)}{MANIFEST_SUFFIX}"

    def path_for(self, relative: str) -> Path:
        """Resolve a plugin-relative path, refusing anything that escapes the store"""
        root = self.root.resolve()
        path = (self.root / relative).resolve()
        if path != root and root not in path.parents:
            raise PluginError(f"Path '{relative}' escapes the plugin directory")
        return path

    def manifest_names(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(file.name[:-len(MANIFEST_SUFFIX)] for file in self.root.glob(f"*{MANIFEST_SUFFIX}"))

    def list_manifests(self) -> List[PluginManifest]:
        manifests = []
        for name in self.manifest_names():
            manifest = self.read_manifest(name)
            if manifest is not None:
                manifests.append(manifest)
        return manifests

    def read_manifest(self, name: str) -> Optional[PluginManifest]:
        path = self.manifest_path(name)
        if not path.exists():
            return None
        return PluginManifest.from_json(path.read_text(encoding="utf-8"))

    def write_manifest(self, manifest: PluginManifest) -> Path:
        self.ensure()
        path = self.manifest_path(manifest.name)
        path.write_text(json.dumps(manifest.to_dict(), indent=2), encoding="utf-8")
        return path

    def remove_manifest(self, name: str) -> bool:
        path = self.manifest_path(name)
        if not path.exists():
            return False
        path.unlink()
        return True

    def remove_paths(self, files: Iterable[str], dirs: Iterable[str]) -> List[str]:
        """Delete plugin files and directories; returns what was actually removed"""
        removed = []
        for file in files:
            path = self.path_for(file)
            if path.is_file():
                path.unlink()
                removed.append(file)
        # Deepest directories first so nested ones go before their parents
        for directory in sorted(dirs, key=len, reverse=True):
            path = self.path_for(directory)
            if path.is_dir():
                shutil.rmtree(path)
                removed.append(directory)
        return removed
