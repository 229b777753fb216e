"""Plugin management tools - install, update, uninstall and list GitHub-hosted tools"""
import base64
import re
import subprocess
import sys
import tarfile
import tempfile
from pathlib import Path
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import requests

from modai.config import REQUEST_TIMEOUT
from modai.exceptions import PluginError, ToolArgumentError
from modai.managers.plugin_store import REMOTE_MANIFEST, LoadFailure, PluginManifest, PluginStore
from modai.protocol import ToolMetadata, ToolResult
from .base import Tool, require_args

GITHUB_API = "https://api.github.com"
_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


class GitHubClient:
    """The three GitHub REST calls plugin installation needs"""

    def __init__(self, api_url: str = GITHUB_API, token: Optional[str] = None, timeout: int = REQUEST_TIMEOUT):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _get(self, path: str, **kwargs) -> requests.Response:
        response = self.session.get(f"{self.api_url}{path}", timeout=self.timeout, **kwargs)
        if response.status_code == 404:
            raise PluginError(f"GitHub resource not found: {path}")
        response.raise_for_status()
        return response

    def default_branch(self, owner: str, repo: str) -> str:
        return self._get(f"/repos/{owner}/{repo}").json()["default_branch"]

    def read_file(self, owner: str, repo: str, path: str, ref: str) -> str:
        data = self._get(f"/repos/{owner}/{repo}/contents/{path}", params={"ref": ref}).json()
        if "content" not in data:
            raise PluginError(f"'{path}' in {owner}/{repo} is not a file")
        return base64.b64decode(data["content"]).decode("utf-8")

    def download_tarball(self, owner: str, repo: str, ref: str, target: Path) -> Path:
        response = self._get(f"/repos/{owner}/{repo}/tarball/{ref}", stream=True)
        with open(target, "wb") as f:
            for chunk in response.iter_content(chunk_size=65536):
                f.write(chunk)
        return target


def parse_version(version: str) -> Tuple:
    parts = re.findall(r"\d+", version)
    return tuple(int(part) for part in parts) if parts else (version,)


def is_newer(remote: str, local: str) -> bool:
    try:
        return parse_version(remote) > parse_version(local)
    except TypeError:
        return remote > local


def _wanted(relative: str, manifest: PluginManifest) -> bool:
    if relative in manifest.files:
        return True
    return any(relative == d or relative.startswith(d + "/") for d in manifest.dirs)


def extract_plugin(archive: Path, store: PluginStore, manifest: PluginManifest) -> List[str]:
    """
    Copy the manifest's files and dirs out of a GitHub tarball into the store.

    The tarball's top-level directory (``owner-repo-sha/``) is dropped.
    """
    store.ensure()
    written = []
    with tarfile.open(archive, "r:*") as tar:
        for member in tar.getmembers():
            parts = member.name.split("/", 1)
            if len(parts) < 2 or not parts[1]:
                continue
            relative = parts[1].rstrip("/")
            if not _wanted(relative, manifest):
                continue
            target = store.path_for(relative)
            if member.isdir():
                target.mkdir(parents=True, exist_ok=True)
            elif member.isfile():
                source = tar.extractfile(member)
                if source is None:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with source, open(target, "wb") as f:
                    f.write(source.read())
                written.append(relative)
    return written


def install_pip_deps(deps: List[str]) -> None:
    """Install a plugin's Python dependencies into the running interpreter"""
    if not deps:
        return
    try:
        result = subprocess.run(
            [sys.executable, "-m", "pip", "install", *deps],
            capture_output=True,
            text=True,
            timeout=300,
        )
    except subprocess.TimeoutExpired as e:
        raise PluginError(f"Installation of {', '.join(deps)} timed out") from e
    if result.returncode != 0:
        raise PluginError(f"Failed to install {', '.join(deps)}: {result.stderr.strip() or 'Unknown error'}")


class PluginTool(Tool):
    """Shared wiring for the tools that manage the plugin store"""

    def __init__(self, store: PluginStore, registry=None, github: Optional[GitHubClient] = None):
        self.store = store
        self.registry = registry
        self.github = github or GitHubClient()

    def execute(self, args: Dict[str, Any]) -> ToolResult:
        try:
            return self._execute(args)
        except (PluginError, ToolArgumentError, requests.RequestException, tarfile.TarError, OSError) as e:
            return ToolResult.fail(str(e))

    @abstractmethod
    def _execute(self, args: Dict[str, Any]) -> ToolResult:
        ...

    def _fetch(self, owner: str, repo: str) -> Tuple[PluginManifest, str, str]:
        """Returns (remote manifest, raw manifest JSON, default branch)"""
        branch = self.github.default_branch(owner, repo)
        try:
            raw = self.github.read_file(owner, repo, REMOTE_MANIFEST, branch)
        except PluginError as e:
            raise PluginError(
                f"Repository '{owner}/{repo}' not found or '{REMOTE_MANIFEST}' is missing "
                f"in the root of the default branch."
            ) from e
        manifest = PluginManifest.from_json(raw)
        manifest.owner = manifest.owner or owner
        manifest.repo = manifest.repo or repo
        return manifest, raw, branch

    def _deploy(self, manifest: PluginManifest, branch: str) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            archive = self.github.download_tarball(
                manifest.owner, manifest.repo, branch, Path(tmp) / f"{manifest.repo}-{branch}.tar.gz"
            )
            extract_plugin(archive, self.store, manifest)
        install_pip_deps(manifest.pip_deps)
        self.store.write_manifest(manifest)
        if self.registry is not None:
            result = self.registry.reload_plugin(self.store, manifest)
            if isinstance(result, LoadFailure):
                raise PluginError(f"Installed but failed to load: {result.reason}")


class InstallTool(PluginTool):
    metadata = ToolMetadata(
        name="install",
        description="Installs a Modai tool from a GitHub repository.",
        example="install(repo='githubusername/repo')",
    )

    def _execute(self, args: Dict[str, Any]) -> ToolResult:
        require_args(args, ["repo"])
        repo_arg = str(args["repo"]).strip()
        if not _REPO_RE.match(repo_arg):
            return ToolResult.fail('Invalid repository format. Please use "owner/repo".')
        owner, repo = repo_arg.split("/")

        manifest, _, branch = self._fetch(owner, repo)
        try:
            self._deploy(manifest, branch)
        except (PluginError, requests.RequestException, tarfile.TarError, OSError) as e:
            self.store.remove_paths(manifest.files, manifest.dirs)
            self.store.remove_manifest(manifest.name)
            return ToolResult.fail(f"Failed to install tool: {e}")
        return ToolResult.ok(f"Successfully installed {manifest.name} from {repo_arg}")


class UpdateTool(PluginTool):
    metadata = ToolMetadata(
        name="update",
        description="Checks for updates for installed Modai tools and updates them. Optional: toolName.",
        example="update(toolName='mytool')",
    )

    def _execute(self, args: Dict[str, Any]) -> ToolResult:
        tool_name = args.get("toolName") or args.get("name")
        if tool_name:
            manifest = self.store.read_manifest(str(tool_name))
            if manifest is None:
                return ToolResult.fail(f"Tool '{tool_name}' not found.")
            installed = [manifest]
        else:
            installed = self.store.list_manifests()
        if not installed:
            return ToolResult.ok("No Modai tools found to update.")

        updated, current, failed = [], [], []
        for local in installed:
            try:
                remote, _, branch = self._fetch(local.owner, local.repo)
                if is_newer(remote.version, local.version):
                    self._deploy(remote, branch)
                    updated.append(local.name)
                else:
                    current.append(local.name)
            except (PluginError, requests.RequestException, tarfile.TarError, OSError) as e:
                failed.append(f"{local.name} ({e})")

        summary = []
        if updated:
            summary.append(f"Successfully updated: {', '.join(updated)}.")
        if current:
            summary.append(f"No updates for: {', '.join(current)}.")
        if failed:
            summary.append(f"Failed to update: {', '.join(failed)}.")
        if failed:
            return ToolResult.fail(" ".join(summary))
        return ToolResult.ok(" ".join(summary))


class UninstallTool(PluginTool):
    metadata = ToolMetadata(
        name="uninstall",
        description="Uninstalls a Modai tool.",
        example="uninstall(name='mytool')",
    )

    def _execute(self, args: Dict[str, Any]) -> ToolResult:
        require_args(args, ["name"])
        name = str(args["name"]).strip()
        manifest = self.store.read_manifest(name)
        if manifest is None:
            return ToolResult.fail(f"Tool '{name}' not found. Is it installed?")
        self.store.remove_paths(manifest.files, manifest.dirs)
        self.store.remove_manifest(name)
        if self.registry is not None:
            self.registry.unregister(name)
        return ToolResult.ok(f"Successfully uninstalled {name}.")


class ListTool(PluginTool):
    metadata = ToolMetadata(
        name="list",
        description="Lists all installed Modai tools.",
        example="list()",
    )

    def _execute(self, args: Dict[str, Any]) -> ToolResult:
        manifests = self.store.list_manifests()
        if not manifests:
            return ToolResult.ok("No Modai tools installed.")
        return ToolResult.ok("\n".join(f"- {m.name} (v{m.version})" for m in manifests))


def get_plugin_tools(store: PluginStore, registry=None, github: Optional[GitHubClient] = None) -> List[Tool]:
    github = github or GitHubClient()
    return [
        InstallTool(store, registry, github),
        UpdateTool(store, registry, github),
        UninstallTool(store, registry, github),
        ListTool(store, registry, github),
    ]
