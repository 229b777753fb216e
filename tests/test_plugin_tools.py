"""Tests for the install/update/uninstall/list tools against a fake GitHub."""

import io
import json
import subprocess
import tarfile

import pytest

from modai.exceptions import PluginError
from modai.managers import PluginManifest, ToolManager
from modai.tools import plugins
from modai.tools.plugins import (
    InstallTool,
    ListTool,
    PluginTool,
    UninstallTool,
    UpdateTool,
    extract_plugin,
    install_pip_deps,
    is_newer,
)

PLUGIN_SOURCE = '''
TOOL_DEF = {"name": "weather", "description": "Weather lookup", "example": "weather(city='Oslo')"}


def execute(args):
    return {"success": True, "stdout": "sunny in " + args.get("city", "?")}
'''


def build_tarball(path, files):
    """GitHub-style tarball: everything under a single top-level directory."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"octo-weather-abc123/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


class FakeGitHub:
    def __init__(self, manifest, files, branch="main"):
        self.manifest = manifest
        self.files = files
        self.branch = branch
        self.downloads = 0

    def default_branch(self, owner, repo):
        if repo == "missing":
            raise PluginError("GitHub resource not found")
        return self.branch

    def read_file(self, owner, repo, path, ref):
        assert path == "modai.tool.json"
        assert ref == self.branch
        return json.dumps(self.manifest)

    def download_tarball(self, owner, repo, ref, target):
        self.downloads += 1
        return build_tarball(target, self.files)


@pytest.fixture
def github():
    manifest = {"name": "weather", "version": "1.0.0", "files": ["weather.py"], "dirs": ["data"]}
    files = {"weather.py": PLUGIN_SOURCE, "data/cities.txt": "Oslo\n", "README.md": "ignored"}
    return FakeGitHub(manifest, files)


class TestInstall:
    def test_installs_and_registers(self, store, github):
        registry = ToolManager()
        result = InstallTool(store, registry, github).execute({"repo": "octo/weather"})

        assert result.success, result.error
        assert result.data == "Successfully installed weather from octo/weather"
        assert (store.root / "weather.py").is_file()
        assert (store.root / "data" / "cities.txt").read_text() == "Oslo\n"
        assert not (store.root / "README.md").exists()

        manifest = store.read_manifest("weather")
        assert (manifest.owner, manifest.repo) == ("octo", "weather")
        assert registry.get("weather").execute({"city": "Oslo"}).data["stdout"] == "sunny in Oslo"

    def test_rejects_bad_repo_format(self, store, github):
        result = InstallTool(store, None, github).execute({"repo": "not a repo"})
        assert result.error == 'Invalid repository format. Please use "owner/repo".'

    def test_missing_repo_argument(self, store, github):
        assert InstallTool(store, None, github).execute({}).error == "Missing required argument: repo"

    def test_missing_repository(self, store, github):
        result = InstallTool(store, None, github).execute({"repo": "octo/missing"})
        assert not result.success
        assert store.list_manifests() == []

    def test_load_failure_rolls_back(self, store, github):
        github.files["weather.py"] = "def broken(:\n"
        result = InstallTool(store, ToolManager(), github).execute({"repo": "octo/weather"})
        assert not result.success
        assert "failed to load" in result.error
        assert store.read_manifest("weather") is None
        assert not (store.root / "weather.py").exists()


class TestUpdate:
    def test_newer_version_is_deployed(self, store, github):
        InstallTool(store, None, github).execute({"repo": "octo/weather"})
        github.manifest = dict(github.manifest, version="1.1.0")
        result = UpdateTool(store, None, github).execute({})
        assert result.success
        assert result.data == "Successfully updated: weather."
        assert store.read_manifest("weather").version == "1.1.0"
        assert github.downloads == 2

    def test_same_version_is_left_alone(self, store, github):
        InstallTool(store, None, github).execute({"repo": "octo/weather"})
        result = UpdateTool(store, None, github).execute({"toolName": "weather"})
        assert result.data == "No updates for: weather."
        assert github.downloads == 1

    def test_unknown_tool(self, store, github):
        assert UpdateTool(store, None, github).execute({"toolName": "nope"}).error == "Tool 'nope' not found."

    def test_nothing_installed(self, store, github):
        assert UpdateTool(store, None, github).execute({}).data == "No Modai tools found to update."


class TestUninstallAndList:
    def test_uninstall_removes_files_and_unregisters(self, store, github):
        registry = ToolManager()
        InstallTool(store, registry, github).execute({"repo": "octo/weather"})
        result = UninstallTool(store, registry, github).execute({"name": "weather"})

        assert result.data == "Successfully uninstalled weather."
        assert not (store.root / "weather.py").exists()
        assert not (store.root / "data").exists()
        assert store.read_manifest("weather") is None
        assert "weather" not in registry

    def test_uninstall_unknown(self, store, github):
        result = UninstallTool(store, None, github).execute({"name": "ghost"})
        assert result.error == "Tool 'ghost' not found. Is it installed?"

    def test_list(self, store, github):
        tool = ListTool(store, None, github)
        assert tool.execute({}).data == "No Modai tools installed."
        InstallTool(store, None, github).execute({"repo": "octo/weather"})
        assert tool.execute({}).data == "- weather (v1.0.0)"


def test_extract_skips_paths_outside_manifest(store, tmp_path):
    archive = build_tarball(tmp_path / "a.tar.gz", {"keep.py": "x", "skip.py": "y"})
    written = extract_plugin(archive, store, PluginManifest(name="keep", files=["keep.py"]))
    assert written == ["keep.py"]
    assert not (store.root / "skip.py").exists()


@pytest.mark.parametrize("remote,local,expected", [
    ("1.0.1", "1.0.0", True),
    ("1.10.0", "1.9.0", True),
    ("1.0.0", "1.0.0", False),
    ("0.9", "1.0", False),
])
def test_is_newer(remote, local, expected):
    assert is_newer(remote, local) is expected


class TestPipDeps:
    def test_no_deps_does_nothing(self, monkeypatch):
        monkeypatch.setattr(plugins.subprocess, "run", lambda *a, **k: pytest.fail("should not run"))
        install_pip_deps([])

    def test_runs_pip_with_current_interpreter(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, "", "")

        monkeypatch.setattr(plugins.subprocess, "run", fake_run)
        install_pip_deps(["requests"])
        assert calls[0][1:] == ["-m", "pip", "install", "requests"]

    def test_failure_raises_plugin_error(self, monkeypatch):
        monkeypatch.setattr(
            plugins.subprocess, "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, "", "no such package"),
        )
        with pytest.raises(PluginError, match="no such package"):
            install_pip_deps(["nonexistent-pkg"])


class TestUnsafeNames:
    def test_install_rejects_traversal_in_remote_manifest(self, store, github, tmp_path):
        github.manifest = dict(github.manifest, name="../../evil")
        result = InstallTool(store, ToolManager(), github).execute({"repo": "octo/weather"})

        assert not result.success
        assert "Invalid plugin name" in result.error
        assert github.downloads == 0
        assert not list(tmp_path.rglob("evil.tool.json"))
        assert not list(tmp_path.parent.glob("evil.tool.json"))

    def test_uninstall_rejects_traversal(self, store, github, tmp_path):
        victim = tmp_path / "foo.tool.json"
        victim.write_text(json.dumps({"name": "foo"}), encoding="utf-8")

        result = UninstallTool(store, None, github).execute({"name": "../foo"})
        assert not result.success
        assert "Invalid plugin name" in result.error
        assert victim.exists()


def test_plugin_tool_base_is_abstract(store, github):
    with pytest.raises(TypeError):
        PluginTool(store, None, github)
