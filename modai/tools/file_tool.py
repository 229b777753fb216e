"""File tool - read, write and list files"""
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from modai.protocol import ToolResult
from .base import require_args

MAX_READ_BYTES = 1024 * 1024

TOOL_DEF = {
    "name": "file",
    "description": "Performs file operations like read, write, and list.",
    "example": "file(action='read', path='/path/to/file')",
}

_PROTECTED_DIRS = [Path("/etc"), Path("/sys"), Path("/proc")]


def _read(path: Path) -> ToolResult:
    if not path.exists():
        return ToolResult.fail(f"File '{path}' does not exist")
    if not path.is_file():
        return ToolResult.fail(f"'{path}' is not a file")
    size = path.stat().st_size
    if size > MAX_READ_BYTES:
        return ToolResult.fail(f"File '{path}' is too large ({size} bytes). Max 1MB.")
    try:
        return ToolResult.ok({"content": path.read_text(encoding="utf-8")})
    except UnicodeDecodeError:
        return ToolResult.fail(f"File '{path}' is not a text file (encoding issue)")


def _write(path: Path, content: Any) -> ToolResult:
    if content is None or content == "":
        return ToolResult.fail("write action requires content")
    abs_path = path.resolve()
    if any(protected in abs_path.parents for protected in _PROTECTED_DIRS):
        return ToolResult.fail(f"Cannot write to system directory '{path}'")
    abs_path.parent.mkdir(parents=True, exist_ok=True)
    text = str(content)
    abs_path.write_text(text, encoding="utf-8")
    return ToolResult.ok({"message": f"Successfully wrote {len(text)} characters to '{path}'"})


def _list(path: Path) -> ToolResult:
    if not path.is_dir():
        return ToolResult.fail(f"'{path}' is not a directory")
    items = []
    for item in sorted(path.iterdir()):
        stats = item.stat()
        items.append({
            "name": item.name,
            "type": "directory" if item.is_dir() else "file",
            "size": stats.st_size,
            "modified": datetime.fromtimestamp(stats.st_mtime).isoformat(),
        })
    return ToolResult.ok({"items": items})


def execute(args: Dict[str, Any]) -> ToolResult:
    require_args(args, ["action", "path"])
    action = str(args["action"])
    path = Path(str(args["path"])).expanduser()

    try:
        if action == "read":
            return _read(path)
        if action == "write":
            return _write(path, args.get("content"))
        if action == "list":
            return _list(path)
    except OSError as e:
        return ToolResult.fail(f"{action} failed: {e}")

    return ToolResult.fail(f"Unknown file action: {action}")
