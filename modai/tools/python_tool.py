"""Python tool - run a multi-line snippet in a fresh interpreter"""
import os
import subprocess
import sys
import tempfile
from typing import Any, Dict

from modai.config import TOOL_TIMEOUT
from modai.protocol import ToolResult
from .base import require_args

TOOL_DEF = {
    "name": "python",
    "description": "Executes multi-line Python code snippets and returns the output.",
    "example": "python(code='''\ndef foo():\n    return 42\nprint(foo())\n''')",
}


def execute(args: Dict[str, Any]) -> ToolResult:
    require_args(args, ["code"])
    code = str(args["code"])
    timeout = min(int(args.get("timeout", TOOL_TIMEOUT) or TOOL_TIMEOUT), 300)

    fd, script = tempfile.mkstemp(suffix=".py")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(code)
        try:
            result = subprocess.run(
                [sys.executable, script],
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return ToolResult.fail(f"Python code exceeded {timeout} seconds and was terminated", data={"code": code})
    finally:
        os.unlink(script)

    if result.returncode != 0:
        return ToolResult.fail(
            result.stderr.strip() or f"Python exited with code {result.returncode}",
            data={"code": code, "output": result.stdout.strip()},
        )
    return ToolResult.ok({"code": code, "output": result.stdout.strip()})
