"""Exec tool - run a shell command with timeout protection"""
import subprocess
from pathlib import Path
from typing import Any, Dict

from modai.config import TOOL_TIMEOUT
from modai.protocol import ToolResult
from .base import require_args

MAX_OUTPUT = 1024 * 1024

TOOL_DEF = {
    "name": "exec",
    "description": "Executes a shell command. Optional: timeout (seconds, max 300), cwd.",
    "example": "exec(command='ls -la')",
}


def execute(args: Dict[str, Any]) -> ToolResult:
    """Run ``command`` in a shell and capture its output."""
    require_args(args, ["command"])
    command = str(args["command"]).strip()
    timeout = min(int(args.get("timeout", TOOL_TIMEOUT) or TOOL_TIMEOUT), 300)
    cwd = str(args.get("cwd") or ".")

    if not command:
        return ToolResult.fail("command is required")

    if not Path(cwd).is_dir():
        return ToolResult.fail(f"Working directory '{cwd}' does not exist")

    process = subprocess.Popen(
        command,
        shell=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=cwd,
        text=True,
    )
    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        stdout, stderr = process.communicate()
        return ToolResult.fail(
            f"Command exceeded {timeout} seconds and was terminated",
            data={"stdout": stdout.strip()[:MAX_OUTPUT], "stderr": stderr.strip()[:MAX_OUTPUT]},
        )

    data = {
        "stdout": stdout.strip()[:MAX_OUTPUT],
        "stderr": stderr.strip()[:MAX_OUTPUT],
        "code": process.returncode,
    }
    if process.returncode != 0:
        return ToolResult.fail(data["stderr"] or f"Command exited with code {process.returncode}", data=data)
    return ToolResult.ok(data)
