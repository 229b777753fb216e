"""Tests for the built-in tools."""

import random
import sys

import pytest
import requests

from modai.protocol import ToolResult
from modai.tools import FunctionTool, api_tool, dicing, exec_tool, file_tool, get_tools, hello, python_tool


def test_builtin_tools_registered_by_name():
    assert [tool.name for tool in get_tools()] == ["exec", "file", "dicing", "hello", "python", "api"]


def test_function_tool_reports_missing_argument():
    tool = FunctionTool(exec_tool.TOOL_DEF, exec_tool.execute)
    assert tool.execute({}) == ToolResult.fail("Missing required argument: command")


class TestExec:
    def test_captures_stdout(self):
        result = exec_tool.execute({"command": "echo hello"})
        assert result.success
        assert result.data["stdout"] == "hello"
        assert result.data["code"] == 0

    def test_nonzero_exit_is_failure(self):
        result = exec_tool.execute({"command": "exit 3"})
        assert not result.success
        assert result.error == "Command exited with code 3"

    def test_timeout(self):
        result = exec_tool.execute({"command": f'"{sys.executable}" -c "import time; time.sleep(5)"', "timeout": 1})
        assert not result.success
        assert "exceeded 1 seconds" in result.error

    def test_missing_cwd(self, tmp_path):
        result = exec_tool.execute({"command": "ls", "cwd": str(tmp_path / "nope")})
        assert "does not exist" in result.error


class TestFile:
    def test_write_then_read(self, tmp_path):
        path = tmp_path / "sub" / "note.txt"
        written = file_tool.execute({"action": "write", "path": str(path), "content": "hi"})
        assert written.success
        assert file_tool.execute({"action": "read", "path": str(path)}).data == {"content": "hi"}

    def test_write_requires_content(self, tmp_path):
        result = file_tool.execute({"action": "write", "path": str(tmp_path / "x")})
        assert result.error == "write action requires content"

    def test_read_missing(self, tmp_path):
        assert "does not exist" in file_tool.execute({"action": "read", "path": str(tmp_path / "x")}).error

    def test_list(self, tmp_path):
        (tmp_path / "a.txt").write_text("1")
        (tmp_path / "dir").mkdir()
        items = file_tool.execute({"action": "list", "path": str(tmp_path)}).data["items"]
        assert [(i["name"], i["type"]) for i in items] == [("a.txt", "file"), ("dir", "directory")]

    def test_unknown_action(self, tmp_path):
        assert file_tool.execute({"action": "chmod", "path": str(tmp_path)}).error == "Unknown file action: chmod"


class TestDicing:
    def test_roll_with_modifier(self):
        result = dicing.roll("2d6+3", rng=random.Random(1))
        (component,) = result["dice_components"]
        assert component["num_dice"] == 2
        assert all(1 <= r <= 6 for r in component["rolls"])
        assert result["modifier"] == 3
        assert result["stdout"] == sum(component["rolls"]) + 3

    def test_subtracted_dice(self):
        result = dicing.roll("3d6-1d4-2", rng=random.Random(2))
        parts = result["dice_components"]
        assert parts[1]["subtotal"] < 0
        assert result["stdout"] == parts[0]["subtotal"] + parts[1]["subtotal"] - 2

    def test_invalid_expression(self):
        assert dicing.execute({"expression": "banana"}).error == "No valid dice or modifiers found in expression."


def test_hello():
    assert hello.execute({"name": "Ada"}).data == {"message": "Hello, Ada! 👋"}
    assert hello.execute({}).data == {"message": "Hello, world! 👋"}


class TestPython:
    def test_runs_snippet(self):
        result = python_tool.execute({"code": "print(6 * 7)"})
        assert result.success
        assert result.data["output"] == "42"

    def test_error_is_failure(self):
        result = python_tool.execute({"code": "raise SystemExit('bad')"})
        assert not result.success
        assert "bad" in result.error


class FakeResponse:
    def __init__(self, status=200, payload=None, text="", content_type="application/json"):
        self.status_code = status
        self.ok = status < 400
        self._payload = payload
        self.text = text
        self.headers = {"content-type": content_type}

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class TestApi:
    def test_json_response(self, monkeypatch):
        calls = []

        def fake_request(method, url, **kwargs):
            calls.append((method, url, kwargs))
            return FakeResponse(payload={"id": 1})

        monkeypatch.setattr(api_tool.requests, "request", fake_request)
        result = api_tool.execute({"method": "post", "url": "https://x.test/items", "body": {"a": 1}})

        assert result.data == {"url": "https://x.test/items", "method": "POST", "status": 200, "output": {"id": 1}}
        assert calls[0][2]["json"] == {"a": 1}

    def test_retries_then_fails(self, monkeypatch):
        attempts = []

        def fake_request(method, url, **kwargs):
            attempts.append(url)
            return FakeResponse(status=503)

        monkeypatch.setattr(api_tool.requests, "request", fake_request)
        result = api_tool.execute({"url": "https://x.test", "retries": 3})
        assert not result.success
        assert len(attempts) == 3

    def test_text_parse_and_summarize(self, monkeypatch):
        monkeypatch.setattr(api_tool.requests, "request",
                            lambda method, url, **kw: FakeResponse(text="plain", content_type="text/plain"))
        result = api_tool.execute({"url": "https://x.test", "summarize": True})
        assert result.data["output"] == {"status": 200, "ok": True, "data": "plain"}

    def test_batch_collects_each_result(self, monkeypatch):
        def fake_request(method, url, **kwargs):
            return FakeResponse(status=404 if "bad" in url else 200, payload={"u": url})

        monkeypatch.setattr(api_tool.requests, "request", fake_request)
        result = api_tool.execute({"batch": [{"url": "https://x.test/good"}, {"url": "https://x.test/bad"}]})
        assert [item["success"] for item in result.data["batch"]] == [True, False]

    def test_chain_feeds_previous_output(self, monkeypatch):
        bodies = []

        def fake_request(method, url, **kwargs):
            bodies.append(kwargs.get("json"))
            return FakeResponse(payload={"step": len(bodies)})

        monkeypatch.setattr(api_tool.requests, "request", fake_request)
        result = api_tool.execute({"url": "https://x.test/1", "chain": [{"url": "https://x.test/2", "method": "POST"}]})
        assert bodies == [None, {"step": 1}]
        assert result.data["output"] == {"step": 2}

    def test_missing_url(self):
        assert api_tool.execute({}).error == "URL is required for API calls"
