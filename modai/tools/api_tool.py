"""API tool - outbound HTTP calls with retries, parse modes, batch and chain requests"""
from typing import Any, Dict, List

import requests

from modai.config import REQUEST_TIMEOUT
from modai.protocol import ToolResult

TOOL_DEF = {
    "name": "api",
    "description": (
        "Executes REST API calls: method, url, headers, body, parse ('auto'|'json'|'text'), "
        "summarize, retries, plus batch (list of requests) and chain (requests fed the previous output)."
    ),
    "example": "api(method='POST', url='https://api.example.com/data', headers={'Authorization': 'Bearer ...'}, body={'foo': 'bar'}, parse='json', retries=3)",
}

_BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def _parse(response: requests.Response, parse: str) -> Any:
    is_json = "json" in response.headers.get("content-type", "")
    if parse == "json" or (parse == "auto" and is_json):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def request(spec: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform one HTTP request described by ``spec``.

    Raises requests.RequestException when every attempt fails.
    """
    url = spec.get("url")
    if not url:
        raise ValueError("URL is required for API calls")
    method = str(spec.get("method", "GET")).upper()
    headers = spec.get("headers") or {}
    body = spec.get("body")
    parse = spec.get("parse", "auto")
    retries = max(int(spec.get("retries", 1) or 1), 1)

    kwargs: Dict[str, Any] = {"headers": headers, "timeout": spec.get("timeout", REQUEST_TIMEOUT)}
    if method in _BODY_METHODS and body is not None:
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        else:
            kwargs["data"] = body

    last_error = None
    for _ in range(retries):
        try:
            response = requests.request(method, url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            last_error = e
            continue
        output = _parse(response, parse)
        if spec.get("summarize"):
            output = {"status": response.status_code, "ok": response.ok, "data": output}
        return {"url": url, "method": method, "status": response.status_code, "output": output}
    raise last_error


def execute(args: Dict[str, Any]) -> ToolResult:
    batch: List[Dict[str, Any]] = args.get("batch") or []
    chain: List[Dict[str, Any]] = args.get("chain") or []

    try:
        if batch:
            results = []
            for spec in batch:
                try:
                    results.append({"success": True, "result": request(spec)})
                except (requests.RequestException, ValueError) as e:
                    results.append({"success": False, "error": str(e)})
            return ToolResult.ok({"batch": results})

        result = request(args)
        for step in chain:
            step = dict(step)
            step.setdefault("body", result["output"])
            result = request(step)
        return ToolResult.ok(result)
    except (requests.RequestException, ValueError) as e:
        return ToolResult.fail(str(e))
