"""Directive parser for tool calls embedded in free-form model output"""
import json
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from modai.protocol import PROTOCOL, Directive, Rejection

TIER_SCAN = "scan"
TIER_STRICT = "strict"
TIER_FUZZY = "fuzzy"
TIER_MANUAL = "manual"
TIER_VALIDATE = "validate"

_PROTOCOL_RE = re.compile(r'"protocol"\s*:\s*"([^"]+)"')
_TOOL_RE = re.compile(r'"tool"\s*:\s*"([^"]+)"')
_ARGUMENTS_RE = re.compile(r'"arguments"\s*:\s*(\{[^}]*\})')
_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n)+")


def find_balanced_object(text: str, start: int) -> Optional[str]:
    """
    Return the substring from the '{' at ``start`` to its matching '}', inclusive.

    Braces inside double-quoted strings are not counted. A backslash escapes
    exactly the next character, inside or outside a string, so ``\\"`` never
    toggles the string flag. Returns None when the text ends first.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            in_string = not in_string
        elif not in_string:
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
    return None


def split_unquoted(content: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` where it is not inside a quoted string. Empty parts are dropped."""
    parts: List[str] = []
    current = ""
    in_string = False
    escaped = False
    for char in content:
        if escaped:
            current += char
            escaped = False
        elif char == "\\":
            current += char
            escaped = True
        elif char == '"':
            current += char
            in_string = not in_string
        elif char == separator and not in_string:
            if current.strip():
                parts.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        parts.append(current.strip())
    return parts


def _unescape(candidate: str) -> str:
    return candidate.replace("\\{", "{").replace("\\}", "}").replace('\\"', '"')


def _parse_arguments_manually(region: str) -> Dict[str, str]:
    """Flat key:value recovery for an arguments body that is not valid JSON"""
    args: Dict[str, str] = {}
    content = region.replace("{", "").replace("}", "").strip()
    for pair in split_unquoted(content):
        colon = pair.find(":")
        if colon > 0:
            key = pair[:colon].strip().replace('"', "")
            value = pair[colon + 1:].strip()
            if value.startswith('"'):
                value = value[1:]
            if value.endswith('"'):
                value = value[:-1]
            args[key] = value
    return args


def _extract_fields_manually(candidate: str) -> Optional[Dict[str, Any]]:
    obj: Dict[str, Any] = {}
    protocol_match = _PROTOCOL_RE.search(candidate)
    if protocol_match:
        obj["protocol"] = protocol_match.group(1)
    tool_match = _TOOL_RE.search(candidate)
    if tool_match:
        obj["tool"] = tool_match.group(1)
    args_match = _ARGUMENTS_RE.search(candidate)
    if args_match:
        try:
            obj["arguments"] = json.loads(args_match.group(1))
        except ValueError:
            obj["arguments"] = _parse_arguments_manually(args_match.group(1))

    if obj.get("protocol") and obj.get("tool") and obj.get("arguments"):
        return obj
    return None


class DirectiveParser:
    """
    Finds ``{"protocol":"modai",...}`` objects inside arbitrary text.

    Each brace-balanced candidate goes through up to three tiers: strict JSON,
    fuzzy JSON (double-escaping undone) and manual field extraction. A later
    tier only runs when the previous one could not parse the candidate at all.
    Candidates that fail are dropped; pass a ``rejections`` list (per call) or
    an ``on_reject`` callback (per parser) to see what was dropped and why.
    """

    def __init__(self, on_reject: Optional[Callable[[Rejection], None]] = None):
        self.on_reject = on_reject

    def extract_all(self, text: str, rejections: Optional[List[Rejection]] = None) -> List[Directive]:
        """All directives in ``text``, in order of first occurrence"""
        return list(self.iter_directives(text, rejections))

    def iter_directives(self, text: str, rejections: Optional[List[Rejection]] = None) -> Iterator[Directive]:
        for start, end, obj, tier in self._scan(text, rejections):
            directive = Directive.from_mapping(obj)
            if directive is None:
                self._reject(rejections, Rejection(
                    start, end, text[start:end], TIER_VALIDATE,
                    f"recognised by {tier} parse but tool/arguments are missing or malformed",
                ))
                continue
            yield directive

    def find_directive(self, text: str, tool: str) -> Optional[Directive]:
        """First directive in ``text`` that names ``tool``"""
        for directive in self.iter_directives(text):
            if directive.tool == tool:
                return directive
        return None

    def strip_all(self, text: str) -> str:
        """
        Remove every recognised modai object from ``text``.

        Scanning resumes at the deletion point, so text that closes up around a
        deleted span is scanned again. Every run of newlines left behind, blank
        lines included, collapses to a single newline and the result is stripped.
        """
        cleaned = text
        pos = 0
        while True:
            start = cleaned.find("{", pos)
            if start == -1:
                break
            candidate = find_balanced_object(cleaned, start)
            if candidate is None:
                pos = start + 1
                continue
            obj, _, _ = self._recognize(candidate)
            if obj is not None:
                cleaned = cleaned[:start] + cleaned[start + len(candidate):]
                pos = start
            else:
                pos = start + len(candidate)

        return _BLANK_LINES_RE.sub("\n", cleaned).strip()

    def _scan(self, text: str, rejections: Optional[List[Rejection]]) -> Iterator[Tuple[int, int, Dict[str, Any], str]]:
        """Yield (start, end, object, tier) for every recognised modai object"""
        pos = 0
        while True:
            start = text.find("{", pos)
            if start == -1:
                return
            candidate = find_balanced_object(text, start)
            if candidate is None:
                self._reject(rejections, Rejection(start, len(text), text[start:], TIER_SCAN, "no matching closing brace"))
                pos = start + 1
                continue

            end = start + len(candidate)
            obj, tier, reason = self._recognize(candidate)
            if obj is None:
                self._reject(rejections, Rejection(start, end, candidate, tier, reason))
            else:
                yield start, end, obj, tier
            pos = end

    def _recognize(self, candidate: str) -> Tuple[Optional[Dict[str, Any]], str, str]:
        """
        Run the parse tiers over one candidate.
        Returns (object, tier, reason); object is None unless protocol is modai.
        """
        try:
            return self._check_protocol(json.loads(candidate), TIER_STRICT)
        except ValueError:
            pass

        try:
            return self._check_protocol(json.loads(_unescape(candidate)), TIER_FUZZY)
        except ValueError:
            pass

        obj = _extract_fields_manually(candidate)
        if obj is None:
            return None, TIER_MANUAL, "no protocol, tool and arguments could be recovered"
        return self._check_protocol(obj, TIER_MANUAL)

    @staticmethod
    def _check_protocol(obj: Any, tier: str) -> Tuple[Optional[Dict[str, Any]], str, str]:
        if isinstance(obj, dict) and obj.get("protocol") == PROTOCOL:
            return obj, tier, ""
        return None, tier, f"protocol is not '{PROTOCOL}'"

    def _reject(self, rejections: Optional[List[Rejection]], rejection: Rejection) -> None:
        if rejections is not None:
            rejections.append(rejection)
        if self.on_reject is not None:
            self.on_reject(rejection)


_default_parser = DirectiveParser()


def extract_all(text: str) -> List[Directive]:
    return _default_parser.extract_all(text)


def strip_all(text: str) -> str:
    return _default_parser.strip_all(text)
