"""Dicing tool - roll dice expressions like 2d6+1 or 3d6+2d4-5"""
import random
import re
from typing import Any, Dict

from modai.protocol import ToolResult
from .base import require_args

TOOL_DEF = {
    "name": "dicing",
    "description": (
        "Rolls dice from advanced expressions: e.g., 2d6+1, 3d6+2d4+5. "
        "Returns each roll, subtotals, and grand total as stdout."
    ),
    "example": "dicing(expression='2d20+5d4-3')",
}

_DICE_RE = re.compile(r"([+-]?\d*d\d+)", re.IGNORECASE)
_MODIFIER_RE = re.compile(r"([+-]?\d+)")
_PART_RE = re.compile(r"^([+-]?)(\d*)d(\d+)$", re.IGNORECASE)


def roll(expression: str, rng: random.Random = None) -> Dict[str, Any]:
    """Evaluate a dice expression. Raises ValueError when it has no dice and no modifiers."""
    rng = rng or random.Random()
    expr = re.sub(r"\s+", "", expression)
    dice_parts = _DICE_RE.findall(expr)
    modifiers = _MODIFIER_RE.findall(_DICE_RE.sub("", expr))
    if not dice_parts and not modifiers:
        raise ValueError("No valid dice or modifiers found in expression.")

    components = []
    total = 0
    for part in dice_parts:
        match = _PART_RE.match(part)
        if not match:
            continue
        sign = -1 if match.group(1) == "-" else 1
        num_dice = int(match.group(2) or "1")
        num_sides = int(match.group(3))
        if num_dice < 1 or num_sides < 2:
            continue
        rolls = [rng.randint(1, num_sides) for _ in range(num_dice)]
        subtotal = sign * sum(rolls)
        total += subtotal
        components.append({
            "part": part,
            "num_dice": num_dice,
            "num_sides": num_sides,
            "rolls": rolls,
            "subtotal": subtotal,
        })

    modifier = sum(int(mod) for mod in modifiers)
    return {
        "expression": expression,
        "dice_components": components,
        "modifier": modifier,
        "stdout": total + modifier,
    }


def execute(args: Dict[str, Any]) -> ToolResult:
    require_args(args, ["expression"])
    try:
        return ToolResult.ok(roll(str(args["expression"])))
    except ValueError as e:
        return ToolResult.fail(str(e))
