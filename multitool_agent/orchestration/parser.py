"""
Tool-call extraction from free-form model output.

The model requests a tool by embedding ``{"tool": "<name>", "params": {...}}``
somewhere in its reply. Decoding is best effort: strict JSON first, then one
retry after a small, fixed set of repairs. Output that still does not decode
is treated as a plain answer.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Greedy: first "{" up to the last "}" with a "tool" key in between
TOOL_JSON_PATTERN = re.compile(r'\{[\s\S]*"tool"[\s\S]*\}')

_BAREWORD_KEY = re.compile(r"([{,]\s*)(\w+):")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


@dataclass
class ToolCallRequest:
    """A tool invocation decoded from one model reply."""

    tool: str
    params: Any = field(default_factory=dict)


def extract_tool_json(text: str) -> Optional[str]:
    """Return the JSON-object-shaped span containing a "tool" key, if any."""
    match = TOOL_JSON_PATTERN.search(text)
    return match.group(0) if match else None


def repair_json(raw: str) -> str:
    """
    Fix the malformed shapes models commonly emit.

    Exactly three repairs, applied in order:
        - single quotes become double quotes
        - bareword keys after ``{`` or ``,`` get quoted
        - trailing commas before ``}`` or ``]`` are dropped
    """
    fixed = raw.replace("'", '"')
    fixed = _BAREWORD_KEY.sub(r'\1"\2":', fixed)
    fixed = _TRAILING_COMMA.sub(r"\1", fixed)
    return fixed


def _decode(raw: str) -> Optional[Any]:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(repair_json(raw))
    except json.JSONDecodeError:
        logger.debug(f"Unrecoverable tool-call JSON: {raw[:200]}")
        return None


def parse_tool_call(text: str) -> Optional[ToolCallRequest]:
    """
    Parse a tool call out of model output.

    Returns:
        The decoded request, or None when the text should be treated as a
        final answer (no tool JSON, or JSON that cannot be recovered).
    """
    raw = extract_tool_json(text)
    if raw is None:
        return None

    data = _decode(raw)
    if not isinstance(data, dict) or "tool" not in data:
        return None

    tool = data["tool"]
    if not isinstance(tool, str):
        # Rendered as JSON so the not-found feedback reads e.g. Tool "null"
        tool = json.dumps(tool)

    params = data.get("params")
    return ToolCallRequest(tool=tool, params={} if params is None else params)
