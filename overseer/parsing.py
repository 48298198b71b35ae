"""Parsing of free-text model output.

Local models served through OpenAI-compatible endpoints often ignore native
function calling and write tool calls into the reply text instead. Two
embedded forms are recognised:

    <update_gold>{"amount": 5, "action": "ADD"}</update_gold>
    <tool_call>{"name": "update_gold", "arguments": {...}}</tool_call>

(the second also as <function-call>). Only known tool names are extracted
from the first form, so ordinary markup in the reply is left alone.

The visible reply is what remains after taking the RESPONSE: section (when
the model used a THOUGHT:/RESPONSE: layout) and stripping tool and <think>
blocks.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from overseer.tools import TOOL_NAMES, ToolCall, decode_tool_call

logger = logging.getLogger(__name__)

_RESPONSE_RE = re.compile(r"RESPONSE:\s*([\s\S]*)", re.IGNORECASE)
_THOUGHT_RE = re.compile(r"THOUGHT:\s*[\s\S]*?(?=RESPONSE:|$)", re.IGNORECASE)
_NAMED_BLOCK_RE = re.compile(r"<([a-z_]+)>\s*([\s\S]*?)\s*</\1>", re.IGNORECASE)
_CALL_BLOCK_RE = re.compile(
    r"<(function-call|tool_call)>\s*([\s\S]*?)\s*</(?:function-call|tool_call)>",
    re.IGNORECASE,
)
_THINK_RE = re.compile(r"<think>\s*[\s\S]*?\s*</think>", re.IGNORECASE)


def extract_response_text(content: str) -> str:
    """Return the RESPONSE: section, or the content with any THOUGHT: section removed."""
    match = _RESPONSE_RE.search(content)
    if match:
        return match.group(1).strip()
    return _THOUGHT_RE.sub("", content, count=1).strip()


def extract_named_blocks(content: str) -> list[ToolCall]:
    """Find <tool_name>{json}</tool_name> blocks for known tool names."""
    calls: list[ToolCall] = []
    for match in _NAMED_BLOCK_RE.finditer(content):
        name = match.group(1)
        if name not in TOOL_NAMES:
            continue
        raw = match.group(2).strip()
        calls.append(decode_tool_call(name, raw or {}))
    return calls


def extract_call_blocks(content: str) -> list[ToolCall]:
    """Find <tool_call>/<function-call> blocks holding {"name", "arguments"}."""
    calls: list[ToolCall] = []
    for match in _CALL_BLOCK_RE.finditer(content):
        raw = match.group(2).strip()
        try:
            parsed: Any = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Unparsable tool_call block: %r", raw[:200])
            continue
        if not isinstance(parsed, dict):
            continue
        name = parsed.get("name")
        if not name or name not in TOOL_NAMES:
            continue
        calls.append(decode_tool_call(name, parsed.get("arguments")))
    return calls


def strip_tool_blocks(content: str) -> str:
    content = _CALL_BLOCK_RE.sub("", content)
    content = _NAMED_BLOCK_RE.sub(
        lambda m: "" if m.group(1) in TOOL_NAMES else m.group(0), content
    )
    return content.strip()


def strip_think_blocks(content: str) -> str:
    return _THINK_RE.sub("", content).strip()


def split_reply(content: str) -> tuple[str, list[ToolCall]]:
    """Split raw model text into (visible text, embedded tool calls)."""
    calls = extract_named_blocks(content) + extract_call_blocks(content)
    visible = strip_think_blocks(strip_tool_blocks(extract_response_text(content)))
    return visible, calls
