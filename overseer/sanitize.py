"""Reply sanitising before anything reaches the chronicle.

Party members must stay in character: lines where the model starts speaking
as the narrator are dropped and repeated lines collapsed. Every role then
goes through the same length bound, with per-role sentence and character
limits. Text cut by the character limit ends in "...".
"""

from __future__ import annotations

import re

AGENT_LIMITS = (3, 360)
DIRECTOR_LIMITS = (4, 520)
META_LIMITS = (2, 240)

NARRATOR_PREFIXES = ("dungeon master:", "narration:", "dm:")

_WS_RE = re.compile(r"\s+")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")


def bound_length(text: str, max_sentences: int, max_chars: int) -> str:
    """Keep the first max_sentences sentences, then hard-cap at max_chars."""
    trimmed = _WS_RE.sub(" ", text or "").strip()
    if not trimmed:
        return trimmed
    sentences = _SENTENCE_RE.findall(trimmed) or [trimmed]
    limited = " ".join(s.strip() for s in sentences[:max_sentences]).strip()
    if len(limited) > max_chars:
        return f"{limited[:max_chars].strip()}..."
    return limited


def sanitize_agent_reply(text: str) -> str:
    lines = [line.strip() for line in (text or "").split("\n")]
    kept: list[str] = []
    for line in lines:
        if not line or line.lower().startswith(NARRATOR_PREFIXES):
            continue
        if line not in kept:
            kept.append(line)
    return bound_length(" ".join(kept), *AGENT_LIMITS)


def sanitize_director_reply(text: str) -> str:
    return bound_length(text, *DIRECTOR_LIMITS)


def sanitize_meta_reply(text: str) -> str:
    return bound_length(text, *META_LIMITS)
