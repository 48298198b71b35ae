"""Handlebars prompt rendering for the cycle's LLM calls.

Free text (story windows, replies, memories) is inserted with triple-stash
{{{...}}} so quotes and angle brackets reach the model unescaped.
"""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def _helper_bullets(this, items, empty="None yet."):
    """{{bullets list}}: one "- item" line per entry, or a fallback."""
    items = list(items or [])
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def _helper_join(this, items, sep=", "):
    """{{join list ", "}}: join strings."""
    return sep.join(str(i) for i in (items or []))


_HELPERS: dict[str, Callable] = {
    "bullets": _helper_bullets,
    "join": _helper_join,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


AGENT_RULES = " ".join([
    "Respond only in-character, first person.",
    "No out-of-character analysis or system references.",
    "Do not repeat or quote narration or other speakers.",
    'Do not include speaker labels like "Dungeon Master:".',
    "Do not narrate the world beyond your immediate senses.",
    "Keep it concise: 2-4 sentences plus a brief intention or question.",
    "If you want another party member to respond next, call address_character "
    "with their id exactly as shown.",
])


AGENT_TEMPLATE = """Setting: {{{setting}}}

Current Scene: {{{scene}}}

Story so far:
{{#if story}}{{{story}}}{{else}}No narrative yet.{{/if}}

Shared Memories:
{{{bullets shared_memories}}}

Your Memories:
{{{bullets personal_memories}}}

Your Status: {{{status}}}

Party Inventory: {{#if inventory}}{{{join inventory ", "}}}{{else}}None.{{/if}}

Party Member IDs: {{{join roster ", "}}}

Rules: {{{rules}}}

Respond to the most recent events."""


DIRECTOR_TEMPLATE = """Setting: {{{setting}}}

Current Scene: {{{scene}}}

Chronicle Window:
{{#if story}}{{{story}}}{{else}}No narrative yet.{{/if}}

Latest Turn:
{{{latest_turn}}}

Shared Memories:
{{{bullets shared_memories}}}

Your Memories:
{{{bullets personal_memories}}}

Party Status:
{{{bullets party_status "None."}}}

{{#if combat}}Combat: {{{combat}}}

{{/if}}Party Gold: {{{gold}}}

Party Inventory: {{#if inventory}}{{{join inventory ", "}}}{{else}}None.{{/if}}

Resolve the scene with vivid narration."""


META_TEMPLATE = 'Sharp observation for the Overseer tab on: "{{{excerpt}}}..."'

INTRO_TEMPLATE = "Introduction to: {{{setting}}}. Be atmospheric."
