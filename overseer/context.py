"""Context windows and prompts for each LLM call in the cycle.

Two story windows are cut from the chronicle, both plain slices of the most
recent narrative/dialogue/encounter messages rendered oldest to newest:

  agent window     last 8 messages; the director's lines are labelled
                   "Narration" so party members don't echo its voice
  director window  last 12 messages, speaker names preserved

Around the window each prompt carries a status block: setting, scene, the
latest memories (most recent first, at most 4 per log), stats, inventory
and, for party turns only, the name = id roster address_character needs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from overseer.memory import recent_memories
from overseer.models import STORY_TYPES, Character, CombatState, InventoryItem, Message
from overseer.presets import DIRECTOR_ID
from overseer.prompts import (
    AGENT_RULES,
    AGENT_TEMPLATE,
    DIRECTOR_TEMPLATE,
    INTRO_TEMPLATE,
    META_TEMPLATE,
    render_prompt,
)
from overseer.state import SessionView

AGENT_WINDOW = 8
DIRECTOR_WINDOW = 12
MEMORY_LIMIT = 4
META_EXCERPT_CHARS = 120


def _story_messages(chronicle: Sequence[Message], size: int) -> list[Message]:
    story = [m for m in chronicle if m.type in STORY_TYPES]
    return story[-size:]


def director_story_window(chronicle: Sequence[Message], size: int = DIRECTOR_WINDOW) -> str:
    return "\n".join(f"{m.sender_name}: {m.content}" for m in _story_messages(chronicle, size))


def agent_story_window(chronicle: Sequence[Message], size: int = AGENT_WINDOW) -> str:
    lines = []
    for m in _story_messages(chronicle, size):
        speaker = "Narration" if m.sender == DIRECTOR_ID else m.sender_name
        lines.append(f"{speaker}: {m.content}")
    return "\n".join(lines)


def inventory_summary(items: Sequence[InventoryItem]) -> list[str]:
    return [f"{i.name} x{i.quantity}" for i in items]


def character_status(char: Character) -> str:
    return f"{char.name}: HP {char.hp}/{char.max_hp}, MP {char.mp}/{char.max_mp}, AC {char.ac}"


def combat_summary(combat: CombatState) -> str:
    if not combat.active:
        return ""
    order = ", ".join(combat.order) or "unset"
    return f"round {combat.round}, turn {combat.turn_index}, order {order}"


def _memory_lines(entries: Sequence[Any]) -> list[str]:
    return [m.content for m in recent_memories(entries, MEMORY_LIMIT)]


def build_agent_prompt(view: SessionView, char: Character) -> str:
    """Prompt for one party member's turn."""
    world = view.world
    ctx = {
        "setting": view.setting or "Unknown",
        "scene": view.current_scene,
        "story": agent_story_window(view.chronicle),
        "shared_memories": _memory_lines(view.shared_memories),
        "personal_memories": _memory_lines(view.personal_memories(char.id)),
        "status": f"HP {char.hp}/{char.max_hp}, MP {char.mp}/{char.max_mp}, AC {char.ac}, Level {char.level}",
        "inventory": inventory_summary(world.inventory),
        "roster": [f"{c.name} = {c.id}" for c in view.characters.values()],
        "rules": AGENT_RULES,
    }
    return render_prompt(AGENT_TEMPLATE, ctx)


def build_director_prompt(view: SessionView, latest_turn: str) -> str:
    """Prompt for the director's resolution, with the wider window."""
    world = view.world
    ctx = {
        "setting": view.setting or "Unknown",
        "scene": view.current_scene,
        "story": director_story_window(view.chronicle),
        "latest_turn": latest_turn,
        "shared_memories": _memory_lines(view.shared_memories),
        "personal_memories": _memory_lines(view.director_memories),
        "party_status": [character_status(c) for c in view.characters.values()],
        "combat": combat_summary(world.combat),
        "gold": str(world.gold),
        "inventory": inventory_summary(world.inventory),
    }
    return render_prompt(DIRECTOR_TEMPLATE, ctx)


def build_meta_prompt(director_text: str) -> str:
    return render_prompt(META_TEMPLATE, {"excerpt": director_text[:META_EXCERPT_CHARS]})


def build_intro_prompt(setting: str) -> str:
    return render_prompt(INTRO_TEMPLATE, {"setting": setting})
