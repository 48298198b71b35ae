"""Tool-call effect processor.

Applies a batch of decoded tool calls, in order, to the session state. Later
calls in a batch see the effects of earlier ones. Nothing here raises on bad
model output:

  - unknown tool names are a logged no-op with result "Success"
  - malformed arguments skip the call (result "Ignored: invalid arguments")
  - references that do not resolve (character ids, item names, address
    targets) are no-ops

Every call, applied or not, is also committed to the chronicle as exactly one
mechanic message carrying the tool name, arguments and result.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from overseer.memory import format_search_result, record_memory, search_memories
from overseer.models import InventoryItem, ToolResult, WorldEvent
from overseer.presets import ENGINE_ID, ENGINE_NAME
from overseer.state import SessionState
from overseer.tools import (
    AddressCharacter,
    LogWorldEvent,
    Malformed,
    ModifyInventory,
    QueryMemories,
    RecordMemory,
    SetCombatState,
    ToolCall,
    Unrecognized,
    UpdateGold,
    UpdateHealth,
    UpdateMana,
)

logger = logging.getLogger(__name__)

SUCCESS = "Success"
IGNORED = "Ignored: invalid arguments"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def resolve_character(state: SessionState, target: str) -> str | None:
    """Exact id match first, then case-insensitive display-name match."""
    if target in state.characters:
        return target
    lowered = target.lower()
    for char in state.characters.values():
        if char.name.lower() == lowered:
            return char.id
    return None


# ---------------------------------------------------------------------------
# Individual effects
# ---------------------------------------------------------------------------

def _update_health(state: SessionState, op: UpdateHealth) -> None:
    char = state.characters.get(op.character_id)
    if char is None:
        logger.debug("update_health: unknown character %r", op.character_id)
        return
    char.hp = clamp(char.hp + op.amount, 0, char.max_hp)


def _update_mana(state: SessionState, op: UpdateMana) -> None:
    char = state.characters.get(op.character_id)
    if char is None:
        logger.debug("update_mana: unknown character %r", op.character_id)
        return
    char.mp = clamp(char.mp + op.amount, 0, char.max_mp)


def _modify_inventory(state: SessionState, op: ModifyInventory) -> None:
    inventory = state.world.inventory
    existing = state.world.find_item(op.item_name)
    if op.action == "ADD":
        if existing is not None:
            existing.quantity += op.quantity
        else:
            inventory.append(InventoryItem(
                name=op.item_name, quantity=op.quantity, description=op.description,
            ))
        return

    if existing is None:
        return
    if existing.quantity <= op.quantity:
        inventory.remove(existing)
    else:
        existing.quantity -= op.quantity


def _update_gold(state: SessionState, op: UpdateGold) -> None:
    if op.action == "ADD":
        state.world.gold += op.amount
    else:
        state.world.gold = max(0, state.world.gold - op.amount)


def _set_combat_state(state: SessionState, op: SetCombatState) -> None:
    combat = state.world.combat
    combat.active = op.active
    combat.order = list(op.initiative_order)
    combat.round = 1
    combat.turn_index = 0


def _address_character(state: SessionState, op: AddressCharacter) -> None:
    resolved = resolve_character(state, op.target_id)
    if resolved is None:
        logger.debug("address_character: unresolved target %r", op.target_id)
        return
    state.forced_speakers.append(resolved)


# ---------------------------------------------------------------------------
# Batch entry point
# ---------------------------------------------------------------------------

def apply_tool_call(state: SessionState, call: ToolCall, speaker_id: str) -> str:
    """Apply one call and return its result string (no chronicle record)."""
    op = call.operation
    logger.debug("apply %s from %s", call.name, speaker_id)

    if isinstance(op, Malformed):
        logger.warning("Dropping %s from %s: %s", call.name, speaker_id, op.error)
        return IGNORED
    if isinstance(op, Unrecognized):
        logger.warning("Unknown tool %r from %s, ignored", op.name, speaker_id)
        return SUCCESS

    if isinstance(op, UpdateHealth):
        _update_health(state, op)
    elif isinstance(op, UpdateMana):
        _update_mana(state, op)
    elif isinstance(op, RecordMemory):
        record_memory(state, speaker_id, op.content, tags=op.tags, is_shared=op.is_shared)
    elif isinstance(op, QueryMemories):
        found = search_memories(state.view(), speaker_id, op.query)
        return format_search_result(found)
    elif isinstance(op, ModifyInventory):
        _modify_inventory(state, op)
    elif isinstance(op, UpdateGold):
        _update_gold(state, op)
    elif isinstance(op, LogWorldEvent):
        state.world.almanac.append(WorldEvent(
            event=op.event,
            consequence=op.consequence,
            reputation_shift=op.reputation_shift,
        ))
    elif isinstance(op, SetCombatState):
        _set_combat_state(state, op)
    elif isinstance(op, AddressCharacter):
        _address_character(state, op)
    return SUCCESS


def apply_tool_calls(state: SessionState, calls: Iterable[ToolCall], speaker_id: str) -> list[str]:
    """Apply a batch in order, recording one mechanic message per call."""
    results: list[str] = []
    for call in calls:
        result = apply_tool_call(state, call, speaker_id)
        state.append_message(
            sender=ENGINE_ID,
            sender_name=ENGINE_NAME,
            content=f"Mechanical update: {call.name.replace('_', ' ')}",
            type="mechanic",
            metadata=ToolResult(tool_name=call.name, args=call.arguments, result=result),
        )
        results.append(result)
    return results
