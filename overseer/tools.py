"""Tool schema and decoding.

Agents mutate shared state only by emitting tool calls. The same table of
tool definitions is rendered for both provider wire formats:

    openai_tools()           : OpenAI-compatible "tools" array (LM Studio)
    gemini_function_decls()  : Gemini "functionDeclarations"

Every raw (name, arguments) pair coming back from a provider is decoded once,
at the provider boundary, into a closed set of operation models. Names we do
not know become Unrecognized; arguments that fail validation become Malformed.
The effect processor only ever sees decoded ToolCall objects.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


# ---------------------------------------------------------------------------
# Definitions: what the model is told it can call
# ---------------------------------------------------------------------------

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "update_health",
        "description": "Modify the HP of a character or NPC.",
        "parameters": {
            "type": "object",
            "properties": {
                "characterId": {"type": "string", "description": "ID of the character"},
                "amount": {"type": "integer", "description": "Positive for heal, negative for damage"},
                "reason": {"type": "string", "description": "Narrative reason"},
            },
            "required": ["characterId", "amount", "reason"],
        },
    },
    {
        "name": "update_mana",
        "description": "Modify the MP (Mana/Essence) of a character.",
        "parameters": {
            "type": "object",
            "properties": {
                "characterId": {"type": "string"},
                "amount": {"type": "integer"},
                "reason": {"type": "string"},
            },
            "required": ["characterId", "amount", "reason"],
        },
    },
    {
        "name": "record_memory",
        "description": "Save a permanent memory. Can be personal or shared knowledge.",
        "parameters": {
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "The fact or event to remember."},
                "isShared": {"type": "boolean", "description": "If true, everyone in the party will know this."},
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Keywords like "npc", "quest", "location".',
                },
            },
            "required": ["content", "isShared"],
        },
    },
    {
        "name": "query_memories",
        "description": (
            "Search the memory database for relevant past events, NPCs, or facts. "
            "Always use this if you feel you have forgotten a detail."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Keywords or phrases to search for."},
            },
            "required": ["query"],
        },
    },
    {
        "name": "modify_inventory",
        "description": "Add or remove items from the party inventory.",
        "parameters": {
            "type": "object",
            "properties": {
                "itemName": {"type": "string"},
                "quantity": {"type": "integer"},
                "action": {"type": "string", "enum": ["ADD", "REMOVE"]},
                "description": {"type": "string"},
            },
            "required": ["itemName", "quantity", "action"],
        },
    },
    {
        "name": "update_gold",
        "description": "Modify the party gold amount.",
        "parameters": {
            "type": "object",
            "properties": {
                "amount": {"type": "integer"},
                "action": {"type": "string", "enum": ["ADD", "REMOVE"]},
            },
            "required": ["amount", "action"],
        },
    },
    {
        "name": "log_world_event",
        "description": "Record a major plot point in the World Almanac.",
        "parameters": {
            "type": "object",
            "properties": {
                "event": {"type": "string"},
                "consequence": {"type": "string"},
                "reputationShift": {"type": "string"},
            },
            "required": ["event", "consequence", "reputationShift"],
        },
    },
    {
        "name": "set_combat_state",
        "description": "Enable or disable combat mode and set turn order.",
        "parameters": {
            "type": "object",
            "properties": {
                "active": {"type": "boolean"},
                "initiativeOrder": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["active"],
        },
    },
    {
        "name": "address_character",
        "description": "Prompt a specific party member to respond next.",
        "parameters": {
            "type": "object",
            "properties": {
                "targetId": {"type": "string", "description": "Character ID to respond next."},
                "message": {"type": "string", "description": "Short in-character prompt or question."},
            },
            "required": ["targetId"],
        },
    },
]

TOOL_NAMES: frozenset[str] = frozenset(t["name"] for t in TOOL_DEFINITIONS)


def openai_tools() -> list[dict[str, Any]]:
    """Tool definitions in the OpenAI chat-completions format."""
    return [{"type": "function", "function": tool} for tool in TOOL_DEFINITIONS]


_GEMINI_TYPES = {
    "object": "OBJECT",
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
}


def _gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type":
            out["type"] = _GEMINI_TYPES[value]
        elif key == "properties":
            out["properties"] = {k: _gemini_schema(v) for k, v in value.items()}
        elif key == "items":
            out["items"] = _gemini_schema(value)
        else:
            out[key] = value
    return out


def gemini_function_decls() -> list[dict[str, Any]]:
    """Tool definitions as Gemini functionDeclarations."""
    return [
        {
            "name": tool["name"],
            "description": tool["description"],
            "parameters": _gemini_schema(tool["parameters"]),
        }
        for tool in TOOL_DEFINITIONS
    ]


# ---------------------------------------------------------------------------
# Operations: one model per recognised tool
# ---------------------------------------------------------------------------

Action = Literal["ADD", "REMOVE"]


class _Args(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UpdateHealth(_Args):
    character_id: str = Field(alias="characterId")
    amount: int
    reason: str = ""


class UpdateMana(_Args):
    character_id: str = Field(alias="characterId")
    amount: int
    reason: str = ""


class RecordMemory(_Args):
    content: str
    is_shared: bool = Field(False, alias="isShared")
    tags: list[str] = Field(default_factory=list)


class QueryMemories(_Args):
    query: str = ""


class ModifyInventory(_Args):
    item_name: str = Field(alias="itemName")
    quantity: int = Field(ge=0)
    action: Action
    description: str = ""


class UpdateGold(_Args):
    amount: int = Field(ge=0)
    action: Action


class LogWorldEvent(_Args):
    event: str
    consequence: str = ""
    reputation_shift: str = Field("", alias="reputationShift")


class SetCombatState(_Args):
    active: bool
    initiative_order: list[str] = Field(default_factory=list, alias="initiativeOrder")


class AddressCharacter(_Args):
    target_id: str = Field(alias="targetId")
    message: str = ""


class Unrecognized(BaseModel):
    name: str


class Malformed(BaseModel):
    error: str


Operation = Union[
    UpdateHealth,
    UpdateMana,
    RecordMemory,
    QueryMemories,
    ModifyInventory,
    UpdateGold,
    LogWorldEvent,
    SetCombatState,
    AddressCharacter,
    Unrecognized,
    Malformed,
]

_OPERATIONS: dict[str, type[_Args]] = {
    "update_health": UpdateHealth,
    "update_mana": UpdateMana,
    "record_memory": RecordMemory,
    "query_memories": QueryMemories,
    "modify_inventory": ModifyInventory,
    "update_gold": UpdateGold,
    "log_world_event": LogWorldEvent,
    "set_combat_state": SetCombatState,
    "address_character": AddressCharacter,
}


class ToolCall(BaseModel):
    """A decoded tool call: the raw name/arguments plus the typed operation."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    operation: Operation


def decode_operation(name: str, arguments: Any) -> Operation:
    """Decode raw arguments for a tool name into its operation model."""
    model = _OPERATIONS.get(name)
    if model is None:
        return Unrecognized(name=name)
    if not isinstance(arguments, dict):
        return Malformed(error=f"arguments must be an object, got {type(arguments).__name__}")
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        return Malformed(error=str(e))


def decode_tool_call(name: str, arguments: Any) -> ToolCall:
    """Normalise a provider tool call into a ToolCall.

    Arguments may arrive as an already-parsed dict, a JSON string (OpenAI
    style), or be missing entirely.
    """
    if arguments is None or arguments == "":
        arguments = {}
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            return ToolCall(
                name=name,
                arguments={"raw": arguments},
                operation=Malformed(error=f"unparsable arguments: {e}"),
            )
    operation = decode_operation(name, arguments)
    raw = arguments if isinstance(arguments, dict) else {"raw": arguments}
    return ToolCall(name=name, arguments=raw, operation=operation)
