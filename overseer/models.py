"""Core domain models.

All turn-cycle stages, the effect processor and the host surfaces operate on
these types. Pydantic is used for validation and serialisation at every data
boundary.

Messages and memory entries are frozen: the chronicle and memory logs are
append-only and nothing in them is edited after creation. Characters and the
world state are mutable, but only the effect processor (and the controller's
own bookkeeping) writes to them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

MessageType = Literal[
    "narrative",
    "dialogue",
    "meta",
    "system",
    "encounter",
    "mechanic",
]

# Message types that make up the story proper (what agents and the director read).
STORY_TYPES: tuple[str, ...] = ("narrative", "dialogue", "encounter")


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryEntry(BaseModel):
    """A single remembered fact, personal to one agent or shared by everyone."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    content: str
    created_at: datetime = Field(default_factory=_now)
    tags: tuple[str, ...] = ()
    is_shared: bool = False
    source_id: str | None = None


class ToolResult(BaseModel):
    """Metadata attached to a mechanic message."""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    result: str = "Success"


class Message(BaseModel):
    """A single entry in the session's append-only chronicle."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    seq: int
    sender: str
    sender_name: str
    content: str
    created_at: datetime = Field(default_factory=_now)
    type: MessageType
    image_url: str | None = None
    metadata: ToolResult | None = None  # present on mechanic messages only


class Character(BaseModel):
    """A party member: fixed identity and instructions, mutable stats and memories."""

    id: str
    name: str
    race: str = ""
    char_class: str = Field("", alias="class")
    age: int = 0
    persona: str = ""
    system_message: str
    visual_description: str = ""
    image: str | None = None

    hp: int
    max_hp: int = Field(ge=0)
    mp: int
    max_mp: int = Field(ge=0)
    ac: int = 10
    level: int = 1
    xp: int = 0
    spells: list[str] = Field(default_factory=list)
    abilities: list[str] = Field(default_factory=list)
    memories: list[MemoryEntry] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _stats_within_bounds(self) -> Character:
        if not 0 <= self.hp <= self.max_hp:
            raise ValueError(f"hp {self.hp} outside 0..{self.max_hp}")
        if not 0 <= self.mp <= self.max_mp:
            raise ValueError(f"mp {self.mp} outside 0..{self.max_mp}")
        return self


class InventoryItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    quantity: int
    description: str = ""


class WorldEvent(BaseModel):
    """One almanac record."""

    model_config = ConfigDict(frozen=True)

    event: str
    consequence: str = ""
    reputation_shift: str = ""
    created_at: datetime = Field(default_factory=_now)


class CombatState(BaseModel):
    active: bool = False
    round: int = 1
    turn_index: int = 0
    order: list[str] = Field(default_factory=list)


class WorldState(BaseModel):
    """Party-wide mutable state. Written only by the effect processor."""

    inventory: list[InventoryItem] = Field(default_factory=list)
    gold: int = 0
    almanac: list[WorldEvent] = Field(default_factory=list)
    combat: CombatState = Field(default_factory=CombatState)
    shared_memories: list[MemoryEntry] = Field(default_factory=list)

    def find_item(self, name: str) -> InventoryItem | None:
        for item in self.inventory:
            if item.name == name:
                return item
        return None
