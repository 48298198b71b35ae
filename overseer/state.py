"""Session state: the single owner of everything a campaign mutates.

SessionState holds the roster, the world state, the chronicle, the
director's own memory log and the forced-speaker queue. Only the turn
controller and the effect processor receive it; every other component
(context builder, HTTP routes, MCP server) gets a SessionView, a read-only
facade over the same objects.

The chronicle is append-only: append_message() is its only writer and
assigns the monotonically increasing seq that defines its total order.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from overseer.models import (
    Character,
    InventoryItem,
    MemoryEntry,
    Message,
    MessageType,
    ToolResult,
    WorldState,
)
from overseer.presets import DIRECTOR_ID, STARTING_GOLD, default_inventory, default_party


class SessionState:
    def __init__(
        self,
        characters: Iterable[Character] | None = None,
        inventory: Iterable[InventoryItem] | None = None,
        gold: int = STARTING_GOLD,
    ) -> None:
        party = default_party() if characters is None else list(characters)
        self.characters: dict[str, Character] = {c.id: c for c in party}
        self.world = WorldState(
            inventory=default_inventory() if inventory is None else list(inventory),
            gold=gold,
        )
        self.chronicle: list[Message] = []
        self.director_memories: list[MemoryEntry] = []
        self.forced_speakers: deque[str] = deque()
        self.setting = ""
        self.current_scene = "Introduction"
        self._seq = 0

    def append_message(
        self,
        *,
        sender: str,
        sender_name: str,
        content: str,
        type: MessageType,
        image_url: str | None = None,
        metadata: ToolResult | None = None,
    ) -> Message:
        self._seq += 1
        msg = Message(
            seq=self._seq,
            sender=sender,
            sender_name=sender_name,
            content=content,
            type=type,
            image_url=image_url,
            metadata=metadata,
        )
        self.chronicle.append(msg)
        return msg

    def view(self) -> SessionView:
        return SessionView(self)


class SessionView:
    """Read-only access to a SessionState."""

    def __init__(self, state: SessionState) -> None:
        self._state = state

    @property
    def characters(self) -> Mapping[str, Character]:
        """Copies of the party members; edits do not reach the session."""
        return MappingProxyType({
            cid: char.model_copy(deep=True) for cid, char in self._state.characters.items()
        })

    @property
    def chronicle(self) -> tuple[Message, ...]:
        return tuple(self._state.chronicle)

    @property
    def world(self) -> WorldState:
        return self._state.world.model_copy(deep=True)

    @property
    def shared_memories(self) -> tuple[MemoryEntry, ...]:
        return tuple(self._state.world.shared_memories)

    @property
    def director_memories(self) -> tuple[MemoryEntry, ...]:
        return tuple(self._state.director_memories)

    @property
    def forced_pending(self) -> bool:
        return bool(self._state.forced_speakers)

    @property
    def setting(self) -> str:
        return self._state.setting

    @property
    def current_scene(self) -> str:
        return self._state.current_scene

    def personal_memories(self, owner_id: str) -> tuple[MemoryEntry, ...]:
        if owner_id == DIRECTOR_ID:
            return self.director_memories
        char = self._state.characters.get(owner_id)
        return tuple(char.memories) if char else ()

    def roster(self) -> list[dict[str, Any]]:
        """Serialisable roster for host observers."""
        return [c.model_dump(mode="json") for c in self._state.characters.values()]
