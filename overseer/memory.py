"""Memory store: append-only personal and shared fact logs.

Personal entries live on one owner's log: a character's `memories` list, or
the director's log on the session. Shared entries live on the world state
and are visible to every agent and the director. Nothing is edited or
deleted once written.

Search is a naive case-insensitive substring match against content and tags.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from overseer.models import MemoryEntry
from overseer.presets import DIRECTOR_ID
from overseer.state import SessionState, SessionView

NO_RESULTS = "No relevant memories found in database."


def _personal_log(state: SessionState, owner_id: str) -> list[MemoryEntry] | None:
    if owner_id == DIRECTOR_ID:
        return state.director_memories
    char = state.characters.get(owner_id)
    return char.memories if char else None


def record_memory(
    state: SessionState,
    owner_id: str,
    content: str,
    *,
    tags: Iterable[str] = (),
    is_shared: bool = False,
) -> MemoryEntry | None:
    """Append a memory. Returns None if a personal entry has no known owner."""
    entry = MemoryEntry(
        content=content,
        tags=tuple(dict.fromkeys(tags)),
        is_shared=is_shared,
        source_id=owner_id,
    )
    if is_shared:
        state.world.shared_memories.append(entry)
        return entry
    log = _personal_log(state, owner_id)
    if log is None:
        return None
    log.append(entry)
    return entry


def matches(entry: MemoryEntry, query: str) -> bool:
    q = query.lower()
    return q in entry.content.lower() or any(q in tag.lower() for tag in entry.tags)


def search_memories(view: SessionView, owner_id: str, query: str) -> list[MemoryEntry]:
    """Search the owner's personal log, then the shared log."""
    candidates = list(view.personal_memories(owner_id)) + list(view.shared_memories)
    return [m for m in candidates if matches(m, query)]


def format_search_result(found: Sequence[MemoryEntry]) -> str:
    if not found:
        return NO_RESULTS
    lines = "\n".join(f"- {m.content}" for m in found)
    return f"Found {len(found)} relevant memories:\n{lines}"


def recent_memories(entries: Sequence[MemoryEntry], limit: int = 4) -> list[MemoryEntry]:
    """The last `limit` entries, most recent first."""
    if limit <= 0:
        return []
    return list(reversed(entries[-limit:]))
