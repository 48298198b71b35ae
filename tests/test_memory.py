"""Tests for overseer.memory: scoping, search and recency."""

from overseer.memory import (
    NO_RESULTS,
    format_search_result,
    recent_memories,
    record_memory,
    search_memories,
)
from overseer.models import MemoryEntry
from overseer.presets import DIRECTOR_ID
from overseer.state import SessionState


class TestRecordMemory:
    def test_personal_goes_to_owner_only(self) -> None:
        state = SessionState()
        before = {cid: len(c.memories) for cid, c in state.characters.items()}
        entry = record_memory(state, "arin", "The ferryman lies", tags=["npc"])
        assert entry.source_id == "arin"
        assert state.characters["arin"].memories[-1] is entry
        for cid, count in before.items():
            if cid != "arin":
                assert len(state.characters[cid].memories) == count
        assert state.world.shared_memories == []

    def test_shared_goes_to_world(self) -> None:
        state = SessionState()
        entry = record_memory(state, "borin", "The vault key is brass", is_shared=True)
        assert state.world.shared_memories == [entry]
        assert entry.is_shared

    def test_director_has_own_log(self) -> None:
        state = SessionState()
        record_memory(state, DIRECTOR_ID, "The duke is the villain")
        assert [m.content for m in state.director_memories] == ["The duke is the villain"]

    def test_unknown_personal_owner_dropped(self) -> None:
        state = SessionState()
        assert record_memory(state, "ghost", "boo") is None

    def test_duplicate_tags_collapsed(self) -> None:
        state = SessionState()
        entry = record_memory(state, "arin", "x", tags=["npc", "npc", "quest"])
        assert entry.tags == ("npc", "quest")


class TestSearch:
    def test_personal_then_shared(self) -> None:
        state = SessionState()
        record_memory(state, "arin", "Met a tall stranger at the bridge")
        record_memory(state, "dara", "The bridge toll is 3 gold")
        record_memory(state, "borin", "The bridge is cursed", is_shared=True)
        found = search_memories(state.view(), "arin", "BRIDGE")
        assert [m.content for m in found] == [
            "Met a tall stranger at the bridge",
            "The bridge is cursed",
        ]

    def test_tag_match(self) -> None:
        state = SessionState()
        record_memory(state, "arin", "Elowen", tags=["NPC"])
        assert len(search_memories(state.view(), "arin", "npc")) == 1

    def test_format(self) -> None:
        assert format_search_result([]) == NO_RESULTS
        text = format_search_result([MemoryEntry(content="a"), MemoryEntry(content="b")])
        assert text == "Found 2 relevant memories:\n- a\n- b"


class TestRecent:
    def test_most_recent_first(self) -> None:
        entries = [MemoryEntry(content=str(i)) for i in range(6)]
        assert [m.content for m in recent_memories(entries)] == ["5", "4", "3", "2"]

    def test_limit_zero(self) -> None:
        assert recent_memories([MemoryEntry(content="x")], 0) == []
