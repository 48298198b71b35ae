"""Tests for overseer.models and the preset party."""

import pytest
from pydantic import ValidationError

from overseer.models import Character, Message, WorldState, InventoryItem, MemoryEntry
from overseer.presets import STARTING_GOLD, default_inventory, default_party


class TestCharacter:
    def test_class_alias_and_field_name(self) -> None:
        by_alias = Character.model_validate({
            "id": "x", "name": "X", "class": "Bard", "system_message": "s",
            "hp": 1, "max_hp": 1, "mp": 0, "max_mp": 0,
        })
        by_name = Character(id="x", name="X", char_class="Bard", system_message="s",
                            hp=1, max_hp=1, mp=0, max_mp=0)
        assert by_alias.char_class == by_name.char_class == "Bard"

    def test_stats_are_required(self) -> None:
        with pytest.raises(ValidationError):
            Character.model_validate({"id": "x", "name": "X", "system_message": "s"})


class TestFrozenRecords:
    def test_message_is_immutable(self) -> None:
        msg = Message(seq=1, sender="a", sender_name="A", content="hi", type="dialogue")
        with pytest.raises(ValidationError):
            msg.content = "changed"

    def test_memory_entry_is_immutable(self) -> None:
        entry = MemoryEntry(content="fact")
        with pytest.raises(ValidationError):
            entry.content = "other"

    def test_unknown_message_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(seq=1, sender="a", sender_name="A", content="hi", type="shout")


class TestWorldState:
    def test_find_item_is_exact(self) -> None:
        world = WorldState(inventory=[InventoryItem(name="Torch", quantity=5)])
        assert world.find_item("Torch").quantity == 5
        assert world.find_item("torch") is None


class TestPresets:
    def test_default_party(self) -> None:
        party = default_party()
        assert [c.id for c in party] == ["arin", "borin", "celeste", "dara"]
        for char in party:
            assert 0 <= char.hp <= char.max_hp
            assert 0 <= char.mp <= char.max_mp
            assert char.system_message
            assert all("background" in m.tags for m in char.memories)

    def test_default_party_is_a_fresh_copy(self) -> None:
        first = default_party()
        first[0].hp = 0
        assert default_party()[0].hp == default_party()[0].max_hp

    def test_starting_inventory_and_gold(self) -> None:
        assert {(i.name, i.quantity) for i in default_inventory()} == {("Rations", 10), ("Torch", 5)}
        assert STARTING_GOLD == 50
