"""Built-in party, system instructions and setting suggestions."""

from __future__ import annotations

from overseer.models import Character, InventoryItem, MemoryEntry

DIRECTOR_ID = "dungeon_master"
DIRECTOR_NAME = "Dungeon Master"
OBSERVER_ID = "overseer"
OBSERVER_NAME = "Overseer"
GUIDE_ID = "guide"
GUIDE_NAME = "The Guide"
ENGINE_ID = "system"
ENGINE_NAME = "Engine"

DIRECTOR_INSTRUCTION = (
    "You are the Dungeon Master. You manage the game state and World Almanac. "
    "You have access to a shared and personal memory database. Use query_memories "
    "to maintain continuity and record_memory to save lore."
)
OBSERVER_INSTRUCTION = "You are the Overseer. Observe and comment."

SETTING_SUGGESTIONS = [
    "The Sunken Citadel of Oakhaven",
    "The Whispering Woods of the Banshee",
    "A Midnight Heist at the Duke's Gala",
    "The Frozen Tundra of the Frost Giants",
    "The Eldritch Library of Floating Isles",
]

STARTING_GOLD = 50


def _background(*facts: str) -> list[MemoryEntry]:
    return [MemoryEntry(content=fact, tags=("background",)) for fact in facts]


def default_inventory() -> list[InventoryItem]:
    return [
        InventoryItem(name="Rations", quantity=10, description="Standard trail food."),
        InventoryItem(name="Torch", quantity=5, description="Standard torch."),
    ]


def default_party() -> list[Character]:
    """Fresh copies of the four preset party members."""
    return [
        Character(
            id="arin", name="Arin", race="Elf", char_class="Ranger", age=112,
            hp=24, max_hp=24, mp=12, max_mp=12, ac=15, level=3, xp=900,
            spells=["Hunter's Mark", "Cure Wounds"],
            abilities=["Natural Explorer", "Archery Fighting Style"],
            memories=_background(
                "Born in the Whispering Woods",
                "Owns a silver locket from a lost companion",
            ),
            persona="Vigilant and resourceful Elf Ranger of the Greenwood.",
            system_message=(
                "I am Arin, an Elf Ranger. You have a long-term memory database. "
                "Use query_memories to recall facts about NPCs, locations, and past "
                "events. Use record_memory to etch new events into your soul."
            ),
            visual_description=(
                "Elf ranger with emerald eyes, hawk-feather braids, dragonscale leather "
                "armor, glowing ethereal recurve bow, misty forest background."
            ),
        ),
        Character(
            id="borin", name="Borin Stonebeard", race="Dwarf", char_class="Warrior", age=187,
            hp=34, max_hp=34, mp=5, max_mp=5, ac=18, level=3, xp=900,
            abilities=["Second Wind", "Action Surge", "Dwarven Resilience"],
            memories=_background(
                "Veteran of the Battle of Deep Crag",
                "Loves spicy cave-fungus stew",
            ),
            persona="Unyielding and battle-hardened Dwarf Warrior.",
            system_message=(
                "GROND! I am Borin Stonebeard. You have a long-term memory database. "
                "Use query_memories if you need to remember someone or something. "
                "Use record_memory to remember new battles or allies."
            ),
            visual_description=(
                "Dwarf warrior, massive auburn beard with gold rings, rune-etched plate "
                "armor, monolithic stone warhammer, forge embers."
            ),
        ),
        Character(
            id="celeste", name="Celeste Lumina", race="Human", char_class="Mage", age=28,
            hp=18, max_hp=18, mp=30, max_mp=30, ac=12, level=3, xp=900,
            spells=["Magic Missile", "Shield", "Misty Step"],
            abilities=["Arcane Recovery", "Sculpt Spells"],
            memories=_background(
                "Once touched the fringe of the Void",
                "Seeking the missing pages of the Codex Aethel",
            ),
            persona="Human Mage and seeker of arcane wisdom.",
            system_message=(
                "I am Celeste Lumina. You have a long-term memory database. If a fact "
                "escapes your immediate attention, use query_memories. Use record_memory "
                "to store arcane discoveries."
            ),
            visual_description=(
                "Human mage, glowing sapphire eyes, translucent blue robes, floating "
                "crystalline staff, celestial library background."
            ),
        ),
        Character(
            id="dara", name="Dara Swiftfoot", race="Halfling", char_class="Rogue", age=25,
            hp=21, max_hp=21, mp=10, max_mp=10, ac=16, level=3, xp=900,
            abilities=["Sneak Attack", "Cunning Action", "Halfling Luck"],
            memories=_background(
                "Still owes gold to Big Sal",
                "Master of the Three-Finger lock-pick technique",
            ),
            persona="Cunning and agile Halfling Rogue.",
            system_message=(
                "I'm Dara Swiftfoot. You have a long-term memory database. Use "
                "query_memories to keep your stories straight. Use record_memory to "
                "remember who owes you money."
            ),
            visual_description=(
                "Halfling rogue, shadow-silk leather armor, obsidian daggers, "
                "rain-slicked rooftop at midnight."
            ),
        ),
    ]
