"""Turn selection and the director-resolution rule.

Both are pure functions so the cycle's decisions can be tested with a seeded
random source and plain arguments.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from enum import Enum

# At most this many party turns per cycle while forced speakers are queued.
MAX_PARTY_TURNS_PER_CYCLE = 2
# The director resolves unconditionally once this many party turns have passed.
RESOLVE_AFTER_TURNS = 2


class Phase(str, Enum):
    IDLE = "IDLE"
    PARTY_INTENT = "PARTY_INTENT"
    DIRECTOR_RESOLUTION = "DIRECTOR_RESOLUTION"
    META_COMMENT = "META_COMMENT"


def select_speaker(
    agent_ids: Sequence[str],
    forced_id: str | None,
    rng: random.Random,
) -> str:
    """Pick who speaks next.

    A forced id wins if it still names an agent; otherwise the choice is
    uniform over all agents.
    """
    if not agent_ids:
        raise ValueError("Cannot select a speaker from an empty roster")
    if forced_id is not None and forced_id in agent_ids:
        return forced_id
    return rng.choice(list(agent_ids))


def should_resolve(*, injected: bool, turns_since_director: int, forced_pending: bool) -> bool:
    """Whether the director resolves at the end of this cycle's party phase."""
    if injected:
        return True
    if turns_since_director >= RESOLVE_AFTER_TURNS:
        return True
    return not forced_pending and turns_since_director >= 1
