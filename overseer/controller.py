"""Turn cycle controller: runs the campaign one cycle at a time.

Cycle flow (IDLE → PARTY_INTENT → DIRECTOR_RESOLUTION → META_COMMENT → IDLE):

  1. Party intent. If the user queued an injection, the first turn is that
     text verbatim, attributed to the Guide, with no LLM call. Otherwise a
     speaker is chosen (next forced speaker from address_character, else
     uniformly at random), its prompt is built, the model is called, tool
     calls are applied, and the sanitised reply is committed as dialogue.
     Turns repeat while forced speakers are queued, at most 2 per cycle.
  2. Director resolution, only if should_resolve() says so: an injection
     happened this cycle, or 2 party turns have passed since the last
     resolution, or 1 has and nobody is waiting to be addressed. The
     director's tool calls are applied and its bounded reply committed as
     narrative; the party-turn counter resets.
  3. Meta comment, always straight after a resolution: the observer
     comments on the director's text. Its tool calls are not processed.

Each phase's LLM call and tool effects complete before the next phase
builds its context. At most one cycle runs at a time; a trigger that arrives
mid-cycle is dropped (user text is never dropped, it waits in the injection
queue).

Autonomous mode schedules the next cycle itself: immediately when an
injection is waiting, otherwise after the idle delay. Turning it off, or
shutting down, cancels the pending timer.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import deque
from typing import Any

from overseer.context import (
    build_agent_prompt,
    build_director_prompt,
    build_intro_prompt,
    build_meta_prompt,
    director_story_window,
)
from overseer.effects import apply_tool_calls
from overseer.llm import LLM
from overseer.models import Message, WorldState
from overseer.portraits import PortraitGenerator, PortraitReady, PortraitStudio
from overseer.presets import (
    DIRECTOR_ID,
    DIRECTOR_INSTRUCTION,
    DIRECTOR_NAME,
    GUIDE_ID,
    GUIDE_NAME,
    OBSERVER_ID,
    OBSERVER_INSTRUCTION,
    OBSERVER_NAME,
)
from overseer.sanitize import sanitize_agent_reply, sanitize_director_reply, sanitize_meta_reply
from overseer.state import SessionState, SessionView
from overseer.turns import MAX_PARTY_TURNS_PER_CYCLE, Phase, select_speaker, should_resolve

logger = logging.getLogger(__name__)

# Fields the host may change on a party member before the campaign starts.
CONFIGURABLE_FIELDS = frozenset({
    "name", "race", "char_class", "age", "persona", "system_message",
    "visual_description", "hp", "max_hp", "mp", "max_mp", "ac", "level", "xp",
    "spells", "abilities",
})


class TurnController:
    def __init__(
        self,
        state: SessionState,
        llm: LLM,
        *,
        portraits: PortraitGenerator | None = None,
        rng: random.Random | None = None,
        idle_delay: float = 10.0,
        phase_delay: float = 0.8,
    ) -> None:
        self._state = state
        self._llm = llm
        self._rng = rng or random.Random()
        self._idle_delay = idle_delay
        self._phase_delay = phase_delay
        self._studio = PortraitStudio(portraits, self.apply_portrait) if portraits else None

        self._phase = Phase.IDLE
        self._busy = False
        self._started = False
        self._autonomous = False
        self._injections: deque[str] = deque()
        self._turns_since_director = 0
        self._active_speaker: str | None = None
        self._timer: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def started(self) -> bool:
        return self._started

    @property
    def autonomous(self) -> bool:
        return self._autonomous

    @property
    def active_speaker(self) -> str | None:
        return self._active_speaker

    @property
    def pending_injections(self) -> int:
        return len(self._injections)

    @property
    def turns_since_director(self) -> int:
        return self._turns_since_director

    @property
    def view(self) -> SessionView:
        return self._state.view()

    @property
    def chronicle(self) -> tuple[Message, ...]:
        return self.view.chronicle

    @property
    def world(self) -> WorldState:
        return self.view.world

    def roster(self) -> list[dict[str, Any]]:
        return self.view.roster()

    def status(self) -> dict[str, Any]:
        return {
            "phase": self._phase.value,
            "busy": self._busy,
            "started": self._started,
            "autonomous": self._autonomous,
            "active_speaker": self._active_speaker,
            "pending_injections": len(self._injections),
            "setting": self._state.setting,
            "scene": self._state.current_scene,
        }

    # ------------------------------------------------------------------
    # Host commands
    # ------------------------------------------------------------------

    def configure_character(self, character_id: str, **fields: Any) -> None:
        """Edit a party member before the campaign starts."""
        if self._started:
            raise ValueError("Characters can only be configured before the campaign starts")
        char = self._state.characters.get(character_id)
        if char is None:
            raise KeyError(character_id)
        unknown = set(fields) - CONFIGURABLE_FIELDS
        if unknown:
            raise ValueError(f"Not configurable: {', '.join(sorted(unknown))}")
        merged = char.model_dump(by_alias=False) | fields
        self._state.characters[character_id] = type(char).model_validate(merged)

    async def start_campaign(self, setting: str) -> Message:
        """Record the setting, request portraits, and narrate the introduction."""
        setting = (setting or "").strip()
        if not setting:
            raise ValueError("A campaign needs a setting")
        if self._started:
            raise ValueError("Campaign already started")
        if not self._state.characters:
            raise ValueError("A campaign needs at least one character")

        self._started = True
        self._busy = True
        self._state.setting = setting
        logger.info("Campaign started: %s", setting)
        try:
            if self._studio is not None:
                self._studio.request(list(self._state.characters.values()))

            reply = await self._llm.invoke(DIRECTOR_INSTRUCTION, build_intro_prompt(setting))
            apply_tool_calls(self._state, reply.tool_calls, DIRECTOR_ID)
            intro = self._state.append_message(
                sender=DIRECTOR_ID, sender_name=DIRECTOR_NAME,
                content=reply.text.strip(), type="narrative",
            )
        finally:
            self._busy = False
        self._reschedule()
        return intro

    async def submit_user_input(self, text: str) -> bool:
        """Queue user text as an injection.

        Returns False (and changes nothing) for empty input. In manual mode a
        cycle runs right away if none is in flight; in autonomous mode one is
        scheduled immediately.
        """
        text = (text or "").strip()
        if not text:
            return False
        self._injections.append(text)
        if self._autonomous:
            self._reschedule()
        elif not self._busy:
            await self.run_cycle()
        return True

    async def advance(self) -> bool:
        """Run one cycle on explicit request (manual mode)."""
        return await self.run_cycle()

    def set_autonomous_mode(self, enabled: bool) -> None:
        if enabled == self._autonomous:
            return
        self._autonomous = enabled
        logger.info("Autonomous mode %s", "on" if enabled else "off")
        if enabled:
            self._reschedule()
        else:
            self._cancel_timer()

    def replace_llm(self, llm: LLM) -> None:
        """Switch provider; takes effect from the next LLM call."""
        self._llm = llm

    async def summarize(self) -> str:
        return await self._llm.summarize(director_story_window(self._state.chronicle))

    def apply_portrait(self, event: PortraitReady) -> None:
        """Single entry point for portrait results."""
        char = self._state.characters.get(event.character_id)
        if char is not None:
            char.image = event.image

    async def wait_for_portraits(self) -> None:
        if self._studio is not None:
            await self._studio.wait()

    async def shutdown(self) -> None:
        self._autonomous = False
        self._cancel_timer()
        if self._studio is not None:
            await self._studio.cancel()

    # ------------------------------------------------------------------
    # The cycle
    # ------------------------------------------------------------------

    async def run_cycle(self) -> bool:
        """Run one full cycle. Returns False if it could not start."""
        if not self._started or self._busy:
            return False
        self._busy = True
        try:
            await self._cycle()
        finally:
            self._phase = Phase.IDLE
            self._active_speaker = None
            self._busy = False
        self._reschedule()
        return True

    async def _cycle(self) -> None:
        self._enter(Phase.PARTY_INTENT)
        injected = False
        latest_turn = ""
        turns = 0
        while True:
            if self._injections and not injected:
                latest_turn = self._take_injection()
                injected = True
            else:
                latest_turn = await self._take_party_turn()
            turns += 1
            self._turns_since_director += 1
            if not (self._state.forced_speakers and turns < MAX_PARTY_TURNS_PER_CYCLE):
                break

        if self._phase_delay:
            await asyncio.sleep(self._phase_delay)

        resolve = should_resolve(
            injected=injected,
            turns_since_director=self._turns_since_director,
            forced_pending=bool(self._state.forced_speakers),
        )
        if not resolve:
            logger.debug("Director deferred (%d turns, forced queued)", self._turns_since_director)
            return

        director_text = await self._director_turn(latest_turn)
        await self._meta_turn(director_text)

    def _enter(self, phase: Phase) -> None:
        self._phase = phase
        logger.info("Phase %s", phase.value)

    def _take_injection(self) -> str:
        text = self._injections.popleft()
        self._state.append_message(
            sender=GUIDE_ID, sender_name=GUIDE_NAME, content=text, type="dialogue",
        )
        return f'{GUIDE_NAME} intervenes: "{text}"'

    async def _take_party_turn(self) -> str:
        forced = self._state.forced_speakers.popleft() if self._state.forced_speakers else None
        speaker_id = select_speaker(list(self._state.characters), forced, self._rng)
        char = self._state.characters[speaker_id]
        self._active_speaker = speaker_id
        logger.debug("Party turn: %s%s", speaker_id, " (forced)" if forced == speaker_id else "")

        prompt = build_agent_prompt(self.view, char)
        reply = await self._llm.invoke(char.system_message, prompt)
        apply_tool_calls(self._state, reply.tool_calls, speaker_id)
        text = sanitize_agent_reply(reply.text)
        self._state.append_message(
            sender=speaker_id, sender_name=char.name, content=text, type="dialogue",
        )
        self._active_speaker = None
        return f"{char.name}: {text}"

    async def _director_turn(self, latest_turn: str) -> str:
        self._enter(Phase.DIRECTOR_RESOLUTION)
        reply = await self._llm.invoke(
            DIRECTOR_INSTRUCTION, build_director_prompt(self.view, latest_turn),
        )
        apply_tool_calls(self._state, reply.tool_calls, DIRECTOR_ID)
        self._state.append_message(
            sender=DIRECTOR_ID, sender_name=DIRECTOR_NAME,
            content=sanitize_director_reply(reply.text), type="narrative",
        )
        self._turns_since_director = 0
        return reply.text

    async def _meta_turn(self, director_text: str) -> None:
        self._enter(Phase.META_COMMENT)
        reply = await self._llm.invoke(OBSERVER_INSTRUCTION, build_meta_prompt(director_text))
        self._state.append_message(
            sender=OBSERVER_ID, sender_name=OBSERVER_NAME,
            content=sanitize_meta_reply(reply.text), type="meta",
        )

    # ------------------------------------------------------------------
    # Autonomous scheduling
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reschedule(self) -> None:
        self._cancel_timer()
        if not (self._autonomous and self._started) or self._busy:
            return
        delay = 0.0 if self._injections else self._idle_delay
        self._timer = asyncio.get_running_loop().create_task(self._fire_after(delay))

    async def _fire_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._timer = None
        try:
            await self.run_cycle()
        except Exception:
            logger.exception("Autonomous cycle failed")
            self._reschedule()

