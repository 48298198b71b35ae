"""Portrait generation: the one fire-and-forget side task of a session.

Portraits are requested for every party member at campaign start. Each
request runs as its own asyncio task and, when it finishes, publishes a
PortraitReady event to a callback; the callback (the controller) is the
only place a portrait is written onto a character. Narrative progress never
waits on these tasks.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from overseer.llm import GEMINI_BASE_URL
from overseer.models import Character
from overseer.settings import Settings

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gemini-2.5-flash-image"


@dataclass(frozen=True)
class PortraitReady:
    character_id: str
    image: str


class PortraitGenerator(Protocol):
    async def generate(self, description: str) -> str | None: ...


class GeminiPortraitGenerator:
    """Gemini image model; returns a data: URL, or None on any failure."""

    def __init__(
        self,
        api_key: str = "",
        model: str = IMAGE_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 120.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def generate(self, description: str) -> str | None:
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {"contents": [{"parts": [{"text": description}]}]}
        params = {"key": self._api_key} if self._api_key else None
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, params=params)
                resp.raise_for_status()
            parts = resp.json()["candidates"][0]["content"]["parts"]
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Portrait generation failed: %s", e)
            return None
        for part in parts:
            inline = part.get("inlineData")
            if inline and inline.get("data"):
                mime = inline.get("mimeType", "image/png")
                return f"data:{mime};base64,{inline['data']}"
        return None


class PortraitStudio:
    """Runs portrait requests as background tasks, caching by description."""

    def __init__(self, generator: PortraitGenerator, on_ready: Callable[[PortraitReady], None]) -> None:
        self._generator = generator
        self._on_ready = on_ready
        self._cache: dict[str, str] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def request(self, characters: list[Character]) -> None:
        for char in characters:
            task = asyncio.create_task(self._paint(char.id, char.visual_description))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _paint(self, character_id: str, description: str) -> None:
        image = self._cache.get(description)
        if image is None:
            image = await self._generator.generate(description)
            if image is None:
                return
            self._cache[description] = image
        self._on_ready(PortraitReady(character_id=character_id, image=image))

    async def wait(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait()


def create_portrait_generator(settings: Settings) -> PortraitGenerator | None:
    if not settings.enable_image_generation or settings.llm_provider != "gemini":
        return None
    return GeminiPortraitGenerator(api_key=os.getenv("GEMINI_API_KEY", ""))
