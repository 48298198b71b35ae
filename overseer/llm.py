"""LLM clients: HTTP connections to chat-completion backends.

The turn controller talks to every model through the protocol:

    async def invoke(self, system_instruction: str, prompt: str) -> LLMReply: ...
    async def summarize(self, text: str) -> str: ...

`invoke` never raises for provider trouble: connection errors, timeouts,
HTTP errors and unexpected response shapes are logged and replaced by the
provider's fixed in-universe placeholder text (with no tool calls), so a
failed call degrades one turn instead of aborting the cycle. `summarize`
returns "" on failure.

Implementations:

    GeminiLLM       : Google Generative Language REST API, native
                       function calling.
    OpenAICompatLLM : OpenAI-compatible /chat/completions (LM Studio and
                       friends). Native tool_calls are merged with tool
                       calls embedded in the reply text.
    EchoLLM         : returns the prompt back unchanged. Useful for
                       smoke-testing the cycle wiring without a running model.

Tool calls are decoded into typed operations here, at the provider boundary.
Tests use ScriptedLLM (tests/scripted_llm.py) instead.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field

from overseer.parsing import split_reply
from overseer.settings import Settings
from overseer.tools import ToolCall, decode_tool_call, gemini_function_decls, openai_tools

logger = logging.getLogger(__name__)

TEMPERATURE = 0.85
SUMMARY_INSTRUCTION = "Summarize the following chronicle into a cohesive legend."


class LLMReply(BaseModel):
    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def invoke(self, system_instruction: str, prompt: str) -> LLMReply: ...

    async def summarize(self, text: str) -> str: ...


# ---------------------------------------------------------------------------
# LLMError: raised inside the HTTP clients for all connection and protocol
# failures; converted to a placeholder before leaving invoke()
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""


class _HttpClient:
    """Shared POST/error-mapping logic for the HTTP backends."""

    placeholder = "The weave falters."

    def __init__(self, base_url: str, timeout: float = 120.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _post(self, url: str, body: dict[str, Any], params: dict[str, str] | None = None) -> Any:
        logger.debug("llm request url=%s body_len=%d", url, len(str(body)))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers(), params=params)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM backend returned HTTP {e.response.status_code}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM backend request failed: {e!r}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e

    async def _complete(self, system_instruction: str, prompt: str) -> LLMReply:
        raise NotImplementedError

    async def _summarize(self, text: str) -> str:
        raise NotImplementedError

    async def invoke(self, system_instruction: str, prompt: str) -> LLMReply:
        try:
            reply = await self._complete(system_instruction, prompt)
        except LLMError as e:
            logger.warning("%s failed, using placeholder: %s", type(self).__name__, e)
            return LLMReply(text=self.placeholder)
        logger.debug("llm response len=%d tool_calls=%d", len(reply.text), len(reply.tool_calls))
        return reply

    async def summarize(self, text: str) -> str:
        try:
            return await self._summarize(text)
        except LLMError as e:
            logger.warning("%s summarize failed: %s", type(self).__name__, e)
            return ""


# ---------------------------------------------------------------------------
# GeminiLLM
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiLLM(_HttpClient):
    """Async client for the Gemini generateContent endpoint.

    Args:
        model:    Model identifier, e.g. "gemini-3-flash-preview".
        api_key:  API key sent as the ?key= query parameter.
        base_url: Override for the REST root (tests, proxies).
        timeout:  HTTP timeout in seconds. Defaults to 120.
    """

    placeholder = "The tapestry of fate is tangled. (API Error)"

    def __init__(
        self,
        model: str,
        api_key: str = "",
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 120.0,
    ) -> None:
        super().__init__(base_url, timeout)
        self._model = model
        self._api_key = api_key

    def _url(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _params(self) -> dict[str, str] | None:
        return {"key": self._api_key} if self._api_key else None

    @staticmethod
    def _parts(data: Any) -> list[dict[str, Any]]:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("Unexpected response format from Gemini backend") from e
        if not isinstance(parts, list) or not all(isinstance(p, dict) for p in parts):
            raise LLMError("Unexpected response format from Gemini backend")
        for part in parts:
            call = part.get("functionCall") or {}
            if not isinstance(part.get("text") or "", str) or not isinstance(call, dict):
                raise LLMError("Unexpected part format from Gemini backend")
            if not isinstance(call.get("name") or "", str):
                raise LLMError("Unexpected functionCall format from Gemini backend")
        return parts

    async def _complete(self, system_instruction: str, prompt: str) -> LLMReply:
        body = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"functionDeclarations": gemini_function_decls()}],
            "generationConfig": {"temperature": TEMPERATURE},
        }
        data = await self._post(self._url(), body, params=self._params())

        text = ""
        calls: list[ToolCall] = []
        for part in self._parts(data):
            if part.get("text"):
                text += part["text"]
            call = part.get("functionCall")
            if call and call.get("name"):
                calls.append(decode_tool_call(call["name"], call.get("args")))
        return LLMReply(text=text, tool_calls=calls)

    async def _summarize(self, text: str) -> str:
        body = {
            "contents": [{
                "role": "user",
                "parts": [{"text": f"{SUMMARY_INSTRUCTION} \n\n {text}"}],
            }],
        }
        data = await self._post(self._url(), body, params=self._params())
        return "".join(p.get("text", "") for p in self._parts(data))


# ---------------------------------------------------------------------------
# OpenAICompatLLM: LM Studio and other /chat/completions servers
# ---------------------------------------------------------------------------

class OpenAICompatLLM(_HttpClient):
    """Async client for OpenAI-compatible chat completions.

    Args:
        base_url: Base URL including the version segment,
                  e.g. "http://localhost:1234/v1".
        model:    Model identifier passed through to the server.
        api_key:  Bearer token, or empty string if not required.
        timeout:  HTTP timeout in seconds. Defaults to 120.
    """

    placeholder = "The weave falters. (LM Studio Error)"
    empty_with_tools = "The weave shifts."

    def __init__(
        self,
        base_url: str,
        model: str = "",
        api_key: str = "",
        timeout: float = 120.0,
    ) -> None:
        super().__init__(base_url, timeout)
        self._model = model
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _url(self) -> str:
        return f"{self._base_url}/chat/completions"

    @staticmethod
    def _message(data: Any) -> dict[str, Any]:
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("Unexpected response format from OpenAI-compatible backend") from e
        message = message or {}
        if not isinstance(message, dict):
            raise LLMError("Unexpected message format from OpenAI-compatible backend")
        calls = message.get("tool_calls") or []
        if not isinstance(calls, list) or not all(
            isinstance(c, dict)
            and isinstance(c.get("function") or {}, dict)
            and isinstance((c.get("function") or {}).get("name") or "", str)
            for c in calls
        ):
            raise LLMError("Unexpected tool_calls format from OpenAI-compatible backend")
        if not isinstance(message.get("content") or "", str):
            raise LLMError("Unexpected content format from OpenAI-compatible backend")
        return message

    async def _complete(self, system_instruction: str, prompt: str) -> LLMReply:
        body: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
            "temperature": TEMPERATURE,
            "tools": openai_tools(),
            "tool_choice": "auto",
        }
        if self._model:
            body["model"] = self._model
        message = self._message(await self._post(self._url(), body))

        native: list[ToolCall] = []
        for call in message.get("tool_calls") or []:
            fn = call.get("function") or {}
            if fn.get("name"):
                native.append(decode_tool_call(fn["name"], fn.get("arguments")))

        visible, inline = split_reply(message.get("content") or "")
        calls = native + inline
        if not visible and calls:
            visible = self.empty_with_tools
        return LLMReply(text=visible, tool_calls=calls)

    async def _summarize(self, text: str) -> str:
        body: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": SUMMARY_INSTRUCTION},
                {"role": "user", "content": text},
            ],
            "temperature": 0.5,
        }
        if self._model:
            body["model"] = self._model
        return self._message(await self._post(self._url(), body)).get("content") or ""


# ---------------------------------------------------------------------------
# EchoLLM: returns the prompt unchanged; useful for cycle smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the prompt text as-is. No network calls, no tool calls.

    Lets you verify that the cycle wiring (context building, sanitising,
    chronicle writes) works end-to-end without a running model.
    """

    async def invoke(self, system_instruction: str, prompt: str) -> LLMReply:
        logger.debug("EchoLLM prompt_len=%d", len(prompt))
        return LLMReply(text=prompt)

    async def summarize(self, text: str) -> str:
        return text


def create_llm(settings: Settings) -> LLM:
    """Build the LLM client selected by the persisted settings."""
    if settings.llm_provider == "lmstudio":
        return OpenAICompatLLM(settings.lmstudio_base_url, model=settings.llm_model)
    return GeminiLLM(settings.llm_model, api_key=os.getenv("GEMINI_API_KEY", ""))
