"""OpenRouter API client with function calling and speech synthesis support."""

from __future__ import annotations
import json
import logging
from enum import Enum
from typing import Any, Optional
from dataclasses import dataclass, field

import httpx

from war_council.config import Settings
from war_council.errors import ConfigError, LLMError

logger = logging.getLogger(__name__)


class ModelTier(str, Enum):
    """Model tiers for different tasks."""
    COUNCILOR = "councilor"  # Tool-calling advisor replies
    SPEECH = "speech"        # Text to speech


@dataclass
class ToolCall:
    """A tool call extracted from model response."""
    id: str
    name: str
    arguments: Any
    raw_arguments: str = ""


@dataclass
class LLMResponse:
    """Structured response from LLM."""
    content: Optional[str]
    tool_calls: list[ToolCall]
    finish_reason: str = "stop"
    model: str = "unknown"
    usage: dict[str, int] = field(default_factory=dict)
    message: dict[str, Any] = field(default_factory=dict)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    def assistant_turn(self) -> dict[str, Any]:
        """The assistant message to append to the conversation."""
        if self.message:
            return self.message
        turn: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            turn["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {"name": tc.name, "arguments": tc.raw_arguments or json.dumps(tc.arguments)},
                }
                for tc in self.tool_calls
            ]
        return turn


class OpenRouterClient:
    """Async client for an OpenAI-compatible chat completions API."""

    def __init__(self, settings: Settings, api_key: Optional[str] = None):
        self.api_key = api_key or settings.api_key
        if not self.api_key:
            raise ConfigError("OPENROUTER_API_KEY not set")

        self.base_url = settings.base_url.rstrip("/")
        self.councilor_model = settings.models.councilor
        self.speech_model = settings.models.tts
        self.timeout = settings.request_timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": "https://github.com/war-council",
            "X-Title": "War Council",
            "Content-Type": "application/json",
        }

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
            )
        return self._client

    def _get_model(self, tier: ModelTier) -> str:
        """Get model name for tier."""
        if tier == ModelTier.SPEECH:
            return self.speech_model
        return self.councilor_model

    def _parse_response(self, data: dict[str, Any]) -> LLMResponse:
        """Parse API response into structured format."""
        try:
            choice = data["choices"][0]
            message = choice["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError("Unexpected response format from chat completions backend") from e

        tool_calls = []
        for tc in message.get("tool_calls") or []:
            raw = tc.get("function", {}).get("arguments") or ""
            try:
                args = json.loads(raw) if raw else {}
            except json.JSONDecodeError:
                # Left for the dispatcher to reject as malformed
                args = None
            tool_calls.append(ToolCall(
                id=tc.get("id", ""),
                name=tc.get("function", {}).get("name", ""),
                arguments=args,
                raw_arguments=raw,
            ))

        return LLMResponse(
            content=message.get("content"),
            tool_calls=tool_calls,
            finish_reason=choice.get("finish_reason") or "stop",
            model=data.get("model", "unknown"),
            usage=data.get("usage") or {},
            message={k: v for k, v in message.items() if k in ("role", "content", "tool_calls")},
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.post(path, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"LLM backend returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self.base_url}") from e
        return response

    async def chat_async(
        self,
        messages: list[dict[str, Any]],
        tier: ModelTier = ModelTier.COUNCILOR,
        tools: Optional[list[dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Send an async chat completion request."""
        payload: dict[str, Any] = {
            "model": self._get_model(tier),
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if tools:
            payload["tools"] = tools
            if tool_choice:
                payload["tool_choice"] = tool_choice

        logger.debug("chat request model=%s messages=%d tools=%d", payload["model"], len(messages), len(tools or []))
        response = await self._post("/chat/completions", payload)
        try:
            data = response.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        return self._parse_response(data)

    async def synthesize_speech(self, text: str, voice: str = "alloy", speed: float = 1.2) -> bytes:
        """Render text to mp3 bytes."""
        payload = {
            "model": self._get_model(ModelTier.SPEECH),
            "voice": voice,
            "input": text,
            "speed": speed,
            "response_format": "mp3",
        }
        response = await self._post("/audio/speech", payload)
        return response.content

    async def close_async(self) -> None:
        """Close the async HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OpenRouterClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close_async()
