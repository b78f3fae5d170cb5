import os
import asyncio
import time
import json
import re
from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING, Any, ClassVar
import logging
import httpx

from .base_model_provider import BaseModelProvider, ProviderCapabilities, ProviderResponse
from .exceptions import (
    ProviderError,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderVerificationError,
)

if TYPE_CHECKING:
    from config.settings import SystemConfig
    from debate_engine.models import DebateMessage
    from debate_engine.types import ProviderEventCallback

logger = logging.getLogger(__name__)

VERIFICATION_TEXT = re.compile(r"organization.{0,40}verif|must be verified", re.IGNORECASE)
OVERLOADED_STATUSES = {502, 503, 529}


class OpenRouterProvider(BaseModelProvider):
    """OpenRouter model provider implementation (chat completions over SSE)."""

    # Shared across instances: one OpenRouter account per process
    _last_request_time: ClassVar[float | None] = None
    _request_lock: ClassVar[asyncio.Lock] = asyncio.Lock()

    def __init__(
        self,
        system_config: "SystemConfig",
        model: str | None = None,
        max_tokens: int = 600,
        temperature: float = 0.7,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(system_config, model, max_tokens, temperature)
        self._api_key = system_config.openrouter.api_key or os.getenv("OPENROUTER_API_KEY")
        self._http_client = http_client

        if not self._api_key and http_client is None:
            logger.warning(
                "OpenRouter API key missing; set OPENROUTER_API_KEY or system.openrouter.api_key"
            )

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(streaming=True, system_prompt=True, attachments=True)

    @property
    def _completions_url(self) -> str:
        return self.system_config.openrouter.base_url.rstrip("/") + "/chat/completions"

    def _headers(self) -> dict[str, str]:
        settings = self.system_config.openrouter
        headers = {"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"}
        optional = {"HTTP-Referer": settings.site_url, "X-Title": settings.app_name}
        headers.update({name: value for name, value in optional.items() if value})
        return headers

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        if not self._api_key:
            raise ProviderError(self.provider_name, "OpenRouter API key not configured")
        return httpx.AsyncClient()

    def _payload(
        self,
        prompt: str,
        history: Sequence["DebateMessage"],
        model_override: str | None,
        stream: bool,
    ) -> dict[str, Any]:
        model = model_override or self.model
        if not model:
            raise ProviderError(self.provider_name, "No model configured for OpenRouter")
        payload: dict[str, Any] = {
            "model": model,
            "messages": self.build_chat_messages(prompt, history),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "reasoning": {"exclude": True},
        }
        if stream:
            payload["stream"] = True
        return payload

    async def _throttle(self) -> None:
        """Space requests from every instance at least ``min_request_interval`` apart."""
        interval = self.system_config.openrouter.min_request_interval
        async with self._request_lock:
            last = OpenRouterProvider._last_request_time
            if last is not None and interval > 0:
                wait = interval - (time.monotonic() - last)
                if wait > 0:
                    logger.debug(f"Throttling OpenRouter request for {wait:.2f}s")
                    await asyncio.sleep(wait)
            OpenRouterProvider._last_request_time = time.monotonic()

    def _error_for(self, status_code: int | None, message: str) -> ProviderError:
        if VERIFICATION_TEXT.search(message):
            return ProviderVerificationError(self.provider_name, message, status_code=status_code)
        if status_code == 429:
            return ProviderRateLimitError(self.provider_name, message, status_code=status_code)
        if status_code in OVERLOADED_STATUSES:
            return ProviderOverloadedError(self.provider_name, message, status_code=status_code)
        return ProviderError(self.provider_name, message, status_code=status_code)

    def _error_from_response(self, response: httpx.Response) -> ProviderError:
        message = response.text
        try:
            body = response.json()
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict) and error.get("message"):
                message = error["message"]
        except json.JSONDecodeError:
            pass
        return self._error_for(response.status_code, f"HTTP {response.status_code}: {message}")

    async def send_message(
        self,
        prompt: str,
        history: Sequence["DebateMessage"],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
    ) -> ProviderResponse:
        """Generate a response using OpenRouter."""
        payload = self._payload(prompt, history, model_override, stream=False)

        await self._throttle()

        client = self._client()
        try:
            http_response = await client.post(
                self._completions_url,
                json=payload,
                headers=self._headers(),
                timeout=self.system_config.openrouter.timeout,
            )
        finally:
            if client is not self._http_client:
                await client.aclose()

        if http_response.is_error:
            error = self._error_from_response(http_response)
            logger.error(f"OpenRouter generation failed for {payload['model']}: {error}")
            raise error

        response_data = http_response.json()
        content = response_data["choices"][0]["message"]["content"] or ""

        if not content.strip():
            logger.warning(
                f"OpenRouter model {payload['model']} returned empty content. "
                f"Response data: {response_data}"
            )
        else:
            logger.debug(
                f"Generated {len(content)} chars from OpenRouter model {payload['model']}"
            )

        return ProviderResponse(
            response=content.strip(), model_used=response_data.get("model", payload["model"])
        )

    async def stream_message(
        self,
        prompt: str,
        history: Sequence["DebateMessage"],
        *,
        is_debate_mode: bool = True,
        resumption_context: dict[str, Any] | None = None,
        attachments: Sequence[Any] | None = None,
        model_override: str | None = None,
        cancel_event: asyncio.Event | None = None,
        on_event: "ProviderEventCallback | None" = None,
    ) -> AsyncIterator[str]:
        """Stream a response using OpenRouter server-sent events."""
        payload = self._payload(prompt, history, model_override, stream=True)

        await self._throttle()

        client = self._client()
        try:
            async with client.stream(
                "POST",
                self._completions_url,
                json=payload,
                headers=self._headers(),
                timeout=self.system_config.openrouter.timeout,
            ) as response:
                if response.is_error:
                    await response.aread()
                    raise self._error_from_response(response)

                async for line in response.aiter_lines():
                    if cancel_event is not None and cancel_event.is_set():
                        logger.debug("OpenRouter stream cancelled by caller")
                        return

                    line = line.strip()
                    # Skip empty lines and SSE comments
                    if not line or line.startswith(":") or not line.startswith("data: "):
                        continue

                    data = line[6:]
                    if data == "[DONE]":
                        return

                    try:
                        parsed = json.loads(data)
                    except json.JSONDecodeError:
                        logger.debug(f"Skipping invalid JSON in stream: {data[:100]}...")
                        continue

                    if "error" in parsed:
                        error = parsed["error"]
                        message = error.get("message", "Unknown streaming error")
                        code = error.get("code")
                        raise self._error_for(code if isinstance(code, int) else None, message)

                    choices = parsed.get("choices") or []
                    if not choices:
                        continue
                    delta = choices[0].get("delta") or {}

                    if on_event is not None:
                        for image in delta.get("images") or []:
                            url = (image.get("image_url") or {}).get("url")
                            if url:
                                on_event({"type": "image", "url": url})
                        for tool_call in delta.get("tool_calls") or []:
                            name = (tool_call.get("function") or {}).get("name")
                            if name:
                                on_event({"type": "tool_call", "name": name})

                    content_chunk = delta.get("content")
                    if content_chunk:
                        yield content_chunk

                    if choices[0].get("finish_reason"):
                        return
        finally:
            if client is not self._http_client:
                await client.aclose()
