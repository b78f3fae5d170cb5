"""Tests for the OpenRouter and Ollama providers and the provider factory."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest
from openai import RateLimitError

from config.settings import OpenRouterConfig, ParticipantConfig, SystemConfig
from debate_engine.models import DebateMessage
from models.manager import ModelManager
from models.providers import (
    OllamaProvider,
    OpenRouterProvider,
    ProviderError,
    ProviderFactory,
    ProviderOverloadedError,
    ProviderRateLimitError,
    ProviderVerificationError,
)


def _system() -> SystemConfig:
    return SystemConfig(
        openrouter=OpenRouterConfig(api_key="test-key", min_request_interval=0.0)
    )


def _sse(*payloads: dict | str) -> str:
    lines = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        lines.append(f"data: {data}\n\n")
    return "".join(lines)


def _delta(**delta) -> dict:
    return {"choices": [{"delta": delta}]}


def _open_router(handler) -> tuple[OpenRouterProvider, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = OpenRouterProvider(_system(), model="openai/gpt-4o-mini", http_client=client)
    return provider, client


async def _collect(provider: OpenRouterProvider, **kwargs) -> list[str]:
    return [chunk async for chunk in provider.stream_message("Argue.", [], **kwargs)]


def test_open_router_streams_content_and_events() -> None:
    requests: list[dict] = []
    events: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        body = _sse(
            _delta(role="assistant"),
            _delta(content="Hello "),
            _delta(images=[{"image_url": {"url": "https://example.com/chart.png"}}]),
            _delta(tool_calls=[{"function": {"name": "lookup"}}]),
            "not json",
            _delta(content="world."),
            "[DONE]",
        )
        return httpx.Response(200, text=body, headers={"content-type": "text/event-stream"})

    provider, _ = _open_router(handler)
    provider.set_system_instruction("You are the Proposition.")
    history = [DebateMessage(sender="Beta", content="Earlier point", speaker_id="b")]

    async def scenario() -> list[str]:
        return [
            chunk async for chunk in provider.stream_message("Argue.", history, on_event=events.append)
        ]

    chunks = asyncio.run(scenario())

    assert chunks == ["Hello ", "world."]
    assert events == [
        {"type": "image", "url": "https://example.com/chart.png"},
        {"type": "tool_call", "name": "lookup"},
    ]
    payload = requests[0]
    assert payload["stream"] is True
    assert payload["model"] == "openai/gpt-4o-mini"
    assert payload["messages"][0] == {"role": "system", "content": "You are the Proposition."}
    assert payload["messages"][1] == {"role": "user", "content": "Beta: Earlier point"}
    assert payload["messages"][-1] == {"role": "user", "content": "Argue."}


def test_open_router_stream_stops_when_cancelled() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=_sse(_delta(content="never")))

    provider, _ = _open_router(handler)
    cancel_event = asyncio.Event()
    cancel_event.set()

    assert asyncio.run(_collect(provider, cancel_event=cancel_event)) == []


@pytest.mark.parametrize(
    ("status", "message", "error_type"),
    [
        (403, "Your organization must be verified to stream this model", ProviderVerificationError),
        (429, "Rate limit exceeded", ProviderRateLimitError),
        (503, "No instances available", ProviderOverloadedError),
        (400, "Bad request", ProviderError),
    ],
)
def test_open_router_http_errors_are_classified(status: int, message: str, error_type: type) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": {"message": message}})

    provider, _ = _open_router(handler)

    with pytest.raises(error_type) as excinfo:
        asyncio.run(_collect(provider))

    assert excinfo.value.status_code == status
    assert message in str(excinfo.value)


def test_open_router_error_inside_stream() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = _sse(_delta(content="Partial "), {"error": {"message": "Provider overloaded", "code": 529}})
        return httpx.Response(200, text=body)

    provider, _ = _open_router(handler)

    with pytest.raises(ProviderOverloadedError):
        asyncio.run(_collect(provider))


def test_open_router_send_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer test-key"
        assert "stream" not in json.loads(request.content)
        return httpx.Response(
            200,
            json={"model": "openai/gpt-4o-mini-2024", "choices": [{"message": {"content": "  A full answer. "}}]},
        )

    provider, _ = _open_router(handler)

    response = asyncio.run(provider.send_message("Argue.", []))

    assert response.response == "A full answer."
    assert response.model_used == "openai/gpt-4o-mini-2024"
    assert provider.get_capabilities().streaming is True


def test_open_router_requires_model() -> None:
    provider, _ = _open_router(lambda request: httpx.Response(200, json={}))
    provider.model = None

    with pytest.raises(ProviderError, match="No model configured"):
        asyncio.run(provider.send_message("Argue.", []))


class FakeCompletions:
    """Simplified ``chat.completions`` namespace of AsyncOpenAI."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _ollama(*responses) -> tuple[OllamaProvider, FakeCompletions]:
    completions = FakeCompletions(*responses)
    provider = OllamaProvider(
        SystemConfig(),
        model="llama3.2:3b",
        max_tokens=300,
        client=SimpleNamespace(chat=SimpleNamespace(completions=completions)),
    )
    return provider, completions


def test_ollama_send_message_passes_local_options() -> None:
    completion = SimpleNamespace(
        model="llama3.2:3b",
        choices=[SimpleNamespace(message=SimpleNamespace(content=" Local answer "))],
    )
    provider, completions = _ollama(completion)

    response = asyncio.run(provider.send_message("Argue.", []))

    assert response.response == "Local answer"
    assert response.model_used == "llama3.2:3b"
    request = completions.requests[0]
    assert request["max_tokens"] == 300
    assert request["extra_body"] == {"keep_alive": "5m", "repeat_penalty": 1.1}
    assert provider.get_capabilities().streaming is False


def test_ollama_rate_limit_is_mapped() -> None:
    http_response = httpx.Response(
        429,
        request=httpx.Request("POST", "http://localhost:11434/v1/chat/completions"),
        json={"error": {"message": "Too many requests"}},
    )
    provider, _ = _ollama(
        RateLimitError("Too many requests", response=http_response, body=http_response.json())
    )

    with pytest.raises(ProviderRateLimitError):
        asyncio.run(provider.send_message("Argue.", []))


def test_ollama_does_not_stream() -> None:
    provider, _ = _ollama()

    with pytest.raises(NotImplementedError):
        provider.stream_message("Argue.", [])


def test_factory_and_manager() -> None:
    assert set(ProviderFactory.get_available_providers()) >= {"ollama", "openrouter"}
    with pytest.raises(ValueError, match="Unknown provider"):
        ProviderFactory.create_provider("bard", SystemConfig())

    manager = ModelManager(_system())
    provider = manager.register_participant(
        ParticipantConfig(id="model_b", name="Beta", provider="ollama", model="llama3.2:3b", temperature=0.2)
    )

    assert isinstance(provider, OllamaProvider)
    assert provider.temperature == 0.2
    assert manager.get_provider("model_b") is provider
    assert manager.has_provider("model_a") is False
    assert manager.participant_ids == ["model_b"]
    with pytest.raises(KeyError):
        manager.get_provider("model_a")
