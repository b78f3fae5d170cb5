"""Tests for configuration loading and persona lookup."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.personas import BUILT_IN_PERSONAS, DEFAULT_PERSONA_ID, Persona, get_persona
from config.settings import AppConfig, ParticipantConfig, StreamingConfig, get_template_config
from debate_engine.types import Position


def _config_dict() -> dict:
    return {
        "debate": {
            "topic": "Remote work beats the office",
            "format": "oxford",
            "rounds": 5,
            "civility": 2,
            "stances": {"model_a": "con"},
        },
        "participants": [
            {"id": "model_a", "name": "Alpha", "provider": "openrouter", "model": "openai/gpt-4o-mini", "persona": "george"},
            {"id": "model_b", "name": "Beta", "provider": "ollama", "model": "llama3.2:3b"},
        ],
        "system": {
            "streaming": {"speed": "slow", "providers": {"ollama": False}},
            "delays": {"ai_response": 1.5},
        },
    }


def test_load_from_json(tmp_path: Path) -> None:
    path = tmp_path / "debate_config.json"
    path.write_text(json.dumps(_config_dict()), encoding="utf-8")

    config = AppConfig.load_from_file(path)

    assert config.debate.rounds == 5
    assert config.debate.stances == {"model_a": Position.CON}
    assert config.system.streaming.speed == "slow"
    assert config.system.delays.ai_response == 1.5
    assert config.system.delays.rate_limit_recovery == 10.0
    assert config.persona_assignments() == {"model_a": "george", "model_b": "default"}

    participant = config.participants[1].to_participant()
    assert participant.id == "model_b"
    assert participant.provider == "ollama"


def test_template_round_trips_through_yaml(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "debate_config.yml"

    get_template_config().save_to_file(path)
    loaded = AppConfig.load_from_file(path)

    assert loaded.debate.topic == get_template_config().debate.topic
    assert [p.id for p in loaded.participants] == ["model_a", "model_b"]


def test_load_rejects_missing_sections(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"debate": {"topic": "x"}}), encoding="utf-8")

    with pytest.raises(ValueError, match="participants"):
        AppConfig.load_from_file(path)

    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_file(tmp_path / "missing.json")


def test_participant_provider_is_validated() -> None:
    with pytest.raises(ValidationError):
        ParticipantConfig(id="x", name="X", provider="bard", model="m")


def test_streaming_toggles() -> None:
    config = StreamingConfig(providers={"ollama": False})

    assert config.is_enabled_for("openrouter") is True
    assert config.is_enabled_for("ollama") is False
    assert StreamingConfig(enabled=False).is_enabled_for("openrouter") is False


def test_persona_lookup_falls_back_to_default() -> None:
    assert get_persona("brody").id == "brody"
    assert get_persona("nobody").id == DEFAULT_PERSONA_ID
    assert get_persona(None).id == DEFAULT_PERSONA_ID

    custom = {"default": Persona(id="default", name="Plain", description="", system_prompt="Be plain.")}
    assert get_persona("george", custom).name == "Plain"
    assert set(BUILT_IN_PERSONAS) >= {"default", "prof_sage", "brody", "devlin", "george"}
