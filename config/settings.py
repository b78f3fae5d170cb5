"""Configuration settings and data models."""

import json
from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field, field_validator
import yaml
from pathlib import Path

from debate_engine.models import Participant
from debate_engine.types import Position

VALID_PROVIDERS = {"openrouter", "ollama"}


class ParticipantConfig(BaseModel):
    """Configuration for one debate participant."""

    id: str = Field(..., description="Stable participant identifier")
    name: str = Field(..., description="Display name")
    provider: str = Field(default="openrouter", description="Model provider (openrouter, ollama)")
    model: str = Field(..., description="Model name (e.g. 'openai/gpt-4o-mini' or 'llama3.2:3b')")
    color: Optional[str] = Field(default=None, description="Display color hint for observers")
    persona: str = Field(default="default", description="Persona id from the persona catalog")
    max_tokens: int = Field(default=600, description="Maximum tokens per response")
    temperature: float = Field(default=0.7, description="Model temperature")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_PROVIDERS:
            raise ValueError(f"Provider must be one of: {VALID_PROVIDERS}")
        return v

    def to_participant(self) -> Participant:
        return Participant(
            id=self.id,
            name=self.name,
            provider=self.provider,
            model=self.model,
            color=self.color,
        )


class DebateConfig(BaseModel):
    """Main debate configuration."""

    topic: str = Field(..., description="Debate motion")
    format: str = Field(default="oxford", description="Debate format id")
    rounds: Optional[int] = Field(default=None, description="Requested rounds, clamped to 3-7; the format default when unset")
    civility: int = Field(default=3, description="Tone intensity, 1 (friendly) to 5 (pointed)")
    stances: Dict[str, Position] = Field(
        default_factory=dict, description="Optional stance overrides by participant id"
    )


class StreamingConfig(BaseModel):
    """Incremental delivery preferences."""

    enabled: bool = Field(default=True, description="Global streaming toggle")
    providers: Dict[str, bool] = Field(
        default_factory=dict, description="Per-provider streaming toggles (missing = enabled)"
    )
    speed: Literal["instant", "natural", "slow"] = Field(
        default="natural", description="Chunk pacing and buffering profile"
    )

    def is_enabled_for(self, provider: str) -> bool:
        return self.enabled and self.providers.get(provider, True)


class DelayConfig(BaseModel):
    """Pauses between turns, in seconds."""

    ai_response: float = Field(default=3.0, description="Reading pause after a one-shot turn")
    post_stream_pause: float = Field(default=0.8, description="Pause after a streamed turn")
    voting_continuation: float = Field(default=1.0, description="Pause after a round vote")
    rate_limit_recovery: float = Field(default=10.0, description="Backoff after a rate-limited turn")
    error_recovery: float = Field(default=3.0, description="Backoff after a failed turn")


class OllamaConfig(BaseModel):
    """Connection and sampling options for a local Ollama server."""

    base_url: str = Field(default="http://localhost:11434", description="Root URL of the Ollama server")
    keep_alive: Optional[str] = Field(
        default="5m", description="Model residency after a request, as an Ollama duration ('0' unloads)"
    )
    repeat_penalty: Optional[float] = Field(default=1.1, description="Sampling penalty for repeated tokens")
    timeout: float = Field(default=120.0, description="Per-request timeout (seconds)")


class OpenRouterConfig(BaseModel):
    """Credentials and attribution headers for OpenRouter."""

    api_key: Optional[str] = Field(
        default=None, description="API key; OPENROUTER_API_KEY is used when unset"
    )
    base_url: str = Field(default="https://openrouter.ai/api/v1", description="OpenAI-compatible endpoint")
    site_url: Optional[str] = Field(default=None, description="Sent as the HTTP-Referer header")
    app_name: Optional[str] = Field(default="Debate Arena", description="Sent as the X-Title header")
    timeout: int = Field(default=60, description="Per-request timeout (seconds)")
    min_request_interval: float = Field(
        default=1.0, description="Minimum spacing between OpenRouter requests (seconds)"
    )


class SystemConfig(BaseModel):
    """Provider connections, streaming, pacing and log verbosity."""

    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    openrouter: OpenRouterConfig = Field(default_factory=OpenRouterConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig, description="Streaming preferences")
    delays: DelayConfig = Field(default_factory=DelayConfig, description="Inter-turn delays")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def _read_config_data(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    text = config_path.read_text(encoding="utf-8")
    if config_path.suffix in (".yml", ".yaml"):
        return yaml.safe_load(text) or {}
    return json.loads(text)


class AppConfig(BaseModel):
    """Complete application configuration."""

    debate: DebateConfig
    participants: List[ParticipantConfig]
    system: SystemConfig = Field(default_factory=SystemConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Read a ``.json``, ``.yml`` or ``.yaml`` file into a validated config.

        Raises FileNotFoundError for a missing path and ValueError when the
        ``debate`` or ``participants`` section is absent or empty.
        """
        data = _read_config_data(config_path)

        missing = [key for key in ("debate", "participants") if key not in data]
        if missing:
            raise ValueError(f"Missing required config sections: {missing}")
        if not data["participants"]:
            raise ValueError("Config must include at least one entry in 'participants'")

        return cls.model_validate(data)

    def save_to_file(self, config_path: Path) -> None:
        """Write the explicitly set values as YAML."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.model_dump(mode="json", exclude_unset=True)
        config_path.write_text(
            yaml.safe_dump(payload, default_flow_style=False, indent=2, sort_keys=False),
            encoding="utf-8",
        )

    def persona_assignments(self) -> Dict[str, str]:
        return {p.id: p.persona for p in self.participants}


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        debate=DebateConfig(
            topic="Should artificial intelligence be regulated by government oversight?",
            format="oxford",
            rounds=3,
            civility=3,
        ),
        participants=[
            ParticipantConfig(
                id="model_a",
                name="GPT-4o mini",
                provider="openrouter",
                model="openai/gpt-4o-mini",
                color="#10a37f",
                persona="prof_sage",
            ),
            ParticipantConfig(
                id="model_b",
                name="Llama",
                provider="ollama",
                model="llama3.2:3b",
                color="#0467df",
                persona="devlin",
            ),
        ],
        system=SystemConfig(),
    )
