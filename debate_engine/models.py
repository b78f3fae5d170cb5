"""Data models for the debate engine."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any
import time
import uuid

from .types import (
    DebateErrorType,
    DebateEventType,
    DebateStatus,
    Position,
    SenderType,
)

HOST_SENDER = "Debate Host"


@dataclass(frozen=True)
class Participant:
    """An agent taking part in the debate; list order is the speaking rotation."""

    id: str
    name: str
    provider: str
    model: str | None = None
    color: str | None = None


@dataclass
class DebateMessage:
    """A single turn record in the debate transcript."""

    sender: str
    content: str
    sender_type: SenderType = SenderType.AI
    speaker_id: str | None = None
    id: str = field(default_factory=lambda: f"msg_{uuid.uuid4().hex[:12]}")
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)
    is_streaming: bool = False

    def finalize_content(self, content: str) -> None:
        """Replace a streaming placeholder's content with the final text.

        Allowed exactly once, and only while the record is still a streaming
        placeholder; afterwards the record is immutable.
        """
        if not self.is_streaming:
            raise RuntimeError(f"Message {self.id} is not an in-flight placeholder")
        self.content = content
        self.is_streaming = False

    @classmethod
    def from_host(cls, content: str, **metadata: Any) -> "DebateMessage":
        """Create a host-authored transcript entry."""
        return cls(
            sender=HOST_SENDER,
            content=content,
            sender_type=SenderType.HOST,
            metadata=dict(metadata),
        )


@dataclass
class DebateSession:
    """Full state of a debate; mutated only by the orchestrator."""

    topic: str
    participants: tuple[Participant, ...]
    format_id: str
    total_rounds: int
    civility: int
    personas: Mapping[str, str]
    stances: Mapping[str, Position]
    id: str = field(default_factory=lambda: f"debate_{uuid.uuid4().hex[:12]}")
    created_at: datetime = field(default_factory=datetime.now)
    status: DebateStatus = DebateStatus.IDLE
    current_round: int = 1
    message_count: int = 0
    current_speaker_index: int = 0
    messages: list[DebateMessage] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Stance assignment is fixed for the life of the session
        self.stances = MappingProxyType(dict(self.stances))
        self.personas = MappingProxyType(dict(self.personas))

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def max_messages(self) -> int:
        return self.total_rounds * self.participant_count

    def get_participant(self, participant_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def persona_for(self, participant_id: str) -> str:
        return self.personas.get(participant_id) or "default"


@dataclass(frozen=True)
class VoteRecord:
    """The recorded winner of one round."""

    round: int
    winner_id: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ParticipantScore:
    """Scoreboard entry derived from the vote history."""

    name: str
    round_wins: int = 0
    rounds_won: list[int] = field(default_factory=list)
    is_overall_winner: bool = False


@dataclass(frozen=True)
class DebateOutcome:
    """Final result: a single winner, or a tie between the leaders."""

    winner_id: str | None
    tied_ids: tuple[str, ...]
    scores: dict[str, ParticipantScore]

    @property
    def is_tie(self) -> bool:
        return self.winner_id is None


@dataclass(frozen=True)
class DebateErrorInfo:
    """Describes a recoverable per-turn failure."""

    type: DebateErrorType
    message: str
    participant_id: str | None = None
    retryable: bool = True


@dataclass(frozen=True)
class DebateEvent:
    """An event delivered to orchestrator listeners."""

    type: DebateEventType
    data: dict[str, Any]
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class StreamMetrics:
    """Live counters for an in-flight streaming operation."""

    duration: float
    chunks_received: int
    bytes_received: int
    average_chunk_size: float


@dataclass(frozen=True)
class DebateOptions:
    """Optional session settings; unset values fall back to defaults."""

    format_id: str | None = None
    rounds: int | None = None
    civility: int | None = None
    stances: Mapping[str, Position] | None = None
