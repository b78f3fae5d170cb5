"""Shared types and enums for the debate engine."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Literal, TypedDict


class DebatePhase(Enum):
    """Structural slot of a turn within a debate format."""

    OPENING = "opening"
    REBUTTAL = "rebuttal"
    CLOSING = "closing"
    CROSSFIRE = "crossfire"
    QUESTION = "question"


class Position(Enum):
    """Debate positions."""

    PRO = "pro"
    CON = "con"


class DebateStatus(Enum):
    """Lifecycle status of a debate session."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    VOTING_ROUND = "voting_round"
    VOTING_OVERALL = "voting_overall"
    COMPLETED = "completed"
    ERROR = "error"


class DebateEventType(Enum):
    """Events emitted by the orchestrator to registered listeners."""

    DEBATE_STARTED = "debate_started"
    MESSAGE_ADDED = "message_added"
    ROUND_CHANGED = "round_changed"
    VOTING_STARTED = "voting_started"
    VOTING_COMPLETED = "voting_completed"
    DEBATE_ENDED = "debate_ended"
    STREAM_STARTED = "stream_started"
    STREAM_CHUNK = "stream_chunk"
    STREAM_COMPLETED = "stream_completed"
    STREAM_ERROR = "stream_error"
    TYPING_STARTED = "typing_started"
    TYPING_STOPPED = "typing_stopped"
    ERROR_OCCURRED = "error_occurred"


class SenderType(Enum):
    """Who authored a transcript entry."""

    AI = "ai"
    HOST = "host"


type StreamSpeed = Literal["instant", "natural", "slow"]
type DebateErrorType = Literal[
    "rate_limit", "ai_error", "network_error", "validation_error"
]


class VotingStartedEventData(TypedDict):
    """Data structure for voting_started event payloads."""

    round: int
    is_final_round: bool
    is_overall_vote: bool
    label: str
    prompt: str


class StreamChunkEventData(TypedDict):
    """Data structure for stream_chunk event payloads."""

    message_id: str
    speaker_id: str
    chunk: str


class StreamCompletedEventData(TypedDict):
    """Data structure for stream_completed event payloads."""

    message_id: str
    speaker_id: str
    content: str
    fallback: bool


# Callback type aliases for the streaming coordinator
type ChunkCallback = Callable[[str], None]
type CompletionCallback = Callable[[str], Awaitable[None] | None]
type ErrorCallback = Callable[[BaseException], Awaitable[None] | None]
type ProviderEventCallback = Callable[[dict[str, Any]], None]
