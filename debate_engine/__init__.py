"""Debate orchestration and flow management."""

from .types import DebateEventType, DebatePhase, DebateStatus, Position, SenderType
from .models import (
    DebateErrorInfo,
    DebateEvent,
    DebateMessage,
    DebateOptions,
    DebateOutcome,
    DebateSession,
    Participant,
    ParticipantScore,
    StreamMetrics,
    VoteRecord,
)
from .exceptions import (
    DebateSetupError,
    RoundNotCompleteError,
    StreamAlreadyActiveError,
    StreamingError,
    StreamingNotSupportedError,
    VoteAlreadyRecordedError,
    VotingError,
)
from .rules import RoundInfo, RulesEngine
from .voting import VotingTracker
from .streaming import ChunkBuffer, StreamingCoordinator
from .orchestrator import DebateOrchestrator
from .transcript import JsonSessionStore, SessionStore, format_transcript

__all__ = [
    "DebateEventType",
    "DebatePhase",
    "DebateStatus",
    "Position",
    "SenderType",
    "DebateErrorInfo",
    "DebateEvent",
    "DebateMessage",
    "DebateOptions",
    "DebateOutcome",
    "DebateSession",
    "Participant",
    "ParticipantScore",
    "StreamMetrics",
    "VoteRecord",
    "DebateSetupError",
    "RoundNotCompleteError",
    "StreamAlreadyActiveError",
    "StreamingError",
    "StreamingNotSupportedError",
    "VoteAlreadyRecordedError",
    "VotingError",
    "RoundInfo",
    "RulesEngine",
    "VotingTracker",
    "ChunkBuffer",
    "StreamingCoordinator",
    "DebateOrchestrator",
    "JsonSessionStore",
    "SessionStore",
    "format_transcript",
]
