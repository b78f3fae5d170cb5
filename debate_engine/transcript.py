"""Session persistence contract and transcript rendering."""

from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Protocol, TypedDict, runtime_checkable

from .models import DebateMessage, DebateSession
from .types import SenderType

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """Persistence collaborator invoked once a debate completes.

    ``save_session`` may be sync or async. Stores may also expose an
    ``enforce_storage_limits()`` method, called best-effort before a debate
    starts.
    """

    def save_session(self, session: DebateSession) -> Awaitable[None] | None: ...


class ParticipantInfo(TypedDict):
    """Information about a debate participant."""

    name: str
    provider: str
    model: str | None
    persona: str
    stance: str


class SessionMetadata(TypedDict):
    """Metadata for a saved debate session."""

    id: str
    topic: str
    format: str
    participants: dict[str, ParticipantInfo]
    total_rounds: int
    civility: int
    status: str
    created_at: str
    saved_at: str
    message_count: int
    word_count: int


def session_to_dict(session: DebateSession) -> dict[str, Any]:
    """Convert a DebateSession to a dictionary for JSON serialization."""
    metadata: SessionMetadata = {
        "id": session.id,
        "topic": session.topic,
        "format": session.format_id,
        "participants": {
            p.id: {
                "name": p.name,
                "provider": p.provider,
                "model": p.model,
                "persona": session.persona_for(p.id),
                "stance": session.stances[p.id].value,
            }
            for p in session.participants
        },
        "total_rounds": session.total_rounds,
        "civility": session.civility,
        "status": session.status.value,
        "created_at": session.created_at.isoformat(),
        "saved_at": datetime.now().isoformat(),
        "message_count": session.message_count,
        "word_count": sum(len(msg.content.split()) for msg in session.messages),
    }
    return {
        "metadata": metadata,
        "messages": [_message_to_dict(msg) for msg in session.messages],
        "votes": session.metadata.get("votes", {}),
        "scores": session.metadata.get("scores", {}),
    }


def _message_to_dict(msg: DebateMessage) -> dict[str, Any]:
    return {
        "id": msg.id,
        "sender": msg.sender,
        "sender_type": msg.sender_type.value,
        "speaker_id": msg.speaker_id,
        "content": msg.content,
        "timestamp": msg.timestamp.isoformat(),
        "metadata": msg.metadata,
    }


def format_transcript(session: DebateSession) -> str:
    """Render a session as plain text, with a heading at each new round."""
    rule = "=" * 80
    lines = [
        "DEBATE TRANSCRIPT",
        f"Topic: {session.topic}",
        f"Format: {session.format_id}",
        f"Participants: {', '.join(f'{p.name} ({session.stances[p.id].value.upper()})' for p in session.participants)}",
        f"Total Messages: {len(session.messages)}",
        "",
        rule,
        "",
    ]

    shown_round = None
    for msg in session.messages:
        round_number = msg.metadata.get("round")
        if msg.sender_type == SenderType.AI and round_number and round_number != shown_round:
            if shown_round is not None:
                lines.append("")
            phase = str(msg.metadata.get("phase", "")).upper()
            lines += [f"ROUND {round_number} - {phase}", "-" * 40]
            shown_round = round_number
        lines += [f"[{msg.sender}]", msg.content.strip(), ""]

    lines.extend([rule, f"END OF TRANSCRIPT - {len(session.messages)} total messages"])
    return "\n".join(lines)


class JsonSessionStore:
    """Writes one JSON file per completed session into a directory."""

    def __init__(self, directory: str | Path = "transcripts", max_sessions: int | None = 50):
        self.directory = Path(directory)
        self.max_sessions = max_sessions

    def save_session(self, session: DebateSession) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{session.id}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(session_to_dict(session), f, indent=2, default=str)
        logger.info(f"Saved debate session {session.id} to {path}")
        return path

    def list_sessions(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob("*.json"), key=lambda p: p.stat().st_mtime)

    def load_session(self, session_id: str) -> dict[str, Any] | None:
        path = self.directory / f"{session_id}.json"
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def enforce_storage_limits(self) -> int:
        """Delete the oldest saved sessions beyond ``max_sessions``."""
        if self.max_sessions is None:
            return 0
        sessions = self.list_sessions()
        excess = sessions[: max(0, len(sessions) - self.max_sessions)]
        for path in excess:
            path.unlink()
        if excess:
            logger.info(f"Removed {len(excess)} old debate sessions from {self.directory}")
        return len(excess)
