"""Tests for session serialization and the JSON session store."""

from __future__ import annotations

import os
from pathlib import Path

from debate_engine.models import DebateMessage, DebateSession, Participant
from debate_engine.transcript import JsonSessionStore, SessionStore, format_transcript, session_to_dict
from debate_engine.types import DebateStatus, Position


def _session() -> DebateSession:
    session = DebateSession(
        topic="Homework should be abolished",
        participants=(
            Participant(id="a", name="Alpha", provider="ollama", model="llama3.2:3b"),
            Participant(id="b", name="Beta", provider="openrouter", model="openai/gpt-4o-mini"),
        ),
        format_id="oxford",
        total_rounds=3,
        civility=3,
        personas={"a": "brody"},
        stances={"a": Position.PRO, "b": Position.CON},
        status=DebateStatus.COMPLETED,
    )
    session.messages.extend(
        [
            DebateMessage.from_host("Welcome to the debate!"),
            DebateMessage(sender="Alpha", content="Kids need rest.", speaker_id="a", metadata={"round": 1, "phase": "opening"}),
            DebateMessage(sender="Beta", content="Practice builds skill.", speaker_id="b", metadata={"round": 1, "phase": "opening"}),
        ]
    )
    session.metadata["votes"] = {"1": "a"}
    return session


def test_session_to_dict() -> None:
    data = session_to_dict(_session())

    metadata = data["metadata"]
    assert metadata["format"] == "oxford"
    assert metadata["status"] == "completed"
    assert metadata["participants"]["a"]["persona"] == "brody"
    assert metadata["participants"]["b"]["persona"] == "default"
    assert metadata["participants"]["b"]["stance"] == "con"
    assert metadata["word_count"] == 10
    assert [m["sender_type"] for m in data["messages"]] == ["host", "ai", "ai"]
    assert data["votes"] == {"1": "a"}
    assert data["scores"] == {}


def test_format_transcript_groups_rounds() -> None:
    text = format_transcript(_session())

    assert "Topic: Homework should be abolished" in text
    assert "Alpha (PRO), Beta (CON)" in text
    assert text.count("ROUND 1 - OPENING") == 1
    assert "[Beta]\nPractice builds skill." in text


def test_json_store_saves_and_loads(tmp_path: Path) -> None:
    store = JsonSessionStore(tmp_path / "sessions")
    session = _session()

    path = store.save_session(session)
    loaded = store.load_session(session.id)

    assert isinstance(store, SessionStore)
    assert path.exists()
    assert loaded is not None
    assert loaded["metadata"]["id"] == session.id
    assert store.load_session("debate_missing") is None


def test_json_store_enforces_limit(tmp_path: Path) -> None:
    store = JsonSessionStore(tmp_path, max_sessions=2)
    paths = []
    for index in range(4):
        path = store.save_session(_session())
        os.utime(path, (1_000_000 + index, 1_000_000 + index))
        paths.append(path)

    removed = store.enforce_storage_limits()

    assert removed == 2
    assert [p.exists() for p in paths] == [False, False, True, True]
    assert JsonSessionStore(tmp_path, max_sessions=None).enforce_storage_limits() == 0
