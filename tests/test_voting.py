"""Tests for the vote tracker and derived scoreboard."""

from __future__ import annotations

import pytest

from debate_engine.exceptions import VoteAlreadyRecordedError, VotingError
from debate_engine.models import Participant
from debate_engine.voting import VotingTracker
from formats import format_registry


@pytest.fixture
def participants() -> list[Participant]:
    return [
        Participant(id="a", name="Alpha", provider="ollama"),
        Participant(id="b", name="Beta", provider="ollama"),
        Participant(id="c", name="Gamma", provider="ollama"),
    ]


def test_scores_are_derived_from_votes(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 3)

    tracker.record_round_vote(1, "a")
    tracker.record_round_vote(2, "b")
    tracker.record_round_vote(3, "a")
    scores = tracker.calculate_scores()

    assert scores["a"].round_wins == 2
    assert scores["a"].rounds_won == [1, 3]
    assert scores["b"].round_wins == 1
    assert scores["c"].round_wins == 0
    assert sum(s.round_wins for s in scores.values()) == 3


def test_duplicate_vote_is_rejected(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 3)
    tracker.record_round_vote(1, "a")

    with pytest.raises(VoteAlreadyRecordedError):
        tracker.record_round_vote(1, "b")

    assert tracker.get_round_vote(1).winner_id == "a"


@pytest.mark.parametrize(("round_number", "winner"), [(0, "a"), (4, "a"), (1, "nobody")])
def test_invalid_votes_raise(participants: list[Participant], round_number: int, winner: str) -> None:
    tracker = VotingTracker(participants, 3)

    with pytest.raises(ValueError):
        tracker.record_round_vote(round_number, winner)


def test_outcome_single_winner(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants[:2], 3)
    for round_number, winner in [(1, "a"), (2, "b"), (3, "a")]:
        tracker.record_round_vote(round_number, winner)

    outcome = tracker.determine_outcome()

    assert outcome.winner_id == "a"
    assert outcome.is_tie is False
    assert outcome.tied_ids == ()


def test_outcome_tie_between_leaders(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 3)
    tracker.record_round_vote(1, "a")
    tracker.record_round_vote(2, "b")
    tracker.record_round_vote(3, "c")

    outcome = tracker.determine_outcome()

    assert outcome.is_tie is True
    assert set(outcome.tied_ids) == {"a", "b", "c"}
    assert "TIE" in tracker.get_tie_message(outcome.tied_ids)


def test_overall_winner_requires_all_rounds(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 3)
    tracker.record_round_vote(1, "a")

    with pytest.raises(VotingError):
        tracker.record_overall_winner("a")

    tracker.record_round_vote(2, "a")
    tracker.record_round_vote(3, "b")
    tracker.record_overall_winner("a")

    assert tracker.overall_winner == "a"
    assert tracker.calculate_scores()["a"].is_overall_winner is True
    assert tracker.votes_map() == {"1": "a", "2": "a", "3": "b", "overall": "a"}
    with pytest.raises(VotingError):
        tracker.record_overall_winner("b")


def test_next_voting_round_and_stats(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 5)
    tracker.record_round_vote(1, "a")
    tracker.record_round_vote(2, "b")

    assert tracker.next_voting_round() == 3
    assert tracker.are_all_rounds_voted() is False
    assert tracker.voting_stats() == {
        "total_rounds": 5,
        "voted_rounds": 2,
        "remaining_rounds": 3,
        "has_overall_winner": False,
    }

    tracker.reset()
    assert tracker.next_voting_round() == 1


@pytest.mark.parametrize(
    ("total", "round_number", "label"),
    [
        (3, 1, "Opening"),
        (3, 3, "Closing"),
        (5, 3, "Counter-Rebuttal"),
        (7, 4, "Cross-Examination"),
        (4, 2, "Exchange 2"),
        (6, 6, "Exchange 6"),
    ],
)
def test_exchange_labels(participants: list[Participant], total: int, round_number: int, label: str) -> None:
    tracker = VotingTracker(participants, total)

    assert tracker.get_exchange_label(round_number) == label


def test_format_can_override_exchange_labels(participants: list[Participant]) -> None:
    socratic = format_registry.get_format("socratic")
    tracker = VotingTracker(participants, 3, socratic)
    unlabeled = VotingTracker(participants, 4, socratic)

    assert tracker.get_exchange_label(1) == "Opening Questions"
    assert tracker.get_exchange_label(3) == "Synthesis"
    assert unlabeled.get_exchange_label(2) == "Exchange 2"


def test_voting_text(participants: list[Participant]) -> None:
    tracker = VotingTracker(participants, 3)
    tracker.record_round_vote(1, "a")

    assert tracker.get_voting_prompt(1) == "Who won Opening?"
    assert tracker.get_voting_prompt(3, is_final_vote=True) == "Who won the final round?"
    assert tracker.get_voting_prompt(3, is_overall_vote=True) == "Who won the debate overall?"
    assert tracker.get_winner_message(1, "a") == "Alpha wins Opening!"
    assert tracker.get_winner_message(3, "b", is_final_vote=True) == "Beta wins the final round!"
    assert "Alpha won 1 out of 3 rounds" in tracker.get_overall_winner_message("a")
