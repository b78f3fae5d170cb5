"""Round votes, the derived scoreboard, and voting text helpers."""

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING, Any

from . import constants
from .exceptions import VoteAlreadyRecordedError, VotingError
from .models import DebateOutcome, Participant, ParticipantScore, VoteRecord

if TYPE_CHECKING:
    from formats.base import DebateFormat

logger = logging.getLogger(__name__)

# Editorial labels by total round count; other counts fall back to "Exchange N"
EXCHANGE_LABELS: dict[int, tuple[str, ...]] = {
    3: ("Opening", "Rebuttal", "Closing"),
    5: ("Opening", "Rebuttal", "Counter-Rebuttal", "Final Rebuttal", "Closing"),
    7: (
        "Opening",
        "Rebuttal",
        "Counter-Rebuttal",
        "Cross-Examination",
        "Final Rebuttal",
        "Pre-Closing",
        "Closing",
    ),
}


class VotingTracker:
    """Owns the vote history for one debate session.

    Scores are never stored: every query recomputes them from the recorded
    votes.
    """

    def __init__(
        self,
        participants: Sequence[Participant],
        total_rounds: int,
        debate_format: "DebateFormat | None" = None,
    ):
        self.participants = tuple(participants)
        self.total_rounds = total_rounds
        self.debate_format = debate_format
        self._votes: dict[int, VoteRecord] = {}
        self._overall_winner: str | None = None

    @property
    def overall_winner(self) -> str | None:
        return self._overall_winner

    def _participant_name(self, participant_id: str) -> str:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant.name
        return "Unknown"

    def _require_participant(self, participant_id: str) -> None:
        if not any(p.id == participant_id for p in self.participants):
            raise ValueError(f"Unknown participant: {participant_id}")

    def record_round_vote(self, round_number: int, winner_id: str) -> VoteRecord:
        if not 1 <= round_number <= self.total_rounds:
            raise ValueError(
                f"Round {round_number} is outside 1..{self.total_rounds}"
            )
        self._require_participant(winner_id)
        if round_number in self._votes:
            raise VoteAlreadyRecordedError(round_number)

        record = VoteRecord(round=round_number, winner_id=winner_id)
        self._votes[round_number] = record
        logger.info(f"Round {round_number} vote recorded for {winner_id}")
        return record

    def record_overall_winner(self, winner_id: str) -> None:
        self._require_participant(winner_id)
        if self._overall_winner is not None:
            raise VotingError("Overall winner has already been recorded")
        if not self.are_all_rounds_voted():
            raise VotingError("Overall winner requires every round to be voted")
        self._overall_winner = winner_id

    def get_round_vote(self, round_number: int) -> VoteRecord | None:
        return self._votes.get(round_number)

    def has_voted_for_round(self, round_number: int) -> bool:
        return round_number in self._votes

    def are_all_rounds_voted(self) -> bool:
        return all(
            self.has_voted_for_round(r) for r in range(1, self.total_rounds + 1)
        )

    def next_voting_round(self) -> int | None:
        for round_number in range(1, self.total_rounds + 1):
            if not self.has_voted_for_round(round_number):
                return round_number
        return None

    def votes_map(self) -> dict[str, str]:
        votes = {str(r): v.winner_id for r, v in sorted(self._votes.items())}
        if self._overall_winner:
            votes["overall"] = self._overall_winner
        return votes

    def calculate_scores(self) -> dict[str, ParticipantScore]:
        scores = {
            p.id: ParticipantScore(
                name=p.name, is_overall_winner=p.id == self._overall_winner
            )
            for p in self.participants
        }
        for round_number, vote in sorted(self._votes.items()):
            score = scores.get(vote.winner_id)
            if score is None:
                continue
            score.round_wins += 1
            score.rounds_won.append(round_number)
        return scores

    def determine_outcome(self) -> DebateOutcome:
        """Rank participants by round wins; equal leaders produce a tie."""
        scores = self.calculate_scores()
        ranked = sorted(scores.items(), key=lambda item: item[1].round_wins, reverse=True)
        if not ranked:
            return DebateOutcome(winner_id=None, tied_ids=(), scores=scores)

        leader_id, leader = ranked[0]
        if len(ranked) > 1 and ranked[1][1].round_wins == leader.round_wins:
            tied = tuple(pid for pid, s in ranked if s.round_wins == leader.round_wins)
            return DebateOutcome(winner_id=None, tied_ids=tied, scores=scores)
        return DebateOutcome(winner_id=leader_id, tied_ids=(), scores=scores)

    def get_exchange_label(self, round_number: int) -> str:
        labels: Sequence[str] | None = None
        if self.debate_format is not None:
            labels = self.debate_format.get_exchange_labels(self.total_rounds)
        if labels is None:
            labels = EXCHANGE_LABELS.get(self.total_rounds)
        if labels and 1 <= round_number <= len(labels):
            return labels[round_number - 1]
        return f"Exchange {round_number}"

    def get_voting_prompt(
        self, round_number: int, is_final_vote: bool = False, is_overall_vote: bool = False
    ) -> str:
        if is_overall_vote:
            return constants.OVERALL_VOTING_PROMPT
        if is_final_vote:
            return constants.FINAL_ROUND_VOTING_PROMPT
        return constants.round_voting_prompt(self.get_exchange_label(round_number))

    def get_winner_message(
        self, round_number: int, winner_id: str, is_final_vote: bool = False
    ) -> str:
        winner_name = self._participant_name(winner_id)
        if is_final_vote:
            return constants.final_round_winner_message(winner_name)
        return constants.round_winner_message(
            self.get_exchange_label(round_number), winner_name
        )

    def get_overall_winner_message(self, winner_id: str) -> str:
        scores = self.calculate_scores()
        wins = scores[winner_id].round_wins if winner_id in scores else 0
        return constants.overall_winner_message(
            self._participant_name(winner_id), wins, self.total_rounds
        )

    def get_tie_message(self, tied_ids: Sequence[str]) -> str:
        scores = self.calculate_scores()
        wins = scores[tied_ids[0]].round_wins if tied_ids else 0
        return constants.tie_message([self._participant_name(pid) for pid in tied_ids], wins)

    def voting_stats(self) -> dict[str, Any]:
        return {
            "total_rounds": self.total_rounds,
            "voted_rounds": len(self._votes),
            "remaining_rounds": self.total_rounds - len(self._votes),
            "has_overall_winner": self._overall_winner is not None,
        }

    def reset(self) -> None:
        self._votes.clear()
        self._overall_winner = None
