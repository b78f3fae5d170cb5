"""Round and turn arithmetic plus setup validation."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from . import constants
from .models import Participant


@dataclass(frozen=True)
class RoundInfo:
    """Snapshot of where a turn falls in the debate structure."""

    current_round: int
    message_count: int
    speaker_index: int
    is_new_round: bool
    is_first_speaker: bool
    is_final_round: bool
    should_end_debate: bool
    should_show_voting: bool


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def clamp_rounds(requested: int | None) -> int:
    if requested is None:
        return constants.DEFAULT_ROUNDS
    return max(constants.MIN_ROUNDS, min(constants.MAX_ROUNDS, int(requested)))


def clamp_civility(requested: int | None) -> int:
    if requested is None:
        return constants.DEFAULT_CIVILITY
    return max(constants.MIN_CIVILITY, min(constants.MAX_CIVILITY, int(requested)))


class RulesEngine:
    """Pure turn arithmetic for a debate with a fixed number of rounds.

    Message counts are 1-based: the count of the turn about to be produced.
    The only state is the configured round limit.
    """

    def __init__(self, total_rounds: int = constants.DEFAULT_ROUNDS):
        self.total_rounds = clamp_rounds(total_rounds)

    def calculate_max_messages(self, participant_count: int) -> int:
        return self.total_rounds * participant_count

    def get_current_round(self, message_count: int, participant_count: int) -> int:
        return (message_count - 1) // participant_count + 1

    def get_round_info(
        self,
        message_count: int,
        speaker_index: int,
        participant_count: int,
        previous_round: int,
        previous_round_voted: bool = False,
    ) -> RoundInfo:
        """Describe the turn at ``message_count``.

        ``previous_round`` is the round the session was in before this turn
        (0 before the first turn); ``previous_round_voted`` says whether that
        round already has a recorded vote.
        """
        current_round = self.get_current_round(message_count, participant_count)
        is_new_round = current_round != previous_round
        is_first_speaker = speaker_index == 0
        should_show_voting = (
            is_new_round
            and previous_round > 0
            and is_first_speaker
            and not previous_round_voted
        )
        return RoundInfo(
            current_round=current_round,
            message_count=message_count,
            speaker_index=speaker_index,
            is_new_round=is_new_round,
            is_first_speaker=is_first_speaker,
            is_final_round=current_round == self.total_rounds,
            should_end_debate=message_count > self.calculate_max_messages(participant_count),
            should_show_voting=should_show_voting,
        )

    def should_continue(self, message_count: int, participant_count: int) -> bool:
        return message_count <= self.calculate_max_messages(participant_count)

    def should_show_voting_for_round(
        self,
        current_round: int,
        previous_round: int,
        is_first_speaker: bool,
        has_voted_for_round: bool,
    ) -> bool:
        return (
            current_round != previous_round
            and previous_round > 0
            and is_first_speaker
            and not has_voted_for_round
        )

    def next_speaker_index(self, current_index: int, participant_count: int) -> int:
        return (current_index + 1) % participant_count

    def validate_setup(
        self, participants: Sequence[Participant], topic: str | None
    ) -> ValidationResult:
        errors: list[str] = []

        if len(participants) < constants.MIN_PARTICIPANTS:
            errors.append(
                f"Debate requires at least {constants.MIN_PARTICIPANTS} participants"
            )
        if len(participants) > constants.MAX_PARTICIPANTS:
            errors.append(
                f"Debate supports maximum {constants.MAX_PARTICIPANTS} participants"
            )

        ids = [p.id for p in participants]
        if len(set(ids)) != len(ids):
            errors.append("Participant ids must be unique")

        stripped = (topic or "").strip()
        if not stripped:
            errors.append("Debate topic is required")
        elif len(stripped) > constants.MAX_TOPIC_LENGTH:
            errors.append(
                f"Debate topic must be {constants.MAX_TOPIC_LENGTH} characters or less"
            )

        return ValidationResult(valid=not errors, errors=errors)

    def get_round_message(self, round_info: RoundInfo) -> str | None:
        """Host announcement for the start of a round, if any."""
        if not round_info.is_new_round:
            return None
        if round_info.is_final_round:
            return constants.FINAL_ROUND_MESSAGE
        if round_info.current_round < self.total_rounds:
            return constants.round_start_message(round_info.current_round)
        return None
