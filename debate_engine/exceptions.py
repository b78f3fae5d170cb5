"""Exceptions raised by the debate engine."""


class DebateSetupError(ValueError):
    """Debate setup failed validation; no session was created."""

    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid debate setup: {', '.join(errors)}")
        self.errors = errors


class VotingError(RuntimeError):
    """A vote could not be recorded."""


class VoteAlreadyRecordedError(VotingError):
    """A round already has a recorded winner."""

    def __init__(self, round_number: int):
        super().__init__(f"Round {round_number} already has a recorded vote")
        self.round_number = round_number


class RoundNotCompleteError(VotingError):
    """Not every participant has spoken in the round yet."""


class StreamingError(RuntimeError):
    """Base class for streaming coordinator failures."""


class StreamAlreadyActiveError(StreamingError):
    def __init__(self, turn_id: str):
        super().__init__(f"Stream already active for message {turn_id}")
        self.turn_id = turn_id


class StreamingNotSupportedError(StreamingError):
    """The resolved provider cannot deliver output incrementally."""
