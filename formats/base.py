"""Base classes and interfaces for debate formats."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass

from debate_engine.types import DebatePhase, Position


@dataclass(frozen=True)
class TurnSpec:
    """One scripted turn: which phase, and who speaks."""
    phase: DebatePhase
    speaker_index: int
    round: int


DEFAULT_PHASE_LABELS: Dict[DebatePhase, str] = {
    DebatePhase.OPENING: "Opening Statement",
    DebatePhase.REBUTTAL: "Rebuttal",
    DebatePhase.CLOSING: "Closing Argument",
    DebatePhase.CROSSFIRE: "Cross-examination",
    DebatePhase.QUESTION: "Question",
}

DEFAULT_PHASE_HINTS: Dict[DebatePhase, str] = {
    DebatePhase.OPENING: "Present your case. Do NOT mention or address the opponent or their claims in this turn.",
    DebatePhase.REBUTTAL: "Directly refute 1-2 specific claims from the prior turn with focused evidence.",
    DebatePhase.CLOSING: "Synthesize and leave one clear takeaway; no new claims.",
    DebatePhase.CROSSFIRE: "Ask or answer pointed questions; keep it tight.",
    DebatePhase.QUESTION: "Pose one focused question that moves the argument.",
}


class DebateFormat(ABC):
    """Abstract base class for debate formats.

    A format is read-only configuration: its default length, the phase of
    each round, and the guidance text injected into turn prompts.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Format id."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable format name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Format description."""
        pass

    @property
    def default_rounds(self) -> int:
        """Rounds used when a session does not request a count."""
        return 3

    @abstractmethod
    def get_guidance(self) -> Dict[DebatePhase, str]:
        """Per-phase guidance strings."""
        pass

    @abstractmethod
    def get_format_instructions(self) -> str:
        """Format boundaries explained once in the role brief."""
        pass

    def get_phase_for_round(self, round_number: int, total_rounds: int) -> DebatePhase:
        """Opening first, closing last, rebuttals in between."""
        if round_number <= 1:
            return DebatePhase.OPENING
        if round_number >= total_rounds:
            return DebatePhase.CLOSING
        return DebatePhase.REBUTTAL

    def get_turn_plan(self, participant_count: int, total_rounds: int) -> List[TurnSpec]:
        """Full scripted turn sequence: every participant speaks once per round."""
        return [
            TurnSpec(
                phase=self.get_phase_for_round(round_number, total_rounds),
                speaker_index=speaker_index,
                round=round_number,
            )
            for round_number in range(1, total_rounds + 1)
            for speaker_index in range(participant_count)
        ]

    def get_phase_guidance(self, phase: DebatePhase) -> str:
        return self.get_guidance().get(phase, "")

    def get_phase_label(self, phase: DebatePhase) -> str:
        return DEFAULT_PHASE_LABELS.get(phase, "Turn")

    def get_phase_hint(self, phase: DebatePhase) -> str:
        return DEFAULT_PHASE_HINTS.get(phase, "")

    def get_exchange_labels(self, total_rounds: int) -> Optional[Sequence[str]]:
        """Format-specific round labels, or None to use the standard table."""
        return None

    def get_position_assignments(self, participant_ids: Sequence[str]) -> Dict[str, Position]:
        """First participant is PRO, second CON, further participants alternate."""
        return {
            participant_id: Position.PRO if i % 2 == 0 else Position.CON
            for i, participant_id in enumerate(participant_ids)
        }

    def get_side_labels(self, participant_ids: Sequence[str]) -> Dict[str, str]:
        positions = self.get_position_assignments(participant_ids)
        return {
            pid: "Proposition" if position == Position.PRO else "Opposition"
            for pid, position in positions.items()
        }
