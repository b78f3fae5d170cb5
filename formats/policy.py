"""Policy debate format implementation."""

from typing import Dict
from .base import DebateFormat
from debate_engine.types import DebatePhase, Position


class PolicyFormat(DebateFormat):
    """Evidence-driven debate over a concrete plan, with a crossfire exchange
    before the closing round in longer debates."""

    @property
    def name(self) -> str:
        return "policy"

    @property
    def display_name(self) -> str:
        return "Policy"

    @property
    def description(self) -> str:
        return "Data-driven debate with evidence, research, and practical solutions"

    def get_guidance(self) -> Dict[DebatePhase, str]:
        return {
            DebatePhase.OPENING: "Opening: present plan/counterplan with 1-2 key pieces of support; natural prose.",
            DebatePhase.REBUTTAL: "Rebuttal: address specific lines; cite selectively; no lists.",
            DebatePhase.CROSSFIRE: "Crossfire: one pointed question and one direct answer; no speeches.",
            DebatePhase.CLOSING: "Closing: weigh impacts; propose clear decision rule; concise.",
        }

    def get_phase_for_round(self, round_number: int, total_rounds: int) -> DebatePhase:
        if total_rounds >= 5 and round_number == total_rounds - 1:
            return DebatePhase.CROSSFIRE
        return super().get_phase_for_round(round_number, total_rounds)

    def get_format_instructions(self) -> str:
        return """POLICY DEBATE FORMAT:
            - The Affirmative defends a concrete plan; the Negative attacks it or offers a counterplan
            - Support claims with specific evidence and cite sources selectively
            - Rebuttals go line by line against the opponent's strongest points
            - Closing turns weigh impacts and propose a clear decision rule"""

    def get_side_labels(self, participant_ids) -> Dict[str, str]:
        positions = self.get_position_assignments(participant_ids)
        return {
            pid: "Affirmative" if position == Position.PRO else "Negative"
            for pid, position in positions.items()
        }
