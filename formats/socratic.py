"""Socratic inquiry format implementation."""

from typing import Dict, Optional, Sequence
from .base import DebateFormat
from debate_engine.types import DebatePhase

SOCRATIC_EXCHANGE_LABELS: Dict[int, tuple[str, ...]] = {
    3: ("Opening Questions", "Follow-up", "Synthesis"),
    5: ("Opening Questions", "Follow-up", "Deeper Probe", "Final Probe", "Synthesis"),
    7: (
        "Opening Questions",
        "Follow-up",
        "Deeper Probe",
        "Assumption Check",
        "Counter-Probe",
        "Final Probe",
        "Synthesis",
    ),
}


class SocraticFormat(DebateFormat):
    """Inquiry-based dialogue that explores ideas through questions."""

    @property
    def name(self) -> str:
        return "socratic"

    @property
    def display_name(self) -> str:
        return "Socratic"

    @property
    def description(self) -> str:
        return "Inquiry-based dialogue that explores ideas through thoughtful questions"

    @property
    def default_rounds(self) -> int:
        return 4

    def get_guidance(self) -> Dict[DebatePhase, str]:
        return {
            DebatePhase.OPENING: "Opening: ask pointed questions to define terms and assumptions; brief.",
            DebatePhase.REBUTTAL: "Follow-ups: ask or answer compactly; pressure test assumptions; no headings.",
            DebatePhase.CLOSING: "Closing: one clear insight or synthesis; very concise.",
        }

    def get_phase_label(self, phase: DebatePhase) -> str:
        labels = {
            DebatePhase.OPENING: "Opening Questions",
            DebatePhase.REBUTTAL: "Focused Follow-up",
            DebatePhase.CLOSING: "Synthesis",
        }
        return labels.get(phase) or super().get_phase_label(phase)

    def get_phase_hint(self, phase: DebatePhase) -> str:
        hints = {
            DebatePhase.OPENING: "Pose 1-3 clarifying questions to frame terms and assumptions.",
            DebatePhase.REBUTTAL: "Probe assumptions with concise, pointed follow-ups or answers.",
            DebatePhase.CLOSING: "Offer a crisp synthesis; no new claims.",
        }
        return hints.get(phase) or super().get_phase_hint(phase)

    def get_exchange_labels(self, total_rounds: int) -> Optional[Sequence[str]]:
        return SOCRATIC_EXCHANGE_LABELS.get(total_rounds)

    def get_format_instructions(self) -> str:
        return """SOCRATIC DIALOGUE FORMAT:
            - Advance your stance mainly through questions rather than speeches
            - Define terms and expose assumptions before arguing conclusions
            - Keep every turn compact; answer questions put to you directly
            - The final turn offers one clear synthesis"""
