"""Oxford-style debate format implementation."""

from typing import Dict
from .base import DebateFormat
from debate_engine.types import DebatePhase

OPENING_GUIDANCE = "Opening: state your case clearly. No headings or lists."
REBUTTAL_GUIDANCE = "Rebuttal: answer specific claims; maintain stance; no meta."
CLOSING_GUIDANCE = "Closing: reinforce strongest point; no new claims; concise."


class OxfordFormat(DebateFormat):
    """Classic formal debate with structured arguments and clear positions."""

    @property
    def name(self) -> str:
        return "oxford"

    @property
    def display_name(self) -> str:
        return "Oxford"

    @property
    def description(self) -> str:
        return "Classic formal debate with structured arguments and clear positions"

    def get_guidance(self) -> Dict[DebatePhase, str]:
        return {
            DebatePhase.OPENING: OPENING_GUIDANCE,
            DebatePhase.REBUTTAL: REBUTTAL_GUIDANCE,
            DebatePhase.CLOSING: CLOSING_GUIDANCE,
        }

    def get_format_instructions(self) -> str:
        return """OXFORD DEBATE FORMAT:
            - Proposition supports the motion, Opposition challenges it
            - Opening turns present your own case without addressing the opponent
            - Rebuttals answer specific claims from the previous speaker
            - Closing turns reinforce your strongest point and introduce no new claims
            - Write natural prose: no headings, no bullet lists, no meta commentary"""
