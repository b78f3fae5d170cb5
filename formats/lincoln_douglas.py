"""Lincoln-Douglas value debate format implementation."""

from typing import Dict
from .base import DebateFormat
from .oxford import CLOSING_GUIDANCE
from debate_engine.types import DebatePhase, Position


class LincolnDouglasFormat(DebateFormat):
    """Philosophical debate focusing on ethics, values, and moral principles."""

    @property
    def name(self) -> str:
        return "lincoln_douglas"

    @property
    def display_name(self) -> str:
        return "Lincoln-Douglas"

    @property
    def description(self) -> str:
        return "Philosophical debate focusing on ethics, values, and moral principles"

    def get_guidance(self) -> Dict[DebatePhase, str]:
        return {
            DebatePhase.OPENING: "Opening: frame moral values and criteria; define key terms; no headings.",
            DebatePhase.REBUTTAL: "Rebuttal: weigh values explicitly; address criteria; natural prose.",
            DebatePhase.CLOSING: CLOSING_GUIDANCE,
        }

    def get_format_instructions(self) -> str:
        return """LINCOLN-DOUGLAS FORMAT:
            - Anchor your case in a core value and a criterion for weighing it
            - Define key moral terms before relying on them
            - Rebuttals weigh competing values explicitly rather than trading facts
            - Closing turns explain why your value framework should prevail"""

    def get_side_labels(self, participant_ids) -> Dict[str, str]:
        positions = self.get_position_assignments(participant_ids)
        return {
            pid: "Affirmative" if position == Position.PRO else "Negative"
            for pid, position in positions.items()
        }
