"""Turn prompt and role brief construction."""

from collections.abc import Sequence
import logging
from typing import TYPE_CHECKING

from . import constants
from .models import DebateMessage, Participant
from .types import DebatePhase, Position, SenderType

if TYPE_CHECKING:
    from config.personas import Persona
    from formats.base import DebateFormat

logger = logging.getLogger(__name__)

FINAL_ROUND_CUE = "Closing: reinforce your strongest point; no new claims; concise."


def tone_directive(civility: int | None) -> str:
    """Map civility 1-5 to a tone line; every level forbids insults."""
    if not civility:
        return ""
    if civility <= 2:
        tone = "friendly wit"
    elif civility >= 4:
        tone = "pointed and adversarial but respectful"
    else:
        tone = "neutral and professional"
    return f"Tone: {tone}. Avoid insults or stereotyping."


def build_turn_prompt(
    topic: str,
    phase: DebatePhase,
    debate_format: "DebateFormat",
    previous_message: str | None = None,
    is_final_round: bool = False,
    civility: int | None = None,
    persona: "Persona | None" = None,
) -> str:
    """Build the lightweight per-turn instruction.

    Persona and stance context live in the role brief; this prompt only
    carries what changes from turn to turn.
    """
    previous = ""
    if previous_message and phase != DebatePhase.OPENING:
        previous = f'{constants.PREVIOUS_SPEAKER_MARKER}"{previous_message}"'

    components = [
        f"Turn: {debate_format.get_phase_label(phase)}",
        debate_format.get_phase_hint(phase),
        previous,
        debate_format.get_phase_guidance(phase),
        f'Respond about "{topic}". Maintain your assigned stance strictly; do not switch sides.',
        persona.turn_nudge if persona and persona.turn_nudge else "",
        tone_directive(civility),
        FINAL_ROUND_CUE if is_final_round and phase == DebatePhase.CLOSING else "",
    ]
    return "\n".join(c for c in components if c)


def build_role_brief(
    topic: str,
    participant: Participant,
    stance: Position,
    debate_format: "DebateFormat",
    opponents: Sequence[Participant] = (),
    persona: "Persona | None" = None,
    civility: int | None = None,
    side_label: str | None = None,
) -> str:
    """Build the once-per-session system instruction for one participant."""
    role_name = side_label or stance.value.title()
    stance_line = {
        Position.PRO: f"You ARE the {role_name} speaker. You support the motion and believe it is correct.",
        Position.CON: f"You ARE the {role_name} speaker. You oppose the motion and believe it is wrong.",
    }[stance]

    sections = [
        f'You are {participant.name}, participating in a debate about: "{topic}"',
        f"DEBATE FORMAT: {debate_format.display_name.upper()}",
        debate_format.get_format_instructions(),
        f"YOUR ROLE: {stance_line}\nNever switch sides, even if the opponent makes a strong point.",
    ]

    if opponents:
        names = ", ".join(o.name for o in opponents)
        sections.append(
            f"YOUR OPPONENTS: {names}. Engage with their strongest arguments, "
            "not weak versions of them, and calibrate your rebuttals to what they actually said."
        )

    if persona:
        persona_text = persona.system_prompt
        if persona.debate_prompt:
            persona_text = f"{persona_text}\n{persona.debate_prompt}"
        sections.append(f"YOUR SPEAKING STYLE:\n{persona_text}")

    tone = tone_directive(civility)
    if tone:
        sections.append(tone)

    sections.append(
        """RESPONSE FORMAT:
- Speak directly as your assigned role without labels, prefixes, or announcements
- Write natural prose; no headings or bullet lists
- Each turn will tell you its phase; follow that phase's boundaries"""
    )
    return "\n\n".join(sections)


def extract_previous_message(
    messages: Sequence[DebateMessage], participant: Participant
) -> str | None:
    """Most recent AI turn with content from someone other than ``participant``."""
    for message in reversed(messages):
        if message.sender_type != SenderType.AI or not message.content:
            continue
        if message.speaker_id is not None:
            if message.speaker_id != participant.id:
                return message.content
        elif not message.sender.startswith(participant.name):
            return message.content
    return None


def build_continuation_prompt(topic: str) -> str:
    return f'Continue the debate about "{topic}". Avoid headings or lists.'


def validate_prompt(prompt: str | None) -> tuple[bool, list[str]]:
    errors: list[str] = []
    if not prompt or not prompt.strip():
        errors.append("Prompt cannot be empty")
    elif len(prompt) > constants.MAX_PROMPT_LENGTH:
        errors.append(
            f"Prompt is too long (max {constants.MAX_PROMPT_LENGTH} characters)"
        )
    return not errors, errors
