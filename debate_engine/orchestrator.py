"""Debate orchestrator: the session state machine and turn loop."""

import asyncio
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
import inspect
import logging
from typing import TYPE_CHECKING, Any, Literal

from config.personas import Persona, get_persona

from . import constants
from .error_classifier import StreamFailureKind, classify_stream_error, classify_turn_error
from .exceptions import (
    DebateSetupError,
    RoundNotCompleteError,
    VoteAlreadyRecordedError,
)
from .models import (
    DebateErrorInfo,
    DebateEvent,
    DebateMessage,
    DebateOptions,
    DebateSession,
    Participant,
    ParticipantScore,
)
from .prompt_builder import (
    build_continuation_prompt,
    build_role_brief,
    build_turn_prompt,
    extract_previous_message,
    validate_prompt,
)
from .rules import RoundInfo, RulesEngine, clamp_civility, clamp_rounds
from .streaming import StreamingCoordinator
from .types import (
    DebateEventType,
    DebatePhase,
    DebateStatus,
    Position,
    StreamChunkEventData,
    StreamCompletedEventData,
    VotingStartedEventData,
)
from .voting import VotingTracker

if TYPE_CHECKING:
    from config.settings import DelayConfig, StreamingConfig
    from formats.base import DebateFormat
    from models.manager import ModelManager
    from models.providers.base_model_provider import BaseModelProvider
    from .transcript import SessionStore

logger = logging.getLogger(__name__)

type DebateListener = Callable[[DebateEvent], None]
type TurnOutcome = Literal["streamed", "one_shot", "rate_limit", "ai_error"]


def render_stream_event(event: Mapping[str, Any]) -> str | None:
    """Inline text for a non-text provider event."""
    event_type = event.get("type")
    if event_type == "image" and event.get("url"):
        return f"\n\n![image]({event['url']})\n\n"
    if event_type == "tool_call" and event.get("name"):
        return f" `[tool: {event['name']}]` "
    return None


def scores_payload(scores: Mapping[str, ParticipantScore]) -> dict[str, dict[str, Any]]:
    return {
        pid: {
            "name": score.name,
            "round_wins": score.round_wins,
            "rounds_won": list(score.rounds_won),
            "is_overall_winner": score.is_overall_winner,
        }
        for pid, score in scores.items()
    }


class DebateOrchestrator:
    """Drives one debate session from setup to the final vote.

    The orchestrator is the only writer of the session. Turns run one at a
    time: each finished turn schedules the next one as a delayed task, and a
    round boundary pauses the loop until ``record_vote`` is called.
    """

    def __init__(
        self,
        model_manager: "ModelManager",
        session_store: "SessionStore | None" = None,
        *,
        streaming: "StreamingConfig | None" = None,
        delays: "DelayConfig | None" = None,
        personas: Mapping[str, Persona] | None = None,
        coordinator: StreamingCoordinator | None = None,
    ):
        from config.settings import DelayConfig, StreamingConfig

        self.model_manager = model_manager
        self.session_store = session_store
        self.streaming_config = streaming or StreamingConfig()
        self.delays = delays or DelayConfig()
        self.persona_catalog = dict(personas) if personas is not None else None
        self.coordinator = coordinator or StreamingCoordinator(self.streaming_config.speed)

        self._listeners: list[DebateListener] = []
        self._timers: dict[str, asyncio.Task[None]] = {}
        self._background: set[asyncio.Task[None]] = set()
        self._clear_session_state()

    def _clear_session_state(self) -> None:
        self._session: DebateSession | None = None
        self._rules: RulesEngine | None = None
        self._voting: VotingTracker | None = None
        self._format: "DebateFormat | None" = None
        self._started_at: datetime | None = None
        self._previous_round = 0
        self._pending_vote_round: int | None = None
        self._ended = False
        self._briefed: set[str] = set()
        # Providers that demanded verification before streaming; one-shot only from then on
        self._streaming_suppressed: set[str] = set()

    @property
    def session(self) -> DebateSession | None:
        return self._session

    @property
    def voting(self) -> VotingTracker | None:
        return self._voting

    @property
    def debate_format(self) -> "DebateFormat | None":
        return self._format

    def is_streaming_suppressed(self, provider_name: str) -> bool:
        return provider_name in self._streaming_suppressed

    # Events

    def add_listener(self, listener: DebateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DebateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event_type: DebateEventType, data: Mapping[str, Any]) -> None:
        event = DebateEvent(type=event_type, data=dict(data))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Debate listener failed on {event_type.value}: {e}")

    # Setup

    def initialize(
        self,
        topic: str,
        participants: Sequence[Participant],
        personas: Mapping[str, str] | None = None,
        options: DebateOptions | None = None,
    ) -> DebateSession:
        """Validate the setup and create an active session.

        Raises DebateSetupError, and leaves no session behind, when the
        participants, topic, format or stance overrides are invalid.
        """
        options = options or DebateOptions()
        if self._session is not None:
            self.reset(keep_listeners=True)

        validation = RulesEngine().validate_setup(participants, topic)
        if not validation.valid:
            raise DebateSetupError(validation.errors)

        # formats imports debate_engine.types, so resolve it at call time
        from formats.registry import format_registry

        try:
            debate_format = format_registry.get_format(options.format_id)
        except ValueError as e:
            raise DebateSetupError([str(e)]) from e

        requested_rounds = debate_format.default_rounds if options.rounds is None else options.rounds
        rules = RulesEngine(clamp_rounds(requested_rounds))

        participant_ids = [p.id for p in participants]
        stances = debate_format.get_position_assignments(participant_ids)
        for pid, stance in (options.stances or {}).items():
            if pid not in stances:
                raise DebateSetupError([f"Stance given for unknown participant: {pid}"])
            try:
                stances[pid] = Position(stance)
            except ValueError as e:
                raise DebateSetupError([f"Invalid stance for {pid}: {stance}"]) from e

        persona_ids = {pid: (personas or {}).get(pid) or "default" for pid in participant_ids}

        session = DebateSession(
            topic=topic.strip(),
            participants=tuple(participants),
            format_id=debate_format.name,
            total_rounds=rules.total_rounds,
            civility=clamp_civility(options.civility),
            personas=persona_ids,
            stances=stances,
            status=DebateStatus.INITIALIZING,
        )

        self._session = session
        self._rules = rules
        self._format = debate_format
        self._voting = VotingTracker(session.participants, session.total_rounds, debate_format)

        session.status = DebateStatus.ACTIVE
        logger.info(
            f"Initialized debate {session.id}: '{session.topic}' "
            f"({debate_format.name}, {session.total_rounds} rounds, {session.participant_count} participants)"
        )
        self._emit(
            DebateEventType.DEBATE_STARTED,
            {
                "session_id": session.id,
                "topic": session.topic,
                "format": session.format_id,
                "total_rounds": session.total_rounds,
                "participants": [p.id for p in session.participants],
                "stances": {pid: s.value for pid, s in session.stances.items()},
            },
        )
        return session

    async def start(self, existing_transcript: Sequence[DebateMessage] = ()) -> None:
        """Begin the turn loop with the first speaker.

        ``existing_transcript`` is kept in the session transcript but never
        sent to providers as history.
        """
        session = self._require_session()
        if self._started_at is not None:
            raise RuntimeError(f"Debate {session.id} has already started")

        await self._enforce_storage_limits()

        session.messages.extend(existing_transcript)
        self._started_at = datetime.now()
        self._append_host(constants.debate_start_message(session.topic))
        self._schedule_turn(0.0, 0, 1)

    async def _enforce_storage_limits(self) -> None:
        enforce = getattr(self.session_store, "enforce_storage_limits", None)
        if enforce is None:
            return
        try:
            result = enforce()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Storage limit enforcement failed, continuing: {e}")

    def _require_session(self) -> DebateSession:
        if self._session is None:
            raise RuntimeError("No active debate session")
        return self._session

    # Turn loop

    def _schedule_turn(self, delay: float, speaker_index: int, message_count: int) -> None:
        timer_id = f"turn_{message_count}"

        async def run() -> None:
            try:
                if delay > 0:
                    await asyncio.sleep(delay)
                await self.execute_turn(speaker_index, message_count)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Turn {message_count} failed unexpectedly")
                if self._session is not None:
                    self._session.status = DebateStatus.ERROR
            finally:
                if self._timers.get(timer_id) is asyncio.current_task():
                    del self._timers[timer_id]

        self._timers[timer_id] = asyncio.create_task(run(), name=timer_id)

    def _cancel_timers(self) -> None:
        current = asyncio.current_task() if self._has_running_loop() else None
        for timer_id, task in list(self._timers.items()):
            if task is current:
                continue
            task.cancel()
            del self._timers[timer_id]

    @staticmethod
    def _has_running_loop() -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True

    async def execute_turn(self, speaker_index: int, message_count: int) -> None:
        """Produce the turn for ``speaker_index`` at 1-based ``message_count``.

        Pauses for a vote instead when a finished round is still unvoted, and
        ends the debate once every turn has been spoken.
        """
        session = self._session
        if session is None or session.status != DebateStatus.ACTIVE:
            return
        rules, voting, debate_format = self._rules, self._voting, self._format
        assert rules is not None and voting is not None and debate_format is not None

        info = rules.get_round_info(
            message_count,
            speaker_index,
            session.participant_count,
            self._previous_round,
            voting.has_voted_for_round(self._previous_round),
        )

        if info.should_end_debate:
            self.end_debate()
            return

        if info.should_show_voting:
            self._begin_round_vote(self._previous_round)
            return

        if info.is_new_round:
            self._announce_round(info)

        session.current_round = info.current_round
        session.message_count = message_count
        session.current_speaker_index = speaker_index
        self._previous_round = info.current_round

        participant = session.participants[speaker_index]
        phase = debate_format.get_phase_for_round(info.current_round, session.total_rounds)
        outcome = await self._produce_turn(session, participant, phase, info)

        if outcome is None or self._session is not session:
            return
        if session.status != DebateStatus.ACTIVE:
            return

        if message_count >= session.max_messages:
            self.end_debate()
            return

        self._schedule_turn(
            self._delay_after(outcome),
            rules.next_speaker_index(speaker_index, session.participant_count),
            message_count + 1,
        )

    def _announce_round(self, info: RoundInfo) -> None:
        assert self._rules is not None
        if self._previous_round > 0:
            self._emit(
                DebateEventType.ROUND_CHANGED,
                {
                    "round": info.current_round,
                    "previous_round": self._previous_round,
                    "is_final_round": info.is_final_round,
                },
            )
        message = self._rules.get_round_message(info)
        if message:
            self._append_host(message, round=info.current_round)

    def _delay_after(self, outcome: TurnOutcome) -> float:
        return {
            "streamed": self.delays.post_stream_pause,
            "one_shot": self.delays.ai_response,
            "rate_limit": self.delays.rate_limit_recovery,
            "ai_error": self.delays.error_recovery,
        }[outcome]

    def _persona(self, participant_id: str) -> Persona:
        assert self._session is not None
        return get_persona(self._session.persona_for(participant_id), self.persona_catalog)

    def _history(self, exclude: DebateMessage | None = None) -> list[DebateMessage]:
        """Transcript since the debate started; pre-session history is excluded."""
        assert self._session is not None
        started = self._started_at or datetime.min
        return [
            m for m in self._session.messages
            if m is not exclude and m.timestamp >= started
        ]

    def _build_prompt(self, participant: Participant, phase: DebatePhase, info: RoundInfo) -> str:
        session, debate_format = self._session, self._format
        assert session is not None and debate_format is not None

        prompt = build_turn_prompt(
            topic=session.topic,
            phase=phase,
            debate_format=debate_format,
            previous_message=extract_previous_message(self._history(), participant),
            is_final_round=info.is_final_round,
            civility=session.civility,
            persona=self._persona(participant.id),
        )
        valid, errors = validate_prompt(prompt)
        if not valid:
            logger.warning(f"Turn prompt for {participant.id} rejected ({'; '.join(errors)}); using continuation prompt")
            prompt = build_continuation_prompt(session.topic)
        return prompt

    def _ensure_role_brief(self, participant: Participant, provider: "BaseModelProvider", prompt: str) -> str:
        """Attach the role brief until the participant completes a turn; returns the prompt to send."""
        session, debate_format = self._session, self._format
        assert session is not None and debate_format is not None
        if participant.id in self._briefed:
            return prompt

        ids = [p.id for p in session.participants]
        brief = build_role_brief(
            topic=session.topic,
            participant=participant,
            stance=session.stances[participant.id],
            debate_format=debate_format,
            opponents=[
                p for p in session.participants
                if session.stances[p.id] != session.stances[participant.id]
            ],
            persona=self._persona(participant.id),
            civility=session.civility,
            side_label=debate_format.get_side_labels(ids).get(participant.id),
        )

        if provider.get_capabilities().system_prompt:
            provider.set_system_instruction(brief)
            return prompt
        return f"{brief}\n\n{prompt}"

    def _should_stream(self, participant: Participant, provider: "BaseModelProvider") -> bool:
        if not provider.get_capabilities().streaming:
            return False
        if participant.provider in self._streaming_suppressed:
            return False
        return self.streaming_config.is_enabled_for(participant.provider)

    async def _produce_turn(
        self,
        session: DebateSession,
        participant: Participant,
        phase: DebatePhase,
        info: RoundInfo,
    ) -> TurnOutcome | None:
        try:
            provider = self.model_manager.get_provider(participant.id)
        except KeyError as e:
            return self._record_turn_error(e, participant, info)

        prompt = self._build_prompt(participant, phase, info)
        prompt = self._ensure_role_brief(participant, provider, prompt)
        metadata = {
            "round": info.current_round,
            "phase": phase.value,
            "message_count": info.message_count,
        }

        if self._should_stream(participant, provider):
            outcome = await self._run_streaming_turn(session, participant, provider, prompt, metadata, info)
        else:
            outcome = await self._run_one_shot_turn(session, participant, provider, prompt, metadata, info)
        if outcome in ("streamed", "one_shot"):
            self._briefed.add(participant.id)
        return outcome

    async def _run_streaming_turn(
        self,
        session: DebateSession,
        participant: Participant,
        provider: "BaseModelProvider",
        prompt: str,
        metadata: dict[str, Any],
        info: RoundInfo,
    ) -> TurnOutcome | None:
        placeholder = DebateMessage(
            sender=participant.name,
            content="",
            speaker_id=participant.id,
            metadata=dict(metadata),
            is_streaming=True,
        )
        session.messages.append(placeholder)
        self._emit(DebateEventType.MESSAGE_ADDED, {"message": placeholder})
        self._emit(
            DebateEventType.STREAM_STARTED,
            {"message_id": placeholder.id, "speaker_id": participant.id},
        )

        result: dict[str, Any] = {}

        def on_chunk(chunk: str) -> None:
            data: StreamChunkEventData = {
                "message_id": placeholder.id,
                "speaker_id": participant.id,
                "chunk": chunk,
            }
            self._emit(DebateEventType.STREAM_CHUNK, data)

        def on_complete(content: str) -> None:
            result["content"] = content

        def on_error(error: BaseException) -> None:
            result["error"] = error

        history = self._history(exclude=placeholder)
        try:
            await self.coordinator.start(
                placeholder.id,
                provider,
                prompt,
                history,
                on_chunk,
                on_complete,
                on_error,
                on_event=render_stream_event,
                speed=self.streaming_config.speed,
            )
        except asyncio.CancelledError:
            self._discard_placeholder(session, placeholder)
            raise

        if self._session is not session:
            return None

        if "content" in result and not result["content"].strip():
            result = {"error": RuntimeError(f"{participant.name} returned an empty response")}

        if "content" in result:
            self._complete_stream(placeholder, result["content"], model_used=participant.model, fallback=False)
            return "streamed"

        if "error" not in result:
            # Cancelled without an error: drop the placeholder and stop here
            self._discard_placeholder(session, placeholder)
            return None

        error: BaseException = result["error"]
        kind = classify_stream_error(error)
        self._emit(
            DebateEventType.STREAM_ERROR,
            {
                "message_id": placeholder.id,
                "speaker_id": participant.id,
                "error": str(error),
                "kind": kind.value,
                "fallback": kind.allows_fallback,
            },
        )

        if kind is StreamFailureKind.VERIFICATION_REQUIRED:
            self._streaming_suppressed.add(participant.provider)
            logger.warning(
                f"Streaming disabled for provider {participant.provider} for the rest of debate {session.id}: {error}"
            )

        if not kind.allows_fallback:
            self._discard_placeholder(session, placeholder)
            return self._record_turn_error(error, participant, info)

        logger.info(f"Falling back to one-shot delivery for {participant.id} ({kind.value})")
        try:
            response = await provider.send_message(prompt, history, is_debate_mode=True)
        except Exception as fallback_error:
            self._discard_placeholder(session, placeholder)
            return self._record_turn_error(fallback_error, participant, info)
        except asyncio.CancelledError:
            self._discard_placeholder(session, placeholder)
            raise

        if self._session is not session:
            return None
        self._complete_stream(
            placeholder,
            response.response,
            model_used=response.model_used or participant.model,
            fallback=True,
        )
        return "streamed"

    def _complete_stream(
        self, placeholder: DebateMessage, content: str, model_used: str | None, fallback: bool
    ) -> None:
        placeholder.finalize_content(content)
        if model_used:
            placeholder.metadata["model_used"] = model_used
        if fallback:
            placeholder.metadata["fallback"] = True

        data: StreamCompletedEventData = {
            "message_id": placeholder.id,
            "speaker_id": placeholder.speaker_id or "",
            "content": content,
            "fallback": fallback,
        }
        self._emit(DebateEventType.STREAM_COMPLETED, data)

    def _discard_placeholder(self, session: DebateSession, placeholder: DebateMessage) -> None:
        if placeholder.is_streaming and placeholder in session.messages:
            session.messages.remove(placeholder)

    async def _run_one_shot_turn(
        self,
        session: DebateSession,
        participant: Participant,
        provider: "BaseModelProvider",
        prompt: str,
        metadata: dict[str, Any],
        info: RoundInfo,
    ) -> TurnOutcome | None:
        typing_data = {"speaker_id": participant.id, "name": participant.name}
        self._emit(DebateEventType.TYPING_STARTED, typing_data)
        try:
            response = await provider.send_message(prompt, self._history(), is_debate_mode=True)
        except Exception as e:
            self._emit(DebateEventType.TYPING_STOPPED, typing_data)
            return self._record_turn_error(e, participant, info)
        self._emit(DebateEventType.TYPING_STOPPED, typing_data)

        if self._session is not session:
            return None

        model_used = response.model_used or participant.model
        message = DebateMessage(
            sender=participant.name,
            content=response.response,
            speaker_id=participant.id,
            metadata={**metadata, "model_used": model_used} if model_used else dict(metadata),
        )
        session.messages.append(message)
        self._emit(DebateEventType.MESSAGE_ADDED, {"message": message})
        return "one_shot"

    def _record_turn_error(
        self, error: BaseException, participant: Participant, info: RoundInfo
    ) -> TurnOutcome:
        """Replace a failed turn with a visible host message."""
        error_type = classify_turn_error(error)
        logger.error(f"Turn {info.message_count} failed for {participant.id} ({error_type}): {error}")

        content = (
            constants.rate_limit_message(participant.name)
            if error_type == "rate_limit"
            else constants.error_message(participant.name)
        )
        self._append_host(
            content,
            round=info.current_round,
            error_type=error_type,
            participant_id=participant.id,
        )
        self._emit(
            DebateEventType.ERROR_OCCURRED,
            {
                "error": DebateErrorInfo(
                    type=error_type,
                    message=str(error),
                    participant_id=participant.id,
                    retryable=True,
                )
            },
        )
        return error_type

    def _append_host(self, content: str, **metadata: Any) -> DebateMessage:
        session = self._require_session()
        message = DebateMessage.from_host(content, **metadata)
        session.messages.append(message)
        self._emit(DebateEventType.MESSAGE_ADDED, {"message": message})
        return message

    # Voting

    def _begin_round_vote(self, round_number: int, is_final: bool | None = None) -> None:
        session, voting = self._session, self._voting
        assert session is not None and voting is not None

        if is_final is None:
            is_final = round_number == session.total_rounds
        session.status = DebateStatus.VOTING_ROUND
        self._pending_vote_round = round_number

        data: VotingStartedEventData = {
            "round": round_number,
            "is_final_round": is_final,
            "is_overall_vote": False,
            "label": voting.get_exchange_label(round_number),
            "prompt": voting.get_voting_prompt(round_number, is_final_vote=is_final),
        }
        logger.info(f"Debate {session.id}: waiting for round {round_number} vote")
        self._emit(DebateEventType.VOTING_STARTED, data)

    async def record_vote(self, round_number: int, winner_id: str) -> None:
        """Record the winner of the round currently awaiting a vote.

        Raises VoteAlreadyRecordedError for a second vote on a round and
        RoundNotCompleteError for a round that is not awaiting a vote.
        """
        session = self._require_session()
        voting = self._voting
        assert voting is not None

        if voting.has_voted_for_round(round_number):
            raise VoteAlreadyRecordedError(round_number)
        if session.status != DebateStatus.VOTING_ROUND or round_number != self._pending_vote_round:
            raise RoundNotCompleteError(f"Round {round_number} is not awaiting a vote")

        voting.record_round_vote(round_number, winner_id)
        self._pending_vote_round = None

        is_final = round_number == session.total_rounds
        self._append_host(
            voting.get_winner_message(round_number, winner_id, is_final_vote=is_final),
            round=round_number,
            winner_id=winner_id,
        )
        scores = scores_payload(voting.calculate_scores())
        session.metadata["scores"] = scores
        session.metadata["votes"] = voting.votes_map()
        self._emit(
            DebateEventType.VOTING_COMPLETED,
            {"round": round_number, "winner_id": winner_id, "scores": scores},
        )

        if voting.are_all_rounds_voted() or self._ended:
            self._declare_outcome()
            return

        session.status = DebateStatus.ACTIVE
        assert self._rules is not None
        self._schedule_turn(
            self.delays.voting_continuation,
            self._rules.next_speaker_index(session.current_speaker_index, session.participant_count),
            session.message_count + 1,
        )

    def _declare_outcome(self) -> None:
        session, voting = self._session, self._voting
        assert session is not None and voting is not None

        session.status = DebateStatus.VOTING_OVERALL
        outcome = voting.determine_outcome()
        if outcome.winner_id is not None and voting.are_all_rounds_voted():
            voting.record_overall_winner(outcome.winner_id)

        if outcome.winner_id is None:
            content = voting.get_tie_message(outcome.tied_ids)
        else:
            content = voting.get_overall_winner_message(outcome.winner_id)
        self._append_host(content, winner_id=outcome.winner_id, tied_ids=list(outcome.tied_ids))

        scores = scores_payload(voting.calculate_scores())
        session.metadata["scores"] = scores
        session.metadata["votes"] = voting.votes_map()
        session.status = DebateStatus.COMPLETED

        logger.info(
            f"Debate {session.id} completed: "
            + (f"winner {outcome.winner_id}" if outcome.winner_id else f"tie between {', '.join(outcome.tied_ids)}")
        )
        self._emit(
            DebateEventType.DEBATE_ENDED,
            {
                "session_id": session.id,
                "winner_id": outcome.winner_id,
                "tied_ids": list(outcome.tied_ids),
                "is_tie": outcome.is_tie,
                "scores": scores,
            },
        )
        self._persist(session)

    def _persist(self, session: DebateSession) -> None:
        if self.session_store is None:
            return
        task = asyncio.create_task(self._save_session(session), name=f"save-{session.id}")
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _save_session(self, session: DebateSession) -> None:
        assert self.session_store is not None
        try:
            result = self.session_store.save_session(session)
            if inspect.isawaitable(result):
                await result
            logger.info(f"Saved debate session {session.id}")
        except Exception as e:
            logger.error(f"Failed to save debate session {session.id}: {e}")

    # Ending and teardown

    def end_debate(self) -> None:
        """Stop producing turns and ask for the final-round vote."""
        session, voting = self._session, self._voting
        if session is None or voting is None:
            return
        if session.status in (DebateStatus.VOTING_OVERALL, DebateStatus.COMPLETED):
            return

        final_round = session.total_rounds
        if self._ended and self._pending_vote_round == final_round:
            return

        self._cancel_timers()
        self.coordinator.cancel_all()
        self._ended = True
        # A pending vote on an earlier round is replaced by the final-round vote
        self._append_host(constants.DEBATE_COMPLETE_MESSAGE)
        if voting.has_voted_for_round(final_round):
            self._declare_outcome()
            return
        self._begin_round_vote(final_round, is_final=True)

    def reset(self, keep_listeners: bool = False) -> None:
        """Cancel all pending work and drop the session. Safe in any state."""
        self._cancel_timers()
        cancelled = self.coordinator.cancel_all()
        if cancelled:
            logger.info(f"Cancelled {cancelled} active stream(s) during reset")
        if self._session is not None:
            logger.info(f"Reset debate {self._session.id}")
        self._clear_session_state()
        if not keep_listeners:
            self._listeners.clear()

    async def wait_for_idle(self) -> None:
        """Wait until no turn is scheduled or running and saves have finished."""
        current = asyncio.current_task()
        while True:
            pending = [
                t for t in (*self._timers.values(), *self._background)
                if t is not current and not t.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
