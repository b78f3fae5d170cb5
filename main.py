#!/usr/bin/env python3
"""Main entry point for the Debate Arena engine: runs one debate in the terminal."""

import asyncio
import logging
import sys
from pathlib import Path

from config.settings import AppConfig, get_template_config
from debate_engine.models import DebateEvent, DebateOptions
from debate_engine.orchestrator import DebateOrchestrator
from debate_engine.transcript import JsonSessionStore, format_transcript
from debate_engine.types import DebateEventType, DebateStatus
from models.manager import ModelManager

DEFAULT_CONFIG_PATH = Path("debate_config.json")

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Configure logging for the debate runner."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_usage():
    """Print usage information."""

    print("Debate Arena")
    print("=" * 40)
    print("Usage:")
    print("   python main.py [config.json]        run a debate from a JSON config")
    print("   python main.py --template [out.yml] write a template config")
    print()
    print("OpenRouter participants need OPENROUTER_API_KEY (or system.openrouter.api_key).")
    print()


class ConsoleObserver:
    """Prints debate events and collects votes from the terminal."""

    def __init__(self, orchestrator: DebateOrchestrator):
        self.orchestrator = orchestrator
        self.vote_requests: asyncio.Queue[int] = asyncio.Queue()
        self.finished = asyncio.Event()

    def __call__(self, event: DebateEvent) -> None:
        data = event.data
        if event.type == DebateEventType.MESSAGE_ADDED:
            message = data["message"]
            if not message.is_streaming:
                print(f"\n[{message.sender}] {message.content}")
        elif event.type == DebateEventType.STREAM_STARTED:
            session = self.orchestrator.session
            speaker = session.get_participant(data["speaker_id"]) if session else None
            print(f"\n[{speaker.name if speaker else data['speaker_id']}] ", end="", flush=True)
        elif event.type == DebateEventType.STREAM_CHUNK:
            print(data["chunk"], end="", flush=True)
        elif event.type == DebateEventType.STREAM_COMPLETED:
            if data["fallback"]:
                print(data["content"], end="")
            print()
        elif event.type == DebateEventType.VOTING_STARTED:
            self.vote_requests.put_nowait(data["round"])
        elif event.type == DebateEventType.DEBATE_ENDED:
            self.finished.set()

    async def collect_votes(self) -> None:
        session = self.orchestrator.session
        assert session is not None

        while not self.finished.is_set():
            round_task = asyncio.ensure_future(self.vote_requests.get())
            finished_task = asyncio.ensure_future(self.finished.wait())
            done, pending = await asyncio.wait(
                {round_task, finished_task}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            if round_task not in done:
                return

            round_number = round_task.result()
            voting = self.orchestrator.voting
            assert voting is not None
            print(f"\n{voting.get_voting_prompt(round_number, round_number == session.total_rounds)}")
            for index, participant in enumerate(session.participants, start=1):
                print(f"   {index}. {participant.name}")

            winner_id = await asyncio.to_thread(self._ask_winner, session.participants)
            await self.orchestrator.record_vote(round_number, winner_id)

    @staticmethod
    def _ask_winner(participants) -> str:
        while True:
            answer = input("Your vote: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(participants):
                return participants[int(answer) - 1].id
            for participant in participants:
                if answer in (participant.id, participant.name):
                    return participant.id
            print("Please enter a number from the list.")


async def run_debate(config: AppConfig) -> int:
    """Run a configured debate to completion; returns the process exit code."""
    model_manager = ModelManager(config.system)
    for participant_config in config.participants:
        model_manager.register_participant(participant_config)

    orchestrator = DebateOrchestrator(
        model_manager,
        JsonSessionStore(),
        streaming=config.system.streaming,
        delays=config.system.delays,
    )
    observer = ConsoleObserver(orchestrator)
    orchestrator.add_listener(observer)

    session = orchestrator.initialize(
        config.debate.topic,
        [p.to_participant() for p in config.participants],
        personas=config.persona_assignments(),
        options=DebateOptions(
            format_id=config.debate.format,
            rounds=config.debate.rounds,
            civility=config.debate.civility,
            stances=config.debate.stances or None,
        ),
    )

    print(f"🎭 {session.topic}")
    print(f"   {session.format_id} | {session.total_rounds} rounds | civility {session.civility}")

    await orchestrator.start()
    try:
        await observer.collect_votes()
    except (KeyboardInterrupt, EOFError):
        logger.info("Debate interrupted by user")
        orchestrator.reset()
        return 130

    await orchestrator.wait_for_idle()
    if session.status != DebateStatus.COMPLETED:
        logger.error(f"Debate ended in status {session.status.value}")
        return 1

    print()
    print(format_transcript(session))
    return 0


def main():
    """Main entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        print_usage()
        return

    if "--template" in args:
        rest = [a for a in args if a != "--template"]
        out_path = Path(rest[0]) if rest else Path("debate_config.yml")
        get_template_config().save_to_file(out_path)
        print(f"Template written to {out_path}")
        return

    config_path = Path(args[0]) if args else DEFAULT_CONFIG_PATH
    try:
        config = AppConfig.load_from_file(config_path)
    except (FileNotFoundError, ValueError) as e:
        setup_logging()
        logger.error(f"Could not load config: {e}")
        print_usage()
        sys.exit(2)

    setup_logging(config.system.log_level)
    sys.exit(asyncio.run(run_debate(config)))


if __name__ == "__main__":
    main()
