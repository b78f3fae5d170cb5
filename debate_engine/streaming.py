"""Incremental delivery of turn output.

``StreamingCoordinator`` runs one streaming operation per in-flight turn.
Raw provider chunks are paced and passed through an adaptive ``ChunkBuffer``
before reaching the caller's ``on_chunk`` callback.
"""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import inspect
import logging
import random
import time
from typing import TYPE_CHECKING, Any

from .exceptions import StreamAlreadyActiveError, StreamingNotSupportedError
from .models import DebateMessage, StreamMetrics
from .types import ChunkCallback, CompletionCallback, ErrorCallback, StreamSpeed

if TYPE_CHECKING:
    from models.providers.base_model_provider import BaseModelProvider

logger = logging.getLogger(__name__)

BOUNDARY_CHARS = (" ", "\n", ".", ",")

# Seconds slept before each raw chunk is buffered
PACING_DELAYS: dict[str, tuple[float, float]] = {
    "natural": (0.02, 0.05),
    "slow": (0.05, 0.1),
}


@dataclass(frozen=True)
class BufferProfile:
    """Flush thresholds; the early values apply during the warmup window."""

    enabled: bool = True
    early_max_size: int = 20
    early_interval: float = 0.05
    max_size: int = 50
    interval: float = 0.1
    warmup: float = 1.0

    def size_for(self, elapsed: float) -> int:
        return self.early_max_size if elapsed < self.warmup else self.max_size

    def interval_for(self, elapsed: float) -> float:
        return self.early_interval if elapsed < self.warmup else self.interval


BUFFER_PROFILES: dict[str, BufferProfile] = {
    "instant": BufferProfile(enabled=False),
    "natural": BufferProfile(),
    "slow": BufferProfile(
        early_max_size=15, early_interval=0.12, max_size=30, interval=0.2
    ),
}


def profile_for_speed(speed: StreamSpeed | None) -> BufferProfile:
    return BUFFER_PROFILES.get(speed or "natural", BUFFER_PROFILES["natural"])


class ChunkBuffer:
    """Coalesces small chunks into readable flushes.

    The first chunk is flushed immediately. Later chunks flush when the
    buffer reaches the size threshold, when a chunk ends on a natural
    boundary, or when the flush timer fires. The timer is armed by the first
    buffered chunk and is not re-armed by later ones.
    """

    def __init__(
        self,
        on_flush: Callable[[str], None],
        profile: BufferProfile,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._on_flush = on_flush
        self._profile = profile
        self._clock = clock
        self._started = clock()
        self._parts: list[str] = []
        self._size = 0
        self._timer: asyncio.TimerHandle | None = None
        self._has_flushed = False
        self.flush_count = 0

    @property
    def pending(self) -> str:
        return "".join(self._parts)

    def add(self, chunk: str) -> None:
        if not chunk:
            return
        self._parts.append(chunk)
        self._size += len(chunk)

        if not self._profile.enabled or not self._has_flushed:
            self.flush()
            return

        elapsed = self._clock() - self._started
        if self._size >= self._profile.size_for(elapsed) or chunk.endswith(BOUNDARY_CHARS):
            self.flush()
        else:
            self._schedule(self._profile.interval_for(elapsed))

    def _schedule(self, delay: float) -> None:
        if self._timer is not None:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        try:
            self.flush()
        except Exception:
            logger.exception("Chunk callback failed during timed flush")

    def flush(self) -> None:
        self._cancel_timer()
        if not self._parts:
            return
        content = "".join(self._parts)
        self._parts = []
        self._size = 0
        self._has_flushed = True
        self.flush_count += 1
        self._on_flush(content)

    def clear(self) -> None:
        """Discard unflushed content."""
        self._cancel_timer()
        self._parts = []
        self._size = 0

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


@dataclass
class StreamOperation:
    """State of one active streaming turn."""

    turn_id: str
    buffer: ChunkBuffer
    cancel_event: asyncio.Event
    started_at: float = field(default_factory=time.monotonic)
    chunks_received: int = 0
    bytes_received: int = 0
    active: bool = True
    parts: list[str] = field(default_factory=list)
    task: "asyncio.Task[str] | None" = None

    def append(self, text: str) -> None:
        self.parts.append(text)
        self.buffer.add(text)


async def _invoke(callback: Callable[..., Any] | None, *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class StreamingCoordinator:
    """Manages concurrent, cancellable streaming operations keyed by turn id."""

    def __init__(self, default_speed: StreamSpeed = "natural"):
        self.default_speed: StreamSpeed = default_speed
        self._operations: dict[str, StreamOperation] = {}

    async def start(
        self,
        turn_id: str,
        provider: "BaseModelProvider",
        prompt: str,
        history: Sequence[DebateMessage],
        on_chunk: ChunkCallback,
        on_complete: CompletionCallback,
        on_error: ErrorCallback,
        on_event: Callable[[dict[str, Any]], str | None] | None = None,
        speed: StreamSpeed | None = None,
        buffer_profile: BufferProfile | None = None,
        model_override: str | None = None,
    ) -> None:
        """Stream one turn to completion, cancellation, or error.

        Exactly one of ``on_complete`` or ``on_error`` runs unless the
        operation is cancelled, in which case neither does. ``on_event``
        receives non-text provider events and may return text to splice into
        the stream.
        """
        if turn_id in self._operations:
            await _invoke(on_error, StreamAlreadyActiveError(turn_id))
            return

        if not provider.get_capabilities().streaming:
            await _invoke(
                on_error,
                StreamingNotSupportedError(
                    f"Provider {provider.provider_name} does not support streaming"
                ),
            )
            return

        speed = speed or self.default_speed
        profile = buffer_profile or profile_for_speed(speed)
        operation = StreamOperation(
            turn_id=turn_id,
            buffer=ChunkBuffer(on_chunk, profile),
            cancel_event=asyncio.Event(),
        )
        self._operations[turn_id] = operation

        def handle_event(event: dict[str, Any]) -> None:
            if on_event is None or not operation.active:
                return
            text = on_event(event)
            if text:
                operation.append(text)

        task = asyncio.create_task(
            self._consume(operation, provider, prompt, history, speed, handle_event, model_override),
            name=f"stream-{turn_id}",
        )
        operation.task = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            self.cancel(turn_id)
            raise

        if task.cancelled() or not operation.active:
            logger.debug(f"Stream {turn_id} cancelled")
            return

        error = task.exception()
        if error is not None:
            self._discard(operation)
            logger.warning(f"Stream {turn_id} failed: {error}")
            await _invoke(on_error, error)
            return

        content = task.result()
        try:
            operation.buffer.flush()
        except Exception as e:
            self._discard(operation)
            await _invoke(on_error, e)
            return
        self._discard(operation)
        logger.debug(
            f"Stream {turn_id} completed: {operation.chunks_received} chunks, "
            f"{operation.bytes_received} bytes"
        )
        await _invoke(on_complete, content)

    async def _consume(
        self,
        operation: StreamOperation,
        provider: "BaseModelProvider",
        prompt: str,
        history: Sequence[DebateMessage],
        speed: StreamSpeed,
        on_event: Callable[[dict[str, Any]], None],
        model_override: str | None,
    ) -> str:
        stream = provider.stream_message(
            prompt,
            history,
            is_debate_mode=True,
            model_override=model_override,
            cancel_event=operation.cancel_event,
            on_event=on_event,
        )
        pacing = PACING_DELAYS.get(speed)

        try:
            async for chunk in stream:
                if not operation.active:
                    break
                if not chunk:
                    continue

                operation.chunks_received += 1
                operation.bytes_received += len(chunk.encode("utf-8"))

                if pacing:
                    await asyncio.sleep(random.uniform(*pacing))
                    if not operation.active:
                        break

                operation.append(chunk)
                if not operation.active:
                    break
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        return "".join(operation.parts)

    def _discard(self, operation: StreamOperation) -> None:
        operation.active = False
        operation.buffer.clear()
        if self._operations.get(operation.turn_id) is operation:
            del self._operations[operation.turn_id]

    def cancel(self, turn_id: str) -> bool:
        """Stop a stream; already-flushed chunks stay delivered."""
        operation = self._operations.get(turn_id)
        if operation is None:
            return False

        self._discard(operation)
        operation.cancel_event.set()
        if operation.task is not None and not operation.task.done():
            operation.task.cancel()
        logger.info(f"Cancelled stream {turn_id}")
        return True

    def cancel_all(self) -> int:
        turn_ids = list(self._operations)
        for turn_id in turn_ids:
            self.cancel(turn_id)
        return len(turn_ids)

    def is_active(self, turn_id: str) -> bool:
        return turn_id in self._operations

    @property
    def active_count(self) -> int:
        return len(self._operations)

    def get_metrics(self, turn_id: str) -> StreamMetrics | None:
        operation = self._operations.get(turn_id)
        if operation is None:
            return None

        chunks = operation.chunks_received
        return StreamMetrics(
            duration=time.monotonic() - operation.started_at,
            chunks_received=chunks,
            bytes_received=operation.bytes_received,
            average_chunk_size=operation.bytes_received / chunks if chunks else 0.0,
        )
