"""Interfaces the stepper consumes, and UI-thread marshalling helpers."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from .pcode import Frame, Language
from .schedule import Coordinates, TraceSchedule
from .values import ExecutionState


class Instruction(Protocol):
    def __str__(self) -> str: ...


class PcodeThread(Protocol):
    def get_instruction(self) -> Optional[Instruction]: ...

    def get_frame(self) -> Optional[Frame]: ...

    def get_state(self) -> ExecutionState: ...


class Emulator(Protocol):
    language: Language

    def get_thread(self, path: str) -> Optional[PcodeThread]: ...


class EmulationService(Protocol):
    def get_cached_emulator(
        self, trace: Any, time: TraceSchedule
    ) -> Optional[Emulator]: ...

    def background_emulate(self, trace: Any, time: TraceSchedule) -> "Future[Emulator]": ...


class TraceManager(Protocol):
    def activate_time(self, time: TraceSchedule) -> None: ...


# ---------------------------------------------------------------------- #
# UI-thread executors
# ---------------------------------------------------------------------- #


class UiExecutor(Protocol):
    def execute(self, fn: Callable[[], None]) -> None: ...


class ImmediateExecutor:
    """Runs callbacks inline on whichever thread settles the future.

    Only safe when every future settles on the UI thread.
    """

    def execute(self, fn: Callable[[], None]) -> None:
        fn()


class QueuedExecutor:
    """Queues callbacks from any thread until the UI thread drains them."""

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()

    def execute(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    def pending(self) -> int:
        return self._queue.qsize()

    def run_pending(self) -> int:
        """Run everything queued so far on the calling thread."""
        ran = 0
        while True:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                return ran
            fn()
            ran += 1


class ThreadAffineExecutor(QueuedExecutor):
    """Runs callbacks inline on the owning thread and queues the rest.

    The owner is the thread that built the executor; it must call
    ``run_pending`` to apply completions that arrived on other threads.
    """

    def __init__(self) -> None:
        super().__init__()
        self.owner = threading.get_ident()

    def execute(self, fn: Callable[[], None]) -> None:
        if threading.get_ident() == self.owner:
            fn()
        else:
            super().execute(fn)


# ---------------------------------------------------------------------- #
# Background requests
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class EmulationRequest:
    """A background emulation tagged with what it was computed for."""

    coordinates: Coordinates
    generation: int
    future: "Future[Emulator]"

    def is_current(self, coordinates: Coordinates, generation: int) -> bool:
        return (
            not self.future.cancelled()
            and self.generation == generation
            and self.coordinates.same_as(coordinates)
        )

    def on_done(
        self, executor: UiExecutor, callback: Callable[["EmulationRequest"], None]
    ) -> None:
        """Invoke ``callback(self)`` on the UI executor once the future settles."""

        def _settled(_: "Future[Emulator]") -> None:
            executor.execute(lambda: callback(self))

        self.future.add_done_callback(_settled)


__all__ = [
    "EmulationRequest",
    "EmulationService",
    "Emulator",
    "ImmediateExecutor",
    "Instruction",
    "PcodeThread",
    "QueuedExecutor",
    "ThreadAffineExecutor",
    "TraceManager",
    "UiExecutor",
]
