# In-memory emulator collaborators so the stepper is unit-testable without a
# real trace database or p-code emulator.

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .pcode import Frame, Language, SpaceKind, Varnode
from .schedule import TraceSchedule


class MapExecutionState:
    """Byte-granular state; a varnode reads as ``None`` unless every byte was set."""

    def __init__(self) -> None:
        self._bytes: Dict[Tuple[SpaceKind, str, int], int] = {}

    def set_var(self, varnode: Varnode, data: bytes) -> None:
        assert len(data) == varnode.size, "data must cover the whole varnode"
        for i, byte in enumerate(data):
            self._bytes[(varnode.space, varnode.name, varnode.offset + i)] = byte

    def set_value(self, varnode: Varnode, value: int, big_endian: bool = False) -> None:
        mask = (1 << (varnode.size * 8)) - 1
        self.set_var(
            varnode,
            (value & mask).to_bytes(varnode.size, "big" if big_endian else "little"),
        )

    def get_var(self, varnode: Varnode) -> Optional[bytes]:
        data = bytearray()
        for i in range(varnode.size):
            byte = self._bytes.get((varnode.space, varnode.name, varnode.offset + i))
            if byte is None:
                return None
            data.append(byte)
        return bytes(data)


@dataclass
class MockInstruction:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass
class MockThread:
    path: str
    instruction: Optional[MockInstruction] = None
    frame: Optional[Frame] = None
    state: MapExecutionState = field(default_factory=MapExecutionState)

    def get_instruction(self) -> Optional[MockInstruction]:
        return self.instruction

    def get_frame(self) -> Optional[Frame]:
        return self.frame

    def get_state(self) -> MapExecutionState:
        return self.state


@dataclass
class MockEmulator:
    language: Language
    threads: Dict[str, MockThread] = field(default_factory=dict)

    def add_thread(self, thread: MockThread) -> MockThread:
        self.threads[thread.path] = thread
        return thread

    def get_thread(self, path: str) -> Optional[MockThread]:
        return self.threads.get(path)


class MockEmulationService:
    """Cache plus manually-completed background requests."""

    def __init__(self) -> None:
        self.cache: Dict[Tuple[Any, TraceSchedule], MockEmulator] = {}
        self.pending: Dict[Tuple[Any, TraceSchedule], List["Future[MockEmulator]"]] = {}
        self.requests: List[Tuple[Any, TraceSchedule]] = []

    def add(self, trace: Any, time: TraceSchedule, emulator: MockEmulator) -> None:
        self.cache[(trace, time)] = emulator

    def get_cached_emulator(self, trace: Any, time: TraceSchedule) -> Optional[MockEmulator]:
        return self.cache.get((trace, time))

    def background_emulate(self, trace: Any, time: TraceSchedule) -> "Future[MockEmulator]":
        key = (trace, time)
        self.requests.append(key)
        future: "Future[MockEmulator]" = Future()
        self.pending.setdefault(key, []).append(future)
        return future

    def complete(self, trace: Any, time: TraceSchedule, emulator: MockEmulator) -> None:
        key = (trace, time)
        self.cache[key] = emulator
        for future in self.pending.pop(key, []):
            future.set_result(emulator)

    def fail(self, trace: Any, time: TraceSchedule, error: BaseException) -> None:
        for future in self.pending.pop((trace, time), []):
            future.set_exception(error)


class ThreadPoolEmulationService:
    """Runs ``emulate(trace, time)`` on a worker thread and caches the result."""

    def __init__(
        self,
        emulate: Callable[[Any, TraceSchedule], MockEmulator],
        max_workers: int = 1,
    ) -> None:
        self._emulate = emulate
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Emulate")
        self._lock = threading.RLock()
        self._cache: Dict[Tuple[Any, TraceSchedule], MockEmulator] = {}

    def get_cached_emulator(self, trace: Any, time: TraceSchedule) -> Optional[MockEmulator]:
        with self._lock:
            return self._cache.get((trace, time))

    def background_emulate(self, trace: Any, time: TraceSchedule) -> "Future[MockEmulator]":
        return self._executor.submit(self._run, trace, time)

    def _run(self, trace: Any, time: TraceSchedule) -> MockEmulator:
        emulator = self._emulate(trace, time)
        with self._lock:
            self._cache[(trace, time)] = emulator
        return emulator

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


__all__ = [
    "MapExecutionState",
    "MockEmulationService",
    "MockEmulator",
    "MockInstruction",
    "MockThread",
    "ThreadPoolEmulationService",
]
