from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, List


@dataclass(frozen=True)
class TraceEntry:
    event: str
    generation: int
    coordinates: str
    detail: str


class TraceBuffer:
    def __init__(self, capacity: int = 256) -> None:
        self._entries: Deque[TraceEntry] = deque(maxlen=capacity)

    def record(self, entry: TraceEntry) -> None:
        self._entries.append(entry)

    def snapshot(self) -> List[TraceEntry]:
        return list(self._entries)

    def events(self) -> List[str]:
        return [entry.event for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["TraceBuffer", "TraceEntry"]
