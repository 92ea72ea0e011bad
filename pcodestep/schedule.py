"""Trace schedules and debugger coordinates."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class TraceSchedule:
    """A position in a trace: snapshot, instruction ticks and p-code ticks.

    ``pticks`` counts p-code steps into the current instruction; zero means
    the instruction has not been decoded yet.
    """

    snap: int = 0
    ticks: int = 0
    pticks: int = 0

    @classmethod
    def parse(cls, text: str) -> "TraceSchedule":
        snap_part, _, rest = text.strip().partition(":")
        ticks_part, _, pticks_part = rest.partition(".")
        try:
            return cls(
                snap=int(snap_part),
                ticks=int(ticks_part) if ticks_part else 0,
                pticks=int(pticks_part) if pticks_part else 0,
            )
        except ValueError as exc:
            raise ValueError(f"Invalid trace schedule: {text!r}") from exc

    def __str__(self) -> str:
        if self.pticks:
            return f"{self.snap}:{self.ticks}.{self.pticks}"
        if self.ticks:
            return f"{self.snap}:{self.ticks}"
        return str(self.snap)

    def stepped_pcode_forward(self, count: int = 1) -> "TraceSchedule":
        return replace(self, pticks=self.pticks + count)

    def stepped_pcode_backward(self, count: int = 1) -> Optional["TraceSchedule"]:
        if self.pticks < count:
            return None
        return replace(self, pticks=self.pticks - count)


@dataclass(frozen=True)
class Coordinates:
    """What the debugger is focused on.

    Only ``trace``, ``time`` and ``thread`` identify what the stepper shows;
    ``frame`` (the stack frame level) is carried along but never compared.
    """

    trace: Any = None
    time: TraceSchedule = field(default_factory=TraceSchedule)
    thread: Optional[str] = None
    frame: int = 0

    def key(self) -> tuple:
        return (self.trace, self.time, self.thread)

    def same_as(self, other: "Coordinates") -> bool:
        return self.key() == other.key()

    def with_time(self, time: TraceSchedule) -> "Coordinates":
        return replace(self, time=time)


NOWHERE = Coordinates()


def same_coordinates(a: Coordinates, b: Coordinates) -> bool:
    return a.same_as(b)


__all__ = ["Coordinates", "NOWHERE", "TraceSchedule", "same_coordinates"]
