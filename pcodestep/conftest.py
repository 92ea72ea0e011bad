"""Shared pytest fixtures for the p-code stepper tests."""

from __future__ import annotations

import pytest

from pcodestep.config import StepperConfig
from pcodestep.mock_emu import (
    MockEmulationService,
    MockEmulator,
    MockInstruction,
    MockThread,
)
from pcodestep.pcode import Frame, Language, Opcode, const, op, register, unique
from pcodestep.schedule import Coordinates, TraceSchedule
from pcodestep.stepper import PcodeStepper

TRACE = "trace-1"
THREAD = "Threads[1]"

X86_64 = Language(
    "x86:LE:64",
    big_endian=False,
    registers={(0x0, 8): "RAX", (0x8, 8): "RCX", (0x20, 8): "RSP"},
    userops={0: "syscall"},
    spaces={1: "ram"},
)


def scenario_frame(index: int = 1, is_branch: bool = True) -> Frame:
    """``$U0:4 = COPY 0x2a`` then ``RAX = INT_ZEXT $U0:4``."""
    return Frame(
        code=(
            op(Opcode.COPY, unique(0x0, 4), [const(0x2A, 4)], time=0),
            op(Opcode.INT_ZEXT, register(0x0, 8), [unique(0x0, 4)], time=1),
        ),
        index=index,
        is_branch=is_branch,
        branched=2 if is_branch else None,
    )


def make_emulator(
    frame: Frame | None,
    instruction: str | None = "MOV EAX, 0x2a",
    path: str = THREAD,
) -> MockEmulator:
    emulator = MockEmulator(X86_64)
    thread = emulator.add_thread(
        MockThread(
            path,
            instruction=None if instruction is None else MockInstruction(instruction),
            frame=frame,
        )
    )
    thread.state.set_value(unique(0x0, 4), 0x2A)
    return emulator


def coords(pticks: int = 1, thread: str | None = THREAD, trace: object = TRACE) -> Coordinates:
    return Coordinates(trace, TraceSchedule(0, 3, pticks), thread)


@pytest.fixture
def language() -> Language:
    return X86_64


@pytest.fixture
def service() -> MockEmulationService:
    return MockEmulationService()


@pytest.fixture
def stepper(service: MockEmulationService) -> PcodeStepper:
    return PcodeStepper(service, config=StepperConfig(trace=True))
