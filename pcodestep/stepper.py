"""Load the p-code frame for the debugger's current coordinates.

``PcodeStepper`` is owned by the UI thread.  Every distinct coordinate change
bumps ``generation`` and rebuilds rows and uniques from scratch.  When the
emulator for the coordinates is not cached yet, a background emulation is
requested; its completion is marshalled through the UI executor and applied
only if it was computed for the live generation and coordinates.  The default
executor is bound to the thread that built the stepper; completions settling
elsewhere wait for that thread to call ``executor.run_pending()``.
"""

from __future__ import annotations

import enum
import logging
from typing import List, Optional

from .config import StepperConfig, load_stepper_config
from .datatypes import BUILTIN_TYPES, DataType, DataTypeCatalog
from .emulation import (
    EmulationRequest,
    EmulationService,
    Emulator,
    ThreadAffineExecutor,
    TraceManager,
    UiExecutor,
)
from .errors import PcodeStepperError
from .formatter import PcodeFormatter
from .pcode import Frame, Language
from .rows import PlaceholderKind, PlaceholderRow, Row, UniqueEntry
from .schedule import NOWHERE, Coordinates, TraceSchedule
from .trace import TraceBuffer, TraceEntry
from .uniques import collect_uniques
from .values import ExecutionState, assign_type, decode_uniques

logger = logging.getLogger(__name__)

NO_INSTRUCTION = "(no instruction)"


class LoadState(enum.Enum):
    NO_COORDINATES = "no_coordinates"
    NO_THREAD = "no_thread"
    NOT_DECODED = "not_decoded"
    LOADING = "loading"
    LOADED = "loaded"
    STALE = "stale"


class PcodeStepper:
    def __init__(
        self,
        emulation_service: Optional[EmulationService] = None,
        *,
        executor: Optional[UiExecutor] = None,
        trace_manager: Optional[TraceManager] = None,
        catalog: Optional[DataTypeCatalog] = None,
        config: Optional[StepperConfig] = None,
    ) -> None:
        self.emulation_service = emulation_service
        self.executor: UiExecutor = executor or ThreadAffineExecutor()
        self.trace_manager = trace_manager
        self.catalog = catalog if catalog is not None else DataTypeCatalog(BUILTIN_TYPES)
        self.config = config or load_stepper_config()
        self.trace_buffer: Optional[TraceBuffer] = (
            TraceBuffer(self.config.trace_capacity) if self.config.trace else None
        )

        self.current: Coordinates = NOWHERE
        self.previous: Coordinates = NOWHERE
        self.generation = 0
        self.state = LoadState.NO_COORDINATES

        self.rows: List[Row] = []
        self.next_row_index: Optional[int] = None
        self.uniques: List[UniqueEntry] = []
        self.instruction_label: Optional[str] = None

        self._pending: Optional[EmulationRequest] = None
        self._language: Optional[Language] = None
        self._exec_state: Optional[ExecutionState] = None

    # ------------------------------------------------------------------ #
    # Presentation accessors
    # ------------------------------------------------------------------ #

    @property
    def instruction_text(self) -> str:
        return self.instruction_label or NO_INSTRUCTION

    @property
    def subtitle(self) -> str:
        return str(self.current.time)

    @property
    def can_step_backward(self) -> bool:
        return self.current.trace is not None and self.current.time.pticks != 0

    @property
    def can_step_forward(self) -> bool:
        return self.current.thread is not None

    # ------------------------------------------------------------------ #
    # Coordinates
    # ------------------------------------------------------------------ #

    def coordinates_activated(self, coordinates: Coordinates) -> None:
        if self.current.same_as(coordinates):
            self.current = coordinates
            return
        self.previous = self.current
        self.current = coordinates
        self.generation += 1
        self._record("activate", "")
        self.load()

    def set_emulation_service(self, service: Optional[EmulationService]) -> None:
        self.emulation_service = service
        self._pending = None
        # Requests issued through the previous service must not apply.
        self.generation += 1
        self._record("service", "")
        self.load()

    def load(self) -> LoadState:
        self.instruction_label = None
        current = self.current
        service = self.emulation_service
        if service is None or current.trace is None:
            self._clear()
            return self.state
        if current.thread is None:
            self._populate_singleton(LoadState.NO_THREAD, PlaceholderKind.NO_THREAD)
            return self.state
        if current.time.pticks == 0:
            self._populate_singleton(LoadState.NOT_DECODED, PlaceholderKind.NOT_DECODED)
            return self.state

        emulator = service.get_cached_emulator(current.trace, current.time)
        if emulator is not None:
            self._load_from_emulator(emulator)
            return self.state

        if self._pending is not None and self._pending.is_current(current, self.generation):
            logger.debug("Emulation for %s already pending", current.time)
            self.state = LoadState.LOADING
            return self.state

        self._populate_singleton(LoadState.LOADING, PlaceholderKind.LOADING)
        logger.debug("Requesting background emulation for %s", current.time)
        self._record("request", "")
        request = EmulationRequest(
            current, self.generation, service.background_emulate(current.trace, current.time)
        )
        self._pending = request
        request.on_done(self.executor, self._background_done)
        return self.state

    def _background_done(self, request: EmulationRequest) -> None:
        if self._pending is request:
            self._pending = None
        if not request.is_current(self.current, self.generation):
            logger.debug(
                "Dropping stale emulation result for %s (generation %d, live %d)",
                request.coordinates.time,
                request.generation,
                self.generation,
            )
            self._record("stale", f"generation {request.generation}")
            self.state = LoadState.STALE
            self.load()
            return

        error = request.future.exception()
        if error is not None:
            logger.error(
                "Background emulation failed for %s",
                request.coordinates.time,
                exc_info=error,
            )
            self._record("failed", str(error))
            self._populate_singleton(
                LoadState.NOT_DECODED, PlaceholderKind.EMULATION_FAILED, str(error)
            )
            return
        self._record("apply", "")
        self._load_from_emulator(request.future.result())

    def _load_from_emulator(self, emulator: Emulator) -> None:
        assert self.current.thread is not None
        thread = emulator.get_thread(self.current.thread)
        if thread is None:
            # Focus is on a thread the schedule never stepped.
            self._populate_singleton(LoadState.NOT_DECODED, PlaceholderKind.NOT_DECODED)
            return
        instruction = thread.get_instruction()
        self.instruction_label = None if instruction is None else str(instruction)
        frame = thread.get_frame()
        if frame is None:
            # Instruction completed by p-code stepping; the next is not decoded.
            self._populate_singleton(LoadState.NOT_DECODED, PlaceholderKind.NOT_DECODED)
            return
        self._populate_from_frame(emulator.language, frame, thread.get_state())

    # ------------------------------------------------------------------ #
    # Population
    # ------------------------------------------------------------------ #

    def _populate_from_frame(
        self, language: Language, frame: Frame, state: ExecutionState
    ) -> None:
        formatted = PcodeFormatter(language, frame, indent=self.config.indent).format()
        self.rows = formatted.rows
        self.next_row_index = formatted.next_row_index
        self.uniques = decode_uniques(collect_uniques(frame), state, language)
        self._language = language
        self._exec_state = state
        self.state = LoadState.LOADED

    def _populate_singleton(
        self, state: LoadState, kind: PlaceholderKind, detail: Optional[str] = None
    ) -> None:
        self.rows = [PlaceholderRow.of(kind, detail)]
        self.next_row_index = None
        self.uniques = []
        self._language = None
        self._exec_state = None
        self.state = state

    def _clear(self) -> None:
        self.rows = []
        self.next_row_index = None
        self.uniques = []
        self._language = None
        self._exec_state = None
        self.state = LoadState.NO_COORDINATES

    def _record(self, event: str, detail: str) -> None:
        if self.trace_buffer is None:
            return
        current = self.current
        self.trace_buffer.record(
            TraceEntry(
                event=event,
                generation=self.generation,
                coordinates=f"{current.trace}@{current.time}/{current.thread}",
                detail=detail,
            )
        )

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def step_backward(self) -> Optional[TraceSchedule]:
        if self.current.trace is None:
            return None
        time = self.current.time.stepped_pcode_backward(1)
        if time is None:
            return None
        self._activate_time(time)
        return time

    def step_forward(self) -> Optional[TraceSchedule]:
        if self.current.thread is None:
            return None
        time = self.current.time.stepped_pcode_forward(1)
        self._activate_time(time)
        return time

    def _activate_time(self, time: TraceSchedule) -> None:
        if self.trace_manager is not None:
            self.trace_manager.activate_time(time)
        else:
            self.coordinates_activated(self.current.with_time(time))

    def assign_type(self, index: int, data_type: Optional[DataType]) -> UniqueEntry:
        """Assign ``data_type`` to the unique at ``index`` and re-decode it.

        Raises ``TypeResolutionError`` (leaving the entry as it was) when the
        type does not resolve, and ``PcodeStepperError`` when no frame is
        loaded.
        """
        if self._exec_state is None or self._language is None:
            raise PcodeStepperError("no unique values loaded")
        entry = self.uniques[index]
        updated = assign_type(entry, data_type, self.catalog, self._exec_state, self._language)
        self.uniques[index] = updated
        return updated


__all__ = ["LoadState", "NO_INSTRUCTION", "PcodeStepper"]
