"""P-code stepper display engine."""

from .errors import PcodeStepperError, TypeResolutionError
from .formatter import FormattedOps, PcodeFormatter, format_frame
from .pcode import Frame, Language, MicroOp, Opcode, SpaceKind, Varnode
from .rows import (
    BranchRow,
    FallthroughRow,
    LineLabelRow,
    OpRow,
    PlaceholderKind,
    PlaceholderRow,
    RefType,
    Row,
    UniqueEntry,
)
from .schedule import Coordinates, TraceSchedule
from .stepper import LoadState, PcodeStepper
from .uniques import collect_uniques
from .values import decode_unique

__all__ = [
    "BranchRow",
    "Coordinates",
    "FallthroughRow",
    "FormattedOps",
    "Frame",
    "Language",
    "LineLabelRow",
    "LoadState",
    "MicroOp",
    "OpRow",
    "Opcode",
    "PcodeFormatter",
    "PcodeStepper",
    "PcodeStepperError",
    "PlaceholderKind",
    "PlaceholderRow",
    "RefType",
    "Row",
    "SpaceKind",
    "TraceSchedule",
    "TypeResolutionError",
    "UniqueEntry",
    "Varnode",
    "collect_uniques",
    "decode_unique",
    "format_frame",
]
