"""Display rows and unique-variable entries produced by the stepper."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

from .pcode import MicroOp, Varnode
from .tokens import SpanCategory, Token, spans, tokens_str

if TYPE_CHECKING:
    from .datatypes import DataType


UNKNOWN_TEXT = "??"


class PlaceholderKind(enum.Enum):
    NO_THREAD = "(no thread selected)"
    NOT_DECODED = "(step to decode instruction)"
    LOADING = "(emulating...)"
    EMULATION_FAILED = "(emulation failed)"


@dataclass(frozen=True, slots=True)
class OpRow:
    index: int
    op: MicroOp
    is_next: bool
    tokens: Tuple[Token, ...]


@dataclass(frozen=True, slots=True)
class LineLabelRow:
    index: int
    tokens: Tuple[Token, ...]


@dataclass(frozen=True, slots=True)
class BranchRow:
    index: int
    target: Optional[int]


@dataclass(frozen=True, slots=True)
class FallthroughRow:
    index: int


@dataclass(frozen=True, slots=True)
class PlaceholderRow:
    index: int
    kind: PlaceholderKind
    message: str

    @classmethod
    def of(cls, kind: PlaceholderKind, detail: Optional[str] = None) -> "PlaceholderRow":
        message = kind.value if detail is None else f"{kind.value} {detail}"
        return cls(0, kind, message)


Row = Union[OpRow, LineLabelRow, BranchRow, FallthroughRow, PlaceholderRow]


def row_spans(row: Row) -> List[Tuple[SpanCategory, str]]:
    if isinstance(row, (OpRow, LineLabelRow)):
        return spans(row.tokens)
    if isinstance(row, BranchRow):
        if row.target is None:
            return [(SpanCategory.TEXT, "(branched)")]
        return [(SpanCategory.TEXT, f"(branched to {row.target})")]
    if isinstance(row, FallthroughRow):
        return [(SpanCategory.TEXT, "(fall-through)")]
    if isinstance(row, PlaceholderRow):
        return [(SpanCategory.TEXT, row.message)]
    raise TypeError(f"Unsupported row: {row!r}")


def row_text(row: Row) -> str:
    if isinstance(row, (OpRow, LineLabelRow)):
        return tokens_str(row.tokens)
    return "".join(text for _, text in row_spans(row))


def row_sequence(row: Row) -> str:
    """Step index shown in the sequence column; blank for synthetic rows."""
    if isinstance(row, OpRow):
        return str(row.op.seq.time)
    return ""


def is_next_row(row: Row) -> bool:

    return isinstance(row, OpRow) and row.is_next


# ---------------------------------------------------------------------- #
# Unique (temporary) variables
# ---------------------------------------------------------------------- #


class RefType(enum.IntFlag):
    """How the frame's ops touch a unique; combining is bitwise-or."""

    NONE = 0
    READ = 1
    WRITE = 2
    READ_WRITE = 3


@dataclass(frozen=True, slots=True)
class UniqueEntry:
    varnode: Varnode
    ref: RefType = RefType.NONE
    raw: Optional[bytes] = None
    value: Optional[int] = None
    data_type: Optional["DataType"] = None
    representation: str = ""

    @property
    def name(self) -> str:
        return unique_name(self.varnode)

    @property
    def address(self) -> Tuple[int, int]:
        return (self.varnode.offset, self.varnode.size)

    @property
    def is_known(self) -> bool:
        return self.raw is not None

    @property
    def bytes_text(self) -> str:
        if self.raw is None:
            return UNKNOWN_TEXT
        return " ".join(f"{b:02x}" for b in self.raw)


def unique_name(varnode: Varnode) -> str:
    return f"$U{varnode.offset:x}:{varnode.size}"


__all__ = [
    "BranchRow",
    "FallthroughRow",
    "LineLabelRow",
    "OpRow",
    "PlaceholderKind",
    "PlaceholderRow",
    "RefType",
    "Row",
    "UNKNOWN_TEXT",
    "UniqueEntry",
    "is_next_row",
    "row_sequence",
    "row_spans",
    "row_text",
    "unique_name",
]
