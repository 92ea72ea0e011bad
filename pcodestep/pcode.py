"""P-code data model: varnodes, micro-ops, op templates, frames and languages.

Everything in here is a read-only snapshot handed to the stepper by the
emulator.  The stepper never mutates these objects.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union


class SpaceKind(enum.Enum):
    REGISTER = "register"
    UNIQUE = "unique"
    CONSTANT = "const"
    RAM = "ram"
    OTHER = "other"


class Opcode(enum.IntEnum):
    UNIMPLEMENTED = 0
    COPY = 1
    LOAD = 2
    STORE = 3
    BRANCH = 4
    CBRANCH = 5
    BRANCHIND = 6
    CALL = 7
    CALLIND = 8
    CALLOTHER = 9
    RETURN = 10
    INT_EQUAL = 11
    INT_NOTEQUAL = 12
    INT_SLESS = 13
    INT_SLESSEQUAL = 14
    INT_LESS = 15
    INT_LESSEQUAL = 16
    INT_ZEXT = 17
    INT_SEXT = 18
    INT_ADD = 19
    INT_SUB = 20
    INT_CARRY = 21
    INT_SCARRY = 22
    INT_SBORROW = 23
    INT_2COMP = 24
    INT_NEGATE = 25
    INT_XOR = 26
    INT_AND = 27
    INT_OR = 28
    INT_LEFT = 29
    INT_RIGHT = 30
    INT_SRIGHT = 31
    INT_MULT = 32
    INT_DIV = 33
    INT_SDIV = 34
    INT_REM = 35
    INT_SREM = 36
    BOOL_NEGATE = 37
    BOOL_XOR = 38
    BOOL_AND = 39
    BOOL_OR = 40
    FLOAT_EQUAL = 41
    FLOAT_NOTEQUAL = 42
    FLOAT_LESS = 43
    FLOAT_LESSEQUAL = 44
    FLOAT_NAN = 46
    FLOAT_ADD = 47
    FLOAT_DIV = 48
    FLOAT_MULT = 49
    FLOAT_SUB = 50
    FLOAT_NEG = 51
    FLOAT_ABS = 52
    FLOAT_SQRT = 53
    FLOAT_INT2FLOAT = 54
    FLOAT_FLOAT2FLOAT = 55
    FLOAT_TRUNC = 56
    FLOAT_CEIL = 57
    FLOAT_FLOOR = 58
    FLOAT_ROUND = 59
    MULTIEQUAL = 60
    INDIRECT = 61
    PIECE = 62
    SUBPIECE = 63
    CAST = 64
    PTRADD = 65
    PTRSUB = 66
    SEGMENTOP = 67
    CPOOLREF = 68
    NEW = 69
    INSERT = 70
    EXTRACT = 71
    POPCOUNT = 72
    LZCOUNT = 73


def opcode_name(opcode: int) -> Optional[str]:
    """Return the mnemonic for ``opcode`` or ``None`` when it is not in the table."""
    try:
        return Opcode(opcode).name
    except ValueError:
        return None


def is_unimplemented(opcode: int) -> bool:
    return opcode == Opcode.UNIMPLEMENTED or opcode_name(opcode) is None


@dataclass(frozen=True, slots=True)
class Varnode:
    space: SpaceKind
    offset: int
    size: int
    space_name: Optional[str] = None

    @property
    def name(self) -> str:
        """Display name of the address space."""
        return self.space_name or self.space.value

    @property
    def is_unique(self) -> bool:
        return self.space is SpaceKind.UNIQUE

    @property
    def is_constant(self) -> bool:
        return self.space is SpaceKind.CONSTANT

    def signed_offset(self) -> int:
        bits = self.size * 8
        value = self.offset & ((1 << bits) - 1)
        if value >= 1 << (bits - 1):
            value -= 1 << bits
        return value


def unique(offset: int, size: int) -> Varnode:
    return Varnode(SpaceKind.UNIQUE, offset, size)


def const(value: int, size: int) -> Varnode:
    return Varnode(SpaceKind.CONSTANT, value & ((1 << (size * 8)) - 1), size)


def register(offset: int, size: int) -> Varnode:
    return Varnode(SpaceKind.REGISTER, offset, size)


def ram(offset: int, size: int, space_name: str = "ram") -> Varnode:
    return Varnode(SpaceKind.RAM, offset, size, space_name)


@dataclass(frozen=True, slots=True)
class SeqNum:
    address: int
    time: int


@dataclass(frozen=True, slots=True)
class MicroOp:
    opcode: int
    output: Optional[Varnode]
    inputs: Tuple[Varnode, ...]
    seq: SeqNum

    @property
    def mnemonic(self) -> str:
        return opcode_name(self.opcode) or f"unknown_{self.opcode}"


def op(
    opcode: int,
    output: Optional[Varnode],
    inputs: Sequence[Varnode],
    time: int,
    address: int = 0,
) -> MicroOp:
    return MicroOp(opcode, output, tuple(inputs), SeqNum(address, time))


# ---------------------------------------------------------------------- #
# Op templates
# ---------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class LabelRef:
    """Relative branch destination, rendered as a line-label reference."""

    label: int


TemplateInput = Union[Varnode, LabelRef]


@dataclass(frozen=True, slots=True)
class OpTemplate:
    opcode: int
    output: Optional[Varnode]
    inputs: Tuple[TemplateInput, ...]


@dataclass(frozen=True, slots=True)
class LabelTemplate:
    label: int


Template = Union[OpTemplate, LabelTemplate]


def _relative_target(micro_op: MicroOp, position: int, count: int) -> Optional[int]:
    if micro_op.opcode not in (Opcode.BRANCH, Opcode.CBRANCH) or not micro_op.inputs:
        return None
    dest = micro_op.inputs[0]
    if not dest.is_constant:
        return None
    target = position + dest.signed_offset()
    if 0 <= target <= count:
        return target
    return None


def op_templates(ops: Sequence[MicroOp]) -> List[Template]:
    """Build the template list for ``ops``, inserting line labels at
    relative branch destinations."""
    count = len(ops)
    targets: Dict[int, int] = {}
    for position, micro_op in enumerate(ops):
        target = _relative_target(micro_op, position, count)
        if target is not None:
            targets[position] = target
    labels = {
        target: number for number, target in enumerate(sorted(set(targets.values())))
    }

    templates: List[Template] = []
    for position, micro_op in enumerate(ops):
        if position in labels:
            templates.append(LabelTemplate(labels[position]))
        inputs: Tuple[TemplateInput, ...] = micro_op.inputs
        if position in targets:
            inputs = (LabelRef(labels[targets[position]]),) + micro_op.inputs[1:]
        templates.append(OpTemplate(micro_op.opcode, micro_op.output, inputs))
    if count in labels:
        templates.append(LabelTemplate(labels[count]))
    return templates


# ---------------------------------------------------------------------- #
# Frames and languages
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class Frame:
    """Decoded p-code of one instruction plus the schedule's position in it."""

    code: Sequence[MicroOp]
    index: int = 0
    is_branch: bool = False
    is_fallthrough: bool = False
    branched: Optional[int] = None
    userop_names: Mapping[int, str] = field(default_factory=dict)

    @property
    def is_finished(self) -> bool:
        return self.index >= len(self.code)

    def userop_name(self, userop: int) -> Optional[str]:
        return self.userop_names.get(userop)


@dataclass(frozen=True)
class Language:
    name: str
    big_endian: bool = False
    registers: Mapping[Tuple[int, int], str] = field(default_factory=dict)
    userops: Mapping[int, str] = field(default_factory=dict)
    spaces: Mapping[int, str] = field(default_factory=dict)

    @property
    def byteorder(self) -> str:
        return "big" if self.big_endian else "little"

    def register_name(self, offset: int, size: int) -> Optional[str]:
        return self.registers.get((offset, size))

    def userop_name(self, userop: int) -> Optional[str]:
        return self.userops.get(userop)

    def space_name(self, space_id: int) -> Optional[str]:
        return self.spaces.get(space_id)


__all__ = [
    "Frame",
    "LabelRef",
    "LabelTemplate",
    "Language",
    "MicroOp",
    "OpTemplate",
    "Opcode",
    "SeqNum",
    "SpaceKind",
    "Template",
    "TemplateInput",
    "Varnode",
    "const",
    "is_unimplemented",
    "op",
    "op_templates",
    "opcode_name",
    "ram",
    "register",
    "unique",
]
