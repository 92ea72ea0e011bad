"""Category-tagged text emission for the p-code formatter.

The formatter only ever talks to the :class:`Appender` protocol.
:class:`RowsAppender` is the one implementation: it collects category tokens
into display rows, one row per ``start_row``/``end_row`` pair.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from .pcode import Frame, Language, MicroOp, is_unimplemented, opcode_name
from .rows import LineLabelRow, OpRow, Row
from .tokens import (
    TAddr,
    TIndent,
    TLineLabel,
    TLocal,
    TMnemonic,
    TRaw,
    TReg,
    TScalar,
    TSep,
    TSpace,
    TUnimpl,
    TUserop,
    Token,
)

INDENT = "  "


def stringify_scalar(value: int) -> str:
    if value < 0:
        return f"-0x{-value:x}"
    return f"0x{value:x}"


def stringify_address(offset: int) -> str:
    return f"0x{offset:x}"


def stringify_unique(offset: int, size: int) -> str:
    return f"$U{offset:x}:{size}"


def stringify_raw_varnode(space: str, offset: int, size: int) -> str:
    return f"({space}, 0x{offset:x}, {size})"


def stringify_line_label(label: int) -> str:
    return f"<{label}>"


def stringify_mnemonic(opcode: int) -> str:
    return opcode_name(opcode) or f"unknown_{opcode}"


class Appender(Protocol):
    def start_row(self, op: Optional[MicroOp], is_next: bool) -> None: ...

    def end_row(self) -> None: ...

    def append_address(self, offset: int) -> None: ...

    def append_register(self, name: str) -> None: ...

    def append_scalar(self, value: int) -> None: ...

    def append_unique(self, offset: int, size: int) -> None: ...

    def append_line_label(self, label: int) -> None: ...

    def append_line_label_ref(self, label: int) -> None: ...

    def append_mnemonic(self, opcode: int) -> None: ...

    def append_raw_varnode(self, space: str, offset: int, size: int) -> None: ...

    def append_space(self, name: str) -> None: ...

    def append_userop(self, userop: int) -> None: ...

    def append_indent(self) -> None: ...

    def append_character(self, c: str) -> None: ...

    def finish(self) -> List[Row]: ...


class RowsAppender:
    """Builds :class:`OpRow` / :class:`LineLabelRow` values from token spans."""

    def __init__(self, language: Language, frame: Frame, indent: bool = False) -> None:
        self.language = language
        self.frame = frame
        self.indent = indent
        self.rows: List[Row] = []
        self._tokens: List[Token] = []
        self._op: Optional[MicroOp] = None
        self._is_next = False

    # ------------------------------------------------------------------ #
    # Row lifecycle
    # ------------------------------------------------------------------ #

    def start_row(self, op: Optional[MicroOp], is_next: bool) -> None:
        self._op = op
        self._is_next = is_next
        self._tokens = []

    def end_row(self) -> None:
        index = len(self.rows)
        tokens = tuple(self._tokens)
        if self._op is None:
            self.rows.append(LineLabelRow(index, tokens))
        else:
            self.rows.append(OpRow(index, self._op, self._is_next, tokens))
        self._tokens = []
        self._op = None
        self._is_next = False

    def finish(self) -> List[Row]:
        return self.rows

    # ------------------------------------------------------------------ #
    # Spans
    # ------------------------------------------------------------------ #

    def append_address(self, offset: int) -> None:
        self._tokens.append(TAddr(stringify_address(offset)))

    def append_register(self, name: str) -> None:
        self._tokens.append(TReg(name))

    def append_scalar(self, value: int) -> None:
        self._tokens.append(TScalar(stringify_scalar(value)))

    def append_unique(self, offset: int, size: int) -> None:
        self._tokens.append(TLocal(stringify_unique(offset, size)))

    def append_line_label(self, label: int) -> None:
        self._tokens.append(TLineLabel(stringify_line_label(label)))

    def append_line_label_ref(self, label: int) -> None:
        self._tokens.append(TLineLabel(stringify_line_label(label)))

    def append_mnemonic(self, opcode: int) -> None:
        text = stringify_mnemonic(opcode)
        if is_unimplemented(opcode):
            self._tokens.append(TUnimpl(text))
        else:
            self._tokens.append(TMnemonic(text))

    def append_raw_varnode(self, space: str, offset: int, size: int) -> None:
        self._tokens.append(TRaw(stringify_raw_varnode(space, offset, size)))

    def append_space(self, name: str) -> None:
        self._tokens.append(TSpace(name))

    def append_userop(self, userop: int) -> None:
        self._tokens.append(TUserop(self.stringify_userop(userop)))

    def append_indent(self) -> None:
        if self.indent:
            self._tokens.append(TIndent(INDENT))

    def append_character(self, c: str) -> None:
        if c == "=":
            self._tokens.append(TSep(" = "))
        else:
            self._tokens.append(TSep(c))

    def stringify_userop(self, userop: int) -> str:
        name = self.language.userop_name(userop)
        if name is not None:
            return name
        name = self.frame.userop_name(userop)
        if name is not None:
            return name
        return str(userop)


__all__ = [
    "Appender",
    "RowsAppender",
    "stringify_address",
    "stringify_line_label",
    "stringify_mnemonic",
    "stringify_raw_varnode",
    "stringify_scalar",
    "stringify_unique",
]
