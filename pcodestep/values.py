"""Decode unique values from an emulator's execution state."""

from __future__ import annotations

import struct
from dataclasses import replace
from typing import Iterable, List, Optional, Protocol

from .datatypes import DataType, DataTypeCatalog
from .errors import TypeResolutionError
from .pcode import Language, Varnode
from .rows import UNKNOWN_TEXT, UniqueEntry


class ExecutionState(Protocol):
    """Read-only view of an emulator thread's state.

    ``get_var`` returns ``None`` when any byte of the varnode was never
    recorded.
    """

    def get_var(self, varnode: Varnode) -> Optional[bytes]: ...


def default_representation(value: int) -> str:
    return f"0x{value:x} ({value})"


def decode_unique(
    entry: UniqueEntry, state: ExecutionState, language: Language
) -> UniqueEntry:
    raw = state.get_var(entry.varnode)
    if raw is None:
        return replace(entry, raw=None, value=None, representation=UNKNOWN_TEXT)
    raw = bytes(raw)
    value = int.from_bytes(raw, language.byteorder)
    if entry.data_type is not None:
        representation = entry.data_type.represent(raw, language.big_endian)
    else:
        representation = default_representation(value)
    return replace(entry, raw=raw, value=value, representation=representation)


def decode_uniques(
    entries: Iterable[UniqueEntry], state: ExecutionState, language: Language
) -> List[UniqueEntry]:
    return [decode_unique(entry, state, language) for entry in entries]


def assign_type(
    entry: UniqueEntry,
    data_type: Optional[DataType],
    catalog: DataTypeCatalog,
    state: ExecutionState,
    language: Language,
) -> UniqueEntry:
    """Return ``entry`` re-decoded with ``data_type`` resolved in ``catalog``.

    Raises :class:`TypeResolutionError` when the type cannot be resolved or is
    wider than the unique, or when it cannot interpret the unique's bytes; in
    that case the catalog is rolled back and the caller's entry is unchanged.
    """
    if data_type is None:
        return decode_unique(replace(entry, data_type=None), state, language)
    with catalog.transaction("Resolve DataType"):
        resolved = catalog.resolve(data_type)
        if resolved.length > entry.varnode.size:
            raise TypeResolutionError(
                f"{resolved.name} ({resolved.length} bytes) does not fit {entry.name}"
            )
        try:
            return decode_unique(replace(entry, data_type=resolved), state, language)
        except (ValueError, KeyError, IndexError, struct.error) as exc:
            raise TypeResolutionError(
                f"{resolved.name} cannot interpret {entry.name}: {exc}"
            ) from exc


__all__ = [
    "ExecutionState",
    "assign_type",
    "decode_unique",
    "decode_uniques",
    "default_representation",
]
