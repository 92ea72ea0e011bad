"""Data types for interpreting unique values, and the catalog they resolve in."""

from __future__ import annotations

import logging
import struct
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Protocol

from .errors import TypeResolutionError

logger = logging.getLogger(__name__)


class DataType(Protocol):
    name: str
    length: int

    def represent(self, data: bytes, big_endian: bool) -> str: ...


def _byteorder(big_endian: bool) -> str:
    return "big" if big_endian else "little"


@dataclass(frozen=True)
class IntegerDataType:
    name: str
    length: int
    signed: bool = False

    def represent(self, data: bytes, big_endian: bool) -> str:
        value = int.from_bytes(
            data[: self.length], _byteorder(big_endian), signed=self.signed
        )
        return str(value)


@dataclass(frozen=True)
class BooleanDataType:
    name: str = "bool"
    length: int = 1

    def represent(self, data: bytes, big_endian: bool) -> str:
        return "true" if any(data[: self.length]) else "false"


@dataclass(frozen=True)
class CharDataType:
    name: str = "char"
    length: int = 1

    def represent(self, data: bytes, big_endian: bool) -> str:
        byte = data[0]
        if 0x20 <= byte <= 0x7E:
            return f"'{chr(byte)}'"
        return f"'\\x{byte:02x}'"


@dataclass(frozen=True)
class FloatDataType:
    name: str
    length: int

    def __post_init__(self) -> None:
        if self.length not in (4, 8):
            raise ValueError(f"float types are 4 or 8 bytes, not {self.length}")

    def represent(self, data: bytes, big_endian: bool) -> str:
        fmt = {4: "f", 8: "d"}[self.length]
        prefix = ">" if big_endian else "<"
        (value,) = struct.unpack(prefix + fmt, data[: self.length])
        return repr(value)


BUILTIN_TYPES: List[DataType] = [
    IntegerDataType("byte", 1),
    IntegerDataType("sbyte", 1, signed=True),
    IntegerDataType("ushort", 2),
    IntegerDataType("short", 2, signed=True),
    IntegerDataType("uint", 4),
    IntegerDataType("int", 4, signed=True),
    IntegerDataType("ulong", 8),
    IntegerDataType("long", 8, signed=True),
    BooleanDataType(),
    CharDataType(),
    FloatDataType("float", 4),
    FloatDataType("double", 8),
]


class DataTypeCatalog:
    """In-memory type catalog with all-or-nothing transactions.

    ``resolve`` must be called inside ``transaction``; any exception raised in
    the ``with`` body discards every change made since the transaction began.
    """

    def __init__(self, types: Iterable[DataType] = ()) -> None:
        self._types: Dict[str, DataType] = {t.name: t for t in types}
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self, description: str) -> Iterator[None]:
        with self._lock:
            snapshot = dict(self._types)
            self._depth += 1
            logger.debug("Begin transaction %r", description)
            try:
                yield
            except BaseException:
                self._types = snapshot
                logger.debug("Rolled back transaction %r", description)
                raise
            else:
                logger.debug("Committed transaction %r", description)
            finally:
                self._depth -= 1

    def resolve(self, data_type: DataType) -> DataType:
        if self._depth == 0:
            raise RuntimeError("resolve() requires an open transaction")
        existing = self._types.get(data_type.name)
        if existing is None:
            self._types[data_type.name] = data_type
            return data_type
        if existing != data_type:
            raise TypeResolutionError(
                f"Conflicting definition for data type {data_type.name!r}"
            )
        return existing

    def get(self, name: str) -> Optional[DataType]:
        return self._types.get(name)

    def names(self) -> List[str]:
        return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types


__all__ = [
    "BUILTIN_TYPES",
    "BooleanDataType",
    "CharDataType",
    "DataType",
    "DataTypeCatalog",
    "FloatDataType",
    "IntegerDataType",
]
