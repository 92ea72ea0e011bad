import struct

import pytest

from pcodestep.datatypes import (
    BUILTIN_TYPES,
    BooleanDataType,
    CharDataType,
    DataTypeCatalog,
    FloatDataType,
    IntegerDataType,
)
from pcodestep.errors import PcodeStepperError, TypeResolutionError


def test_integer_representation_respects_sign_and_order() -> None:
    assert IntegerDataType("short", 2, signed=True).represent(b"\xfe\xff", False) == "-2"
    assert IntegerDataType("ushort", 2).represent(b"\x01\x00", True) == "256"


def test_bool_and_char_representation() -> None:
    assert BooleanDataType().represent(b"\x00", False) == "false"
    assert BooleanDataType().represent(b"\x02", False) == "true"
    assert CharDataType().represent(b"A", False) == "'A'"
    assert CharDataType().represent(b"\x01", False) == "'\\x01'"


def test_float_representation() -> None:
    assert FloatDataType("float", 4).represent(struct.pack("<f", 1.5), False) == "1.5"
    assert FloatDataType("double", 8).represent(struct.pack(">d", -0.25), True) == "-0.25"


def test_resolve_requires_transaction() -> None:
    catalog = DataTypeCatalog()
    with pytest.raises(RuntimeError):
        catalog.resolve(IntegerDataType("byte", 1))


def test_transaction_commits_new_types() -> None:
    catalog = DataTypeCatalog()
    with catalog.transaction("add"):
        catalog.resolve(IntegerDataType("byte", 1))
    assert "byte" in catalog
    assert catalog.names() == ["byte"]


def test_failed_transaction_discards_every_change() -> None:
    catalog = DataTypeCatalog(BUILTIN_TYPES)
    before = catalog.names()
    with pytest.raises(ValueError):
        with catalog.transaction("partial"):
            catalog.resolve(IntegerDataType("first", 2))
            catalog.resolve(IntegerDataType("second", 2))
            raise ValueError("abort")
    assert catalog.names() == before
    assert catalog.get("first") is None


def test_nested_transaction_is_allowed() -> None:
    catalog = DataTypeCatalog()
    with catalog.transaction("outer"):
        with catalog.transaction("inner"):
            catalog.resolve(IntegerDataType("byte", 1))
        catalog.resolve(IntegerDataType("word", 2))
    assert catalog.names() == ["byte", "word"]


def test_type_resolution_error_is_a_stepper_error() -> None:
    catalog = DataTypeCatalog([IntegerDataType("int", 4, signed=True)])
    with pytest.raises(PcodeStepperError):
        with catalog.transaction("conflict"):
            catalog.resolve(IntegerDataType("int", 2))
    assert issubclass(TypeResolutionError, PcodeStepperError)


def test_float_types_are_four_or_eight_bytes() -> None:
    with pytest.raises(ValueError):
        FloatDataType("half", 2)
    assert FloatDataType("float", 4).length == 4
