import pytest

from pcodestep.conftest import X86_64
from pcodestep.datatypes import BUILTIN_TYPES, DataTypeCatalog, IntegerDataType
from pcodestep.errors import TypeResolutionError
from pcodestep.mock_emu import MapExecutionState
from pcodestep.pcode import Language, unique
from pcodestep.rows import RefType, UniqueEntry
from pcodestep.values import assign_type, decode_unique, decode_uniques


BIG_ENDIAN = Language("toy:BE:32", big_endian=True)


def _state(**values: int) -> MapExecutionState:
    state = MapExecutionState()
    for name, value in values.items():
        offset = int(name[1:], 16)
        state.set_value(unique(offset, 4), value)
    return state


def test_unrecorded_unique_is_unknown_not_zero() -> None:
    entry = decode_unique(UniqueEntry(unique(0, 4), RefType.READ), MapExecutionState(), X86_64)
    assert entry.raw is None
    assert entry.value is None
    assert entry.representation == "??"
    assert entry.bytes_text == "??"


def test_partially_recorded_unique_is_unknown() -> None:
    state = MapExecutionState()
    state.set_var(unique(0, 2), b"\x01\x02")
    entry = decode_unique(UniqueEntry(unique(0, 4)), state, X86_64)
    assert entry.value is None


def test_little_endian_decoding() -> None:
    state = MapExecutionState()
    state.set_var(unique(0, 4), b"\x2a\x00\x00\x00")
    entry = decode_unique(UniqueEntry(unique(0, 4)), state, X86_64)
    assert entry.raw == b"\x2a\x00\x00\x00"
    assert entry.value == 0x2A
    assert entry.representation == "0x2a (42)"
    assert entry.bytes_text == "2a 00 00 00"


def test_big_endian_decoding() -> None:
    state = MapExecutionState()
    state.set_var(unique(0, 4), b"\x00\x00\x01\x00")
    entry = decode_unique(UniqueEntry(unique(0, 4)), state, BIG_ENDIAN)
    assert entry.value == 0x100


def test_assigned_type_drives_representation() -> None:
    state = _state(u0=0xFFFF_FFFF)
    catalog = DataTypeCatalog(BUILTIN_TYPES)
    entry = decode_unique(UniqueEntry(unique(0, 4)), state, X86_64)
    assert entry.representation == "0xffffffff (4294967295)"

    typed = assign_type(entry, IntegerDataType("int", 4, signed=True), catalog, state, X86_64)
    assert typed.representation == "-1"
    assert typed.value == 0xFFFF_FFFF

    cleared = assign_type(typed, None, catalog, state, X86_64)
    assert cleared.data_type is None
    assert cleared.representation == "0xffffffff (4294967295)"


def test_assign_type_resolves_to_catalog_instance() -> None:
    state = _state(u0=7)
    existing = IntegerDataType("counter", 4)
    catalog = DataTypeCatalog([existing])
    typed = assign_type(
        UniqueEntry(unique(0, 4)), IntegerDataType("counter", 4), catalog, state, X86_64
    )
    assert typed.data_type is existing


def test_too_wide_type_rolls_back_catalog() -> None:
    state = _state(u0=1)
    catalog = DataTypeCatalog(BUILTIN_TYPES)
    entry = decode_unique(UniqueEntry(unique(0, 4)), state, X86_64)

    with pytest.raises(TypeResolutionError):
        assign_type(entry, IntegerDataType("wide", 8), catalog, state, X86_64)

    assert "wide" not in catalog
    assert entry.data_type is None


def test_conflicting_definition_is_rejected() -> None:
    catalog = DataTypeCatalog(BUILTIN_TYPES)
    with pytest.raises(TypeResolutionError, match="Conflicting"):
        assign_type(
            UniqueEntry(unique(0, 4)),
            IntegerDataType("int", 4, signed=False),
            catalog,
            MapExecutionState(),
            X86_64,
        )
    assert catalog.get("int") == IntegerDataType("int", 4, signed=True)


def test_decode_uniques_keeps_order() -> None:
    state = _state(u0=1, u4=2)
    entries = decode_uniques(
        [UniqueEntry(unique(0, 4)), UniqueEntry(unique(4, 4)), UniqueEntry(unique(8, 4))],
        state,
        X86_64,
    )
    assert [entry.value for entry in entries] == [1, 2, None]
