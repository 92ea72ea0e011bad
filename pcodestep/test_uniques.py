from pcodestep.conftest import scenario_frame
from pcodestep.pcode import Frame, Opcode, const, op, register, unique
from pcodestep.rows import RefType, UniqueEntry
from pcodestep.uniques import collect_uniques, iter_unique_refs


def test_write_then_read_merges_to_read_write() -> None:
    assert collect_uniques(scenario_frame()) == [UniqueEntry(unique(0, 4), RefType.READ_WRITE)]


def test_entries_are_sorted_by_offset() -> None:
    frame = Frame(
        code=(
            op(Opcode.COPY, unique(0x80, 8), [unique(0x40, 8)], time=0),
            op(Opcode.INT_ADD, unique(0x10, 8), [unique(0x80, 8), const(1, 8)], time=1),
        )
    )
    entries = collect_uniques(frame)
    assert [entry.name for entry in entries] == ["$U10:8", "$U40:8", "$U80:8"]
    assert [entry.ref for entry in entries] == [
        RefType.WRITE,
        RefType.READ,
        RefType.READ_WRITE,
    ]


def test_non_unique_varnodes_are_ignored() -> None:
    frame = Frame(code=(op(Opcode.COPY, register(0, 8), [const(1, 8)], time=0),))
    assert collect_uniques(frame) == []


def test_repeated_reads_give_one_entry() -> None:
    frame = Frame(
        code=(
            op(Opcode.INT_ADD, register(0, 8), [unique(0, 8), unique(0, 8)], time=0),
            op(Opcode.COPY, register(8, 8), [unique(0, 8)], time=1),
        )
    )
    assert collect_uniques(frame) == [UniqueEntry(unique(0, 8), RefType.READ)]


def test_collection_is_deterministic() -> None:
    frame = scenario_frame()
    assert collect_uniques(frame) == collect_uniques(frame)


def test_iter_unique_refs_reports_output_before_inputs() -> None:
    micro_op = op(Opcode.INT_ADD, unique(8, 4), [unique(0, 4), unique(4, 4)], time=0)
    assert list(iter_unique_refs([micro_op])) == [
        (unique(8, 4), RefType.WRITE),
        (unique(0, 4), RefType.READ),
        (unique(4, 4), RefType.READ),
    ]


def test_unknown_entry_shows_placeholder_bytes() -> None:
    entry = UniqueEntry(unique(0x1f, 2), RefType.READ)
    assert entry.name == "$U1f:2"
    assert not entry.is_known
    assert entry.bytes_text == "??"
    assert UniqueEntry(unique(0, 2), raw=b"\x01\xab").bytes_text == "01 ab"
