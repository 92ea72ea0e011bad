from pcodestep.pcode import (
    Frame,
    LabelRef,
    LabelTemplate,
    Opcode,
    OpTemplate,
    const,
    is_unimplemented,
    op,
    op_templates,
    opcode_name,
    register,
    unique,
)


def test_opcode_names_follow_the_pcode_table() -> None:
    assert opcode_name(Opcode.COPY) == "COPY"
    assert opcode_name(9) == "CALLOTHER"
    assert opcode_name(45) is None
    assert opcode_name(999) is None


def test_unimplemented_covers_opcode_zero_and_unknown_codes() -> None:
    assert is_unimplemented(Opcode.UNIMPLEMENTED)
    assert is_unimplemented(999)
    assert not is_unimplemented(Opcode.INT_ADD)


def test_unknown_opcode_mnemonic() -> None:
    micro_op = op(999, None, [], time=0)
    assert micro_op.mnemonic == "unknown_999"


def test_signed_offset_wraps_at_varnode_width() -> None:
    assert const(-1, 8).offset == 0xFFFF_FFFF_FFFF_FFFF
    assert const(-1, 8).signed_offset() == -1
    assert const(2, 4).signed_offset() == 2
    assert const(0x80, 1).signed_offset() == -0x80


def test_templates_without_branches_mirror_ops() -> None:
    ops = [
        op(Opcode.COPY, unique(0, 4), [const(1, 4)], time=0),
        op(Opcode.INT_ADD, register(0, 8), [register(0, 8), const(4, 8)], time=1),
    ]
    templates = op_templates(ops)
    assert templates == [
        OpTemplate(Opcode.COPY, unique(0, 4), (const(1, 4),)),
        OpTemplate(Opcode.INT_ADD, register(0, 8), (register(0, 8), const(4, 8))),
    ]


def test_relative_branch_gets_label_before_target() -> None:
    ops = [
        op(Opcode.CBRANCH, None, [const(2, 8), unique(0, 1)], time=0),
        op(Opcode.COPY, register(0, 8), [const(0, 8)], time=1),
        op(Opcode.COPY, register(8, 8), [const(1, 8)], time=2),
    ]
    templates = op_templates(ops)
    assert templates == [
        OpTemplate(Opcode.CBRANCH, None, (LabelRef(0), unique(0, 1))),
        OpTemplate(Opcode.COPY, register(0, 8), (const(0, 8),)),
        LabelTemplate(0),
        OpTemplate(Opcode.COPY, register(8, 8), (const(1, 8),)),
    ]


def test_branch_past_last_op_appends_trailing_label() -> None:
    ops = [op(Opcode.BRANCH, None, [const(1, 8)], time=0)]
    assert op_templates(ops) == [
        OpTemplate(Opcode.BRANCH, None, (LabelRef(0),)),
        LabelTemplate(0),
    ]


def test_backward_branch_and_label_numbering() -> None:
    ops = [
        op(Opcode.COPY, register(0, 8), [const(0, 8)], time=0),
        op(Opcode.CBRANCH, None, [const(-1, 8), unique(0, 1)], time=1),
        op(Opcode.BRANCH, None, [const(1, 8)], time=2),
    ]
    templates = op_templates(ops)
    assert templates == [
        LabelTemplate(0),
        OpTemplate(Opcode.COPY, register(0, 8), (const(0, 8),)),
        OpTemplate(Opcode.CBRANCH, None, (LabelRef(0), unique(0, 1))),
        OpTemplate(Opcode.BRANCH, None, (LabelRef(1),)),
        LabelTemplate(1),
    ]


def test_out_of_range_branch_keeps_constant() -> None:
    ops = [op(Opcode.BRANCH, None, [const(5, 8)], time=0)]
    assert op_templates(ops) == [OpTemplate(Opcode.BRANCH, None, (const(5, 8),))]


def test_frame_userop_lookup_and_finished() -> None:
    frame = Frame(code=(), userop_names={3: "pcodeop_three"})
    assert frame.userop_name(3) == "pcodeop_three"
    assert frame.userop_name(4) is None
    assert frame.is_finished
