"""Render a frame's p-code into display rows.

The formatter walks the op template list (static rendering directives, which
may contain line labels) in lock-step with the frame's runtime ops (real ops
only).  Each non-label template consumes the next runtime op; the row bound to
the op whose step index equals ``frame.index`` is marked as the next op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .appender import Appender, RowsAppender
from .pcode import (
    Frame,
    LabelRef,
    LabelTemplate,
    Language,
    Opcode,
    OpTemplate,
    SpaceKind,
    Template,
    TemplateInput,
    Varnode,
    op_templates,
)
from .rows import BranchRow, FallthroughRow, Row

logger = logging.getLogger(__name__)


@dataclass
class FormattedOps:
    rows: List[Row]
    next_row_index: Optional[int]


class PcodeFormatter:
    def __init__(
        self,
        language: Language,
        frame: Frame,
        templates: Optional[Sequence[Template]] = None,
        indent: Optional[bool] = None,
    ) -> None:
        self.language = language
        self.frame = frame
        if templates is None:
            templates = op_templates(frame.code)
        self.templates: List[Template] = list(templates)
        if indent is None:
            indent = any(isinstance(t, LabelTemplate) for t in self.templates)
        self.indent = indent
        self._index = 0
        self.next_row_index: Optional[int] = None

    def create_appender(self) -> RowsAppender:
        return RowsAppender(self.language, self.frame, self.indent)

    def format(self) -> FormattedOps:
        appender = self.create_appender()
        self._index = 0
        self.next_row_index = None

        for template in self.templates:
            if isinstance(template, LabelTemplate):
                appender.start_row(None, False)
                appender.append_line_label(template.label)
                appender.end_row()
                continue
            if self._index >= len(self.frame.code):
                logger.warning(
                    "Template %r has no runtime op (frame holds %d ops); skipped",
                    template,
                    len(self.frame.code),
                )
                continue
            op = self.frame.code[self._index]
            self._index += 1
            is_next = self.next_row_index is None and op.seq.time == self.frame.index
            if is_next:
                self.next_row_index = len(appender.rows)
            appender.start_row(op, is_next)
            self.format_op_template(appender, template)
            appender.end_row()

        rows = appender.finish()
        if self.frame.is_branch:
            rows.append(BranchRow(len(rows), self.frame.branched))
        elif self.frame.is_fallthrough:
            rows.append(FallthroughRow(len(rows)))
        return FormattedOps(rows, self.next_row_index)

    # ------------------------------------------------------------------ #
    # Template rendering
    # ------------------------------------------------------------------ #

    def format_op_template(self, appender: Appender, template: OpTemplate) -> None:
        appender.append_indent()
        if template.output is not None:
            self.format_varnode(appender, template.output)
            appender.append_character("=")

        opcode = template.opcode
        inputs = template.inputs
        first = inputs[0] if inputs else None
        first_is_const = isinstance(first, Varnode) and first.is_constant

        if opcode == Opcode.CALLOTHER and first_is_const:
            appender.append_userop(first.offset)
            appender.append_character("(")
            self.format_inputs(appender, inputs[1:])
            appender.append_character(")")
            return

        appender.append_mnemonic(opcode)
        if opcode in (Opcode.LOAD, Opcode.STORE) and first_is_const and len(inputs) >= 2:
            space = self.language.space_name(first.offset) or f"space{first.offset}"
            appender.append_character(" ")
            appender.append_space(space)
            appender.append_character("(")
            self.format_input(appender, inputs[1])
            appender.append_character(")")
            if len(inputs) > 2:
                appender.append_character(",")
                appender.append_character(" ")
                self.format_inputs(appender, inputs[2:])
            return

        if inputs:
            appender.append_character(" ")
            self.format_inputs(appender, inputs)

    def format_inputs(self, appender: Appender, inputs: Sequence[TemplateInput]) -> None:
        for position, item in enumerate(inputs):
            if position:
                appender.append_character(",")
                appender.append_character(" ")
            self.format_input(appender, item)

    def format_input(self, appender: Appender, item: TemplateInput) -> None:
        if isinstance(item, LabelRef):
            appender.append_line_label_ref(item.label)
        else:
            self.format_varnode(appender, item)

    def format_varnode(self, appender: Appender, varnode: Varnode) -> None:
        space = varnode.space
        if space is SpaceKind.CONSTANT:
            appender.append_scalar(varnode.offset)
        elif space is SpaceKind.UNIQUE:
            appender.append_unique(varnode.offset, varnode.size)
        elif space is SpaceKind.REGISTER:
            name = self.language.register_name(varnode.offset, varnode.size)
            if name is None:
                appender.append_raw_varnode(varnode.name, varnode.offset, varnode.size)
            else:
                appender.append_register(name)
        elif space is SpaceKind.RAM:
            appender.append_character("*")
            appender.append_character("[")
            appender.append_space(varnode.name)
            appender.append_character("]")
            appender.append_address(varnode.offset)
        else:
            appender.append_raw_varnode(varnode.name, varnode.offset, varnode.size)


def format_frame(
    language: Language,
    frame: Frame,
    templates: Optional[Sequence[Template]] = None,
    indent: Optional[bool] = None,
) -> FormattedOps:
    return PcodeFormatter(language, frame, templates, indent).format()


__all__ = ["FormattedOps", "PcodeFormatter", "format_frame"]
