"""Collect the unique (temporary) varnodes a frame's ops touch."""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .pcode import Frame, MicroOp, Varnode
from .rows import RefType, UniqueEntry


def iter_unique_refs(ops: Iterable[MicroOp]) -> Iterable[Tuple[Varnode, RefType]]:
    for op in ops:
        if op.output is not None and op.output.is_unique:
            yield op.output, RefType.WRITE
        for varnode in op.inputs:
            if varnode.is_unique:
                yield varnode, RefType.READ


def collect_uniques(frame: Frame) -> List[UniqueEntry]:
    """Return one entry per unique address, ascending, with merged ref types.

    Ranges that overlap without being identical are kept as separate entries.
    """
    refs: Dict[Tuple[int, int], RefType] = {}
    varnodes: Dict[Tuple[int, int], Varnode] = {}
    for varnode, ref in iter_unique_refs(frame.code):
        key = (varnode.offset, varnode.size)
        refs[key] = refs.get(key, RefType.NONE) | ref
        varnodes.setdefault(key, varnode)
    return [UniqueEntry(varnodes[key], refs[key]) for key in sorted(refs)]


__all__ = ["collect_uniques", "iter_unique_refs"]
