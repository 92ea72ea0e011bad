"""Category colors, and HTML rendering of rows under a given style.

A :class:`SpanStyle` is a plain value.  Changing a preference means building a
new style (``with_color``) and re-rendering; nothing here is global.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from .rows import Row, is_next_row, row_spans
from .tokens import SpanCategory

Color = Tuple[int, int, int]

DEFAULT_COLORS: Dict[SpanCategory, Color] = {
    SpanCategory.ADDRESS: (0, 0, 128),
    SpanCategory.REGISTER: (102, 0, 204),
    SpanCategory.SCALAR: (0, 128, 0),
    SpanCategory.LOCAL: (153, 51, 0),
    SpanCategory.MNEMONIC: (0, 0, 128),
    SpanCategory.UNIMPL: (128, 0, 0),
    SpanCategory.SEPARATOR: (0, 0, 128),
    SpanCategory.LINE_LABEL: (0, 0, 255),
    SpanCategory.SPACE: (128, 0, 128),
    SpanCategory.RAW: (128, 128, 0),
    SpanCategory.USEROP: (0, 102, 153),
}

DEFAULT_COUNTER_COLOR: Color = (191, 223, 191)
DEFAULT_CURSOR_COLOR: Color = (232, 242, 254)
DEFAULT_BACKGROUND_COLOR: Color = (255, 255, 255)
DEFAULT_FOREGROUND_COLOR: Color = (0, 0, 0)


def to_hex(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def blend(a: Color, b: Color, ratio: float) -> Color:
    """Mix ``ratio`` of ``a`` with ``1 - ratio`` of ``b``."""
    inverse = 1.0 - ratio
    return (
        round(a[0] * ratio + b[0] * inverse),
        round(a[1] * ratio + b[1] * inverse),
        round(a[2] * ratio + b[2] * inverse),
    )


@dataclass(frozen=True)
class SpanStyle:
    colors: Mapping[SpanCategory, Color] = field(
        default_factory=lambda: dict(DEFAULT_COLORS)
    )
    counter: Color = DEFAULT_COUNTER_COLOR
    cursor: Color = DEFAULT_CURSOR_COLOR
    background: Color = DEFAULT_BACKGROUND_COLOR
    foreground: Color = DEFAULT_FOREGROUND_COLOR

    def color_of(self, category: SpanCategory) -> Color:
        return self.colors.get(category, self.foreground)

    def with_color(self, category: SpanCategory, color: Optional[Color]) -> "SpanStyle":
        colors = dict(self.colors)
        if color is None:
            colors.pop(category, None)
        else:
            colors[category] = color
        return replace(self, colors=colors)

    def row_background(self, row: Row, selected: bool = False) -> Color:
        if is_next_row(row):
            return blend(self.counter, self.cursor, 0.5) if selected else self.counter
        return self.cursor if selected else self.background

    def css(self) -> str:
        rules = []
        for category in SpanCategory:
            color = self.colors.get(category)
            if color is not None:
                rules.append(f" .{category.value} {{ color:{to_hex(color)}; }}")
        return "".join(rules)


def html_span(category: SpanCategory, text: str) -> str:
    escaped = html.escape(text)
    if category is SpanCategory.INDENT:
        escaped = escaped.replace(" ", "&nbsp;")
    return f'<span class="{category.value}">{escaped}</span>'


def render_html(row: Row, style: SpanStyle) -> str:
    body = "".join(html_span(category, text) for category, text in row_spans(row))
    return f"<html><head><style>{style.css()}</style></head>{body}</html>"


__all__ = [
    "Color",
    "DEFAULT_COLORS",
    "SpanStyle",
    "blend",
    "html_span",
    "render_html",
    "to_hex",
]
