"""Render stepper rows to images for debugging."""

from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from ..rows import Row, row_spans
from ..style import SpanStyle


class RowRenderer:
    """Renders p-code rows to a PIL image using a :class:`SpanStyle`."""

    def __init__(self, style: Optional[SpanStyle] = None,
                 line_height: int = 16, padding: int = 4,
                 font: Optional[ImageFont.ImageFont] = None):
        self.style = style or SpanStyle()
        self.line_height = line_height
        self.padding = padding
        self.font = font or ImageFont.load_default()

    def _measure(self, draw: ImageDraw.ImageDraw, text: str) -> float:
        return draw.textlength(text, font=self.font)

    def render_rows(self, rows: Sequence[Row],
                    selected: Optional[int] = None,
                    header: Optional[str] = None) -> Image.Image:
        """Render ``rows`` one per line; the next-op row gets the counter color."""
        lines = ([header] if header is not None else []) + list(rows)

        # Measure on a scratch image first
        scratch = ImageDraw.Draw(Image.new('RGB', (1, 1)))
        width = 1
        for line in lines:
            if isinstance(line, str):
                line_width = self._measure(scratch, line)
            else:
                line_width = sum(self._measure(scratch, text) for _, text in row_spans(line))
            width = max(width, int(line_width) + 1)
        width += 2 * self.padding
        height = max(1, len(lines)) * self.line_height + 2 * self.padding

        img = Image.new('RGB', (width, height), self.style.background)
        draw = ImageDraw.Draw(img)

        y = self.padding
        for line in lines:
            if isinstance(line, str):
                draw.text((self.padding, y), line, fill=self.style.foreground, font=self.font)
                y += self.line_height
                continue

            background = self.style.row_background(line, selected == line.index)
            draw.rectangle([0, y, width - 1, y + self.line_height - 1], fill=background)
            x = float(self.padding)
            for category, text in row_spans(line):
                draw.text((x, y), text, fill=self.style.color_of(category), font=self.font)
                x += self._measure(draw, text)
            y += self.line_height

        return img

    def save_rows(self, rows: Sequence[Row], filename: str,
                  selected: Optional[int] = None) -> None:
        """Save rendered rows to an image file."""
        self.render_rows(rows, selected).save(filename)
