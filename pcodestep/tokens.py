"""Category-tagged text tokens for rendered p-code."""

import enum
from typing import List, Sequence, Tuple


class SpanCategory(enum.Enum):
    """Syntactic category of a rendered span; the value doubles as a CSS class."""

    ADDRESS = "addr"
    REGISTER = "reg"
    SCALAR = "scalar"
    LOCAL = "loc"
    MNEMONIC = "op"
    UNIMPL = "unimpl"
    SEPARATOR = "sep"
    LINE_LABEL = "lab"
    SPACE = "space"
    RAW = "raw"
    USEROP = "usr"
    INDENT = "indent"
    TEXT = "text"


class Token:
    category: SpanCategory = SpanCategory.TEXT

    def __init__(self, text: str) -> None:
        self.text = text

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return False
        return self.__dict__ == getattr(other, "__dict__", {})

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.text))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text})"

    def __str__(self) -> str:
        return self.text

    def span(self) -> Tuple[SpanCategory, str]:
        return (self.category, self.text)


def spans(parts: Sequence[Token]) -> List[Tuple[SpanCategory, str]]:
    return [part.span() for part in parts]


def tokens_str(parts: Sequence[Token]) -> str:
    return "".join(str(part) for part in parts)


class TAddr(Token):
    category = SpanCategory.ADDRESS


class TReg(Token):
    category = SpanCategory.REGISTER


class TScalar(Token):
    category = SpanCategory.SCALAR


class TLocal(Token):
    category = SpanCategory.LOCAL


class TMnemonic(Token):
    category = SpanCategory.MNEMONIC


class TUnimpl(Token):
    category = SpanCategory.UNIMPL


class TSep(Token):
    category = SpanCategory.SEPARATOR


class TLineLabel(Token):
    category = SpanCategory.LINE_LABEL


class TSpace(Token):
    category = SpanCategory.SPACE


class TRaw(Token):
    category = SpanCategory.RAW


class TUserop(Token):
    category = SpanCategory.USEROP


class TIndent(Token):
    category = SpanCategory.INDENT


class TText(Token):
    category = SpanCategory.TEXT
