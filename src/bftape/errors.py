from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


def _line_and_column(source: str, offset: int) -> Tuple[int, int]:
    line = source.count('\n', 0, offset) + 1
    line_start = source.rfind('\n', 0, offset) + 1
    return line, offset - line_start + 1


def _build_context(lines: List[str], line_no_1: int, column: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"         {' ' * (column - 1)}^")
    return "\n".join(out)


def _hint_for(message: str) -> Optional[str]:
    msg = message.lower()
    if "unmatched ']'" in msg:
        return "Every ']' needs an earlier '[' on the same nesting level. Remove it or add the missing '['."
    if "unclosed '['" in msg:
        return "Add the missing ']' or remove the '['. Brackets inside comments count too."
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ParseError(BFError):
    line: int
    column: int
    context: str


@dataclass
class InputExhausted(BFError):
    pass


@dataclass
class StepLimitExceeded(BFError):
    limit: int


def make_parse_error(*, message: str, source: str, offset: int) -> ParseError:
    line, column = _line_and_column(source, offset)
    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(message)
    hint_block = f"\nHint: {hint}" if hint else ""
    return ParseError(
        message=f"ParseError: {message} (line {line}, column {column})\n{ctx}{hint_block}",
        line=line,
        column=column,
        context=ctx,
    )
