from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .errors import make_parse_error
from .program import (
    Advance, Decrement, Increment, Input, Instruction, Loop, Output, Program, Retreat,
)

_SIMPLE = {
    '>': Advance(),
    '<': Retreat(),
    '+': Increment(),
    '-': Decrement(),
    '.': Output(),
    ',': Input(),
}


def parse(source: Union[str, bytes]) -> Program:
    """
    Scan source text into a Program.

    Only the eight command characters are significant; everything else is a
    comment. Brackets are balanced into nested Loop instructions.

    Raises:
        ParseError: on an unmatched ']' or an unclosed '['
    """
    if isinstance(source, (bytes, bytearray)):
        source = bytes(source).decode('latin-1')

    stack: List[List[Instruction]] = [[]]
    opened: List[int] = []

    for pos, ch in enumerate(source):
        ins = _SIMPLE.get(ch)
        if ins is not None:
            stack[-1].append(ins)
        elif ch == '[':
            stack.append([])
            opened.append(pos)
        elif ch == ']':
            if len(stack) == 1:
                raise make_parse_error(message="Unmatched ']'", source=source, offset=pos)
            body = stack.pop()
            opened.pop()
            stack[-1].append(Loop(tuple(body)))

    if opened:
        raise make_parse_error(message="Unclosed '['", source=source, offset=opened[-1])
    return Program(tuple(stack[0]))


def parse_file(path: Union[str, Path]) -> Program:
    return parse(Path(path).read_bytes())
