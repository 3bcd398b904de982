from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union


# ---------------- Instruction tree ----------------
@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retreat:
    pass


@dataclass(frozen=True)
class Increment:
    pass


@dataclass(frozen=True)
class Decrement:
    pass


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Loop:
    body: Tuple["Instruction", ...]


Instruction = Union[Advance, Retreat, Increment, Decrement, Output, Input, Loop]

SYMBOLS = {
    Advance: '>',
    Retreat: '<',
    Increment: '+',
    Decrement: '-',
    Output: '.',
    Input: ',',
}


@dataclass(frozen=True)
class Program:
    """Parsed program: the ordered top-level instructions."""

    instructions: Tuple[Instruction, ...]

    def __iter__(self):
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    def instruction_count(self) -> int:
        return _count(self.instructions)

    def __str__(self) -> str:
        out: List[str] = []
        _format(self.instructions, out, 0)
        return "".join(out)


def _count(instructions: Iterable[Instruction]) -> int:
    total = 0
    pending = [instructions]
    while pending:
        for ins in pending.pop():
            total += 1
            if isinstance(ins, Loop):
                pending.append(ins.body)
    return total


def _format(instructions: Iterable[Instruction], out: List[str], indent: int) -> None:
    # frame: [body, position, indent, at_line_start]
    frames: List[list] = [[tuple(instructions), 0, indent, True]]
    while frames:
        frame = frames[-1]
        body, pos, depth, at_line_start = frame
        if pos >= len(body):
            frames.pop()
            if frames:
                parent = frames[-1]
                out.append(f"\n{' ' * parent[2]}]\n")
                parent[1] += 1
                parent[3] = True
            continue

        ins = body[pos]
        pad = " " * depth
        if isinstance(ins, Loop):
            if not at_line_start:
                out.append("\n")
            out.append(f"{pad}[\n")
            frames.append([ins.body, 0, depth + 2, True])
            continue
        if at_line_start:
            out.append(pad)
            frame[3] = False
        out.append(SYMBOLS[type(ins)])
        frame[1] += 1
