from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .optimizer import Add, Clear, LoopNode, Move, Node
from .program import Input, Output

# Opcodes
OP_MOVE = 0
OP_ADD = 1
OP_CLEAR = 2
OP_OUTPUT = 3
OP_INPUT = 4
OP_JUMP_IF_ZERO = 5
OP_JUMP_IF_NONZERO = 6

OP_NAMES = {
    OP_MOVE: "MOVE",
    OP_ADD: "ADD",
    OP_CLEAR: "CLEAR",
    OP_OUTPUT: "OUTPUT",
    OP_INPUT: "INPUT",
    OP_JUMP_IF_ZERO: "JUMP_IF_ZERO",
    OP_JUMP_IF_NONZERO: "JUMP_IF_NONZERO",
}


@dataclass(frozen=True)
class FlatCode:
    ops: np.ndarray   # int64 opcodes
    args: np.ndarray  # int64 operand (delta or jump target), 0 if unused

    def __len__(self) -> int:
        return len(self.ops)


def _flatten(nodes: List[Node], out: List[Tuple[int, int]]) -> None:
    # frame: [body, position, index of the opening jump or None at top level]
    frames: List[list] = [[tuple(nodes), 0, None]]
    while frames:
        frame = frames[-1]
        body, pos, start = frame
        if pos >= len(body):
            frames.pop()
            if start is not None:
                end = len(out)
                # both branches land just past the opposite bracket
                out.append((OP_JUMP_IF_NONZERO, start + 1))
                out[start] = (OP_JUMP_IF_ZERO, end + 1)
            continue

        n = body[pos]
        frame[1] += 1
        if isinstance(n, Add):
            out.append((OP_ADD, n.n))
        elif isinstance(n, Move):
            out.append((OP_MOVE, n.n))
        elif isinstance(n, Clear):
            out.append((OP_CLEAR, 0))
        elif isinstance(n, Output):
            out.append((OP_OUTPUT, 0))
        elif isinstance(n, Input):
            out.append((OP_INPUT, 0))
        elif isinstance(n, LoopNode):
            frames.append([n.body, 0, len(out)])
            out.append((OP_JUMP_IF_ZERO, -1))


def lower(nodes: List[Node]) -> FlatCode:
    """Flatten IR into opcode/operand arrays with resolved jump targets."""
    flat: List[Tuple[int, int]] = []
    _flatten(nodes, flat)
    ops = np.array([op for op, _ in flat], dtype=np.int64)
    args = np.array([arg for _, arg in flat], dtype=np.int64)
    return FlatCode(ops=ops, args=args)


def format_listing(code: FlatCode) -> str:
    lines = []
    for pc, (op, arg) in enumerate(zip(code.ops.tolist(), code.args.tolist())):
        name = OP_NAMES[op]
        if op in (OP_MOVE, OP_ADD):
            lines.append(f"{pc:05d}  {name:<16} {arg:+d}")
        elif op in (OP_JUMP_IF_ZERO, OP_JUMP_IF_NONZERO):
            lines.append(f"{pc:05d}  {name:<16} -> {arg:05d}")
        else:
            lines.append(f"{pc:05d}  {name}")
    return "\n".join(lines) + "\n"
