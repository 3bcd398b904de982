#
# Program -> packed IR.
# Levels (0..2):
#   0: one IR node per instruction
#   1: pack (+/- and </>) + modulo shrink (wrap at 256)
#   2: clear-loop recognition ([-], [+]) + local clear peepholes
#
# Invariant: every node that touches a cell touches it at the same cursor as
# the instructions it replaces, so the tape window grows identically at every
# level. Move(0) is dropped (no access); Add(0) is kept (it reads and writes).
#
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Tuple, Union

from .program import (
    Advance, Decrement, Increment, Input, Instruction, Loop, Output, Program, Retreat,
)

CELL_SIZE = 256
MAX_LEVEL = 2


# ---------------- IR Nodes ----------------
@dataclass(frozen=True)
class Add:
    n: int  # net +/- on current cell


@dataclass(frozen=True)
class Move:
    n: int  # net >/<


@dataclass(frozen=True)
class Clear:
    pass  # [-]


@dataclass(frozen=True)
class LoopNode:
    body: Tuple["Node", ...]


Node = Union[Add, Move, Clear, Output, Input, LoopNode]


# ---------------- Tree walking ----------------
def rewrite_bodies(nodes: Iterable[Node], rewrite: Callable[[List[Node]], List[Node]]) -> List[Node]:
    """
    Apply a single-level rewrite to every body, innermost first.

    `rewrite` sees one body at a time; loops inside it already carry their
    rewritten bodies. Uses an explicit frame stack, so nesting depth is not
    bounded by the recursion limit.
    """
    frames: List[list] = [[tuple(nodes), 0, []]]
    while True:
        frame = frames[-1]
        body, pos, out = frame
        if pos < len(body):
            n = body[pos]
            if isinstance(n, LoopNode):
                frames.append([n.body, 0, []])
            else:
                out.append(n)
                frame[1] += 1
            continue

        result = rewrite(out)
        frames.pop()
        if not frames:
            return result
        parent = frames[-1]
        parent[2].append(LoopNode(tuple(result)))
        parent[1] += 1


# ---------------- Program -> IR ----------------
_LEAVES = {
    Increment: Add(1),
    Decrement: Add(-1),
    Advance: Move(1),
    Retreat: Move(-1),
}


def to_nodes(instructions: Iterable[Instruction]) -> List[Node]:
    frames: List[list] = [[tuple(instructions), 0, []]]
    while True:
        frame = frames[-1]
        body, pos, out = frame
        if pos < len(body):
            ins = body[pos]
            if isinstance(ins, Loop):
                frames.append([ins.body, 0, []])
                continue
            out.append(_LEAVES.get(type(ins), ins))
            frame[1] += 1
            continue

        frames.pop()
        if not frames:
            return out
        parent = frames[-1]
        parent[2].append(LoopNode(tuple(out)))
        parent[1] += 1


def count_nodes(nodes: Iterable[Node]) -> int:
    c = 0
    pending = [nodes]
    while pending:
        for n in pending.pop():
            c += 1
            if isinstance(n, LoopNode):
                pending.append(n.body)
    return c


# ---------------- Basic utilities (single level) ----------------
def _pack_level(nodes: List[Node]) -> List[Node]:
    out: List[Node] = []
    i = 0
    while i < len(nodes):
        n = nodes[i]
        if isinstance(n, Add):
            s = 0
            while i < len(nodes) and isinstance(nodes[i], Add):
                s += nodes[i].n
                i += 1
            out.append(Add(s))
            continue
        if isinstance(n, Move):
            s = 0
            while i < len(nodes) and isinstance(nodes[i], Move):
                s += nodes[i].n
                i += 1
            if s != 0:
                out.append(Move(s))
            continue
        out.append(n)
        i += 1
    return out


def _reduce_level(nodes: List[Node]) -> List[Node]:
    out: List[Node] = []
    for n in nodes:
        if isinstance(n, Add):
            v = n.n % CELL_SIZE
            out.append(Add(v) if v <= CELL_SIZE - v else Add(-(CELL_SIZE - v)))
        else:
            out.append(n)
    return out


def _clear_loops_level(nodes: List[Node]) -> List[Node]:
    out: List[Node] = []
    for n in nodes:
        if isinstance(n, LoopNode) and len(n.body) == 1 \
                and isinstance(n.body[0], Add) and n.body[0].n in (-1, 1):
            out.append(Clear())
        else:
            out.append(n)
    return out


def _peephole_level(nodes: List[Node]) -> List[Node]:
    out: List[Node] = []
    for cur in nodes:
        # Add right before Clear (same cell) is dead; Clear still touches the cell
        if isinstance(cur, Clear) and out and isinstance(out[-1], (Add, Clear)):
            out.pop()
        out.append(cur)
    return out


def pack(nodes: List[Node]) -> List[Node]:
    """Combine adjacent Add/Add and Move/Move; drop zero moves."""
    return rewrite_bodies(nodes, _pack_level)


def reduce_add_mod(nodes: List[Node]) -> List[Node]:
    """Shrink Add by modulo (e.g. +250 -> -6)."""
    return rewrite_bodies(nodes, _reduce_level)


def recognize_clear_loops(nodes: List[Node]) -> List[Node]:
    return rewrite_bodies(nodes, _clear_loops_level)


def peephole_clear_local(nodes: List[Node]) -> List[Node]:
    """Local clear peepholes (adjacent)."""
    return rewrite_bodies(nodes, _peephole_level)


# ---------------- Main optimizer pipeline ----------------
def optimize(program: Program, level: int = MAX_LEVEL) -> List[Node]:
    level = max(0, min(MAX_LEVEL, int(level)))
    out = to_nodes(program.instructions)
    if level >= 1:
        out = reduce_add_mod(pack(out))
    if level >= 2:
        out = peephole_clear_local(recognize_clear_loops(out))
    return out
