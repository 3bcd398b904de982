from __future__ import annotations

import logging
import types
from typing import List, Optional

from .optimizer import Add, Clear, LoopNode, Move, Node, optimize
from .program import Input, Output, Program
from .runtime import EofPolicy

logger = logging.getLogger(__name__)

_INDENT = "    "

# Generated loop functions call each other once per nesting level.
_RECURSION_HEADROOM = 200

_HEADER = '''#!/usr/bin/env python3
# Generated by bftape from {source_name!r} (optimization level {level}).
import sys

from bftape.errors import BFError
from bftape.runtime import EofPolicy, get_byte, put_byte
from bftape.tape import Tape

EOF_POLICY = EofPolicy.{policy}
LOOP_DEPTH = {depth}
'''

_RUN_HEAD = '''

def run(source, sink):
    if LOOP_DEPTH + {headroom} > sys.getrecursionlimit():
        sys.setrecursionlimit(LOOP_DEPTH + {headroom})
    tape = Tape()
'''

_FOOTER = '''

def main():
    try:
        run(sys.stdin.buffer, sys.stdout.buffer)
    except BFError as e:
        print(e, file=sys.stderr)
        return 1
    finally:
        sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
'''


class PythonEmitter:
    """
    Ahead-of-time code generator: IR -> Python module source.

    Code Generation Strategy:
    - All cell access goes through tape.read()/tape.write(), so growth
      happens exactly where the interpreter would grow
    - All cursor motion goes through tape.advance()/tape.retreat()
    - Every loop becomes its own module-level function, which keeps the
      generated code one block deep regardless of the program's nesting
    - The IR is walked with an explicit frame stack; loop functions are
      numbered in the order their loops open
    """

    def __init__(self, level: int, eof_policy: EofPolicy, source_name: Optional[str] = None):
        self.level = level
        self.eof_policy = EofPolicy.parse(eof_policy)
        self.source_name = source_name or "<string>"
        self.functions: List[str] = []
        self.max_depth = 0

    def emit(self, nodes: List[Node]) -> str:
        self.functions = []
        self.max_depth = 0
        main_body = self._emit_tree(nodes)

        parts = [_HEADER.format(source_name=self.source_name, level=self.level,
                                policy=self.eof_policy.name, depth=self.max_depth)]
        parts.extend(self.functions)
        parts.append(_RUN_HEAD.format(headroom=_RECURSION_HEADROOM))
        parts.extend(main_body)
        parts.append(f"{_INDENT}return tape\n")
        parts.append(_FOOTER)
        return "".join(parts)

    def _emit_tree(self, nodes: List[Node]) -> List[str]:
        # frame: [body, position, lines, function index or None for run()]
        frames: List[list] = [[tuple(nodes), 0, [], None]]
        while True:
            frame = frames[-1]
            body, pos, lines, index = frame
            pad = _INDENT * (1 if index is None else 2)
            if pos < len(body):
                n = body[pos]
                frame[1] += 1
                if isinstance(n, LoopNode):
                    # reserve the name first so nested loops number after their parent
                    child = len(self.functions)
                    self.functions.append("")
                    lines.append(f"{pad}_loop_{child}(tape, source, sink)\n")
                    frames.append([n.body, 0, [], child])
                    self.max_depth = max(self.max_depth, len(frames) - 1)
                else:
                    lines.append(pad + self._statement(n))
                continue

            frames.pop()
            if index is None:
                return lines
            self.functions[index] = (
                f"\n\ndef _loop_{index}(tape, source, sink):\n"
                f"{_INDENT}while tape.read() != 0:\n"
                + ("".join(lines) or f"{_INDENT * 2}pass\n")
            )

    @staticmethod
    def _statement(n: Node) -> str:
        if isinstance(n, Add):
            return f"tape.write((tape.read() + {n.n}) & 0xFF)\n"
        if isinstance(n, Move):
            if n.n > 0:
                return f"tape.advance({n.n})\n"
            return f"tape.retreat({-n.n})\n"
        if isinstance(n, Clear):
            return "tape.write(0)\n"
        if isinstance(n, Output):
            return "put_byte(sink, tape.read())\n"
        if isinstance(n, Input):
            return "get_byte(tape, source, EOF_POLICY, sink)\n"
        raise TypeError(f"Unexpected IR node {n!r}")


def emit_python(
    program: Program,
    *,
    optimize_level: int = 2,
    eof_policy: EofPolicy = EofPolicy.ERROR,
    source_name: Optional[str] = None,
) -> str:
    nodes = optimize(program, optimize_level)
    text = PythonEmitter(optimize_level, eof_policy, source_name).emit(nodes)
    logger.debug("emitted %d lines of Python for %s", text.count("\n"), source_name or "<string>")
    return text


def load_emitted(text: str, name: str = "bftape_generated") -> types.ModuleType:
    module = types.ModuleType(name)
    code = compile(text, f"<{name}>", "exec")
    exec(code, module.__dict__)
    return module
