from __future__ import annotations

import logging
import sys
from typing import BinaryIO, List, Optional

from .errors import StepLimitExceeded
from .program import (
    Advance, Decrement, Increment, Input, Loop, Output, Program, Retreat,
)
from .runtime import EofPolicy, get_byte, put_byte
from .tape import Tape

logger = logging.getLogger(__name__)


class Executor:
    """
    Tree-walking evaluator.

    Nested loop bodies are run from an explicit frame stack instead of Python
    recursion. A frame is [body, position]; entering a loop pushes its body
    without moving the parent position, so when the body frame is exhausted
    the parent lands on the same Loop instruction and re-checks the cell.
    """

    def __init__(
        self,
        program: Program,
        tape: Optional[Tape] = None,
        *,
        source: Optional[BinaryIO] = None,
        sink: Optional[BinaryIO] = None,
        eof_policy: EofPolicy = EofPolicy.ERROR,
        step_limit: Optional[int] = None,
    ):
        self.program = program
        self.tape = Tape() if tape is None else tape
        self.source = sys.stdin.buffer if source is None else source
        self.sink = sys.stdout.buffer if sink is None else sink
        self.eof_policy = EofPolicy.parse(eof_policy)
        self.step_limit = step_limit
        self.steps = 0

    def run(self) -> Tape:
        tape = self.tape
        frames: List[list] = [[self.program.instructions, 0]]
        logger.debug("interpreting %d instructions", self.program.instruction_count())

        while frames:
            frame = frames[-1]
            body, pos = frame
            if pos >= len(body):
                frames.pop()
                continue

            self._count_step()
            ins = body[pos]
            if isinstance(ins, Loop):
                if tape.read() != 0:
                    frames.append([ins.body, 0])
                else:
                    frame[1] += 1
                continue

            if isinstance(ins, Advance):
                tape.advance()
            elif isinstance(ins, Retreat):
                tape.retreat()
            elif isinstance(ins, Increment):
                tape.increment_cell()
            elif isinstance(ins, Decrement):
                tape.decrement_cell()
            elif isinstance(ins, Output):
                put_byte(self.sink, tape.read())
            elif isinstance(ins, Input):
                get_byte(tape, self.source, self.eof_policy, self.sink)
            frame[1] += 1

        logger.debug("interpreter finished after %d steps: %r", self.steps, tape)
        return tape

    def _count_step(self) -> None:
        self.steps += 1
        if self.step_limit is not None and self.steps > self.step_limit:
            raise StepLimitExceeded(
                message=f"RuntimeError: step limit of {self.step_limit} exceeded",
                limit=self.step_limit,
            )


def interpret(program: Program, **kwargs) -> Tape:
    return Executor(program, **kwargs).run()
