from __future__ import annotations

import logging
import sys
from typing import BinaryIO, Optional

from numba import njit

from .errors import StepLimitExceeded
from .lowering import (
    FlatCode, OP_ADD, OP_CLEAR, OP_INPUT, OP_JUMP_IF_NONZERO, OP_JUMP_IF_ZERO, OP_MOVE,
    OP_OUTPUT,
)
from .runtime import EofPolicy, get_byte, put_byte
from .tape import Tape

logger = logging.getLogger(__name__)

# Stop reasons
STOP_END = 0
STOP_OUTPUT = 1
STOP_INPUT = 2
STOP_GROW = 3
STOP_BUDGET = 4

DEFAULT_BATCH_STEPS = 1_000_000


@njit(cache=True)
def run_batch(ops, args, storage, origin_offset, cursor, pc, max_steps):
    """
    JIT-compiled flat-code loop.

    Runs until the program ends or something needs Python: I/O, an access
    outside the materialized window (the caller grows the tape and resumes
    at the same pc), or the step budget.
    """
    stop_reason = STOP_END
    prog_len = len(ops)
    size = len(storage)
    steps = 0

    while pc < prog_len:
        if steps >= max_steps:
            stop_reason = STOP_BUDGET
            break

        command = ops[pc]
        if command == OP_MOVE:
            cursor += args[pc]
            pc += 1
            steps += 1
            continue

        # every other opcode touches the current cell
        index = cursor + origin_offset
        if index < 0 or index >= size:
            stop_reason = STOP_GROW
            break

        if command == OP_ADD:
            storage[index] = (storage[index] + args[pc]) & 255
        elif command == OP_CLEAR:
            storage[index] = 0
        elif command == OP_OUTPUT:
            stop_reason = STOP_OUTPUT
            break
        elif command == OP_INPUT:
            stop_reason = STOP_INPUT
            break
        elif command == OP_JUMP_IF_ZERO:
            if storage[index] == 0:
                pc = args[pc]
                steps += 1
                continue
        elif command == OP_JUMP_IF_NONZERO:
            if storage[index] != 0:
                pc = args[pc]
                steps += 1
                continue

        pc += 1
        steps += 1

    return pc, cursor, stop_reason, steps


class JitRunner:
    """
    Drives run_batch over a Tape, serving I/O and growth between batches.

    A step is one executed flat op (I/O included). With step_limit set, each
    batch is capped at the remaining allowance, so the limit is enforced to
    the exact step.
    """

    def __init__(
        self,
        code: FlatCode,
        tape: Optional[Tape] = None,
        *,
        source: Optional[BinaryIO] = None,
        sink: Optional[BinaryIO] = None,
        eof_policy: EofPolicy = EofPolicy.ERROR,
        batch_steps: int = DEFAULT_BATCH_STEPS,
        step_limit: Optional[int] = None,
    ):
        self.code = code
        self.tape = Tape() if tape is None else tape
        self.source = sys.stdin.buffer if source is None else source
        self.sink = sys.stdout.buffer if sink is None else sink
        self.eof_policy = EofPolicy.parse(eof_policy)
        self.batch_steps = batch_steps
        self.step_limit = step_limit
        self.pc = 0
        self.steps = 0

    def run(self) -> Tape:
        tape = self.tape
        logger.debug("jit running %d flat ops", len(self.code))

        while True:
            budget = self.batch_steps
            if self.step_limit is not None:
                budget = min(budget, self.step_limit - self.steps + 1)

            pc, cursor, stop_reason, steps = run_batch(
                self.code.ops, self.code.args, tape.storage,
                tape.origin_offset, tape.cursor, self.pc, budget,
            )
            self.pc = int(pc)
            tape.cursor = int(cursor)
            self.steps += int(steps)
            self._check_limit()

            if stop_reason == STOP_END:
                break
            if stop_reason == STOP_GROW:
                tape.ensure_capacity_for(tape.cursor)
            elif stop_reason == STOP_OUTPUT:
                put_byte(self.sink, tape.read())
                self.pc += 1
                self.steps += 1
            elif stop_reason == STOP_INPUT:
                get_byte(tape, self.source, self.eof_policy, self.sink)
                self.pc += 1
                self.steps += 1
            self._check_limit()

        logger.debug("jit finished after %d steps: %r", self.steps, tape)
        return tape

    def _check_limit(self) -> None:
        if self.step_limit is not None and self.steps > self.step_limit:
            raise StepLimitExceeded(
                message=f"RuntimeError: step limit of {self.step_limit} exceeded",
                limit=self.step_limit,
            )
