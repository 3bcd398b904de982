#!/usr/bin/env python3
"""
Executor tests: instruction semantics, loops, I/O and EOF policies.
"""

import io
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from bftape.errors import InputExhausted, StepLimitExceeded
from bftape.interpreter import Executor
from bftape.parser import parse, parse_file
from bftape.runtime import EofPolicy
from bftape.tape import Tape

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def execute(source, input_data=b"", tape=None, **kwargs):
    sink = io.BytesIO()
    executor = Executor(parse(source), tape, source=io.BytesIO(input_data), sink=sink, **kwargs)
    tape = executor.run()
    return sink.getvalue(), tape, executor


def test_increment_then_output():
    output, _, _ = execute("+++.")
    assert output == bytes([3])


def test_decrement_on_empty_tape_wraps():
    output, _, _ = execute("-.")
    assert output == bytes([255])


def test_retreat_from_origin_grows_left_by_one():
    output, tape, _ = execute("<+.")
    assert output == bytes([1])
    assert tape.origin_offset == 1
    assert len(tape.storage) == 1
    assert tape.cursor == -1


def test_clear_loop_runs_exactly_five_times():
    tape = Tape()
    tape.write(5)
    _, tape, executor = execute("[-]", tape=tape)
    assert tape.read() == 0
    # 6 condition checks + 5 decrements
    assert executor.steps == 11


def test_loop_skipped_when_cell_is_zero():
    output, tape, executor = execute("[.+]")
    assert output == b""
    assert tape.read() == 0
    assert executor.steps == 1


def test_repeated_output_emits_same_byte():
    output, _, _ = execute("++++..")
    assert output == bytes([4, 4])


def test_move_values_between_cells():
    # cell1 = cell0 * 3, cell0 cleared
    output, tape, _ = execute("++++[>+++<-]>.")
    assert output == bytes([12])
    assert tape.peek(0) == 0
    assert tape.peek(1) == 12


def test_hello_world():
    sink = io.BytesIO()
    program = parse_file(os.path.join(EXAMPLES, 'hello.bf'))
    Executor(program, source=io.BytesIO(), sink=sink).run()
    assert sink.getvalue() == b"Hello World!\n"


def test_leftward_example():
    sink = io.BytesIO()
    program = parse_file(os.path.join(EXAMPLES, 'leftward.bf'))
    tape = Executor(program, source=io.BytesIO(), sink=sink).run()
    assert sink.getvalue() == bytes([61, 72, 32, 61])
    assert tape.origin_offset == 2
    assert tape.span() == (-2, 2)


def test_input_reads_one_byte_per_instruction():
    output, _, _ = execute(",.,+.", b"AB")
    assert output == b"AC"


def test_cat_with_zero_policy():
    sink = io.BytesIO()
    program = parse_file(os.path.join(EXAMPLES, 'cat.bf'))
    Executor(program, source=io.BytesIO(b"echo me"), sink=sink, eof_policy=EofPolicy.ZERO).run()
    assert sink.getvalue() == b"echo me"


def test_exhausted_input_is_fatal_by_default():
    with pytest.raises(InputExhausted):
        execute(",")


def test_exhausted_input_zero_policy():
    output, _, _ = execute("+++,.", eof_policy=EofPolicy.ZERO)
    assert output == bytes([0])


def test_exhausted_input_unchanged_policy():
    output, _, _ = execute("+++,.", eof_policy="unchanged")
    assert output == bytes([3])


def test_unchanged_policy_still_prepares_cell():
    _, tape, _ = execute("<<,", eof_policy=EofPolicy.UNCHANGED)
    assert tape.origin_offset == 2
    assert len(tape.storage) == 2


def test_step_limit():
    with pytest.raises(StepLimitExceeded) as info:
        execute("+[]", step_limit=100)
    assert info.value.limit == 100


def test_deeply_nested_loops():
    depth = 1500
    output, tape, _ = execute("+" + "[" * depth + "-" + "]" * depth + "+.")
    assert output == bytes([1])


def test_runs_are_isolated():
    first, _, _ = execute("+++++.")
    second, _, _ = execute("+.")
    assert first == bytes([5])
    assert second == bytes([1])
