#!/usr/bin/env python3
"""
Public API tests.
"""

import io
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

import bftape
from bftape.api import CompileOptions, RunOptions, compile_file, compile_string, run_string
from bftape.emitter import load_emitted
from bftape.errors import StepLimitExceeded
from bftape.runtime import EofPolicy

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_run_string_defaults():
    result = run_string("++++++++[>++++++++<-]>+.")
    assert result.output == b"A"
    assert result.tape.peek(1) == 65


def test_run_string_with_stdin():
    result = run_string(",+.", stdin=b"a")
    assert result.output == b"b"


def test_step_limit_option():
    with pytest.raises(StepLimitExceeded):
        run_string("+[]", options=RunOptions(step_limit=50))


def test_compile_string_counts():
    result = compile_string("+++[-]", options=CompileOptions(optimize_level=2))
    assert result.instruction_count == 5
    assert result.node_count == 1
    assert "tape.write(0)" in result.python_source


def test_compile_file_names_source():
    result = compile_file(os.path.join(EXAMPLES, 'hello.bf'))
    assert "hello.bf" in result.python_source


def test_eof_policy_parse():
    assert EofPolicy.parse("ZERO") is EofPolicy.ZERO
    assert EofPolicy.parse(EofPolicy.UNCHANGED) is EofPolicy.UNCHANGED
    with pytest.raises(ValueError):
        EofPolicy.parse("max")


def test_package_exports():
    result = bftape.run_string("+.", options=bftape.RunOptions(eof_policy=bftape.EofPolicy.ZERO))
    assert result.output == bytes([1])
    assert isinstance(bftape.parse("+"), bftape.Program)


def test_compile_deeply_nested_program():
    depth = 1200
    result = compile_string("+" + "[" * depth + "-" + "]" * depth + "+.")
    assert result.instruction_count == depth + 4
    module = load_emitted(result.python_source)
    sink = io.BytesIO()
    module.run(io.BytesIO(), sink)
    assert sink.getvalue() == bytes([1])
