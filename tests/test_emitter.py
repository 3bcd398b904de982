#!/usr/bin/env python3
"""
Generated Python module tests.
"""

import io
import os
import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from bftape.emitter import emit_python, load_emitted
from bftape.errors import InputExhausted
from bftape.parser import parse
from bftape.runtime import EofPolicy


def run_emitted(source, input_data=b"", **kwargs):
    module = load_emitted(emit_python(parse(source), **kwargs))
    sink = io.BytesIO()
    tape = module.run(io.BytesIO(input_data), sink)
    return sink.getvalue(), tape


def test_generated_module_layout():
    text = emit_python(parse("+[>[-]<-]"), optimize_level=0, source_name="demo.bf")
    assert text.startswith("#!/usr/bin/env python3\n")
    assert "demo.bf" in text
    assert "from bftape.tape import Tape" in text
    assert "def _loop_0(tape, source, sink):" in text
    assert "def _loop_1(tape, source, sink):" in text
    assert "def run(source, sink):" in text
    assert 'if __name__ == "__main__":' in text
    compile(text, "<generated>", "exec")


def test_primitives_only():
    text = emit_python(parse("+++>>-<."), optimize_level=1)
    assert "tape.write((tape.read() + 3) & 0xFF)" in text
    assert "tape.advance(2)" in text
    assert "tape.write((tape.read() + -1) & 0xFF)" in text
    assert "tape.retreat(1)" in text
    assert "put_byte(sink, tape.read())" in text


def test_clear_loop_becomes_write():
    text = emit_python(parse("+[-]"), optimize_level=2)
    assert "tape.write(0)" in text
    assert "_loop_" not in text


def test_empty_loop_body_is_valid():
    text = emit_python(parse("[]"), optimize_level=0)
    assert "pass" in text
    output, tape = run_emitted("[]")
    assert output == b""
    assert tape.read() == 0


@pytest.mark.parametrize("level", [0, 1, 2])
def test_scenarios(level):
    assert run_emitted("+++.", optimize_level=level)[0] == bytes([3])
    assert run_emitted("-.", optimize_level=level)[0] == bytes([255])
    output, tape = run_emitted("<+.", optimize_level=level)
    assert output == bytes([1])
    assert tape.origin_offset == 1
    assert len(tape.storage) == 1


def test_nesting_deeper_than_block_limit():
    depth = 40
    output, _ = run_emitted("+" + "[" * depth + "-" + "]" * depth + "+.", optimize_level=0)
    assert output == bytes([1])


def test_eof_policy_is_baked_in():
    text = emit_python(parse(","), eof_policy=EofPolicy.ZERO)
    assert "EOF_POLICY = EofPolicy.ZERO" in text
    assert run_emitted("+,.", eof_policy=EofPolicy.ZERO)[0] == bytes([0])
    with pytest.raises(InputExhausted):
        run_emitted(",")


def test_input_and_output():
    assert run_emitted(",[.,]", b"abc", eof_policy="zero")[0] == b"abc"


def test_main_reports_runtime_errors(monkeypatch, capsysbinary):
    module = load_emitted(emit_python(parse("+.,")))
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"")))
    assert module.main() == 1
    out, err = capsysbinary.readouterr()
    assert out == bytes([1])
    assert b"input exhausted" in err
    assert b"Traceback" not in err


def test_main_returns_zero_on_success(monkeypatch, capsysbinary):
    module = load_emitted(emit_python(parse(",+.")))
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"a")))
    assert module.main() == 0
    assert capsysbinary.readouterr().out == b"b"


def test_source_name_cannot_inject_code():
    name = "evil\nimport os"
    text = emit_python(parse("+"), source_name=name)
    assert repr(name) in text
    assert "\nimport os" not in text
    compile(text, "<generated>", "exec")
