from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .emitter import emit_python, load_emitted
from .interpreter import Executor
from .lowering import lower
from .optimizer import count_nodes, optimize
from .parser import parse
from .program import Program
from .runtime import EofPolicy
from .tape import Tape

BACKENDS = ("interpret", "jit", "compiled")


@dataclass(frozen=True)
class RunOptions:
    eof_policy: EofPolicy = EofPolicy.ERROR
    step_limit: Optional[int] = None
    backend: str = "interpret"
    optimize_level: int = 2


@dataclass(frozen=True)
class CompileOptions:
    optimize_level: int = 2
    eof_policy: EofPolicy = EofPolicy.ERROR


@dataclass(frozen=True)
class RunResult:
    output: bytes
    tape: Tape


@dataclass(frozen=True)
class CompileResult:
    python_source: str
    instruction_count: int
    node_count: int


def run_program(program: Program, *, stdin: bytes = b"", options: Optional[RunOptions] = None) -> RunResult:
    opts = options or RunOptions()
    source = io.BytesIO(stdin)
    sink = io.BytesIO()

    if opts.backend == "interpret":
        tape = Executor(program, source=source, sink=sink, eof_policy=opts.eof_policy,
                        step_limit=opts.step_limit).run()
    elif opts.backend == "jit":
        from .jit import JitRunner

        code = lower(optimize(program, opts.optimize_level))
        tape = JitRunner(code, source=source, sink=sink, eof_policy=opts.eof_policy,
                         step_limit=opts.step_limit).run()
    elif opts.backend == "compiled":
        if opts.step_limit is not None:
            raise ValueError("step_limit is not supported by the compiled backend")
        text = emit_python(program, optimize_level=opts.optimize_level, eof_policy=opts.eof_policy)
        tape = load_emitted(text).run(source, sink)
    else:
        raise ValueError(f"Unknown backend {opts.backend!r} (expected one of: {', '.join(BACKENDS)})")

    return RunResult(output=sink.getvalue(), tape=tape)


def run_string(source: Union[str, bytes], *, stdin: bytes = b"", options: Optional[RunOptions] = None) -> RunResult:
    return run_program(parse(source), stdin=stdin, options=options)


def run_file(path: Union[str, Path], *, stdin: bytes = b"", options: Optional[RunOptions] = None) -> RunResult:
    return run_string(Path(path).read_bytes(), stdin=stdin, options=options)


def compile_string(
    source: Union[str, bytes],
    *,
    options: Optional[CompileOptions] = None,
    source_name: Optional[str] = None,
) -> CompileResult:
    opts = options or CompileOptions()
    program = parse(source)
    text = emit_python(program, optimize_level=opts.optimize_level,
                       eof_policy=opts.eof_policy, source_name=source_name)
    return CompileResult(
        python_source=text,
        instruction_count=program.instruction_count(),
        node_count=count_nodes(optimize(program, opts.optimize_level)),
    )


def compile_file(path: Union[str, Path], *, options: Optional[CompileOptions] = None) -> CompileResult:
    p = Path(path)
    return compile_string(p.read_bytes(), options=options, source_name=p.name)
