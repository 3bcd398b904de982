from __future__ import annotations

import argparse
import logging
import os
import stat
import sys
import time
from pathlib import Path
from typing import List, Optional

from .emitter import emit_python
from .errors import BFError
from .interpreter import Executor
from .lowering import format_listing, lower
from .optimizer import MAX_LEVEL, optimize
from .parser import parse_file
from .runtime import EofPolicy

DEFAULT_OUTPUT = {
    "script": "a.py",
    "ir": "out.ir",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bftape",
        description="Run or compile programs for the eight-instruction tape language.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-r", "--run", dest="interpret", action="store_true",
                      help="Interpret instead of compile")
    mode.add_argument("--jit", action="store_true", help="Run through the numba-compiled flat-code runner")
    mode.add_argument("--emit-ir", action="store_true", help="Emit the lowered flat-code listing only")
    parser.add_argument("-o", dest="output_filename", help="Name of the file to be generated")
    parser.add_argument("-O", dest="optimization_level", type=int, choices=range(0, MAX_LEVEL + 1),
                        default=MAX_LEVEL, help="Sets the optimization level (default: %(default)s)")
    parser.add_argument("--eof", choices=[p.value for p in EofPolicy], default=EofPolicy.ERROR.value,
                        help="Behavior of ',' once input is exhausted (default: %(default)s)")
    parser.add_argument("--dump-tape", action="store_true", help="Print the final tape window to stderr")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    parser.add_argument("input_filename", help="Source file")
    return parser


def _write_script(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")
    mode = os.stat(path).st_mode
    os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    eof_policy = EofPolicy.parse(args.eof)
    try:
        program = parse_file(args.input_filename)
    except FileNotFoundError:
        print(f"Couldn't find file {args.input_filename}", file=sys.stderr)
        return 1
    except BFError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        if args.interpret or args.jit:
            start = time.time()
            if args.jit:
                from .jit import JitRunner

                runner = JitRunner(lower(optimize(program, args.optimization_level)), eof_policy=eof_policy)
            else:
                runner = Executor(program, eof_policy=eof_policy)
            try:
                tape = runner.run()
            finally:
                sys.stdout.buffer.flush()
            end = time.time()
            if args.dump_tape:
                print(f"Execution took {(end - start) * 1000:.2f} ms ({runner.steps} steps)", file=sys.stderr)
                print(tape.dump(), file=sys.stderr)
            return 0

        if args.emit_ir:
            out = Path(args.output_filename or DEFAULT_OUTPUT["ir"])
            out.write_text(format_listing(lower(optimize(program, args.optimization_level))), encoding="utf-8")
            return 0

        out = Path(args.output_filename or DEFAULT_OUTPUT["script"])
        text = emit_python(program, optimize_level=args.optimization_level,
                           eof_policy=eof_policy, source_name=Path(args.input_filename).name)
        _write_script(out, text)
        return 0
    except BFError as e:
        print(e, file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
