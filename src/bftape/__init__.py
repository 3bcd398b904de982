import logging

from .api import (
    CompileOptions, CompileResult, RunOptions, RunResult, compile_file, compile_string, run_file,
    run_program, run_string,
)
from .errors import BFError, InputExhausted, ParseError, StepLimitExceeded
from .interpreter import Executor, interpret
from .parser import parse, parse_file
from .program import Program
from .runtime import EofPolicy
from .tape import Tape

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Tape',
    'Program',
    'Executor',
    'EofPolicy',
    'interpret',
    'parse',
    'parse_file',
    'BFError',
    'ParseError',
    'InputExhausted',
    'StepLimitExceeded',
    'RunOptions',
    'RunResult',
    'CompileOptions',
    'CompileResult',
    'run_program',
    'run_string',
    'run_file',
    'compile_string',
    'compile_file',
]
