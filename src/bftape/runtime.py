from __future__ import annotations

import enum
from typing import BinaryIO, Optional

from .errors import InputExhausted
from .tape import Tape


class EofPolicy(enum.Enum):
    """What an Input instruction does once the source has no bytes left."""

    ERROR = "error"
    ZERO = "zero"
    UNCHANGED = "unchanged"

    @classmethod
    def parse(cls, value) -> "EofPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown EOF policy {value!r} (expected one of: {choices})") from None


def put_byte(sink: BinaryIO, value: int) -> None:
    sink.write(bytes((value,)))


def get_byte(tape: Tape, source: BinaryIO, policy: EofPolicy, sink: Optional[BinaryIO] = None) -> None:
    # Pending output must be visible before we block on input.
    if sink is not None:
        sink.flush()

    data = source.read(1)
    if data:
        tape.write(data[0])
        return

    if policy is EofPolicy.ERROR:
        raise InputExhausted(message=f"RuntimeError: input exhausted at cell {tape.cursor}")
    if policy is EofPolicy.ZERO:
        tape.write(0)
    else:
        tape.ensure_capacity_for(tape.cursor)
