from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Tape:
    """
    Unbounded byte tape over the signed integers.

    Storage is a contiguous numpy uint8 buffer covering the logical addresses
    [-origin_offset, len(storage) - origin_offset). The cursor may point
    anywhere; the buffer is only grown when a cell is actually accessed.

    Growth Policy:
    - Left: prepend exactly the missing slots (existing bytes shift right)
      and raise origin_offset by the same amount
    - Right: append zeros up to and including the accessed index
    - Never shrinks, never pre-allocates past the accessed address
    """

    def __init__(self):
        self.storage = np.zeros(0, dtype=np.uint8)
        self.origin_offset = 0
        self.cursor = 0

    # ===== Cursor =====

    def advance(self, count: int = 1) -> None:
        self.cursor += count

    def retreat(self, count: int = 1) -> None:
        self.cursor -= count

    # ===== Growth =====

    def ensure_capacity_for(self, address: int) -> int:
        """
        Make sure `address` is backed by storage and return its storage index.

        Args:
            address: logical address (any int)

        Returns:
            index such that 0 <= index < len(self.storage)
        """
        index = address + self.origin_offset
        if index < 0:
            deficit = -index
            self.storage = np.concatenate((np.zeros(deficit, dtype=np.uint8), self.storage))
            self.origin_offset += deficit
            logger.debug("tape grew left by %d (origin_offset=%d, size=%d)",
                         deficit, self.origin_offset, len(self.storage))
            index = 0
        elif index >= len(self.storage):
            missing = index + 1 - len(self.storage)
            self.storage = np.concatenate((self.storage, np.zeros(missing, dtype=np.uint8)))
            logger.debug("tape grew right by %d (size=%d)", missing, len(self.storage))
        assert 0 <= index < len(self.storage)
        return index

    # ===== Cell access =====

    # growth may replace self.storage, so the index is bound before subscripting

    def read(self) -> int:
        index = self.ensure_capacity_for(self.cursor)
        return int(self.storage[index])

    def write(self, value: int) -> None:
        index = self.ensure_capacity_for(self.cursor)
        self.storage[index] = value & 0xFF

    def increment_cell(self) -> None:
        self.write((self.read() + 1) % 256)

    def decrement_cell(self) -> None:
        self.write((self.read() - 1) % 256)

    # ===== Inspection (never grows) =====

    def peek(self, address: int) -> int:
        index = address + self.origin_offset
        if 0 <= index < len(self.storage):
            return int(self.storage[index])
        return 0

    def span(self) -> Optional[Tuple[int, int]]:
        if len(self.storage) == 0:
            return None
        return -self.origin_offset, len(self.storage) - self.origin_offset - 1

    def cells(self) -> List[Tuple[int, int]]:
        low = -self.origin_offset
        return [(low + i, int(v)) for i, v in enumerate(self.storage)]

    def dump(self, width: int = 16) -> str:
        """Render the materialized window, marking the cursor cell with brackets."""
        span = self.span()
        if span is None:
            return f"<empty tape, cursor={self.cursor}>"
        rows = []
        cells = self.cells()
        for i in range(0, len(cells), width):
            row = cells[i:i + width]
            vals = []
            for address, value in row:
                text = f"{value:03}"
                vals.append(f"[{text}]" if address == self.cursor else f" {text} ")
            rows.append(f"{row[0][0]:+6d}: " + "".join(vals))
        rows.append(f"cursor={self.cursor} span={span[0]}..{span[1]} origin_offset={self.origin_offset}")
        return "\n".join(rows)

    def __repr__(self) -> str:
        return f"Tape(cursor={self.cursor}, origin_offset={self.origin_offset}, size={len(self.storage)})"
