"""
CallStack -- fixed-capacity return-address stack for CALL / RETURN.
"""

from __future__ import annotations

from typing import List, Tuple

from c8emu.core.errors import StackOverflow, StackUnderflow
from c8emu.core.types import STACK_CAPACITY


class CallStack:
    """Bounded LIFO of saved program-counter values."""

    def __init__(self, capacity: int = STACK_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity: int = capacity
        self._frames: List[int] = []

    def push(self, address: int) -> None:
        if len(self._frames) >= self.capacity:
            raise StackOverflow(self.capacity)
        self._frames.append(address)

    def pop(self) -> int:
        if not self._frames:
            raise StackUnderflow()
        return self._frames.pop()

    @property
    def depth(self) -> int:
        return len(self._frames)

    def frames(self) -> Tuple[int, ...]:
        """Saved addresses, oldest first."""
        return tuple(self._frames)

    def clear(self) -> None:
        self._frames.clear()

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f"CallStack(depth={len(self._frames)}, capacity={self.capacity})"
