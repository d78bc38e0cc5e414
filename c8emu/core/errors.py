"""
Machine faults for C8EMU.

Every fault halts the interpreter and is re-raised to the caller.  Unknown
opcodes are *not* faults; they execute as no-ops.
"""

from __future__ import annotations


class MachineFault(RuntimeError):
    """Base class for all unrecoverable machine faults."""


class OutOfBoundsAccess(MachineFault, IndexError):
    """A memory address outside 0x000-0xFFF was read or written."""

    def __init__(self, address: int) -> None:
        super().__init__(f"memory access out of bounds: 0x{address:X}")
        self.address = address


class StackOverflow(MachineFault):
    """A CALL was executed with the call stack already full."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"call stack overflow (capacity {capacity})")
        self.capacity = capacity


class StackUnderflow(MachineFault):
    """A RETURN was executed with an empty call stack."""

    def __init__(self) -> None:
        super().__init__("call stack underflow (return with empty stack)")


class ProgramTooLarge(MachineFault, ValueError):
    """A program image does not fit between 0x200 and 0xFFF."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"program image is {size} bytes; at most {limit} bytes fit in memory"
        )
        self.size = size
        self.limit = limit
