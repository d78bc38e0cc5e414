"""
RegisterFile -- V0-VF, the index register I and the program counter.

Register VF doubles as the flag register: arithmetic, shift and draw
instructions overwrite it with their carry / borrow / collision outcome.
"""

from __future__ import annotations

from c8emu.core.types import NUM_REGISTERS, PROGRAM_START


class RegisterFile:
    """General registers plus I and PC."""

    def __init__(self) -> None:
        self.v: bytearray = bytearray(NUM_REGISTERS)
        self._index: int = 0
        self._pc: int = PROGRAM_START

    def reset(self) -> None:
        for i in range(NUM_REGISTERS):
            self.v[i] = 0
        self._index = 0
        self._pc = PROGRAM_START

    # ------------------------------------------------------------------
    # General registers
    # ------------------------------------------------------------------

    def get(self, x: int) -> int:
        return self.v[x]

    def set(self, x: int, value: int) -> None:
        self.v[x] = value & 0xFF

    # ------------------------------------------------------------------
    # Index register / program counter
    # ------------------------------------------------------------------

    @property
    def index(self) -> int:
        """The 16-bit index register I."""
        return self._index

    @index.setter
    def index(self, value: int) -> None:
        self._index = value & 0xFFFF

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & 0xFFFF

    def advance_pc(self) -> None:
        """Step past the instruction just fetched."""
        self._pc = (self._pc + 2) & 0xFFFF

    def skip(self) -> None:
        """Skip the next instruction (conditional-skip opcodes)."""
        self._pc = (self._pc + 2) & 0xFFFF

    def __repr__(self) -> str:
        regs = " ".join(f"V{i:X}={b:02X}" for i, b in enumerate(self.v))
        return f"RegisterFile(PC={self._pc:03X} I={self._index:03X} {regs})"
