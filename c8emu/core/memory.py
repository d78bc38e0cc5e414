"""
Memory -- the flat 4 KB address space of the CHIP-8 machine.

Layout::

    0x000-0x04F   hexadecimal font (16 glyphs x 5 bytes)
    0x050-0x1FF   unused (historically the interpreter itself)
    0x200-0xFFF   program image and working RAM

All accesses are bounds-checked; there is no mirroring.  An address outside
``0x000-0xFFF`` raises :class:`~c8emu.core.errors.OutOfBoundsAccess`.
"""

from __future__ import annotations

from c8emu.core.errors import OutOfBoundsAccess, ProgramTooLarge
from c8emu.core.types import (
    FONT_SET,
    FONT_START,
    MAX_PROGRAM_SIZE,
    MEMORY_SIZE,
    PROGRAM_START,
)


class Memory:
    """Byte-addressable RAM with the font table preloaded."""

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        self._size: int = size
        self._data: bytearray = bytearray(size)
        self.load_font()

    # ------------------------------------------------------------------
    # Byte access
    # ------------------------------------------------------------------

    def read(self, address: int) -> int:
        self._check(address)
        return self._data[address]

    def write(self, address: int, value: int) -> None:
        self._check(address)
        self._data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Return the big-endian 16-bit word at *address*."""
        return (self.read(address) << 8) | self.read(address + 1)

    def __getitem__(self, address: int) -> int:
        return self.read(address)

    def __setitem__(self, address: int, value: int) -> None:
        self.write(address, value)

    def __len__(self) -> int:
        return self._size

    def dump(self, start: int, length: int) -> bytes:
        """Return a copy of *length* bytes beginning at *start*."""
        if length <= 0:
            return b""
        self._check(start)
        self._check(start + length - 1)
        return bytes(self._data[start : start + length])

    # ------------------------------------------------------------------
    # Bulk loading
    # ------------------------------------------------------------------

    def load_font(self) -> None:
        """Write the built-in hex font to 0x000-0x04F."""
        self._data[FONT_START : FONT_START + len(FONT_SET)] = FONT_SET

    def load_program(self, image: bytes) -> None:
        """Copy *image* into memory starting at 0x200.

        Raises:
            ProgramTooLarge: If the image would extend past 0xFFF.  Nothing
                is written in that case.
        """
        size = len(image)
        limit = min(MAX_PROGRAM_SIZE, self._size - PROGRAM_START)
        if size > limit:
            raise ProgramTooLarge(size, limit)
        self._data[PROGRAM_START : PROGRAM_START + size] = bytes(image)

    def clear(self) -> None:
        """Zero all of memory and reload the font."""
        self._data[:] = bytes(self._size)
        self.load_font()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise OutOfBoundsAccess(address)

    def __repr__(self) -> str:
        return f"Memory(size={self._size})"
