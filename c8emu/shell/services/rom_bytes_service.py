"""
ROM loading and inspection service for C8EMU.

Responsibilities:
  - Read CHIP-8 program images from disk.
  - Reject images that cannot fit between 0x200 and 0xFFF before they reach
    the machine.
  - Summarise an image (size, free space, leading instructions) for the
    ``--info`` command.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import List, Tuple

from c8emu.core.disassembler import disassemble_program
from c8emu.core.errors import ProgramTooLarge
from c8emu.core.types import MAX_PROGRAM_SIZE, PROGRAM_START

# Extensions commonly used for CHIP-8 program images
_EXT_CHIP8: frozenset[str] = frozenset({".ch8", ".c8", ".rom", ".bin"})

_INFO_LISTING_LENGTH: int = 8


@dataclass(frozen=True)
class RomInfo:
    """Metadata describing a CHIP-8 program image."""

    path: str
    size: int
    free_bytes: int
    end_address: int
    sha1: str
    known_extension: bool
    listing: Tuple[Tuple[int, int, str], ...]


class RomBytesService:
    """Static utility for loading program images and inferring metadata."""

    # -- reading -----------------------------------------------------------

    @staticmethod
    def read(path: str) -> bytes:
        """Read a program image from *path*.

        Returns:
            The raw program bytes.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ProgramTooLarge: If the image exceeds the space above 0x200.
            OSError: On general I/O failure.
        """
        with open(path, "rb") as fh:
            data = fh.read()

        RomBytesService.validate(data)
        return data

    @staticmethod
    def validate(data: bytes) -> None:
        """Raise :class:`ProgramTooLarge` if *data* cannot be loaded."""
        if len(data) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)

    # -- inspection --------------------------------------------------------

    @staticmethod
    def inspect(path: str) -> RomInfo:
        """Return :class:`RomInfo` for the image at *path*."""
        with open(path, "rb") as fh:
            data = fh.read()

        listing: List[Tuple[int, int, str]] = disassemble_program(
            data, PROGRAM_START, limit=_INFO_LISTING_LENGTH
        )
        size = len(data)
        return RomInfo(
            path=path,
            size=size,
            free_bytes=MAX_PROGRAM_SIZE - size,
            end_address=PROGRAM_START + size - 1 if size else PROGRAM_START,
            sha1=hashlib.sha1(data).hexdigest(),
            known_extension=os.path.splitext(path)[1].lower() in _EXT_CHIP8,
            listing=tuple(listing),
        )

    @staticmethod
    def describe(path: str) -> dict[str, object]:
        """Return a human-readable metadata dict for the image at *path*."""
        info = RomBytesService.inspect(path)
        result: dict[str, object] = {
            "file": os.path.basename(info.path),
            "size": f"{info.size} bytes",
            "load_range": f"0x{PROGRAM_START:03X}-0x{info.end_address:03X}",
            "free_bytes": info.free_bytes,
            "fits": info.free_bytes >= 0,
            "sha1": info.sha1,
        }
        if not info.known_extension:
            result["note"] = "unrecognised file extension"
        return result
