"""
CHIP-8 disassembler.

Renders 16-bit instructions as conventional assembler mnemonics.  Used by
the interpreter's trace logging, the ``--info`` ROM summary and the
``--debug`` diagnostics in ``main.py``.

==========  ==================
Opcode      Mnemonic
==========  ==================
00E0        CLS
00EE        RET
1nnn        JP   nnn
2nnn        CALL nnn
3xnn        SE   Vx, nn
4xnn        SNE  Vx, nn
5xy0        SE   Vx, Vy
6xnn        LD   Vx, nn
7xnn        ADD  Vx, nn
8xy0-8xyE   LD/OR/AND/XOR/ADD/SUB/SHR/SUBN/SHL
9xy0        SNE  Vx, Vy
Annn        LD   I, nnn
Bnnn        JP   V0, nnn
Cxnn        RND  Vx, nn
Dxyn        DRW  Vx, Vy, n
Ex9E        SKP  Vx
ExA1        SKNP Vx
Fx07-Fx65   timer / index / BCD / block transfer forms
==========  ==================

Anything else disassembles as ``DW xxxx`` (a raw data word).
"""

from __future__ import annotations

from typing import List, Tuple

from c8emu.core.types import PROGRAM_START

_ALU_MNEMONICS: dict[int, str] = {
    0x0: "LD",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

_F_FORMS: dict[int, str] = {
    0x07: "LD   V{x:X}, DT",
    0x0A: "LD   V{x:X}, K",
    0x15: "LD   DT, V{x:X}",
    0x18: "LD   ST, V{x:X}",
    0x1E: "ADD  I, V{x:X}",
    0x29: "LD   F, V{x:X}",
    0x33: "LD   B, V{x:X}",
    0x55: "LD   [I], V{x:X}",
    0x65: "LD   V{x:X}, [I]",
}


def disassemble(opcode: int) -> str:
    """Return the mnemonic form of a single 16-bit *opcode*."""
    opcode &= 0xFFFF
    group = opcode >> 12
    x = (opcode >> 8) & 0xF
    y = (opcode >> 4) & 0xF
    n = opcode & 0xF
    nn = opcode & 0xFF
    nnn = opcode & 0xFFF

    if opcode == 0x00E0:
        return "CLS"
    if opcode == 0x00EE:
        return "RET"
    if group == 0x1:
        return f"JP   {nnn:03X}"
    if group == 0x2:
        return f"CALL {nnn:03X}"
    if group == 0x3:
        return f"SE   V{x:X}, {nn:02X}"
    if group == 0x4:
        return f"SNE  V{x:X}, {nn:02X}"
    if group == 0x5 and n == 0:
        return f"SE   V{x:X}, V{y:X}"
    if group == 0x6:
        return f"LD   V{x:X}, {nn:02X}"
    if group == 0x7:
        return f"ADD  V{x:X}, {nn:02X}"
    if group == 0x8 and n in _ALU_MNEMONICS:
        return f"{_ALU_MNEMONICS[n]:<4} V{x:X}, V{y:X}"
    if group == 0x9 and n == 0:
        return f"SNE  V{x:X}, V{y:X}"
    if group == 0xA:
        return f"LD   I, {nnn:03X}"
    if group == 0xB:
        return f"JP   V0, {nnn:03X}"
    if group == 0xC:
        return f"RND  V{x:X}, {nn:02X}"
    if group == 0xD:
        return f"DRW  V{x:X}, V{y:X}, {n:X}"
    if group == 0xE and nn == 0x9E:
        return f"SKP  V{x:X}"
    if group == 0xE and nn == 0xA1:
        return f"SKNP V{x:X}"
    if group == 0xF and nn in _F_FORMS:
        return _F_FORMS[nn].format(x=x)
    return f"DW   {opcode:04X}"


def disassemble_program(image: bytes, origin: int = PROGRAM_START,
                        limit: int = 0) -> List[Tuple[int, int, str]]:
    """Disassemble a program image two bytes at a time.

    Args:
        image: Raw program bytes.
        origin: Address of ``image[0]``.
        limit: Maximum number of instructions (0 means all).

    Returns:
        ``(address, opcode, text)`` tuples.  A trailing odd byte is
        reported as a ``DB`` entry.
    """
    listing: List[Tuple[int, int, str]] = []
    for offset in range(0, len(image) - 1, 2):
        if limit and len(listing) >= limit:
            return listing
        opcode = (image[offset] << 8) | image[offset + 1]
        listing.append((origin + offset, opcode, disassemble(opcode)))

    if len(image) % 2 and not (limit and len(listing) >= limit):
        last = image[-1]
        listing.append((origin + len(image) - 1, last, f"DB   {last:02X}"))
    return listing
