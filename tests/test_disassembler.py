"""Tests for the CHIP-8 disassembler."""

import pytest

from c8emu.core.disassembler import disassemble, disassemble_program


class TestDisassemble:

    @pytest.mark.parametrize("opcode, text", [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1ABC, "JP   ABC"),
        (0x2300, "CALL 300"),
        (0x3A12, "SE   VA, 12"),
        (0x4B34, "SNE  VB, 34"),
        (0x5120, "SE   V1, V2"),
        (0x6005, "LD   V0, 05"),
        (0x7003, "ADD  V0, 03"),
        (0x8120, "LD   V1, V2"),
        (0x8124, "ADD  V1, V2"),
        (0x8127, "SUBN V1, V2"),
        (0x812E, "SHL  V1, V2"),
        (0x9120, "SNE  V1, V2"),
        (0xA123, "LD   I, 123"),
        (0xB200, "JP   V0, 200"),
        (0xC3FF, "RND  V3, FF"),
        (0xD015, "DRW  V0, V1, 5"),
        (0xE29E, "SKP  V2"),
        (0xE2A1, "SKNP V2"),
        (0xF40A, "LD   V4, K"),
        (0xF51E, "ADD  I, V5"),
        (0xF633, "LD   B, V6"),
        (0xFF65, "LD   VF, [I]"),
    ])
    def test_known_opcodes(self, opcode, text):
        assert disassemble(opcode) == text

    @pytest.mark.parametrize("opcode", [0x0000, 0x0123, 0x5121, 0x8128, 0x9121, 0xE1FF, 0xF1FF])
    def test_unknown_opcodes_are_data_words(self, opcode):
        assert disassemble(opcode) == f"DW   {opcode:04X}"


class TestDisassembleProgram:

    def test_addresses_start_at_origin(self):
        listing = disassemble_program(b"\x60\x05\x70\x03")
        assert listing == [
            (0x200, 0x6005, "LD   V0, 05"),
            (0x202, 0x7003, "ADD  V0, 03"),
        ]

    def test_trailing_odd_byte(self):
        listing = disassemble_program(b"\x00\xE0\x7F", origin=0x300)
        assert listing[-1] == (0x302, 0x7F, "DB   7F")

    def test_limit(self):
        image = bytes([0x00, 0xE0] * 10)
        assert len(disassemble_program(image, limit=3)) == 3

    def test_limit_excludes_trailing_byte(self):
        listing = disassemble_program(b"\x00\xE0\x7F", limit=1)
        assert listing == [(0x200, 0x00E0, "CLS")]

    def test_empty_image(self):
        assert disassemble_program(b"") == []
