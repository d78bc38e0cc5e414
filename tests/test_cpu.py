"""Opcode-level tests for the CHIP-8 Interpreter."""

import logging
import random

import pytest

from c8emu.core.errors import OutOfBoundsAccess, StackOverflow, StackUnderflow
from c8emu.core.machine import Chip8Machine
from c8emu.core.types import FONT_GLYPH_BYTES, MachineConfig, MachineState
from tests.helpers import words_to_bytes


def run(machine, steps=1):
    for _ in range(steps):
        machine.step()
    return machine


class TestFlowControl:

    def test_jump(self, load):
        m = run(load(0x1234))
        assert m.registers.pc == 0x234

    def test_call_and_return(self, load):
        m = load(0x2300)
        m.memory[0x300] = 0x00
        m.memory[0x301] = 0xEE
        m.step()
        assert m.registers.pc == 0x300
        assert m.stack.frames() == (0x202,)
        m.step()
        assert m.registers.pc == 0x202
        assert m.stack.depth == 0

    def test_jump_with_v0_offset(self, load):
        m = run(load(0x6010, 0xB300), 2)
        assert m.registers.pc == 0x310

    def test_jump_with_offset_past_memory_faults_on_fetch(self, load):
        m = run(load(0x60FF, 0xBFFF), 2)
        assert m.registers.pc == 0x10FE
        with pytest.raises(OutOfBoundsAccess):
            m.step()
        assert m.state == MachineState.HALTED

    def test_return_with_empty_stack_faults(self, load):
        m = load(0x00EE)
        with pytest.raises(StackUnderflow):
            m.step()
        assert m.halted
        assert isinstance(m.cpu.last_fault, StackUnderflow)

    def test_recursion_overflows_stack(self, load):
        m = load(0x2200)  # calls itself forever
        for _ in range(16):
            m.step()
        with pytest.raises(StackOverflow):
            m.step()
        assert m.state == MachineState.HALTED
        # Halted machines do nothing further.
        assert m.step() is False


class TestSkips:

    @pytest.mark.parametrize("program, expected_pc", [
        ((0x6042, 0x3042), 0x206),  # SE Vx, nn  taken
        ((0x6042, 0x3043), 0x204),  # SE Vx, nn  not taken
        ((0x6042, 0x4043), 0x206),  # SNE Vx, nn taken
        ((0x6042, 0x4042), 0x204),  # SNE Vx, nn not taken
    ])
    def test_immediate_skips(self, load, program, expected_pc):
        m = run(load(*program), 2)
        assert m.registers.pc == expected_pc

    def test_register_equal_skip(self, load):
        m = run(load(0x6007, 0x6107, 0x5010), 3)
        assert m.registers.pc == 0x208

    def test_register_not_equal_skip(self, load):
        m = run(load(0x6007, 0x6108, 0x9010), 3)
        assert m.registers.pc == 0x208

    def test_register_not_equal_no_skip(self, load):
        m = run(load(0x6007, 0x6107, 0x9010), 3)
        assert m.registers.pc == 0x206

    def test_key_pressed_skip(self, load):
        m = load(0x6A0C, 0xEA9E)
        m.set_key(0xC, True)
        run(m, 2)
        assert m.registers.pc == 0x206

    def test_key_pressed_no_skip(self, load):
        m = run(load(0x6A0C, 0xEA9E), 2)
        assert m.registers.pc == 0x204

    def test_key_not_pressed_skip(self, load):
        m = run(load(0x6A0C, 0xEAA1), 2)
        assert m.registers.pc == 0x206

    def test_key_not_pressed_no_skip(self, load):
        m = load(0x6A0C, 0xEAA1)
        m.set_key(0xC, True)
        run(m, 2)
        assert m.registers.pc == 0x204

    def test_key_value_above_0xf_is_never_pressed(self, load):
        m = load(0x6A1C, 0xEA9E)
        m.set_key(0xC, True)
        run(m, 2)
        assert m.registers.pc == 0x204

    def test_key_value_above_0xf_always_skips_not_pressed(self, load):
        m = load(0x6A1C, 0xEAA1)
        m.set_key(0xC, True)
        run(m, 2)
        assert m.registers.pc == 0x206


class TestLoadsAndArithmetic:

    def test_end_to_end_set_then_add(self, load):
        m = run(load(0x6005, 0x7003), 2)
        assert m.registers.get(0) == 8
        assert m.registers.pc == 0x204

    def test_add_immediate_wraps_without_touching_vf(self, load):
        m = run(load(0x6FAA, 0x60FF, 0x7002), 3)
        assert m.registers.get(0) == 0x01
        assert m.registers.get(0xF) == 0xAA

    @pytest.mark.parametrize("op, a, b, expected", [
        (0x0, 0x12, 0x34, 0x34),
        (0x1, 0xF0, 0x0F, 0xFF),
        (0x2, 0xF3, 0x3F, 0x33),
        (0x3, 0xFF, 0x0F, 0xF0),
    ])
    def test_bitwise_ops(self, load, op, a, b, expected):
        m = run(load(0x6000 | a, 0x6100 | b, 0x8010 | op), 3)
        assert m.registers.get(0) == expected

    def test_add_with_carry_exhaustive(self, machine):
        cpu = machine.cpu
        v = machine.registers.v
        for a in range(0, 256, 3):
            for b in range(0, 256, 5):
                v[1], v[2] = a, b
                cpu.execute(0x8124)
                assert v[1] == (a + b) % 256
                assert v[0xF] == (1 if a + b > 255 else 0)

    def test_sub_borrow_semantics(self, machine):
        cpu = machine.cpu
        v = machine.registers.v
        for a in range(0, 256, 7):
            for b in range(0, 256, 11):
                v[1], v[2] = a, b
                cpu.execute(0x8125)
                assert v[1] == (a - b) % 256
                assert v[0xF] == (1 if a > b else 0)

    def test_subn_borrow_semantics(self, machine):
        cpu = machine.cpu
        v = machine.registers.v
        for a in range(0, 256, 7):
            for b in range(0, 256, 11):
                v[1], v[2] = a, b
                cpu.execute(0x8127)
                assert v[1] == (b - a) % 256
                assert v[0xF] == (1 if b > a else 0)

    def test_sub_equal_operands_clears_flag(self, load):
        m = run(load(0x6050, 0x6150, 0x8015), 3)
        assert m.registers.get(0) == 0
        assert m.registers.get(0xF) == 0

    @pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0x81, 0xFF, 0x5A])
    def test_shift_right(self, machine, value):
        v = machine.registers.v
        v[3] = value
        machine.cpu.execute(0x8306)
        assert v[3] == value >> 1
        assert v[0xF] == value & 1

    @pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0x81, 0xFF, 0x5A])
    def test_shift_left(self, machine, value):
        v = machine.registers.v
        v[3] = value
        machine.cpu.execute(0x830E)
        assert v[3] == (value << 1) & 0xFF
        assert v[0xF] == value >> 7

    def test_flag_written_last_when_target_is_vf(self, machine):
        v = machine.registers.v
        v[0xF], v[1] = 0xFF, 0x02
        machine.cpu.execute(0x8F14)
        assert v[0xF] == 1

    def test_set_index(self, load):
        m = run(load(0xA123))
        assert m.registers.index == 0x123

    def test_add_to_index_wraps_at_16_bits(self, machine):
        machine.registers.index = 0xFFFF
        machine.registers.v[2] = 2
        machine.cpu.execute(0xF21E)
        assert machine.registers.index == 0x0001

    def test_random_masked(self, machine):
        machine.cpu.rng = random.Random(7)
        for _ in range(50):
            machine.cpu.execute(0xC50F)
            assert machine.registers.get(5) <= 0x0F
        machine.cpu.execute(0xC500)
        assert machine.registers.get(5) == 0

    def test_random_is_reproducible_from_seed(self, load):
        first = run(load(0xC0FF, 0xC1FF), 2)
        values = (first.registers.get(0), first.registers.get(1))
        expected = random.Random(1234)
        assert values == (expected.randrange(256), expected.randrange(256))


class TestDrawing:

    def test_leftmost_sprite_bit_lands_on_origin_column(self, load):
        m = load(0x603F, 0x6100, 0xA300, 0xD011)
        m.memory[0x300] = 0x80
        run(m, 4)
        assert m.frame_buffer.pixel(63, 0) == 1
        assert m.frame_buffer.lit_count() == 1
        assert m.registers.get(0xF) == 0

    def test_draw_wraps_to_column_zero(self, load):
        m = load(0x603F, 0x6100, 0xA300, 0xD011)
        m.memory[0x300] = 0x40
        run(m, 4)
        assert m.frame_buffer.pixel(0, 0) == 1
        assert m.frame_buffer.lit_count() == 1
        assert m.registers.get(0xF) == 0

    def test_draw_twice_sets_collision_and_erases(self, load):
        m = load(0x6005, 0x6106, 0xA000, 0xD015, 0xD015)
        run(m, 4)
        assert m.frame_buffer.lit_count() > 0
        assert m.registers.get(0xF) == 0
        m.step()
        assert m.registers.get(0xF) == 1
        assert m.frame_buffer.lit_count() == 0

    def test_draw_font_glyph(self, load):
        # LD F, V0 then draw the "0" glyph.
        m = run(load(0x6000, 0xF029, 0xD115), 3)
        fb = m.frame_buffer
        assert m.registers.index == 0
        assert [fb.pixel(x, 0) for x in range(4)] == [1, 1, 1, 1]
        assert [fb.pixel(x, 1) for x in range(4)] == [1, 0, 0, 1]

    def test_draw_marks_dirty(self, load):
        m = load(0xA000, 0xD001)
        m.frame_buffer.consume_dirty()
        run(m, 2)
        assert m.frame_buffer.dirty

    def test_draw_past_memory_faults(self, machine):
        machine.registers.index = 0xFFE
        with pytest.raises(OutOfBoundsAccess):
            machine.cpu.execute(0xD005)

    def test_clear_screen(self, load):
        m = run(load(0xA000, 0xD005, 0x00E0), 3)
        assert not any(m.frame_buffer.snapshot())


class TestTimersAndMemoryOps:

    def test_delay_timer_round_trip(self, load):
        m = run(load(0x6330, 0xF315, 0xF407), 3)
        assert m.timers.delay == 0x30
        assert m.registers.get(4) == 0x30

    def test_sound_timer(self, load):
        m = run(load(0x6303, 0xF318), 2)
        assert m.timers.sound == 3

    def test_font_address(self, machine):
        machine.registers.v[1] = 0xA
        machine.cpu.execute(0xF129)
        assert machine.registers.index == 0xA * FONT_GLYPH_BYTES

    @pytest.mark.parametrize("value, digits", [
        (0, (0, 0, 0)), (7, (0, 0, 7)), (42, (0, 4, 2)), (255, (2, 5, 5)),
        (100, (1, 0, 0)),
    ])
    def test_bcd(self, machine, value, digits):
        machine.registers.v[6] = value
        machine.registers.index = 0x400
        machine.cpu.execute(0xF633)
        assert tuple(machine.memory.dump(0x400, 3)) == digits

    def test_store_registers_inclusive(self, machine):
        v = machine.registers.v
        for i in range(16):
            v[i] = 0x10 + i
        machine.registers.index = 0x500
        machine.cpu.execute(0xF355)
        assert list(machine.memory.dump(0x500, 5)) == [0x10, 0x11, 0x12, 0x13, 0]
        assert machine.registers.index == 0x500

    def test_load_registers_inclusive(self, machine):
        for i, byte in enumerate([9, 8, 7, 6]):
            machine.memory[0x600 + i] = byte
        machine.registers.index = 0x600
        machine.cpu.execute(0xF265)
        assert list(machine.registers.v[:4]) == [9, 8, 7, 0]

    def test_store_past_memory_faults(self, machine):
        machine.registers.index = 0xFFE
        with pytest.raises(OutOfBoundsAccess):
            machine.cpu.execute(0xF255)


class TestWaitForKey:

    def test_wait_blocks_until_key_press(self, load):
        m = load(0xF50A, 0x6101)
        m.step()
        assert m.state == MachineState.WAITING_FOR_KEY
        assert m.step() is False
        assert m.registers.pc == 0x202

        m.set_key(0x9, True)
        assert m.state == MachineState.RUNNING
        assert m.registers.get(5) == 0x9
        assert m.step() is True
        assert m.registers.get(1) == 1

    def test_key_release_does_not_resume(self, load):
        m = run(load(0xF50A))
        m.set_key(0x3, False)
        assert m.state == MachineState.WAITING_FOR_KEY


class TestUnknownOpcodes:

    @pytest.mark.parametrize("opcode", [
        0x0000, 0x0123, 0x5121, 0x8128, 0x812F, 0x9121, 0xE1FF, 0xF1FF,
    ])
    def test_unknown_opcode_is_noop(self, load, opcode):
        m = load(opcode)
        before = list(m.registers.v)
        assert m.step() is True
        assert m.registers.pc == 0x202
        assert list(m.registers.v) == before
        assert m.state == MachineState.RUNNING


class TestTrace:

    def test_trace_logs_disassembly(self, caplog):
        m = Chip8Machine(MachineConfig(trace=True))
        m.load_program(words_to_bytes(0x6005))
        with caplog.at_level(logging.DEBUG, logger="c8emu.core.cpu"):
            m.step()
        assert "LD   V0, 05" in caplog.text
