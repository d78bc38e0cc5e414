"""
Core enumerations, constants and configuration for C8EMU.

Machine geometry
----------------

==================  ===========  ==================================
Item                Value        Notes
==================  ===========  ==================================
Memory              4096 bytes   0x000-0xFFF
Font table          0x000-0x04F  16 glyphs, 5 bytes each
Program origin      0x200        ROM images load here
Registers           16 x 8 bit   V0-VF, VF is the flag register
Call stack          16 frames
Display             64 x 32      one bit per pixel
Keypad              16 keys      0x0-0xF
Timers              60 Hz        delay and sound
==================  ===========  ==================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


MEMORY_SIZE: int = 0x1000
PROGRAM_START: int = 0x200
MAX_PROGRAM_SIZE: int = MEMORY_SIZE - PROGRAM_START

FONT_START: int = 0x000
FONT_GLYPH_BYTES: int = 5

NUM_REGISTERS: int = 16
FLAG_REGISTER: int = 0xF
STACK_CAPACITY: int = 16
NUM_KEYS: int = 16

DISPLAY_COLS: int = 64
DISPLAY_ROWS: int = 32

TIMER_HZ: int = 60
FRAME_HZ: int = 60

DEFAULT_TURBO_SPEED: int = 10
# Turbo speeds at or above this may overrun the rendering budget.
TURBO_WARN_THRESHOLD: int = 40

# fmt: off
FONT_SET: bytes = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
# fmt: on


class MachineState(IntEnum):
    RUNNING = 0
    WAITING_FOR_KEY = 1
    HALTED = 2


@dataclass(frozen=True)
class MachineConfig:
    """Tunable parameters for a :class:`~c8emu.core.machine.Chip8Machine`.

    Attributes
    ----------
    turbo:
        Start with turbo mode enabled.
    turbo_speed:
        Instructions executed per frame while turbo is on.
    timer_hz:
        Rate at which the host should call ``tick_timer``.
    frame_hz:
        Rate at which the host should call ``run_frame``.
    seed:
        Seed for the ``Cxnn`` random source.  ``None`` seeds from the OS.
    trace:
        Log every executed instruction at DEBUG level.
    stack_capacity:
        Maximum call depth.
    """

    turbo: bool = False
    turbo_speed: int = DEFAULT_TURBO_SPEED
    timer_hz: int = TIMER_HZ
    frame_hz: int = FRAME_HZ
    seed: Optional[int] = None
    trace: bool = False
    stack_capacity: int = STACK_CAPACITY

    def __post_init__(self) -> None:
        if self.turbo_speed < 1:
            raise ValueError(f"turbo_speed must be >= 1, got {self.turbo_speed}")
        if self.timer_hz <= 0:
            raise ValueError(f"timer_hz must be positive, got {self.timer_hz}")
        if self.frame_hz <= 0:
            raise ValueError(f"frame_hz must be positive, got {self.frame_hz}")
        if self.stack_capacity < 1:
            raise ValueError(
                f"stack_capacity must be >= 1, got {self.stack_capacity}"
            )
