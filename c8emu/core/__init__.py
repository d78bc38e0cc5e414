# C8EMU machine core
"""
CHIP-8 machine core.  Pure state, no I/O.

Use :class:`~c8emu.core.machine.Chip8Machine` to build a machine and
:class:`~c8emu.core.scheduler.Scheduler` to drive it from host clocks.
"""

from c8emu.core.errors import (
    MachineFault,
    OutOfBoundsAccess,
    ProgramTooLarge,
    StackOverflow,
    StackUnderflow,
)
from c8emu.core.machine import Chip8Machine
from c8emu.core.scheduler import Scheduler
from c8emu.core.types import MachineConfig, MachineState

__all__ = [
    "Chip8Machine",
    "MachineConfig",
    "MachineFault",
    "MachineState",
    "OutOfBoundsAccess",
    "ProgramTooLarge",
    "Scheduler",
    "StackOverflow",
    "StackUnderflow",
]
