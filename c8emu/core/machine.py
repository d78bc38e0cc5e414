"""
Chip8Machine -- the complete emulated CHIP-8 system.

The machine owns every hardware component and exposes the control surface
used by the host:

* **Memory** -- 4 KB RAM with the font at 0x000.
* **RegisterFile** -- V0-VF, I, PC.
* **CallStack** -- 16 return addresses.
* **FrameBuffer** -- 64 x 32 monochrome display.
* **InputLatch** -- 16-key keypad and wait-for-key slot.
* **TimerUnit** -- delay and sound timers.
* **Interpreter** -- the fetch-decode-execute engine.

The machine never performs I/O.  Rendering, audio and key capture belong to
the platform layer, which reads :attr:`frame_buffer` and the tone flag
returned by :meth:`tick_timer`, and feeds key events to :meth:`set_key`.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from c8emu.core.call_stack import CallStack
from c8emu.core.cpu import Interpreter
from c8emu.core.errors import ProgramTooLarge
from c8emu.core.frame_buffer import FrameBuffer
from c8emu.core.input_state import InputLatch
from c8emu.core.memory import Memory
from c8emu.core.registers import RegisterFile
from c8emu.core.timers import TimerUnit
from c8emu.core.types import MachineConfig, MachineState, TURBO_WARN_THRESHOLD

logger = logging.getLogger(__name__)


class Chip8Machine:
    """A fully-wired CHIP-8 machine.

    Parameters
    ----------
    config:
        Machine parameters.  ``None`` uses :class:`MachineConfig` defaults.
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self, config: Optional[MachineConfig] = None) -> None:
        self.config: MachineConfig = config if config is not None else MachineConfig()

        self.memory: Memory = Memory()
        self.registers: RegisterFile = RegisterFile()
        self.stack: CallStack = CallStack(self.config.stack_capacity)
        self.frame_buffer: FrameBuffer = FrameBuffer()
        self.timers: TimerUnit = TimerUnit()
        self.input_state: InputLatch = InputLatch(self.registers.set)

        self.cpu: Interpreter = Interpreter(
            self.memory,
            self.registers,
            self.stack,
            self.frame_buffer,
            self.input_state,
            self.timers,
            rng=random.Random(self.config.seed),
            trace=self.config.trace,
        )

        self._turbo: bool = self.config.turbo
        self._turbo_speed: int = self.config.turbo_speed
        self.program_size: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to RUNNING with every component reinitialised.

        Safe from any state, including WAITING_FOR_KEY and HALTED; a pending
        key wait is discarded.
        """
        self.memory.clear()
        self.registers.reset()
        self.stack.clear()
        self.frame_buffer.clear()
        self.input_state.clear()
        self.timers.reset()
        self.cpu.reset()
        self._turbo = False
        self.program_size = 0
        logger.info("Machine reset")

    def load_program(self, image: bytes) -> None:
        """Reset, then copy *image* into memory at 0x200.

        Raises:
            ProgramTooLarge: If the image does not fit.  The machine is left
                reset and halted.
        """
        self.reset()
        try:
            self.memory.load_program(image)
        except ProgramTooLarge as exc:
            self.cpu.halted = True
            self.cpu.last_fault = exc
            logger.error("Program rejected: %s", exc)
            raise
        self.program_size = len(image)
        logger.info("Loaded %d-byte program", self.program_size)

    def reload(self, image: bytes) -> None:
        """Load *image* like :meth:`load_program`, then restore the turbo
        mode requested by :attr:`config`."""
        self.load_program(image)
        if self.config.turbo:
            self.set_turbo(True)

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one instruction (see :meth:`Interpreter.step`)."""
        return self.cpu.step()

    def tick_timer(self) -> bool:
        """Advance both timers by one tick; return the tone-on flag."""
        return self.timers.tick()

    def pause(self) -> None:
        """Halt instruction execution.  Timers keep running."""
        if self.cpu.halted:
            return
        self.cpu.pause()
        logger.warning("Emulator paused")

    def resume(self) -> None:
        if not self.cpu.halted:
            return
        self.cpu.resume()
        logger.warning("Emulator resumed")

    def toggle_pause(self) -> None:
        if self.cpu.halted:
            self.resume()
        else:
            self.pause()

    def set_key(self, index: int, pressed: bool) -> None:
        self.input_state.set_key(index, pressed)

    # ------------------------------------------------------------------
    # Turbo
    # ------------------------------------------------------------------

    def set_turbo(self, enabled: bool) -> None:
        self._turbo = bool(enabled)
        logger.info("Turbo mode %s", "ON" if self._turbo else "OFF")

    def toggle_turbo(self) -> None:
        self.set_turbo(not self._turbo)

    def set_turbo_speed(self, speed: int) -> None:
        """Set the number of instructions run per frame in turbo mode.

        Raises:
            ValueError: If *speed* is less than 1.
        """
        if speed < 1:
            raise ValueError(f"turbo speed must be >= 1, got {speed}")
        self._turbo_speed = speed
        if speed >= TURBO_WARN_THRESHOLD:
            logger.warning(
                "Turbo speed %d is very high; rendering may lag", speed
            )

    @property
    def turbo(self) -> bool:
        return self._turbo

    @property
    def turbo_speed(self) -> int:
        return self._turbo_speed

    @property
    def steps_per_frame(self) -> int:
        return self._turbo_speed if self._turbo else 1

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> MachineState:
        return self.cpu.state

    @property
    def halted(self) -> bool:
        return self.cpu.halted

    @property
    def waiting_for_key(self) -> bool:
        return self.input_state.waiting

    def get_snapshot(self) -> Dict[str, Any]:
        """Return a diagnostic summary of the machine state."""
        return {
            "state": self.state.name,
            "pc": self.registers.pc,
            "i": self.registers.index,
            "v": list(self.registers.v),
            "stack": list(self.stack.frames()),
            "delay_timer": self.timers.delay,
            "sound_timer": self.timers.sound,
            "waiting_register": self.input_state.waiting_register,
            "turbo": self._turbo,
            "turbo_speed": self._turbo_speed,
            "instructions": self.cpu.instruction_count,
            "last_fault": str(self.cpu.last_fault) if self.cpu.last_fault else None,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"state={self.state.name}, "
            f"pc=0x{self.registers.pc:03X}, "
            f"program={self.program_size} bytes)"
        )
