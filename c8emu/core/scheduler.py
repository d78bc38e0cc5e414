"""
Scheduler -- turns two external clock signals into machine activity.

The host calls:

* :meth:`Scheduler.run_frame` once per display frame.  It runs the
  interpreter once, or ``turbo_speed`` times in turbo mode, and reports
  whether the display needs repainting.
* :meth:`Scheduler.tick_timers` once per 60 Hz timer tick.  It ticks the
  timer unit exactly once, independent of how many instructions ran, and
  reports whether the tone should be audible.

The scheduler never owns a clock.  Both calls take the same lock, as do the
host-side mutations it forwards (key events, pause, turbo, reset and
reload), so a host may drive them from different threads.
"""

from __future__ import annotations

import threading

from c8emu.core.machine import Chip8Machine
from c8emu.core.types import MachineState


class Scheduler:
    """Drive a :class:`Chip8Machine` from frame and timer signals."""

    def __init__(self, machine: Chip8Machine) -> None:
        self.machine = machine
        self._lock = threading.Lock()
        self.frames: int = 0
        self.timer_ticks: int = 0

    def run_frame(self) -> bool:
        """Run one frame's worth of instructions.

        Stops early once the machine leaves RUNNING (key wait, pause or
        fault).  Faults propagate after the machine has halted.

        Returns:
            ``True`` if the framebuffer changed since the last frame.
        """
        machine = self.machine
        with self._lock:
            self.frames += 1
            for _ in range(machine.steps_per_frame):
                if machine.state != MachineState.RUNNING:
                    break
                machine.step()
            return machine.frame_buffer.consume_dirty()

    def tick_timers(self) -> bool:
        """Tick the timer unit once; return the tone-on flag."""
        with self._lock:
            self.timer_ticks += 1
            return self.machine.tick_timer()

    # ------------------------------------------------------------------
    # Host-side mutations
    # ------------------------------------------------------------------

    def set_key(self, index: int, pressed: bool) -> None:
        """Forward a key event; a press may resolve a pending key wait."""
        with self._lock:
            self.machine.set_key(index, pressed)

    def toggle_pause(self) -> None:
        with self._lock:
            self.machine.toggle_pause()

    def toggle_turbo(self) -> None:
        with self._lock:
            self.machine.toggle_turbo()

    def reset(self) -> None:
        with self._lock:
            self.machine.reset()

    def reload(self, image: bytes) -> None:
        """Reload *image* (see :meth:`Chip8Machine.reload`)."""
        with self._lock:
            self.machine.reload(image)
