"""
TimerUnit -- the delay and sound countdown timers.

Both timers count down once per call to :meth:`TimerUnit.tick` and stop at
zero.  The host drives ``tick`` from a fixed-rate clock (60 Hz), never from
instruction execution, so timer speed does not depend on turbo mode or on
whether the interpreter is paused.
"""

from __future__ import annotations


class TimerUnit:
    """Delay and sound timers (8-bit each)."""

    def __init__(self) -> None:
        self._delay: int = 0
        self._sound: int = 0

    def reset(self) -> None:
        self._delay = 0
        self._sound = 0

    def tick(self) -> bool:
        """Decrement both timers toward zero.

        Returns:
            ``True`` while the sound timer is still non-zero after the
            decrement (tone on), ``False`` once it has reached zero.
        """
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1
        return self._sound > 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def delay(self) -> int:
        return self._delay

    @delay.setter
    def delay(self, value: int) -> None:
        self._delay = value & 0xFF

    @property
    def sound(self) -> int:
        return self._sound

    @sound.setter
    def sound(self, value: int) -> None:
        self._sound = value & 0xFF

    @property
    def tone_on(self) -> bool:
        return self._sound > 0

    # Interpreter-facing accessors.

    def set_delay(self, value: int) -> None:
        self.delay = value

    def get_delay(self) -> int:
        return self._delay

    def set_sound(self, value: int) -> None:
        self.sound = value

    def __repr__(self) -> str:
        return f"TimerUnit(delay={self._delay}, sound={self._sound})"
