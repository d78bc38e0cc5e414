"""
Input handler for C8EMU.
Maps keyboard keys to the 16-key CHIP-8 keypad and to emulator hotkeys.

Keypad layout
-------------

The CHIP-8 keypad is a 4x4 grid.  It is mapped onto the left-hand block
of a QWERTY keyboard so that each physical key produces the hex digit
printed at the same grid position::

    CHIP-8 keypad      Keyboard
    1 2 3 C            1 2 3 4
    4 5 6 D            Q W E R
    7 8 9 E            A S D F
    A 0 B F            Z X C V

Hotkeys
-------

===================  ============================
Key                  Action
===================  ============================
Escape               Quit
F1                   Reset (reloads the ROM)
P                    Pause / resume
T                    Turbo on / off
F11                  Fullscreen toggle
===================  ============================
"""

from __future__ import annotations

import logging

import pygame

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Physical key -> CHIP-8 key index
# ---------------------------------------------------------------------------

KEY_LAYOUT: dict[str, int] = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}

_KEY_MAP: dict[int, int] = {
    pygame.K_1: KEY_LAYOUT["1"],
    pygame.K_2: KEY_LAYOUT["2"],
    pygame.K_3: KEY_LAYOUT["3"],
    pygame.K_4: KEY_LAYOUT["4"],
    pygame.K_q: KEY_LAYOUT["q"],
    pygame.K_w: KEY_LAYOUT["w"],
    pygame.K_e: KEY_LAYOUT["e"],
    pygame.K_r: KEY_LAYOUT["r"],
    pygame.K_a: KEY_LAYOUT["a"],
    pygame.K_s: KEY_LAYOUT["s"],
    pygame.K_d: KEY_LAYOUT["d"],
    pygame.K_f: KEY_LAYOUT["f"],
    pygame.K_z: KEY_LAYOUT["z"],
    pygame.K_x: KEY_LAYOUT["x"],
    pygame.K_c: KEY_LAYOUT["c"],
    pygame.K_v: KEY_LAYOUT["v"],
}


class InputHandler:
    """Translates pygame keyboard events into keypad and control actions.

    Parameters
    ----------
    machine:
        The emulated machine, or the :class:`~c8emu.core.scheduler.Scheduler`
        driving it so events share its lock.  Expected interface:

        * ``set_key(index: int, pressed: bool)``
        * ``toggle_pause()``
        * ``toggle_turbo()``

    Reset and fullscreen are reported through :meth:`consume_reset_request`
    and :meth:`consume_fullscreen_request` because they need the window (to reload
    the ROM or to recreate the display).
    """

    def __init__(self, machine: object) -> None:
        self._machine = machine
        self._quit_requested: bool = False
        self._reset_requested: bool = False
        self._fullscreen_requested: bool = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def quit_requested(self) -> bool:
        """``True`` if the user pressed Escape or closed the window."""
        return self._quit_requested

    def consume_reset_request(self) -> bool:
        requested = self._reset_requested
        self._reset_requested = False
        return requested

    def consume_fullscreen_request(self) -> bool:
        requested = self._fullscreen_requested
        self._fullscreen_requested = False
        return requested

    def poll(self) -> None:
        """Pump the pygame event queue and process all pending events.

        This should be called once at the top of each frame.
        """
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event: pygame.event.Event) -> None:
        """Process a single pygame event."""
        if event.type == pygame.QUIT:
            self._quit_requested = True
            return

        if event.type == pygame.KEYDOWN:
            self._on_key_down(event)
        elif event.type == pygame.KEYUP:
            self._on_key_up(event)
        elif event.type == pygame.WINDOWFOCUSLOST:
            self.clear_all()

    def clear_all(self) -> None:
        """Release every keypad key."""
        for index in _KEY_MAP.values():
            self._machine.set_key(index, False)

    # ------------------------------------------------------------------
    # Keyboard handlers
    # ------------------------------------------------------------------

    def _on_key_down(self, event: pygame.event.Event) -> None:
        key = event.key

        if key == pygame.K_ESCAPE:
            self._quit_requested = True
            return
        if key == pygame.K_F1:
            self._reset_requested = True
            return
        if key == pygame.K_F11:
            self._fullscreen_requested = True
            return
        if key == pygame.K_p:
            self._machine.toggle_pause()
            return
        if key == pygame.K_t:
            self._machine.toggle_turbo()
            return

        index = _KEY_MAP.get(key)
        if index is not None:
            self._machine.set_key(index, True)

    def _on_key_up(self, event: pygame.event.Event) -> None:
        index = _KEY_MAP.get(event.key)
        if index is not None:
            self._machine.set_key(index, False)
