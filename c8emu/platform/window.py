"""
Main application window for C8EMU.
Uses pygame to create a display, drive the emulation main loop, and
coordinate audio, video, and input subsystems.

Typical usage::

    from c8emu.platform.window import Window

    machine = MachineFactory.create("game.ch8")
    window = Window(machine, rom_image, scale=10)
    window.run()

The window is the host of both clock signals the machine needs:

* the **frame** signal -- once per loop iteration, throttled to
  ``frame_hz`` by ``pygame.time.Clock``;
* the **timer** signal -- ``timer_hz`` ticks per second of wall time,
  accumulated from ``time.monotonic()`` so it stays at 60 Hz whatever
  the frame rate and whether or not the interpreter is paused.
"""

from __future__ import annotations

import logging
import time

import pygame

from c8emu.core.errors import MachineFault
from c8emu.core.scheduler import Scheduler
from c8emu.platform.audio import ToneDevice
from c8emu.platform.input_handler import InputHandler
from c8emu.shell.frame_renderer import FrameRenderer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE: str = "C8EMU - CHIP-8"

# Minimum / maximum allowed display scale factors.
_MIN_SCALE: int = 1
_MAX_SCALE: int = 30

# Cap on timer ticks caught up in a single frame after a stall.
_MAX_TIMER_CATCHUP: int = 10


class Window:
    """Pygame window that owns the emulation main loop.

    Parameters
    ----------
    machine:
        A :class:`~c8emu.core.machine.Chip8Machine` with a program loaded.
    rom_image:
        The program bytes, reloaded on a reset request.
    scale:
        Integer scale factor applied to the 64 x 32 display.
    enable_audio:
        Set to ``False`` to mute sound output entirely.
    """

    def __init__(
        self,
        machine: object,
        rom_image: bytes,
        scale: int = 10,
        *,
        enable_audio: bool = True,
    ) -> None:
        # ---- basic state -------------------------------------------------
        self._machine = machine
        self._rom_image: bytes = rom_image
        self._scale: int = max(_MIN_SCALE, min(_MAX_SCALE, scale))
        self._running: bool = False
        self._fullscreen: bool = False

        config = machine.config  # type: ignore[attr-defined]
        self._frame_hz: int = config.frame_hz
        self._timer_hz: int = config.timer_hz
        self._scheduler: Scheduler = Scheduler(machine)  # type: ignore[arg-type]

        # ---- extract machine geometry ------------------------------------
        fb = machine.frame_buffer  # type: ignore[attr-defined]
        self._native_width: int = fb.cols
        self._native_height: int = fb.rows

        # ---- init pygame display -----------------------------------------
        if not pygame.get_init():
            pygame.init()

        self._display_width: int = self._native_width * self._scale
        self._display_height: int = self._native_height * self._scale
        self._screen: pygame.Surface = self._open_display()
        pygame.display.set_caption(_WINDOW_TITLE)

        self._clock: pygame.time.Clock = pygame.time.Clock()

        # ---- subsystems --------------------------------------------------
        self._frame_renderer: FrameRenderer = FrameRenderer(machine)
        self._audio: ToneDevice = ToneDevice(enabled=enable_audio)
        self._input: InputHandler = InputHandler(self._scheduler)

        # ---- timing / performance counters -------------------------------
        self._timer_accum: float = 0.0
        self._last_time: float = 0.0
        self._frame_count: int = 0
        self._fps_update_time: float = 0.0
        self._fps_display: float = 0.0

        logger.info(
            "Window: %dx%d native, %dx%d display (scale=%d, %d Hz)",
            self._native_width,
            self._native_height,
            self._display_width,
            self._display_height,
            self._scale,
            self._frame_hz,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def scale(self) -> int:
        return self._scale

    @property
    def fps(self) -> float:
        """The measured frames-per-second (updated once per second)."""
        return self._fps_display

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Enter the main emulation loop.

        This method blocks until the user closes the window or presses
        Escape.  It:

        1. Polls input events and forwards them to the machine.
        2. Runs one frame of instructions through the scheduler.
        3. Ticks the timers at ``timer_hz`` and drives the tone device.
        4. Repaints the display when the framebuffer is dirty.
        5. Throttles to the target frame rate.
        """
        self._running = True
        self._last_time = time.monotonic()
        self._fps_update_time = self._last_time
        self._frame_count = 0

        logger.info("Entering main loop (target %d fps)", self._frame_hz)

        try:
            self._present(self._frame_renderer.render())
            while self._running:
                self._tick()
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self._shutdown()

    # ------------------------------------------------------------------
    # Per-frame tick
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        """Execute one iteration of the main loop."""
        # ---- input -------------------------------------------------------
        self._input.poll()
        if self._input.quit_requested:
            self._running = False
            return
        if self._input.consume_reset_request():
            self._scheduler.reload(self._rom_image)
        if self._input.consume_fullscreen_request():
            self._toggle_fullscreen()

        # ---- emulation ---------------------------------------------------
        try:
            dirty = self._scheduler.run_frame()
        except MachineFault as exc:
            # The machine has halted itself; keep the window up so the
            # last frame stays visible and F1 can restart the program.
            logger.error("Emulation halted: %s", exc)
            dirty = True

        # ---- timers / audio ----------------------------------------------
        now = time.monotonic()
        self._timer_accum += (now - self._last_time) * self._timer_hz
        self._last_time = now
        ticks = min(int(self._timer_accum), _MAX_TIMER_CATCHUP)
        self._timer_accum -= int(self._timer_accum)
        for _ in range(ticks):
            self._audio.update(self._scheduler.tick_timers())

        # ---- video -------------------------------------------------------
        if dirty:
            self._present(self._frame_renderer.render())

        # ---- timing ------------------------------------------------------
        self._clock.tick(self._frame_hz)
        self._update_fps()

    def _present(self, surface: pygame.Surface) -> None:
        """Scale *surface* to the window and flip."""
        try:
            current_size = self._screen.get_size()
            if surface.get_size() != current_size:
                scaled = pygame.transform.scale(surface, current_size)
            else:
                scaled = surface
            self._screen.blit(scaled, (0, 0))
            pygame.display.flip()
        except pygame.error as exc:
            logger.warning("Display update skipped (%s)", exc)

    # ------------------------------------------------------------------
    # Display mode
    # ------------------------------------------------------------------

    def _open_display(self) -> pygame.Surface:
        if self._fullscreen:
            return pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        return pygame.display.set_mode(
            (self._display_width, self._display_height),
            pygame.RESIZABLE,
        )

    def _toggle_fullscreen(self) -> None:
        self._fullscreen = not self._fullscreen
        try:
            self._screen = self._open_display()
        except pygame.error as exc:
            logger.warning("Fullscreen toggle failed (%s)", exc)
            self._fullscreen = not self._fullscreen
            return
        self._present(self._frame_renderer.render())

    # ------------------------------------------------------------------
    # FPS tracking
    # ------------------------------------------------------------------

    def _update_fps(self) -> None:
        """Update the displayed FPS counter roughly once per second."""
        self._frame_count += 1
        now = time.monotonic()
        elapsed = now - self._fps_update_time
        if elapsed >= 1.0:
            self._fps_display = self._frame_count / elapsed
            self._frame_count = 0
            self._fps_update_time = now

            state = self._machine.state.name  # type: ignore[attr-defined]
            turbo = "  TURBO" if self._machine.turbo else ""  # type: ignore[attr-defined]
            pygame.display.set_caption(
                f"{_WINDOW_TITLE}  [{self._fps_display:.1f} fps]  {state}{turbo}"
            )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _shutdown(self) -> None:
        """Clean up all subsystems."""
        logger.info("Shutting down")
        self._audio.shutdown()
        pygame.quit()
