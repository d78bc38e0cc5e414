"""
Frame renderer for C8EMU.
Converts the machine's binary FrameBuffer into an RGB pygame Surface.

The emulation core produces one byte per pixel, 0 (unlit) or 1 (lit).  This
module maps each cell through a two-entry colour table and writes the result
into a pygame Surface suitable for scaling and blitting to the display.

Only the renderer knows about colour: the default is lime on black.
"""

from __future__ import annotations

import logging

import numpy as np
import pygame

logger = logging.getLogger(__name__)

DEFAULT_UNLIT: int = 0x000000
DEFAULT_LIT: int = 0x00FF00


def snapshot_to_rgb(snapshot: bytes, cols: int, rows: int,
                    lut: np.ndarray) -> np.ndarray:
    """Map a row-major cell snapshot to an ``(rows, cols, 3)`` RGB array."""
    cells = np.frombuffer(snapshot, dtype=np.uint8).reshape((rows, cols))
    return lut[cells & 1]


class FrameRenderer:
    """Renders :class:`~c8emu.core.frame_buffer.FrameBuffer` contents.

    Parameters
    ----------
    machine:
        The emulated machine.  Only ``machine.frame_buffer`` is used.
    lit, unlit:
        ``0xRRGGBB`` colours for lit and unlit cells.
    """

    def __init__(self, machine: object, lit: int = DEFAULT_LIT,
                 unlit: int = DEFAULT_UNLIT) -> None:
        self._machine = machine
        fb = machine.frame_buffer  # type: ignore[attr-defined]
        self._cols: int = fb.cols
        self._rows: int = fb.rows

        self._lut: np.ndarray = np.zeros((2, 3), dtype=np.uint8)
        self.set_colours(lit, unlit)

        self._surface: pygame.Surface = pygame.Surface((self._cols, self._rows))

        logger.info("FrameRenderer: %dx%d", self._cols, self._rows)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._cols

    @property
    def height(self) -> int:
        return self._rows

    @property
    def surface(self) -> pygame.Surface:
        """The internal pygame Surface (updated on each :meth:`render` call)."""
        return self._surface

    def render(self) -> pygame.Surface:
        """Render the current frame and return the surface.

        If the blit fails the previous frame is kept and the error is
        logged; the machine state is never touched.
        """
        fb = self._machine.frame_buffer  # type: ignore[attr-defined]
        try:
            rgb = snapshot_to_rgb(fb.snapshot(), self._cols, self._rows, self._lut)
            # pygame surfarray expects (W, H, 3) -- transpose width and height.
            pygame.surfarray.blit_array(self._surface, rgb.transpose(1, 0, 2))
        except (pygame.error, ValueError) as exc:
            logger.warning("FrameRenderer: render skipped (%s)", exc)
        return self._surface

    def set_colours(self, lit: int, unlit: int) -> None:
        """Replace the lit / unlit colours (``0xRRGGBB``)."""
        for row, colour in ((0, unlit), (1, lit)):
            self._lut[row, 0] = (colour >> 16) & 0xFF
            self._lut[row, 1] = (colour >> 8) & 0xFF
            self._lut[row, 2] = colour & 0xFF
