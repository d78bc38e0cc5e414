"""
FrameBuffer -- the monochrome CHIP-8 display.

The display is a grid of ``rows x cols`` cells (32 x 64 by default), each
either lit (1) or unlit (0).  Cells are stored one byte per pixel in
row-major order::

    cells[row * cols + col]

Sprites are composited with XOR.  Sprite coordinates always wrap modulo the
grid size, so no out-of-range cell can be addressed by a draw.  A draw
reports a *collision* when any set sprite bit lands on an already-lit cell;
the interpreter copies that result into VF.

The buffer carries a *dirty* flag that is raised by :meth:`clear` and
:meth:`draw_sprite` and consumed by the scheduler so the renderer only
repaints when something changed.
"""

from __future__ import annotations

from typing import Sequence

from c8emu.core.types import DISPLAY_COLS, DISPLAY_ROWS


class FrameBuffer:
    """Binary pixel grid with an XOR sprite primitive.

    Parameters
    ----------
    cols:
        Horizontal pixel count.  64 for CHIP-8.
    rows:
        Vertical pixel count.  32 for CHIP-8.
    """

    SPRITE_WIDTH: int = 8

    def __init__(self, cols: int = DISPLAY_COLS, rows: int = DISPLAY_ROWS) -> None:
        if cols <= 0:
            raise ValueError(f"cols must be positive, got {cols}")
        if rows <= 0:
            raise ValueError(f"rows must be positive, got {rows}")

        self.cols: int = cols
        self.rows: int = rows

        self._size: int = cols * rows
        self.cells: bytearray = bytearray(self._size)
        self.dirty: bool = False

    @property
    def size(self) -> int:
        """Total number of cells."""
        return self._size

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Turn every cell off."""
        self.cells[:] = bytes(self._size)
        self.dirty = True

    def draw_sprite(self, origin_x: int, origin_y: int,
                    sprite_rows: Sequence[int]) -> bool:
        """XOR an 8-pixel-wide sprite onto the grid.

        Args:
            origin_x: Column of the sprite's left edge (wraps).
            origin_y: Row of the sprite's top edge (wraps).
            sprite_rows: One byte per sprite row, MSB is the leftmost pixel.

        Returns:
            ``True`` if any lit cell was turned off by the draw.
        """
        cols = self.cols
        rows = self.rows
        cells = self.cells
        collision = False

        for row, bits in enumerate(sprite_rows):
            y = (origin_y + row) % rows
            base = y * cols
            for col in range(self.SPRITE_WIDTH):
                if not (bits >> (7 - col)) & 1:
                    continue
                idx = base + (origin_x + col) % cols
                if cells[idx]:
                    collision = True
                cells[idx] ^= 1

        self.dirty = True
        return collision

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def pixel(self, x: int, y: int) -> int:
        """Return the cell at column *x*, row *y*.

        Raises:
            IndexError: If the coordinates are outside the grid.
        """
        if not (0 <= x < self.cols and 0 <= y < self.rows):
            raise IndexError(f"pixel ({x}, {y}) out of range {self.cols}x{self.rows}")
        return self.cells[y * self.cols + x]

    def snapshot(self) -> bytes:
        """Return a read-only copy of all ``rows * cols`` cells."""
        return bytes(self.cells)

    def lit_count(self) -> int:
        return sum(self.cells)

    def consume_dirty(self) -> bool:
        """Return the dirty flag and clear it."""
        dirty = self.dirty
        self.dirty = False
        return dirty

    def __repr__(self) -> str:
        return (
            f"FrameBuffer("
            f"cols={self.cols}, "
            f"rows={self.rows}, "
            f"lit={self.lit_count()})"
        )
