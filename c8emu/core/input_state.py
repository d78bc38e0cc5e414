"""
InputLatch - the 16-key hexadecimal keypad and the wait-for-key request.

Key indices run 0x0-0xF.  Host code writes key events through
:meth:`InputLatch.set_key`; the interpreter samples them through
:meth:`InputLatch.is_pressed` (``Ex9E`` / ``ExA1``) and arms a wait through
:meth:`InputLatch.request_key` (``Fx0A``).

While a wait is pending the interpreter executes nothing.  The next key
*press* resolves it: the key index is written into the waiting register
(through the ``write_register`` callable supplied by the machine) and the
pending state clears.  Key releases never resolve a wait.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from c8emu.core.types import NUM_KEYS

logger = logging.getLogger(__name__)


class InputLatch:
    """Keypad state with a single pending wait-for-key slot.

    Parameters
    ----------
    write_register:
        Called as ``write_register(register_index, key_index)`` when a key
        press resolves a pending wait.  ``None`` leaves register writes to
        the caller, which still receives the register index from
        :meth:`set_key`.
    """

    def __init__(self, write_register: Optional[Callable[[int, int], None]] = None) -> None:
        self._write_register = write_register
        self._keys: List[bool] = [False] * NUM_KEYS
        self._waiting_register: Optional[int] = None

    # ------------------------------------------------------------------
    # Host-side input event injection
    # ------------------------------------------------------------------

    def set_key(self, index: int, pressed: bool) -> Optional[int]:
        """Record a key press or release.

        Parameters
        ----------
        index : int
            Logical key 0x0-0xF.  Out-of-range values are ignored.
        pressed : bool
            ``True`` for key-down, ``False`` for key-up.

        Returns
        -------
        int or None
            The register index a pending wait was resolved into, else
            ``None``.
        """
        if index < 0 or index >= NUM_KEYS:
            return None

        self._keys[index] = pressed

        if not pressed or self._waiting_register is None:
            return None

        register = self._waiting_register
        self._waiting_register = None
        if self._write_register is not None:
            self._write_register(register, index)
        logger.debug("Key 0x%X resolved wait into V%X", index, register)
        return register

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def is_pressed(self, index: int) -> bool:
        if index < 0 or index >= NUM_KEYS:
            return False
        return self._keys[index]

    def pressed_keys(self) -> List[int]:
        return [i for i, down in enumerate(self._keys) if down]

    # ------------------------------------------------------------------
    # Wait-for-key
    # ------------------------------------------------------------------

    def request_key(self, register_index: int) -> None:
        """Arm a wait; the next key press is written into *register_index*."""
        self._waiting_register = register_index

    def cancel_wait(self) -> None:
        self._waiting_register = None

    @property
    def waiting(self) -> bool:
        return self._waiting_register is not None

    @property
    def waiting_register(self) -> Optional[int]:
        return self._waiting_register

    # ------------------------------------------------------------------
    # Bulk clear
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Release every key and drop any pending wait."""
        for i in range(NUM_KEYS):
            self._keys[i] = False
        self._waiting_register = None
