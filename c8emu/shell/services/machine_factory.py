"""
Machine creation factory for C8EMU.

Creates fully-configured :class:`~c8emu.core.machine.Chip8Machine`
instances from a ROM file path and optional overrides.

Typical usage::

    machine = MachineFactory.create("game.ch8")
    machine = MachineFactory.create("game.ch8", turbo=True, turbo_speed=20)
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Optional, Tuple

from c8emu.core.machine import Chip8Machine
from c8emu.core.types import MachineConfig
from c8emu.shell.services.rom_bytes_service import RomBytesService

logger = logging.getLogger(__name__)


class MachineFactory:
    """Create an emulated CHIP-8 machine from a ROM file."""

    @staticmethod
    def create(
        rom_path: str,
        config: Optional[MachineConfig] = None,
        *,
        turbo: Optional[bool] = None,
        turbo_speed: Optional[int] = None,
        seed: Optional[int] = None,
        trace: Optional[bool] = None,
    ) -> Chip8Machine:
        """Build a machine and load the program at *rom_path*.

        Parameters
        ----------
        rom_path:
            Filesystem path to the program image.
        config:
            Base configuration.  ``None`` uses :class:`MachineConfig`
            defaults.
        turbo, turbo_speed, seed, trace:
            Per-field overrides applied on top of *config* when not
            ``None``.

        Raises
        ------
        FileNotFoundError
            If *rom_path* does not exist.
        ProgramTooLarge
            If the image does not fit in memory.
        ValueError
            If an override is out of range (e.g. ``turbo_speed < 1``).
        """
        machine, _ = MachineFactory.create_with_image(
            rom_path, config,
            turbo=turbo, turbo_speed=turbo_speed, seed=seed, trace=trace,
        )
        return machine

    @staticmethod
    def create_with_image(
        rom_path: str,
        config: Optional[MachineConfig] = None,
        *,
        turbo: Optional[bool] = None,
        turbo_speed: Optional[int] = None,
        seed: Optional[int] = None,
        trace: Optional[bool] = None,
    ) -> Tuple[Chip8Machine, bytes]:
        """Like :meth:`create`, but also return the image bytes so the
        caller can reload the program after a reset."""
        if not os.path.isfile(rom_path):
            raise FileNotFoundError(f"ROM file not found: {rom_path}")

        config = MachineFactory._resolve_config(
            config, turbo=turbo, turbo_speed=turbo_speed, seed=seed, trace=trace
        )
        image = RomBytesService.read(rom_path)

        machine = Chip8Machine(config)
        machine.reload(image)

        logger.info(
            "Created %s from %s (%d bytes, turbo=%s x%d)",
            type(machine).__name__,
            os.path.basename(rom_path),
            len(image),
            config.turbo,
            config.turbo_speed,
        )
        return machine, image

    @staticmethod
    def _resolve_config(
        config: Optional[MachineConfig],
        **overrides: object,
    ) -> MachineConfig:
        base = config if config is not None else MachineConfig()
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return base
        return replace(base, **changes)
