"""Shared pytest fixtures for the C8EMU test-suite."""

from __future__ import annotations

from typing import Callable

import pytest

from c8emu.core.machine import Chip8Machine
from c8emu.core.scheduler import Scheduler
from c8emu.core.types import MachineConfig
from tests.helpers import words_to_bytes


@pytest.fixture
def machine() -> Chip8Machine:
    return Chip8Machine(MachineConfig(seed=1234))


@pytest.fixture
def scheduler(machine: Chip8Machine) -> Scheduler:
    return Scheduler(machine)


@pytest.fixture
def load(machine: Chip8Machine) -> Callable[..., Chip8Machine]:
    """Load the given instruction words at 0x200 and return the machine."""

    def _load(*words: int) -> Chip8Machine:
        machine.load_program(words_to_bytes(*words))
        return machine

    return _load
