#!/usr/bin/env python3
"""
C8EMU -- CHIP-8 Emulator

Main entry point.  Parses command-line arguments, creates the emulated
machine from a ROM file, and launches the pygame display window.

Usage examples::

    # Run a ROM
    python main.py roms/pong.ch8

    # Larger window, turbo mode at 20 instructions per frame
    python main.py roms/pong.ch8 --scale 15 --turbo --turbo-speed 20

    # List ROM metadata without launching
    python main.py roms/pong.ch8 --info

    # Run 200 instructions headless and dump the machine state
    python main.py roms/pong.ch8 --debug 200

    # Disable audio
    python main.py roms/pong.ch8 --no-audio
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from c8emu.core.disassembler import disassemble
from c8emu.core.errors import MachineFault
from c8emu.core.machine import Chip8Machine
from c8emu.core.types import DEFAULT_TURBO_SPEED, MachineConfig
from c8emu.shell.services.machine_factory import MachineFactory
from c8emu.shell.services.rom_bytes_service import RomBytesService


# ---------------------------------------------------------------------------
# CLI definition
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    parser = argparse.ArgumentParser(
        prog="c8emu",
        description=(
            "C8EMU -- CHIP-8 Emulator.  "
            "Load a ROM file and play it in a pygame window."
        ),
    )

    parser.add_argument(
        "rom",
        help="Path to the ROM file (.ch8, .c8, .rom, .bin)",
    )

    # Display
    parser.add_argument(
        "--scale", "-s",
        type=int,
        default=10,
        help="Display scale factor (1-30).  Default: 10.",
    )

    # Speed
    parser.add_argument(
        "--turbo",
        action="store_true",
        default=False,
        help="Start in turbo mode (several instructions per frame).",
    )
    parser.add_argument(
        "--turbo-speed",
        type=int,
        default=DEFAULT_TURBO_SPEED,
        metavar="N",
        help=(
            "Instructions per frame in turbo mode (>= 1).  "
            f"Default: {DEFAULT_TURBO_SPEED}."
        ),
    )

    # Audio
    parser.add_argument(
        "--no-audio",
        action="store_true",
        default=False,
        help="Disable audio output.",
    )

    # Determinism
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random-number instruction (Cxnn).",
    )

    # Debugging / info
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print ROM metadata and exit without launching the emulator.",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        default=False,
        help="Log every executed instruction (requires -vv).",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG).",
    )

    parser.add_argument(
        "--debug",
        type=int,
        default=None,
        metavar="STEPS",
        help="Run STEPS instructions without a window, print diagnostics and exit.",
    )

    return parser


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _configure_logging(verbosity: int) -> None:
    """Set up the root logger based on requested verbosity."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---------------------------------------------------------------------------
# Info mode
# ---------------------------------------------------------------------------

def _print_rom_info(rom_path: str) -> None:
    """Print human-readable metadata for a ROM and exit."""
    try:
        info = RomBytesService.describe(rom_path)
        listing = RomBytesService.inspect(rom_path).listing
    except FileNotFoundError:
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        sys.exit(1)
    except OSError as exc:
        print(f"Error reading ROM: {exc}", file=sys.stderr)
        sys.exit(1)

    print("C8EMU ROM Information")
    print("=" * 40)
    for key, value in info.items():
        label = key.replace("_", " ").title()
        print(f"  {label:20s}: {value}")
    print("-" * 40)
    for addr, opcode, text in listing:
        print(f"  {addr:03X}: {opcode:04X}  {text}")
    print("=" * 40)


# ---------------------------------------------------------------------------
# Debug mode
# ---------------------------------------------------------------------------

def _run_debug(machine: Chip8Machine, steps: int) -> int:
    """Run *steps* instructions headless and print diagnostic information."""
    print("=" * 60)
    print("C8EMU Debug Diagnostics")
    print("=" * 60)
    print(f"Machine: {machine}")

    executed = 0
    fault: Optional[MachineFault] = None
    for _ in range(steps):
        pc = machine.registers.pc
        try:
            if not machine.step():
                break
        except MachineFault as exc:
            fault = exc
            break
        # The fetch at pc succeeded, so the word is readable.
        opcode = machine.memory.read_word(pc)
        executed += 1
        print(f"  {pc:03X}: {opcode:04X}  {disassemble(opcode)}")

    snap = machine.get_snapshot()
    print(f"\nExecuted {executed} instruction(s); state={snap['state']}")
    if fault is not None:
        print(f"Fault: {fault}")
    print(f"  PC=${snap['pc']:03X}  I=${snap['i']:03X}  "
          f"DT={snap['delay_timer']}  ST={snap['sound_timer']}")
    regs = snap["v"]
    print("  " + " ".join(f"V{i:X}={regs[i]:02X}" for i in range(8)))
    print("  " + " ".join(f"V{i:X}={regs[i]:02X}" for i in range(8, 16)))
    print(f"  Stack: {[f'{a:03X}' for a in snap['stack']]}")
    if snap["waiting_register"] is not None:
        print(f"  Waiting for key into V{snap['waiting_register']:X}")

    fb = machine.frame_buffer
    print(f"\n  Display: {fb.lit_count()}/{fb.size} lit pixels")
    for y in range(fb.rows):
        row = fb.cells[y * fb.cols : (y + 1) * fb.cols]
        print("  |" + "".join("#" if c else " " for c in row) + "|")

    print("\n" + "=" * 60)
    print("Debug complete.")
    return 1 if fault is not None else 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` to use ``sys.argv``.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger("c8emu.main")

    # Validate the ROM path early.
    rom_path: str = os.path.expanduser(args.rom)
    if not os.path.isfile(rom_path):
        print(f"Error: ROM file not found: {rom_path}", file=sys.stderr)
        return 1

    # Info-only mode.
    if args.info:
        _print_rom_info(rom_path)
        return 0

    # Create the emulated machine.
    try:
        config = MachineConfig(
            turbo=args.turbo,
            turbo_speed=args.turbo_speed,
            seed=args.seed,
            trace=args.trace,
        )
        machine, image = MachineFactory.create_with_image(rom_path, config)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (MachineFault, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.exception("Failed to create machine")
        print(f"Error creating machine: {exc}", file=sys.stderr)
        return 1

    # Debug mode: run a few instructions and print diagnostics.
    if args.debug is not None:
        return _run_debug(machine, args.debug)

    # Imported late so --info / --debug work without a display.
    from c8emu.platform.window import Window

    # Launch the window.
    logger.info("Starting emulation ...")
    try:
        window = Window(
            machine,
            image,
            scale=args.scale,
            enable_audio=not args.no_audio,
        )
        window.run()
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        logger.exception("Fatal error during emulation")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1

    logger.info("Exited cleanly")
    return 0


if __name__ == "__main__":
    sys.exit(main())
