"""C8EMU -- CHIP-8 virtual machine emulator."""

__version__ = "1.0.0"
