"""Emulated PC peripherals driven through I/O port reads and writes, plus guest RAM."""

__version__ = "0.1.0"