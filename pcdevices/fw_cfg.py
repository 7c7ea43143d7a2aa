"""Firmware configuration device: selector on port 0x510, data on 0x511."""

from __future__ import annotations

import logging
import struct

from .portbus import PortDevice

log = logging.getLogger(__name__)

SELECTOR_PORT = 0x510
DATA_PORT = 0x511

KEY_ID = 0x0001
KEY_UUID = 0x0003
KEY_NUMA = 0x0005
KEY_FILE_DIR = 0x0019
KEY_RAM_SIZE = 0x8003
KEY_E820 = 0x8004
KEY_RESERVED_MEMORY_END = 0x8005

E820_RAM = 1
LOW_MEMORY_SIZE = 0x9FC00
HIGH_MEMORY_BASE = 0x100000

_NAME_FIELD = 56


def _e820_entry(address: int, size: int, kind: int) -> bytes:
    return struct.pack("<QQI", address, size, kind)


def _dir_entry(size: int, key: int, name: str) -> bytes:
    encoded = name.encode("ascii").ljust(_NAME_FIELD, b"\x00")
    return struct.pack(">IHH", size, key, 0) + encoded


class FwCfg(PortDevice):
    """Serves RAM size, an e820 map and a file directory to the firmware."""

    def __init__(self, ram_size: int) -> None:
        self.selector = 0
        self.offset = 0
        self.entries: dict[int, bytes] = {}
        self._populate(ram_size)

    def _populate(self, ram_size: int) -> None:
        # No signature entry is provided, so firmware falls back to CMOS for RAM size.
        self.entries[KEY_ID] = bytes([0x01, 0x00, 0x00, 0x00])
        self.entries[KEY_UUID] = bytes(16)
        self.entries[KEY_NUMA] = struct.pack("<Q", 8)

        ram_data = struct.pack("<Q", ram_size)
        self.entries[KEY_RAM_SIZE] = ram_data

        e820 = _e820_entry(0, LOW_MEMORY_SIZE, E820_RAM)
        if ram_size > HIGH_MEMORY_BASE:
            e820 += _e820_entry(HIGH_MEMORY_BASE, ram_size - HIGH_MEMORY_BASE, E820_RAM)
        self.entries[KEY_E820] = e820

        reserved_end = struct.pack("<Q", ram_size)
        self.entries[KEY_RESERVED_MEMORY_END] = reserved_end

        files = [
            _dir_entry(len(e820), KEY_E820, "etc/e820"),
            _dir_entry(len(ram_data), KEY_RAM_SIZE, "etc/ram_size"),
            _dir_entry(len(reserved_end), KEY_RESERVED_MEMORY_END, "etc/reserved-memory-end"),
        ]
        self.entries[KEY_FILE_DIR] = struct.pack(">I", len(files)) + b"".join(files)

    def _current(self) -> bytes:
        return self.entries.get(self.selector, b"")

    def port_in(self, port: int, size: int) -> int:
        if port == SELECTOR_PORT:
            return self.selector
        if port == DATA_PORT:
            data = self._current()
            if self.offset < len(data):
                value = data[self.offset]
                self.offset += 1
                return value
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        if port == SELECTOR_PORT:
            self.selector = val & 0xFFFF
            self.offset = 0
            log.debug(
                "fw_cfg: SELECT key=0x%04X data_len=%d", self.selector, len(self._current())
            )

    def port_range(self) -> tuple[int, int]:
        return (SELECTOR_PORT, DATA_PORT)