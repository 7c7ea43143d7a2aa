"""CMOS RAM and real-time clock (MC146818) on ports 0x70-0x71."""

from __future__ import annotations

from .portbus import PortDevice

_KB = 1024
_MB = 1024 * 1024
_READ_ONLY = frozenset({0x0C, 0x0D})


class Cmos(PortDevice):
    """CMOS register file preset with memory sizes, a fixed clock and boot order."""

    def __init__(self, total_ram_bytes: int) -> None:
        self.index = 0
        self.nmi_disabled = False
        self.data = bytearray(256)

        ram_kb = min(total_ram_bytes // _KB, 640)
        ext_ram_kb = (
            min((total_ram_bytes - _MB) // _KB, 0xFFFF)
            if total_ram_bytes > _MB
            else 0
        )
        above_16m_64k = (
            min((total_ram_bytes - 16 * _MB) // (64 * _KB), 0xFFFF)
            if total_ram_bytes > 16 * _MB
            else 0
        )

        d = self.data
        d[0x0A] = 0x26  # status A: normal update rate
        d[0x0B] = 0x02  # status B: 24-hour mode, BCD
        d[0x0C] = 0x00  # status C: no interrupts pending
        d[0x0D] = 0x80  # status D: battery OK
        d[0x14] = 0x06  # equipment: VGA, no FPU
        d[0x10] = 0x00  # no floppy

        self._set_word(0x15, min(ram_kb, 640))
        self._set_word(0x17, ext_ram_kb)
        self._set_word(0x30, ext_ram_kb)
        self._set_word(0x34, above_16m_64k)
        d[0x5B] = d[0x5C] = d[0x5D] = 0

        d[0x00] = 0x00  # seconds
        d[0x02] = 0x00  # minutes
        d[0x04] = 0x12  # hours
        d[0x06] = 0x01  # day of week
        d[0x07] = 0x01  # day of month
        d[0x08] = 0x01  # month
        d[0x09] = 0x24  # year
        d[0x32] = 0x20  # century
        d[0x3D] = 0x01  # boot from hard disk first

    def _set_word(self, reg: int, value: int) -> None:
        self.data[reg] = value & 0xFF
        self.data[reg + 1] = (value >> 8) & 0xFF

    def port_in(self, port: int, size: int) -> int:
        if port == 0x70:
            return self.index
        if port == 0x71:
            return self.data[self.index]
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        if port == 0x70:
            self.nmi_disabled = bool(val & 0x80)
            self.index = val & 0x7F
        elif port == 0x71 and self.index not in _READ_ONLY:
            self.data[self.index] = val & 0xFF

    def port_range(self) -> tuple[int, int]:
        return (0x70, 0x71)