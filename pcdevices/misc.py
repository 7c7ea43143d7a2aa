"""Small legacy PC port devices touched during firmware start-up."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .portbus import PortDevice

log = logging.getLogger(__name__)


@dataclass
class PostPort(PortDevice):
    """Port 0x80: records the last POST diagnostic code."""

    last_code: int = 0

    def port_in(self, port: int, size: int) -> int:
        return self.last_code

    def port_out(self, port: int, size: int, val: int) -> None:
        self.last_code = val & 0xFF
        log.debug("POST code: 0x%02X", self.last_code)

    def port_range(self) -> tuple[int, int]:
        return (0x80, 0x80)


@dataclass
class SystemControlA(PortDevice):
    """Port 0x92: fast A20 gate (bit 1) and fast reset (bit 0, not stored)."""

    value: int = 0x00

    def a20_enabled(self) -> bool:
        return bool(self.value & 0x02)

    def port_in(self, port: int, size: int) -> int:
        return self.value

    def port_out(self, port: int, size: int, val: int) -> None:
        self.value = val & 0xFE
        if val & 0x01:
            log.warning("System reset requested via port 0x92")

    def port_range(self) -> tuple[int, int]:
        return (0x92, 0x92)


@dataclass
class SystemControlB(PortDevice):
    """Port 0x61: speaker and timer gate; the refresh bit toggles on each read."""

    value: int = 0x00
    refresh_toggle: bool = False

    def port_in(self, port: int, size: int) -> int:
        self.refresh_toggle = not self.refresh_toggle
        if self.refresh_toggle:
            return self.value | 0x10
        return self.value & ~0x10 & 0xFF

    def port_out(self, port: int, size: int, val: int) -> None:
        self.value = val & 0x0F

    def port_range(self) -> tuple[int, int]:
        return (0x61, 0x61)


@dataclass
class DmaStub(PortDevice):
    """8237 DMA controller stub: stores channel and page registers."""

    regs: bytearray = field(default_factory=lambda: bytearray(16))
    page_regs: bytearray = field(default_factory=lambda: bytearray(16))

    def port_in(self, port: int, size: int) -> int:
        if 0x00 <= port <= 0x0F:
            return self.regs[port]
        if 0x81 <= port <= 0x8F:
            return self.page_regs[port - 0x81]
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        if 0x00 <= port <= 0x0F:
            self.regs[port] = val & 0xFF
        elif 0x81 <= port <= 0x8F:
            self.page_regs[port - 0x81] = val & 0xFF

    def port_range(self) -> tuple[int, int]:
        return (0x00, 0x0F)


@dataclass
class DmaPageRegs(PortDevice):
    """DMA page registers on ports 0x81-0x8F."""

    regs: bytearray = field(default_factory=lambda: bytearray(16))

    def port_in(self, port: int, size: int) -> int:
        return self.regs[port - 0x81]

    def port_out(self, port: int, size: int, val: int) -> None:
        self.regs[port - 0x81] = val & 0xFF

    def port_range(self) -> tuple[int, int]:
        return (0x81, 0x8F)


class Dma2Stub(PortDevice):
    """Second DMA controller (0xC0-0xDF): reads zero, ignores writes."""

    def port_in(self, port: int, size: int) -> int:
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        pass

    def port_range(self) -> tuple[int, int]:
        return (0xC0, 0xDF)