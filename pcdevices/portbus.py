"""I/O port devices and the bus that dispatches port accesses to them."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

log = logging.getLogger(__name__)

PORT_COUNT = 0x10000
UNHANDLED_READ = 0xFF


class PortDevice(ABC):
    """A device that answers reads and writes on a range of I/O ports."""

    @abstractmethod
    def port_in(self, port: int, size: int) -> int:
        """Read `size` bytes from `port`."""

    @abstractmethod
    def port_out(self, port: int, size: int, val: int) -> None:
        """Write `val` (`size` bytes wide) to `port`."""

    @abstractmethod
    def port_range(self) -> tuple[int, int]:
        """Return the inclusive (start, end) range of ports the device owns."""


class PortBus:
    """Routes port accesses to the device registered for each port."""

    def __init__(self) -> None:
        self._devices: list[PortDevice] = []
        self._map: dict[int, PortDevice] = {}

    def register(self, device: PortDevice) -> None:
        """Attach a device; later registrations take over overlapping ports."""
        start, end = device.port_range()
        for port in range(start, end + 1):
            self._map[port & (PORT_COUNT - 1)] = device
        self._devices.append(device)

    def port_in(self, port: int, size: int) -> int:
        device = self._map.get(port & (PORT_COUNT - 1))
        if device is None:
            log.debug("Unhandled port IN: 0x%04X", port)
            return UNHANDLED_READ
        return device.port_in(port, size)

    def port_out(self, port: int, size: int, val: int) -> None:
        device = self._map.get(port & (PORT_COUNT - 1))
        if device is None:
            log.debug("Unhandled port OUT: 0x%04X = 0x%X", port, val)
            return
        device.port_out(port, size, val)