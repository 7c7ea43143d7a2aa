"""PCI configuration space accessed through ports 0xCF8 (address) and 0xCFC-0xCFF (data).

CONFIG_ADDRESS layout: bit 31 enable, bits 23:16 bus, bits 15:11 device,
bits 10:8 function, bits 7:2 register.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .portbus import PortDevice

CONFIG_SPACE_SIZE = 256
CONFIG_ADDRESS_PORT = 0xCF8
CONFIG_DATA_FIRST = 0xCFC
CONFIG_DATA_LAST = 0xCFF

_HEADER_TYPE_OFFSET = 0x0E
_READ_ONLY_OFFSETS = (
    0x00, 0x01,              # vendor ID
    0x02, 0x03,              # device ID
    0x06, 0x07,              # status
    0x08,                    # revision
    0x09, 0x0A, 0x0B,        # class code
    0x0E,                    # header type
    *range(0x10, 0x28),      # BARs: none present
)


def _default_writemask() -> bytearray:
    mask = bytearray(b"\xFF" * CONFIG_SPACE_SIZE)
    for offset in _READ_ONLY_OFFSETS:
        mask[offset] = 0
    return mask


@dataclass
class _PciFunction:
    bus: int
    device: int
    function: int
    config: bytearray
    writemask: bytearray = field(default_factory=_default_writemask)

    def read(self, addr: int, width: int) -> int | None:
        if addr + width > CONFIG_SPACE_SIZE:
            return None
        return int.from_bytes(self.config[addr:addr + width], "little")

    def write(self, addr: int, width: int, val: int) -> None:
        for i, byte in enumerate((val & ((1 << (8 * width)) - 1)).to_bytes(width, "little")):
            pos = addr + i
            if pos < CONFIG_SPACE_SIZE:
                mask = self.writemask[pos]
                self.config[pos] = (self.config[pos] & ~mask & 0xFF) | (byte & mask)


class PciBus(PortDevice):
    """Configuration mechanism #1 over a list of registered PCI functions."""

    def __init__(self) -> None:
        self.config_address = 0
        self._functions: list[_PciFunction] = []

    def register_device(self, bus: int, device: int, function: int, config: bytes) -> None:
        """Add a function with a 256-byte configuration space."""
        if len(config) != CONFIG_SPACE_SIZE:
            raise ValueError(
                f"PCI config space must be {CONFIG_SPACE_SIZE} bytes, got {len(config)}"
            )
        self._functions.append(_PciFunction(bus, device, function, bytearray(config)))

    @classmethod
    def with_default_devices(cls) -> PciBus:
        """Create a bus with an i440FX host bridge at 0:0:0 and a PIIX3 ISA bridge at 0:1:0."""
        pci = cls()

        host = bytearray(CONFIG_SPACE_SIZE)
        host[0x00:0x02] = (0x8086).to_bytes(2, "little")  # vendor: Intel
        host[0x02:0x04] = (0x1237).to_bytes(2, "little")  # device: i440FX
        host[0x04:0x06] = (0x0006).to_bytes(2, "little")  # command: mem + io
        host[0x08] = 0x02                                 # revision
        host[0x0A] = 0x00                                 # subclass: host bridge
        host[0x0B] = 0x06                                 # class: bridge
        host[0x0E] = 0x00                                 # header type 0
        host[0x59:0x60] = b"\x33" * 7                     # PAM: read/write everywhere
        pci.register_device(0, 0, 0, host)

        isa = bytearray(CONFIG_SPACE_SIZE)
        isa[0x00:0x02] = (0x8086).to_bytes(2, "little")
        isa[0x02:0x04] = (0x7000).to_bytes(2, "little")   # device: PIIX3
        isa[0x04:0x06] = (0x0007).to_bytes(2, "little")
        isa[0x0A] = 0x01                                  # subclass: ISA bridge
        isa[0x0B] = 0x06
        isa[0x0E] = 0x00
        pci.register_device(0, 1, 0, isa)

        return pci

    def _decode_address(self) -> tuple[bool, int, int, int, int]:
        addr = self.config_address
        return (
            bool(addr & 0x8000_0000),
            (addr >> 16) & 0xFF,
            (addr >> 11) & 0x1F,
            (addr >> 8) & 0x07,
            addr & 0xFC,
        )

    def _find(self, bus: int, device: int, function: int) -> _PciFunction | None:
        return next(
            (
                f for f in self._functions
                if (f.bus, f.device, f.function) == (bus, device, function)
            ),
            None,
        )

    @staticmethod
    def _empty_slot_read(start: int, width: int) -> int:
        # An absent function reads as all ones, except header type 0 so
        # enumeration does not probe further functions of an empty slot.
        data = bytes(
            0x00 if start + k == _HEADER_TYPE_OFFSET else 0xFF for k in range(width)
        )
        return int.from_bytes(data, "little")

    def port_in(self, port: int, size: int) -> int:
        if port == CONFIG_ADDRESS_PORT:
            return self.config_address
        if not CONFIG_DATA_FIRST <= port <= CONFIG_DATA_LAST:
            return 0xFFFF_FFFF

        enable, bus, device, function, register = self._decode_address()
        if not enable:
            return 0xFFFF_FFFF

        byte_offset = port - CONFIG_DATA_FIRST
        if size == 1:
            start, width = register + byte_offset, 1
        elif size == 2:
            start, width = register + byte_offset, 2
        else:
            start, width = register, 4

        target = self._find(bus, device, function)
        if target is None:
            return self._empty_slot_read(start, width)
        value = target.read(start, width)
        if value is None:
            return (1 << (8 * width)) - 1
        return value

    def port_out(self, port: int, size: int, val: int) -> None:
        if port == CONFIG_ADDRESS_PORT:
            self.config_address = val & 0xFFFF_FFFF
            return
        if not CONFIG_DATA_FIRST <= port <= CONFIG_DATA_LAST:
            return

        enable, bus, device, function, register = self._decode_address()
        if not enable:
            return
        target = self._find(bus, device, function)
        if target is None:
            return

        byte_offset = port - CONFIG_DATA_FIRST
        if size == 1:
            target.write(register + byte_offset, 1, val)
        elif size == 2:
            target.write(register + byte_offset, 2, val)
        else:
            target.write(register, 4, val)

    def port_range(self) -> tuple[int, int]:
        return (CONFIG_ADDRESS_PORT, CONFIG_DATA_LAST)