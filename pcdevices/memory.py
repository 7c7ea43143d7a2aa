"""Guest RAM and the memory bus in front of it."""

from __future__ import annotations

ADDR_MASK = 0xFFFFFFFF


class Ram:
    """A flat block of little-endian guest memory."""

    def __init__(self, size: int) -> None:
        self._data = bytearray(size)

    def _check(self, addr: int, width: int) -> None:
        if addr < 0 or addr + width > len(self._data):
            raise IndexError(
                f"RAM access of {width} byte(s) at 0x{addr:X} is out of range"
            )

    def load(self, offset: int, data: bytes) -> None:
        """Copy `data` into RAM at `offset`."""
        self._check(offset, len(data))
        self._data[offset:offset + len(data)] = data

    def size(self) -> int:
        return len(self._data)

    def _read(self, addr: int, width: int) -> int:
        self._check(addr, width)
        return int.from_bytes(self._data[addr:addr + width], "little")

    def _write(self, addr: int, width: int, val: int) -> None:
        self._check(addr, width)
        mask = (1 << (8 * width)) - 1
        self._data[addr:addr + width] = (val & mask).to_bytes(width, "little")

    def read_u8(self, addr: int) -> int:
        return self._read(addr, 1)

    def read_u16(self, addr: int) -> int:
        return self._read(addr, 2)

    def read_u32(self, addr: int) -> int:
        return self._read(addr, 4)

    def write_u8(self, addr: int, val: int) -> None:
        self._write(addr, 1, val)

    def write_u16(self, addr: int, val: int) -> None:
        self._write(addr, 2, val)

    def write_u32(self, addr: int, val: int) -> None:
        self._write(addr, 4, val)


class MemoryBus:
    """Guest physical address space backed by RAM.

    Reads beyond RAM return 0xFF bytes; writes beyond RAM are dropped.
    """

    def __init__(self, ram_size: int) -> None:
        self.ram = Ram(ram_size)

    def load(self, offset: int, data: bytes) -> None:
        self.ram.load(offset, data)

    def map_rom(self, base: int, data: bytes) -> None:
        """Copy a ROM image into RAM at `base` if it fits; otherwise ignore it.

        The image stays writable so firmware can shadow itself.
        """
        if base + len(data) <= self.ram.size():
            self.ram.load(base, data)

    def read_bytes(self, addr: int, length: int) -> bytes:
        """Read `length` bytes starting at `addr`, wrapping at 4 GiB."""
        return bytes(self.read_u8((addr + i) & ADDR_MASK) for i in range(length))

    def _wide_read(self, addr: int, width: int) -> int:
        addr &= ADDR_MASK
        if addr + width - 1 < self.ram.size():
            return self.ram._read(addr, width)
        return int.from_bytes(self.read_bytes(addr, width), "little")

    def read_u8(self, addr: int) -> int:
        addr &= ADDR_MASK
        if addr < self.ram.size():
            return self.ram.read_u8(addr)
        return 0xFF

    def read_u16(self, addr: int) -> int:
        return self._wide_read(addr, 2)

    def read_u32(self, addr: int) -> int:
        return self._wide_read(addr, 4)

    def _wide_write(self, addr: int, width: int, val: int) -> None:
        addr &= ADDR_MASK
        if addr + width - 1 < self.ram.size():
            self.ram._write(addr, width, val)

    def write_u8(self, addr: int, val: int) -> None:
        self._wide_write(addr, 1, val)

    def write_u16(self, addr: int, val: int) -> None:
        self._wide_write(addr, 2, val)

    def write_u32(self, addr: int, val: int) -> None:
        self._wide_write(addr, 4, val)