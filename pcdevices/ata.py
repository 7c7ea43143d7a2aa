"""ATA/IDE hard disk controller in PIO mode on the primary channel.

Registers: 0x1F0 data, 0x1F1 error/features, 0x1F2 sector count,
0x1F3-0x1F5 LBA bytes, 0x1F6 drive/head, 0x1F7 status/command,
0x3F6 alternate status/device control.
"""

from __future__ import annotations

import logging

from .portbus import PortDevice

log = logging.getLogger(__name__)

SECTOR_SIZE = 512

STATUS_BSY = 0x80
STATUS_DRDY = 0x40
STATUS_DRQ = 0x08
STATUS_ERR = 0x01

ERROR_ABORT = 0x04

CMD_READ_SECTORS = 0x20
CMD_WRITE_SECTORS = 0x30
CMD_IDENTIFY = 0xEC

_MODEL = b"kokoa86 Virtual Disk            "


class AtaDisk(PortDevice):
    """A single PIO-mode disk backed by an in-memory image."""

    def __init__(self) -> None:
        self.data = bytearray()
        self.status = STATUS_DRDY
        self.error = 0
        self.sector_count = 0
        self.lba_low = 0
        self.lba_mid = 0
        self.lba_high = 0
        self.drive_head = 0xA0
        self.device_control = 0
        self.buffer = bytearray()
        self.buffer_pos = 0
        self.buffer_read = True
        self.sectors_remaining = 0
        self.current_lba = 0
        self.irq14_pending = False

    def load_image(self, data: bytes) -> None:
        """Use `data` as the disk image, zero-padded to a whole sector."""
        image = bytearray(data)
        remainder = len(image) % SECTOR_SIZE
        if remainder:
            image.extend(bytes(SECTOR_SIZE - remainder))
        self.data = image

    def has_disk(self) -> bool:
        return bool(self.data)

    def _total_sectors(self) -> int:
        return len(self.data) // SECTOR_SIZE

    def _lba(self) -> int:
        return (
            self.lba_low
            | (self.lba_mid << 8)
            | (self.lba_high << 16)
            | ((self.drive_head & 0x0F) << 24)
        )

    def _requested_count(self) -> int:
        return self.sector_count or 256

    def _abort(self, status: int) -> None:
        self.status = status
        self.error = ERROR_ABORT

    def _execute_command(self, cmd: int) -> None:
        if cmd == CMD_READ_SECTORS:
            lba = self._lba()
            count = self._requested_count()
            if lba + count > self._total_sectors():
                self._abort(STATUS_DRDY | STATUS_ERR)
                return
            self.current_lba = lba
            self.sectors_remaining = count - 1
            self._load_sector(lba)
            self.status = STATUS_DRDY | STATUS_DRQ
            self.irq14_pending = True
        elif cmd == CMD_WRITE_SECTORS:
            count = self._requested_count()
            self.current_lba = self._lba()
            self.sectors_remaining = count - 1
            self.buffer = bytearray(SECTOR_SIZE)
            self.buffer_pos = 0
            self.buffer_read = False
            self.status = STATUS_DRDY | STATUS_DRQ
        elif cmd == CMD_IDENTIFY:
            if not self.has_disk():
                self._abort(STATUS_ERR)
                return
            self.buffer = self._identify_block()
            self.buffer_pos = 0
            self.buffer_read = True
            self.status = STATUS_DRDY | STATUS_DRQ
            self.irq14_pending = True
        else:
            log.warning("ATA: Unknown command 0x%02X", cmd)
            self._abort(STATUS_DRDY | STATUS_ERR)

    def _identify_block(self) -> bytearray:
        block = bytearray(SECTOR_SIZE)
        total = self._total_sectors()

        block[0:2] = (0x0040).to_bytes(2, "little")  # fixed disk
        cylinders = min(total // (16 * 63), 16383)
        block[2:4] = cylinders.to_bytes(2, "little")
        block[6:8] = (16).to_bytes(2, "little")  # heads
        block[12:14] = (63).to_bytes(2, "little")  # sectors per track

        # Model string, words 27-46, byte-swapped within each word.
        for i, byte in enumerate(_MODEL[:40]):
            block[(27 * 2 + i) ^ 1] = byte

        block[98:100] = (0x0200).to_bytes(2, "little")  # LBA supported
        block[120:124] = (total & 0xFFFFFFFF).to_bytes(4, "little")
        return block

    def _load_sector(self, lba: int) -> None:
        offset = lba * SECTOR_SIZE
        if offset + SECTOR_SIZE <= len(self.data):
            self.buffer = bytearray(self.data[offset:offset + SECTOR_SIZE])
        else:
            self.buffer = bytearray(SECTOR_SIZE)
        self.buffer_pos = 0
        self.buffer_read = True

    def _write_sector(self, lba: int) -> None:
        offset = lba * SECTOR_SIZE
        if offset + SECTOR_SIZE <= len(self.data):
            self.data[offset:offset + SECTOR_SIZE] = self.buffer

    def _read_data(self, size: int) -> int:
        if not self.buffer_read or self.buffer_pos >= len(self.buffer):
            return 0
        if size >= 2 and self.buffer_pos + 1 < len(self.buffer):
            word = int.from_bytes(
                self.buffer[self.buffer_pos:self.buffer_pos + 2], "little"
            )
            self.buffer_pos += 2
            if self.buffer_pos >= len(self.buffer):
                if self.sectors_remaining > 0:
                    self.current_lba += 1
                    self.sectors_remaining -= 1
                    self._load_sector(self.current_lba)
                    self.irq14_pending = True
                else:
                    self.status = STATUS_DRDY
            return word
        byte = self.buffer[self.buffer_pos]
        self.buffer_pos += 1
        return byte

    def _write_data(self, size: int, val: int) -> None:
        if self.buffer_read or self.buffer_pos >= len(self.buffer):
            return
        if size >= 2 and self.buffer_pos + 1 < len(self.buffer):
            self.buffer[self.buffer_pos] = val & 0xFF
            self.buffer[self.buffer_pos + 1] = (val >> 8) & 0xFF
            self.buffer_pos += 2
        else:
            self.buffer[self.buffer_pos] = val & 0xFF
            self.buffer_pos += 1

        if self.buffer_pos >= len(self.buffer):
            self._write_sector(self.current_lba)
            if self.sectors_remaining > 0:
                self.current_lba += 1
                self.sectors_remaining -= 1
                self.buffer = bytearray(SECTOR_SIZE)
                self.buffer_pos = 0
            else:
                self.status = STATUS_DRDY
            self.irq14_pending = True

    def port_in(self, port: int, size: int) -> int:
        if port == 0x1F0:
            return self._read_data(size)
        registers = {
            0x1F1: self.error,
            0x1F2: self.sector_count,
            0x1F3: self.lba_low,
            0x1F4: self.lba_mid,
            0x1F5: self.lba_high,
            0x1F6: self.drive_head,
            0x1F7: self.status,
            0x3F6: self.status,
        }
        return registers.get(port, 0xFF)

    def port_out(self, port: int, size: int, val: int) -> None:
        byte = val & 0xFF
        if port == 0x1F0:
            self._write_data(size, val)
        elif port == 0x1F2:
            self.sector_count = byte
        elif port == 0x1F3:
            self.lba_low = byte
        elif port == 0x1F4:
            self.lba_mid = byte
        elif port == 0x1F5:
            self.lba_high = byte
        elif port == 0x1F6:
            self.drive_head = byte
        elif port == 0x1F7:
            self._execute_command(byte)
        elif port == 0x3F6:
            self.device_control = byte

    def port_range(self) -> tuple[int, int]:
        return (0x1F0, 0x1F7)