"""Intel 8042 PS/2 keyboard controller on ports 0x60 (data) and 0x64 (status/command).

Status bits: 0 output buffer full, 1 input buffer full, 2 system flag,
3 command/data, 4 keyboard enabled, 5-7 error flags.
"""

from __future__ import annotations

import logging
from collections import deque

from .portbus import PortDevice

log = logging.getLogger(__name__)

DATA_PORT = 0x60
COMMAND_PORT = 0x64

STATUS_OBF = 0x01

ACK = 0xFA
BAT_OK = 0xAA
SELF_TEST_OK = 0x55
INTERFACE_TEST_OK = 0x00

CTRL_READ_CONFIG = 0x20
CTRL_WRITE_CONFIG = 0x60
CTRL_DISABLE_PORT2 = 0xA7
CTRL_ENABLE_PORT2 = 0xA8
CTRL_SELF_TEST = 0xAA
CTRL_INTERFACE_TEST = 0xAB
CTRL_DISABLE_KEYBOARD = 0xAD
CTRL_ENABLE_KEYBOARD = 0xAE
CTRL_WRITE_OUTPUT = 0xD1
CTRL_RESET = 0xFE

KBD_RESET = 0xFF
KBD_DISABLE_SCANNING = 0xF5
KBD_ENABLE_SCANNING = 0xF4


class Ps2Controller(PortDevice):
    """Keyboard controller with a scancode queue and a keyboard that ACKs commands."""

    def __init__(self) -> None:
        self.output_buffer: deque[int] = deque()
        self.status = 0x14
        self.config = 0x47
        self.pending_cmd: int | None = None
        self.keyboard_enabled = True
        self.irq1_pending = False

    def _push(self, byte: int) -> None:
        self.output_buffer.append(byte & 0xFF)
        self.status |= STATUS_OBF

    def send_scancode(self, code: int) -> None:
        """Queue a scancode from the keyboard if it is enabled."""
        if not self.keyboard_enabled:
            return
        self._push(code)
        if self.config & 0x01:
            self.irq1_pending = True

    def check_irq1(self) -> bool:
        """Return whether IRQ1 was pending, clearing the flag."""
        pending = self.irq1_pending
        self.irq1_pending = False
        return pending

    def _read_output(self) -> int:
        if not self.output_buffer:
            return 0
        byte = self.output_buffer.popleft()
        if not self.output_buffer:
            self.status &= ~STATUS_OBF & 0xFF
        return byte

    def port_in(self, port: int, size: int) -> int:
        if port == DATA_PORT:
            return self._read_output()
        if port == COMMAND_PORT:
            return self.status
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        val &= 0xFF
        if port == DATA_PORT:
            self._data_write(val)
        elif port == COMMAND_PORT:
            self._controller_command(val)

    def _data_write(self, val: int) -> None:
        if self.pending_cmd is not None:
            cmd, self.pending_cmd = self.pending_cmd, None
            if cmd == CTRL_WRITE_CONFIG:
                self.config = val
            # CTRL_WRITE_OUTPUT: the A20 bit and the rest are ignored.
            return
        # Byte for the keyboard: every command is acknowledged.
        self._push(ACK)
        if val == KBD_RESET:
            self._push(BAT_OK)
        elif val == KBD_DISABLE_SCANNING:
            self.keyboard_enabled = False
        elif val == KBD_ENABLE_SCANNING:
            self.keyboard_enabled = True

    def _controller_command(self, val: int) -> None:
        if val == CTRL_READ_CONFIG:
            self._push(self.config)
        elif val in (CTRL_WRITE_CONFIG, CTRL_WRITE_OUTPUT):
            self.pending_cmd = val
        elif val in (CTRL_DISABLE_PORT2, CTRL_ENABLE_PORT2):
            pass
        elif val == CTRL_SELF_TEST:
            self._push(SELF_TEST_OK)
        elif val == CTRL_INTERFACE_TEST:
            self._push(INTERFACE_TEST_OK)
        elif val == CTRL_DISABLE_KEYBOARD:
            self.keyboard_enabled = False
        elif val == CTRL_ENABLE_KEYBOARD:
            self.keyboard_enabled = True
        elif val == CTRL_RESET:
            log.warning("PS/2: System reset requested")
        else:
            log.debug("PS/2: Unknown controller command: 0x%02X", val)

    def port_range(self) -> tuple[int, int]:
        return (DATA_PORT, COMMAND_PORT)