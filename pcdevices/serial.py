"""8250 UART with a transmit-only data path."""

from __future__ import annotations

import sys

from .portbus import PortDevice

_LSR_THRE_TEMT = 0x60
_IIR_NO_INTERRUPT = 0x01


class Serial8250(PortDevice):
    """A UART that records every transmitted byte and optionally echoes it.

    Register offsets from the base port: 0 THR/RBR, 1 IER, 2 IIR, 3 LCR,
    4 MCR, 5 LSR, 6 MSR, 7 scratch.
    """

    def __init__(self, base_port: int, write_stdout: bool = True) -> None:
        self.base_port = base_port
        self.write_stdout = write_stdout
        self.lsr = _LSR_THRE_TEMT
        self.lcr = 0
        self.ier = 0
        self.mcr = 0
        self.scratch = 0
        self._output = bytearray()

    @classmethod
    def capture(cls, base_port: int) -> Serial8250:
        """Create a UART that only records output, without echoing it."""
        return cls(base_port, write_stdout=False)

    def output(self) -> bytes:
        """Return everything transmitted so far."""
        return bytes(self._output)

    def port_in(self, port: int, size: int) -> int:
        offset = port - self.base_port
        if offset == 1:
            return self.ier
        if offset == 2:
            return _IIR_NO_INTERRUPT
        if offset == 3:
            return self.lcr
        if offset == 4:
            return self.mcr
        if offset == 5:
            return self.lsr
        if offset == 7:
            return self.scratch
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        offset = port - self.base_port
        byte = val & 0xFF
        if offset == 0:
            self._output.append(byte)
            if self.write_stdout:
                self._echo(byte)
        elif offset == 1:
            self.ier = byte
        elif offset == 3:
            self.lcr = byte
        elif offset == 4:
            self.mcr = byte
        elif offset == 7:
            self.scratch = byte

    @staticmethod
    def _echo(byte: int) -> None:
        try:
            stream = getattr(sys.stdout, "buffer", None)
            if stream is not None:
                stream.write(bytes([byte]))
            else:
                sys.stdout.write(chr(byte))
            sys.stdout.flush()
        except (OSError, ValueError):
            pass

    def port_range(self) -> tuple[int, int]:
        return (self.base_port, self.base_port + 7)