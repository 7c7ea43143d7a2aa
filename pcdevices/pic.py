"""Intel 8259 programmable interrupt controller.

A PC has a master at 0x20-0x21 (IRQ 0-7) and a slave at 0xA0-0xA1
(IRQ 8-15) cascaded on the master's IRQ 2.
"""

from __future__ import annotations

from .portbus import PortDevice


def _lowest_bit(value: int) -> int:
    return (value & -value).bit_length() - 1


class Pic8259(PortDevice):
    """One 8259 chip with its ICW initialisation state machine."""

    def __init__(self, base_port: int, is_master: bool) -> None:
        self.base_port = base_port
        self.is_master = is_master
        self.vector_offset = 0x08 if is_master else 0x70
        self.imr = 0xFF
        self.irr = 0
        self.isr = 0
        self.icw_step = 0
        self.icw4_needed = False
        self.auto_eoi = False
        self.read_isr = False

    @staticmethod
    def _bit(irq: int) -> int:
        if not 0 <= irq <= 7:
            raise ValueError(f"IRQ line {irq} is outside 0-7")
        return 1 << irq

    def raise_irq(self, irq: int) -> None:
        self.irr |= self._bit(irq)

    def lower_irq(self, irq: int) -> None:
        self.irr &= ~self._bit(irq) & 0xFF

    def get_interrupt(self) -> int | None:
        """Acknowledge the highest-priority unmasked request and return its vector.

        Returns None if nothing is pending or a higher-priority IRQ is in service.
        """
        pending = self.irr & ~self.imr & 0xFF
        if not pending:
            return None
        irq = _lowest_bit(pending)
        if self.isr & ((1 << irq) - 1):
            return None
        self.irr &= ~(1 << irq) & 0xFF
        self.isr |= 1 << irq
        if self.auto_eoi:
            self.isr &= ~(1 << irq) & 0xFF
        return (self.vector_offset + irq) & 0xFF

    def has_interrupt(self) -> bool:
        return bool(self.irr & ~self.imr & 0xFF)

    def port_in(self, port: int, size: int) -> int:
        offset = port - self.base_port
        if offset == 0:
            return self.isr if self.read_isr else self.irr
        if offset == 1:
            return self.imr
        return 0

    def port_out(self, port: int, size: int, val: int) -> None:
        offset = port - self.base_port
        val &= 0xFF
        if offset == 0:
            self._command(val)
        elif offset == 1:
            self._data(val)

    def _command(self, val: int) -> None:
        if val & 0x10:
            # ICW1
            self.icw_step = 1
            self.icw4_needed = bool(val & 0x01)
            self.imr = 0
            self.isr = 0
            self.irr = 0
            self.auto_eoi = False
        elif val & 0x08:
            # OCW3
            if val & 0x02:
                self.read_isr = bool(val & 0x01)
        else:
            # OCW2
            cmd = (val >> 5) & 0x07
            if cmd == 1:
                if self.isr:
                    self.isr &= ~(1 << _lowest_bit(self.isr)) & 0xFF
            elif cmd == 3:
                self.isr &= ~(1 << (val & 0x07)) & 0xFF

    def _data(self, val: int) -> None:
        if self.icw_step == 1:
            self.vector_offset = val & 0xF8
            self.icw_step = 2
        elif self.icw_step == 2:
            self.icw_step = 3 if self.icw4_needed else 0
        elif self.icw_step == 3:
            self.auto_eoi = bool(val & 0x02)
            self.icw_step = 0
        else:
            self.imr = val

    def port_range(self) -> tuple[int, int]:
        return (self.base_port, self.base_port + 1)