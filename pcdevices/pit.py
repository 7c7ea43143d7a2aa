"""Intel 8253/8254 programmable interval timer on ports 0x40-0x43.

Channel 0 drives IRQ0, channel 1 is the legacy DRAM refresh timer and
channel 2 feeds the PC speaker. The input clock runs at 1,193,182 Hz.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .portbus import PortDevice

PIT_FREQUENCY = 1_193_182

CHANNEL0_PORT = 0x40
CONTROL_PORT = 0x43

ACCESS_LATCH = 0
ACCESS_LOBYTE = 1
ACCESS_HIBYTE = 2
ACCESS_LOHI = 3

_FULL_COUNT = 0x10000


@dataclass
class PitChannel:
    """State of one counter."""

    reload: int = 0
    counter: int = 0
    mode: int = 0
    access: int = ACCESS_LOHI
    bcd: bool = False
    output: bool = False
    gate: bool = True
    latched: int | None = None
    flip_flop: bool = False
    reload_ready: bool = False


def _default_channels() -> list[PitChannel]:
    return [PitChannel(), PitChannel(), PitChannel(gate=False)]


@dataclass
class Pit8253(PortDevice):
    """Three-channel timer; channel 0 raises `irq0_pending` when it fires."""

    channels: list[PitChannel] = field(default_factory=_default_channels)
    ticks: int = 0
    irq0_pending: bool = False

    def tick(self, cycles: int) -> None:
        """Advance every running channel by `cycles` input clock cycles."""
        self.ticks += cycles
        for index, ch in enumerate(self.channels):
            if not ch.gate or not ch.reload_ready:
                continue
            if ch.mode == 0:
                if ch.counter == 0:
                    ch.output = True
                    self._fired(index)
                else:
                    ch.counter -= min(cycles, ch.counter)
            elif ch.mode in (2, 3):
                self._run_periodic(index, ch, cycles)
            elif ch.counter > 0:
                ch.counter -= min(cycles, ch.counter)

    def _run_periodic(self, index: int, ch: PitChannel, cycles: int) -> None:
        reload = ch.reload or _FULL_COUNT
        count = ch.counter or _FULL_COUNT
        remaining = cycles
        while remaining > 0:
            step = min(remaining, count)
            count -= step
            remaining -= step
            if count == 0:
                count = reload
                if ch.mode == 2:
                    ch.output = True
                else:
                    ch.output = not ch.output
                self._fired(index)
        ch.counter = count & 0xFFFF

    def _fired(self, index: int) -> None:
        if index == 0:
            self.irq0_pending = True

    def check_irq0(self) -> bool:
        """Return whether IRQ0 was pending, clearing the flag."""
        pending = self.irq0_pending
        self.irq0_pending = False
        return pending

    def _channel_for(self, port: int) -> PitChannel | None:
        index = port - CHANNEL0_PORT
        if 0 <= index < len(self.channels):
            return self.channels[index]
        return None

    def port_in(self, port: int, size: int) -> int:
        ch = self._channel_for(port)
        if ch is None:
            return 0
        value = ch.latched if ch.latched is not None else ch.counter
        if ch.flip_flop or ch.access == ACCESS_HIBYTE:
            ch.flip_flop = False
            ch.latched = None
            return (value >> 8) & 0xFF
        if ch.access == ACCESS_LOHI:
            ch.flip_flop = True
        return value & 0xFF

    def port_out(self, port: int, size: int, val: int) -> None:
        val &= 0xFF
        if port == CONTROL_PORT:
            self._control(val)
            return
        ch = self._channel_for(port)
        if ch is None:
            return
        if ch.access == ACCESS_LOBYTE:
            ch.reload = (ch.reload & 0xFF00) | val
            ch.counter = ch.reload
            ch.reload_ready = True
        elif ch.access == ACCESS_HIBYTE:
            ch.reload = (ch.reload & 0x00FF) | (val << 8)
            ch.counter = ch.reload
            ch.reload_ready = True
        elif ch.access == ACCESS_LOHI:
            if not ch.flip_flop:
                ch.reload = (ch.reload & 0xFF00) | val
                ch.flip_flop = True
            else:
                ch.reload = (ch.reload & 0x00FF) | (val << 8)
                ch.counter = ch.reload
                ch.flip_flop = False
                ch.reload_ready = True

    def _control(self, val: int) -> None:
        index = (val >> 6) & 0x03
        if index == 3:
            # Read-back command is not supported.
            return
        ch = self.channels[index]
        access = (val >> 4) & 0x03
        if access == ACCESS_LATCH:
            ch.latched = ch.counter
            return
        ch.access = access
        ch.mode = (val >> 1) & 0x07
        ch.bcd = bool(val & 0x01)
        ch.flip_flop = False
        ch.output = False
        ch.reload_ready = False

    def port_range(self) -> tuple[int, int]:
        return (CHANNEL0_PORT, CONTROL_PORT)