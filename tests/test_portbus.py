import pytest

from pcdevices.portbus import PortBus, PortDevice


class _EchoDevice(PortDevice):
    def __init__(self, base, value):
        self.base = base
        self.value = value

    def port_in(self, port, size):
        return self.value

    def port_out(self, port, size, val):
        self.value = val

    def port_range(self):
        return (self.base, self.base + 3)


def test_register_and_dispatch():
    bus = PortBus()
    bus.register(_EchoDevice(0x100, 0x42))
    assert bus.port_in(0x100, 1) == 0x42
    assert bus.port_in(0x103, 1) == 0x42
    assert bus.port_in(0x200, 1) == 0xFF


def test_write_then_read():
    bus = PortBus()
    bus.register(_EchoDevice(0x300, 0))
    bus.port_out(0x300, 1, 0xAB)
    assert bus.port_in(0x300, 1) == 0xAB


def test_multiple_devices():
    bus = PortBus()
    bus.register(_EchoDevice(0x100, 0x11))
    bus.register(_EchoDevice(0x200, 0x22))
    assert bus.port_in(0x100, 1) == 0x11
    assert bus.port_in(0x200, 1) == 0x22


def test_port_just_outside_range_is_unhandled():
    bus = PortBus()
    bus.register(_EchoDevice(0x100, 0x42))
    assert bus.port_in(0x104, 1) == 0xFF
    assert bus.port_in(0x0FF, 1) == 0xFF


def test_unhandled_write_is_ignored():
    bus = PortBus()
    device = _EchoDevice(0x100, 0x42)
    bus.register(device)
    bus.port_out(0x200, 1, 0x99)
    assert device.value == 0x42


def test_later_registration_wins_on_overlap():
    bus = PortBus()
    bus.register(_EchoDevice(0x100, 0x11))
    bus.register(_EchoDevice(0x102, 0x22))
    assert bus.port_in(0x101, 1) == 0x11
    assert bus.port_in(0x102, 1) == 0x22


def test_port_device_is_abstract():
    with pytest.raises(TypeError):
        PortDevice()