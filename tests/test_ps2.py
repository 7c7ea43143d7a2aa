import pytest

from pcdevices.ps2 import Ps2Controller


def test_ps2_self_test():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0xAA)
    assert ps2.port_in(0x60, 1) == 0x55


def test_ps2_scancode():
    ps2 = Ps2Controller()
    ps2.send_scancode(0x1E)
    assert ps2.port_in(0x64, 1) & 0x01 == 1
    assert ps2.port_in(0x60, 1) == 0x1E
    assert ps2.port_in(0x64, 1) & 0x01 == 0


def test_ps2_keyboard_reset():
    ps2 = Ps2Controller()
    ps2.port_out(0x60, 1, 0xFF)
    assert ps2.port_in(0x60, 1) == 0xFA
    assert ps2.port_in(0x60, 1) == 0xAA


def test_ps2_config():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0x60)
    ps2.port_out(0x60, 1, 0x45)
    assert ps2.config == 0x45
    ps2.port_out(0x64, 1, 0x20)
    assert ps2.port_in(0x60, 1) == 0x45


def test_initial_status():
    assert Ps2Controller().port_in(0x64, 1) == 0x14


def test_empty_buffer_reads_zero():
    assert Ps2Controller().port_in(0x60, 1) == 0


def test_scancode_raises_irq1_when_enabled():
    ps2 = Ps2Controller()
    ps2.send_scancode(0x1E)
    assert ps2.check_irq1() is True
    assert ps2.check_irq1() is False


def test_scancode_without_irq_when_config_bit_clear():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0x60)
    ps2.port_out(0x60, 1, 0x46)
    ps2.send_scancode(0x1E)
    assert ps2.check_irq1() is False
    assert ps2.port_in(0x60, 1) == 0x1E


def test_disabled_keyboard_drops_scancodes():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0xAD)
    ps2.send_scancode(0x1E)
    assert ps2.port_in(0x64, 1) & 0x01 == 0
    ps2.port_out(0x64, 1, 0xAE)
    ps2.send_scancode(0x1F)
    assert ps2.port_in(0x60, 1) == 0x1F


def test_disable_and_enable_scanning():
    ps2 = Ps2Controller()
    ps2.port_out(0x60, 1, 0xF5)
    assert ps2.port_in(0x60, 1) == 0xFA
    ps2.send_scancode(0x1E)
    assert ps2.port_in(0x60, 1) == 0
    ps2.port_out(0x60, 1, 0xF4)
    assert ps2.port_in(0x60, 1) == 0xFA
    ps2.send_scancode(0x1E)
    assert ps2.port_in(0x60, 1) == 0x1E


@pytest.mark.parametrize("command", [0xED, 0xF0, 0x12])
def test_keyboard_commands_are_acknowledged(command):
    ps2 = Ps2Controller()
    ps2.port_out(0x60, 1, command)
    assert ps2.port_in(0x60, 1) == 0xFA
    assert ps2.port_in(0x64, 1) & 0x01 == 0


def test_interface_test_passes():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0xAB)
    assert ps2.port_in(0x64, 1) & 0x01 == 1
    assert ps2.port_in(0x60, 1) == 0x00


def test_write_output_port_consumes_next_byte():
    ps2 = Ps2Controller()
    ps2.port_out(0x64, 1, 0xD1)
    ps2.port_out(0x60, 1, 0xDF)
    assert ps2.port_in(0x64, 1) & 0x01 == 0
    assert ps2.config == 0x47
    ps2.port_out(0x60, 1, 0xFF)
    assert ps2.port_in(0x60, 1) == 0xFA


def test_output_queue_is_fifo():
    ps2 = Ps2Controller()
    for code in (0x10, 0x11, 0x12):
        ps2.send_scancode(code)
    assert [ps2.port_in(0x60, 1) for _ in range(3)] == [0x10, 0x11, 0x12]


def test_port_range():
    assert Ps2Controller().port_range() == (0x60, 0x64)