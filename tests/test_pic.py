import pytest

from pcdevices.pic import Pic8259


def init_master(icw4: int = 0x01) -> Pic8259:
    pic = Pic8259(0x20, True)
    pic.port_out(0x20, 1, 0x11)
    pic.port_out(0x21, 1, 0x20)
    pic.port_out(0x21, 1, 0x04)
    pic.port_out(0x21, 1, icw4)
    return pic


def test_pic_init_sequence():
    pic = init_master()
    assert pic.vector_offset == 0x20
    assert pic.imr == 0x00


def test_pic_mask_and_irq():
    pic = init_master()
    pic.port_out(0x21, 1, 0xFE)
    pic.raise_irq(0)
    assert pic.has_interrupt()
    assert pic.get_interrupt() == 0x20


def test_pic_masked_irq_ignored():
    pic = init_master()
    pic.port_out(0x21, 1, 0xFF)
    pic.raise_irq(0)
    assert not pic.has_interrupt()
    assert pic.get_interrupt() is None


def test_pic_eoi():
    pic = init_master()
    pic.port_out(0x21, 1, 0x00)
    pic.raise_irq(0)
    pic.get_interrupt()
    assert pic.isr == 0x01
    pic.port_out(0x20, 1, 0x20)
    assert pic.isr == 0x00


def test_pic_specific_eoi():
    pic = init_master()
    pic.raise_irq(0)
    pic.raise_irq(3)
    assert pic.get_interrupt() == 0x20
    pic.port_out(0x20, 1, 0x20)
    assert pic.get_interrupt() == 0x23
    assert pic.isr == 0x08
    pic.port_out(0x20, 1, 0x63)
    assert pic.isr == 0x00


def test_pic_higher_priority_in_service_blocks():
    pic = init_master()
    pic.raise_irq(0)
    assert pic.get_interrupt() == 0x20
    pic.raise_irq(1)
    assert pic.get_interrupt() is None
    pic.port_out(0x20, 1, 0x20)
    assert pic.get_interrupt() == 0x21


def test_pic_auto_eoi():
    pic = init_master(icw4=0x03)
    pic.raise_irq(2)
    assert pic.get_interrupt() == 0x22
    assert pic.isr == 0


def test_pic_ocw3_read_isr_and_irr():
    pic = init_master()
    pic.raise_irq(1)
    pic.raise_irq(4)
    assert pic.port_in(0x20, 1) == 0x12
    pic.get_interrupt()
    pic.port_out(0x20, 1, 0x0B)
    assert pic.port_in(0x20, 1) == 0x02
    pic.port_out(0x20, 1, 0x0A)
    assert pic.port_in(0x20, 1) == 0x10


def test_pic_init_without_icw4():
    pic = Pic8259(0xA0, False)
    pic.port_out(0xA0, 1, 0x10)
    pic.port_out(0xA1, 1, 0x2F)
    pic.port_out(0xA1, 1, 0x02)
    pic.port_out(0xA1, 1, 0xAA)
    assert pic.vector_offset == 0x28
    assert pic.port_in(0xA1, 1) == 0xAA


def test_pic_defaults():
    slave = Pic8259(0xA0, False)
    master = Pic8259(0x20, True)
    assert slave.vector_offset == 0x70
    assert master.vector_offset == 0x08
    assert master.port_in(0x21, 1) == 0xFF
    assert slave.port_range() == (0xA0, 0xA1)


def test_pic_lower_irq():
    pic = init_master()
    pic.raise_irq(5)
    pic.lower_irq(5)
    assert not pic.has_interrupt()
    assert pic.get_interrupt() is None


def test_pic_invalid_irq():
    pic = Pic8259(0x20, True)
    with pytest.raises(ValueError):
        pic.raise_irq(8)