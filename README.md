# pcdevices

Emulated peripherals of a classic x86 PC, for use inside an emulator or
for testing code that talks to PC hardware through I/O ports. Each device
answers port reads and writes; a `PortBus` sends every port access to the
device that claims the port.

## Devices

| Module | Class | Ports / role |
| --- | --- | --- |
| `pcdevices.portbus` | `PortDevice`, `PortBus` | abstract device and dispatch over the 65536 ports |
| `pcdevices.memory` | `Ram`, `MemoryBus` | little-endian guest memory |
| `pcdevices.serial` | `Serial8250` | 8 ports from a chosen base (e.g. COM1 at 0x3F8), transmit only |
| `pcdevices.cmos` | `Cmos` | 0x70–0x71, clock, memory sizes, boot order |
| `pcdevices.misc` | `PostPort`, `SystemControlA`, `SystemControlB`, `DmaStub`, `DmaPageRegs`, `Dma2Stub` | 0x80, 0x92, 0x61, 0x00–0x0F, 0x81–0x8F, 0xC0–0xDF |
| `pcdevices.ata` | `AtaDisk` | primary IDE 0x1F0–0x1F7 (PIO) |
| `pcdevices.pic` | `Pic8259` | a base port and the one after it, e.g. 0x20–0x21 or 0xA0–0xA1 |
| `pcdevices.pci` | `PciBus` | 0xCF8–0xCFF configuration space |
| `pcdevices.fw_cfg` | `FwCfg` | 0x510–0x511 firmware configuration |
| `pcdevices.pit` | `Pit8253` | 0x40–0x43 interval timer |
| `pcdevices.ps2` | `Ps2Controller` | 0x60–0x64 keyboard controller |
| `pcdevices.vga` | `VgaText` | 80×25 text buffer and VGA registers |

Notes on behaviour:

- Ports no device claims read as `0xFF`; writes to them are ignored. When
  two devices claim the same port, the one registered last wins.
- `MemoryBus` reads beyond RAM return `0xFF` bytes and writes beyond RAM
  are dropped. `map_rom` copies an image into RAM if it fits, and it stays
  writable. `Ram` itself raises `IndexError` for out-of-range accesses.
- `Serial8250(base)` echoes transmitted bytes to standard output;
  `Serial8250.capture(base)` only records them. `output()` returns
  everything sent so far.
- `Cmos(total_ram_bytes)` and `FwCfg(ram_size)` are set up from the RAM
  size given.
- `PciBus.with_default_devices()` builds a bus with a host bridge at
  0:0:0 and an ISA bridge at 0:1:0; `register_device` adds further
  functions with a 256-byte configuration space.
- `Pic8259.raise_irq` / `lower_irq` take lines 0–7 and raise `ValueError`
  otherwise; `get_interrupt()` returns a vector number or `None`.
- `Pit8253.tick(cycles)` advances the counters; `check_irq0()` reports and
  clears a pending channel-0 interrupt. `Ps2Controller.check_irq1()` does
  the same for keyboard interrupts.
- `VgaText` has `port_in(port)` and `port_out(port, val)` without a size
  argument, so it is not a `PortDevice` and cannot be registered on a
  `PortBus` directly. `mem_read` / `mem_write` take offsets into the text
  buffer (relative to `VGA_TEXT_BASE`).

## Example

```python
from pcdevices.portbus import PortBus
from pcdevices.serial import Serial8250
from pcdevices.pic import Pic8259

bus = PortBus()
com1 = Serial8250.capture(0x3F8)
bus.register(com1)
pic = Pic8259(0x20, True)
bus.register(pic)

for byte in b"Hi":
    bus.port_out(0x3F8, 1, byte)
assert com1.output() == b"Hi"

# Initialise the master PIC with vector base 0x20, then unmask IRQ0
bus.port_out(0x20, 1, 0x11)
bus.port_out(0x21, 1, 0x20)
bus.port_out(0x21, 1, 0x04)
bus.port_out(0x21, 1, 0x01)
bus.port_out(0x21, 1, 0xFE)

pic.raise_irq(0)
assert pic.get_interrupt() == 0x20
```

Reading a sector from a disk image:

```python
from pathlib import Path
from pcdevices.ata import AtaDisk

disk = AtaDisk()
disk.load_image(Path("disk.img").read_bytes())
disk.port_out(0x1F2, 1, 1)     # one sector
disk.port_out(0x1F6, 1, 0xE0)  # LBA mode, drive 0
disk.port_out(0x1F7, 1, 0x20)  # READ SECTORS
words = [disk.port_in(0x1F0, 2) for _ in range(256)]
```

Rendering the text screen:

```python
from pcdevices.vga import VgaText

vga = VgaText()
for ch in b"Hello":
    vga.put_char(ch, 0x0F)
cells = vga.render_cells()  # 2000 (char, fg_rgb, bg_rgb) tuples
```

## What it does not include

The package provides devices only. It has no CPU or instruction decoder,
no machine object that wires the devices to memory and runs firmware or a
boot sector, no window that displays the VGA screen or turns key presses
into scancodes, and no command-line program. `MemoryBus` does not route
the VGA text window to `VgaText`; connecting them is left to the caller.

## Running the tests

```
pip install -e .[test]
pytest
```