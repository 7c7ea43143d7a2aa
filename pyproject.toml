[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcdevices"
version = "0.1.0"
description = "Emulated PC peripherals: I/O port bus, RAM, UART, CMOS, ATA, PIC, PCI, fw_cfg, PIT, PS/2 and VGA text mode"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "x86", "pc", "i/o ports", "8259", "8253", "ata", "vga", "pci"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pcdevices"]

[tool.pytest.ini_options]
addopts = "-ra"
