"""VGA text mode: an 80x25 character buffer plus the VGA register ports.

The text buffer is memory-mapped at 0xB8000; every cell is a character
byte followed by an attribute byte laid out as blink(1) | bg(3) | fg(4).
"""

from __future__ import annotations

VGA_TEXT_BASE = 0xB8000
VGA_TEXT_SIZE = 0x1000
VGA_COLS = 80
VGA_ROWS = 25

_ROW_BYTES = VGA_COLS * 2
_BLANK_CHAR = 0x20
_BLANK_ATTR = 0x07
_PLACEHOLDER = "\u25A1"

# Standard 16-colour text palette as 6-bit DAC values.
_DEFAULT_PALETTE = (
    (0x00, 0x00, 0x00),  # black
    (0x00, 0x00, 0x2A),  # blue
    (0x00, 0x2A, 0x00),  # green
    (0x00, 0x2A, 0x2A),  # cyan
    (0x2A, 0x00, 0x00),  # red
    (0x2A, 0x00, 0x2A),  # magenta
    (0x2A, 0x15, 0x00),  # brown
    (0x2A, 0x2A, 0x2A),  # light grey
    (0x15, 0x15, 0x15),  # dark grey
    (0x15, 0x15, 0x3F),  # light blue
    (0x15, 0x3F, 0x15),  # light green
    (0x15, 0x3F, 0x3F),  # light cyan
    (0x3F, 0x15, 0x15),  # light red
    (0x3F, 0x15, 0x3F),  # light magenta
    (0x3F, 0x3F, 0x15),  # yellow
    (0x3F, 0x3F, 0x3F),  # white
)

Cell = tuple[str, tuple[int, int, int], tuple[int, int, int]]


def _scale_6_to_8(value: int) -> int:
    return ((value << 2) | (value >> 4)) & 0xFF


class VgaText:
    """Text-mode VGA state: character buffer, cursor and register files."""

    def __init__(self) -> None:
        self.buffer = bytearray(VGA_COLS * VGA_ROWS * 2)
        self.cursor_x = 0
        self.cursor_y = 0
        self.misc_output = 0x63
        self.crtc_index = 0
        self.crtc_regs = bytearray(25)
        self.attr_index = 0
        self.attr_regs = bytearray(21)
        self.seq_index = 0
        self.seq_regs = bytearray(5)
        self.gc_index = 0
        self.gc_regs = bytearray(9)
        self.dac_read_index = 0
        self.dac_write_index = 0
        self.dac_component = 0
        self.dac_palette = [[0, 0, 0] for _ in range(256)]
        for entry, colour in zip(self.dac_palette, _DEFAULT_PALETTE):
            entry[:] = colour

    def mem_read(self, offset: int) -> int:
        """Read a byte of the text buffer; offsets past the end read 0."""
        if 0 <= offset < len(self.buffer):
            return self.buffer[offset]
        return 0

    def mem_write(self, offset: int, val: int) -> None:
        """Write a byte of the text buffer; offsets past the end are ignored."""
        if 0 <= offset < len(self.buffer):
            self.buffer[offset] = val & 0xFF

    def put_char(self, ch: int, attr: int) -> None:
        """Write a character at the cursor, handling LF, CR and backspace."""
        if ch == 0x0A:
            self._next_line()
        elif ch == 0x0D:
            self.cursor_x = 0
        elif ch == 0x08:
            if self.cursor_x > 0:
                self.cursor_x -= 1
        else:
            offset = (self.cursor_y * VGA_COLS + self.cursor_x) * 2
            if offset + 1 < len(self.buffer):
                self.buffer[offset] = ch & 0xFF
                self.buffer[offset + 1] = attr & 0xFF
            self.cursor_x = (self.cursor_x + 1) & 0xFF
            if self.cursor_x >= VGA_COLS:
                self.cursor_x = 0
                self._next_line()

    def _next_line(self) -> None:
        self.cursor_y = (self.cursor_y + 1) & 0xFF
        if self.cursor_y >= VGA_ROWS:
            self._scroll_up()
            self.cursor_y = VGA_ROWS - 1

    def _scroll_up(self) -> None:
        self.buffer[:-_ROW_BYTES] = self.buffer[_ROW_BYTES:]
        self.buffer[-_ROW_BYTES:] = bytes((_BLANK_CHAR, _BLANK_ATTR)) * VGA_COLS

    def render_cells(self) -> list[Cell]:
        """Return every cell, row by row, as (character, fg RGB, bg RGB)."""
        cells: list[Cell] = []
        for offset in range(0, VGA_COLS * VGA_ROWS * 2, 2):
            ch = self.buffer[offset]
            attr = self.buffer[offset + 1]
            fg = self.palette_to_rgb(attr & 0x0F)
            bg = self.palette_to_rgb((attr >> 4) & 0x07)
            if 0x20 <= ch < 0x7F:
                glyph = chr(ch)
            elif ch == 0:
                glyph = " "
            else:
                glyph = _PLACEHOLDER
            cells.append((glyph, fg, bg))
        return cells

    def palette_to_rgb(self, idx: int) -> tuple[int, int, int]:
        """Convert a DAC palette entry from 6-bit components to 8-bit RGB."""
        r, g, b = self.dac_palette[idx]
        return (_scale_6_to_8(r), _scale_6_to_8(g), _scale_6_to_8(b))

    @staticmethod
    def _indexed(regs: bytearray, idx: int) -> int:
        return regs[idx] if idx < len(regs) else 0

    def port_in(self, port: int) -> int:
        """Handle a read from a VGA I/O port."""
        if port == 0x3C0:
            return self.attr_index
        if port == 0x3C1:
            return self._indexed(self.attr_regs, self.attr_index & 0x1F)
        if port == 0x3C4:
            return self.seq_index
        if port == 0x3C5:
            return self._indexed(self.seq_regs, self.seq_index)
        if port == 0x3C7:
            return 0x03
        if port == 0x3C8:
            return self.dac_write_index
        if port == 0x3C9:
            value = self.dac_palette[self.dac_read_index][self.dac_component]
            self.dac_component += 1
            if self.dac_component >= 3:
                self.dac_component = 0
                self.dac_read_index = (self.dac_read_index + 1) & 0xFF
            return value
        if port == 0x3CC:
            return self.misc_output
        if port == 0x3CE:
            return self.gc_index
        if port == 0x3CF:
            return self._indexed(self.gc_regs, self.gc_index)
        if port == 0x3D4:
            return self.crtc_index
        if port == 0x3D5:
            return self._indexed(self.crtc_regs, self.crtc_index)
        # 0x3DA (input status 1) always reports "not in retrace".
        return 0

    def port_out(self, port: int, val: int) -> None:
        """Handle a write to a VGA I/O port."""
        val &= 0xFF
        if port == 0x3C0:
            self.attr_index = val
        elif port == 0x3C2:
            self.misc_output = val
        elif port == 0x3C4:
            self.seq_index = val
        elif port == 0x3C5:
            if self.seq_index < len(self.seq_regs):
                self.seq_regs[self.seq_index] = val
        elif port == 0x3C7:
            self.dac_read_index = val
            self.dac_component = 0
        elif port == 0x3C8:
            self.dac_write_index = val
            self.dac_component = 0
        elif port == 0x3C9:
            if self.dac_component < 3:
                self.dac_palette[self.dac_write_index][self.dac_component] = val
            self.dac_component += 1
            if self.dac_component >= 3:
                self.dac_component = 0
                self.dac_write_index = (self.dac_write_index + 1) & 0xFF
        elif port == 0x3CE:
            self.gc_index = val
        elif port == 0x3CF:
            if self.gc_index < len(self.gc_regs):
                self.gc_regs[self.gc_index] = val
        elif port == 0x3D4:
            self.crtc_index = val
        elif port == 0x3D5:
            if self.crtc_index < len(self.crtc_regs):
                self.crtc_regs[self.crtc_index] = val
            if self.crtc_index in (0x0E, 0x0F):
                pos = (self.crtc_regs[0x0E] << 8) | self.crtc_regs[0x0F]
                self.cursor_x = (pos % VGA_COLS) & 0xFF
                self.cursor_y = (pos // VGA_COLS) & 0xFF