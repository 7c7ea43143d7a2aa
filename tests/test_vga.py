import pytest

from pcdevices.vga import VGA_COLS, VGA_ROWS, VgaText


@pytest.fixture
def vga():
    return VgaText()


def test_put_char(vga):
    vga.put_char(ord("A"), 0x07)
    assert vga.buffer[0] == ord("A")
    assert vga.buffer[1] == 0x07
    assert vga.cursor_x == 1
    assert vga.cursor_y == 0


def test_newline(vga):
    vga.put_char(ord("A"), 0x07)
    vga.put_char(0x0D, 0x07)
    vga.put_char(0x0A, 0x07)
    assert vga.cursor_x == 0
    assert vga.cursor_y == 1


def test_scroll(vga):
    for _ in range(VGA_ROWS):
        vga.put_char(ord("X"), 0x07)
        vga.put_char(0x0A, 0x07)
    assert vga.cursor_y == VGA_ROWS - 1


def test_scroll_moves_rows_up_and_blanks_last_row(vga):
    vga.put_char(ord("A"), 0x07)
    vga.put_char(0x0D, 0x07)
    vga.put_char(0x0A, 0x07)
    vga.put_char(ord("B"), 0x1E)
    vga.put_char(0x0D, 0x07)
    for _ in range(VGA_ROWS - 1):
        vga.put_char(0x0A, 0x07)
    assert vga.cursor_y == VGA_ROWS - 1
    assert vga.buffer[0] == ord("B")
    assert vga.buffer[1] == 0x1E
    last_row = vga.buffer[(VGA_ROWS - 1) * VGA_COLS * 2:]
    assert bytes(last_row) == b"\x20\x07" * VGA_COLS


def test_line_wraps_at_last_column(vga):
    for _ in range(VGA_COLS):
        vga.put_char(ord("x"), 0x07)
    assert (vga.cursor_x, vga.cursor_y) == (0, 1)


def test_backspace_stops_at_column_zero(vga):
    vga.put_char(ord("a"), 0x07)
    vga.put_char(0x08, 0x07)
    vga.put_char(0x08, 0x07)
    assert vga.cursor_x == 0


def test_mem_mapped_write(vga):
    vga.mem_write(0, ord("H"))
    vga.mem_write(1, 0x0F)
    vga.mem_write(2, ord("i"))
    vga.mem_write(3, 0x0F)
    cells = vga.render_cells()
    assert cells[0][0] == "H"
    assert cells[1][0] == "i"


def test_mem_access_out_of_range(vga):
    vga.mem_write(VGA_COLS * VGA_ROWS * 2, 0x41)
    assert vga.mem_read(VGA_COLS * VGA_ROWS * 2) == 0
    vga.mem_write(5, 0x41)
    assert vga.mem_read(5) == 0x41


def test_render_default_palette(vga):
    assert vga.palette_to_rgb(0x0F) == (0xFF, 0xFF, 0xFF)
    assert vga.palette_to_rgb(0x00) == (0x00, 0x00, 0x00)


def test_render_cells_colours_and_glyphs(vga):
    vga.mem_write(0, 0x01)
    vga.mem_write(1, 0x1F)
    cells = vga.render_cells()
    assert len(cells) == VGA_COLS * VGA_ROWS
    glyph, fg, bg = cells[0]
    assert glyph == "\u25A1"
    assert fg == (0xFF, 0xFF, 0xFF)
    assert bg == (0x00, 0x00, 0xAA)
    assert cells[1][0] == " "


def test_dac_write_then_read(vga):
    vga.port_out(0x3C8, 0x20)
    for value in (0x10, 0x20, 0x30):
        vga.port_out(0x3C9, value)
    assert vga.port_in(0x3C8) == 0x21
    vga.port_out(0x3C7, 0x20)
    assert [vga.port_in(0x3C9) for _ in range(3)] == [0x10, 0x20, 0x30]
    assert vga.dac_read_index == 0x21


def test_crtc_cursor_tracking(vga):
    vga.port_out(0x3D4, 0x0E)
    vga.port_out(0x3D5, 0x00)
    vga.port_out(0x3D4, 0x0F)
    vga.port_out(0x3D5, VGA_COLS + 1)
    assert (vga.cursor_x, vga.cursor_y) == (1, 1)
    assert vga.port_in(0x3D5) == VGA_COLS + 1


@pytest.mark.parametrize(
    "index_port, data_port, index",
    [(0x3C4, 0x3C5, 2), (0x3CE, 0x3CF, 5), (0x3D4, 0x3D5, 0x0A)],
)
def test_indexed_registers_round_trip(vga, index_port, data_port, index):
    vga.port_out(index_port, index)
    vga.port_out(data_port, 0x5A)
    assert vga.port_in(index_port) == index
    assert vga.port_in(data_port) == 0x5A


def test_indexed_register_beyond_file_reads_zero(vga):
    vga.port_out(0x3C4, 0x10)
    vga.port_out(0x3C5, 0x77)
    assert vga.port_in(0x3C5) == 0


def test_misc_output_and_status_ports(vga):
    assert vga.port_in(0x3CC) == 0x63
    vga.port_out(0x3C2, 0x67)
    assert vga.port_in(0x3CC) == 0x67
    assert vga.port_in(0x3C7) == 0x03
    assert vga.port_in(0x3DA) == 0x00