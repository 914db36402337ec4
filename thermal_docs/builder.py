"""Append-only ESC/POS byte builder.

Every method appends to the buffer and returns the builder, so documents
are written as one chain. Nothing here validates or raises: odd input
(negative widths, empty strings, characters outside the code page)
degrades to something printable.
"""

from __future__ import annotations

import base64

ESC = 0x1B
GS = 0x1D

# Code page 16 = WPC1252, covers ñ, á, é, í, ó, ú, ü and ¿¡.
CODE_PAGE_WPC1252 = 16

INIT = bytes([ESC, 0x40])
SELECT_CODE_PAGE = bytes([ESC, 0x74, CODE_PAGE_WPC1252])
ALIGN_LEFT = bytes([ESC, 0x61, 0x00])
ALIGN_CENTER = bytes([ESC, 0x61, 0x01])
ALIGN_RIGHT = bytes([ESC, 0x61, 0x02])
BOLD_ON = bytes([ESC, 0x45, 0x01])
BOLD_OFF = bytes([ESC, 0x45, 0x00])
UNDERLINE_ON = bytes([GS, 0x2D, 0x01])
UNDERLINE_OFF = bytes([GS, 0x2D, 0x00])
SIZE_NORMAL = bytes([GS, 0x21, 0x00])
SIZE_DOUBLE_HEIGHT = bytes([GS, 0x21, 0x01])
SIZE_DOUBLE_WIDTH = bytes([GS, 0x21, 0x10])
SIZE_DOUBLE = bytes([GS, 0x21, 0x11])
CUT_PAPER = bytes([GS, 0x56, 0x41, 0x03])
FEED_PREFIX = bytes([ESC, 0x64])

BITMAP_MARKER_PREFIX = "__BITMAP_B64:"
BITMAP_MARKER_SUFFIX = ":END__"

_REPLACEMENT = 0x3F  # "?"


def encode_text(text: str) -> bytes:
    """One byte per character; anything above U+00FF becomes ``?``."""
    return bytes(code if code <= 0xFF else _REPLACEMENT for code in map(ord, text))


def bitmap_marker(base64_png: str) -> str:
    return f"{BITMAP_MARKER_PREFIX}{base64_png}{BITMAP_MARKER_SUFFIX}"


def fit_columns(left: str, right: str, width: int) -> str:
    """Lay ``left`` and ``right`` on one line of ``width`` characters.

    ``right`` is always kept whole; ``left`` is truncated (never wrapped) so
    that at least one space separates them.
    """
    room = width - len(right) - 1
    if len(left) > room:
        left = left[: max(0, room)]
    gap = max(1, width - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


class EscPosBuilder:
    """Accumulates printer commands and text for one document."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def raw(self, data: bytes) -> EscPosBuilder:
        self._buffer.extend(data)
        return self

    def init(self) -> EscPosBuilder:
        """Reset the printer and select the WPC1252 code page."""
        return self.raw(INIT).raw(SELECT_CODE_PAGE)

    def text(self, text: str) -> EscPosBuilder:
        return self.raw(encode_text(text))

    def line(self, text: str = "") -> EscPosBuilder:
        return self.text(f"{text}\n")

    def align_left(self) -> EscPosBuilder:
        return self.raw(ALIGN_LEFT)

    def align_center(self) -> EscPosBuilder:
        return self.raw(ALIGN_CENTER)

    def align_right(self) -> EscPosBuilder:
        return self.raw(ALIGN_RIGHT)

    def bold_on(self) -> EscPosBuilder:
        return self.raw(BOLD_ON)

    def bold_off(self) -> EscPosBuilder:
        return self.raw(BOLD_OFF)

    def underline_on(self) -> EscPosBuilder:
        return self.raw(UNDERLINE_ON)

    def underline_off(self) -> EscPosBuilder:
        return self.raw(UNDERLINE_OFF)

    def normal_size(self) -> EscPosBuilder:
        return self.raw(SIZE_NORMAL)

    def double_height(self) -> EscPosBuilder:
        return self.raw(SIZE_DOUBLE_HEIGHT)

    def double_width(self) -> EscPosBuilder:
        return self.raw(SIZE_DOUBLE_WIDTH)

    def double_size(self) -> EscPosBuilder:
        return self.raw(SIZE_DOUBLE)

    def reset_style(self) -> EscPosBuilder:
        """Back to left-aligned, normal size, no emphasis or underline."""
        return self.normal_size().bold_off().underline_off().align_left()

    def feed(self, lines: int = 1) -> EscPosBuilder:
        return self.raw(FEED_PREFIX + bytes([max(0, min(int(lines), 255))]))

    def cut(self) -> EscPosBuilder:
        """Feed three lines then cut."""
        return self.feed(3).raw(CUT_PAPER)

    def separator(self, char: str = "-", width: int = 42) -> EscPosBuilder:
        if width <= 0:
            return self.line()
        fill = char or " "
        return self.line((fill * width)[:width])

    def columns(self, left: str, right: str, width: int = 42) -> EscPosBuilder:
        return self.line(fit_columns(left, right, width))

    def print_bitmap(self, base64_png: str) -> EscPosBuilder:
        """Embed a PNG as a textual marker for the Print Bridge to rasterize.

        The marker is plain ASCII inside the binary stream; a bridge that
        does not know it prints it as text.
        """
        return self.text(bitmap_marker(base64_png))

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    def to_base64(self) -> str:
        return base64.b64encode(self._buffer).decode("ascii")
