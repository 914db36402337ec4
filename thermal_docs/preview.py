"""Terminal preview of an encoded document."""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field

from rich.panel import Panel
from rich.text import Text

from thermal_docs.builder import BITMAP_MARKER_PREFIX, BITMAP_MARKER_SUFFIX
from thermal_docs.config import columns_for_paper

logger = logging.getLogger(__name__)

ESC = 0x1B
GS = 0x1D
LF = 0x0A

CUT_RULE_CHAR = "✂"

_PREFIX = BITMAP_MARKER_PREFIX.encode("ascii")
_SUFFIX = BITMAP_MARKER_SUFFIX.encode("ascii")


def image_placeholder(base64_png: str) -> str:
    """``[imagen WxH]`` for a base64 PNG, ``[imagen]`` when it cannot be read."""
    from PIL import Image

    try:
        with Image.open(io.BytesIO(base64.b64decode(base64_png))) as img:
            width, height = img.size
    except Exception as exc:
        logger.debug("Unreadable bitmap in preview: %s", exc)
        return "[imagen]"
    return f"[imagen {width}x{height}]"


@dataclass
class _PrinterState:
    bold: bool = False
    underline: bool = False
    double_width: bool = False
    double_height: bool = False
    align: int = 0
    segments: list[tuple[str, str]] = field(default_factory=list)

    def style(self) -> str:
        parts = []
        if self.bold or self.double_height or self.double_width:
            parts.append("bold")
        if self.underline:
            parts.append("underline")
        return " ".join(parts)

    def add(self, text: str) -> None:
        self.segments.append((text, self.style()))


def _flush(state: _PrinterState, out: Text, cols: int) -> None:
    width = sum(len(text) for text, _ in state.segments)
    pad = 0
    if state.align == 1:
        pad = max(0, (cols - width) // 2)
    elif state.align == 2:
        pad = max(0, cols - width)
    out.append(" " * pad)
    for text, style in state.segments:
        out.append(text, style=style or None)
    out.append("\n")
    state.segments.clear()


def render_preview(data: bytes, paper_width: int | None = 80) -> Text:
    """Interpret the command stream into styled text.

    Covers the commands the builder emits plus raster images (``GS v 0``), so
    both marker and expanded streams can be previewed.
    """
    cols = columns_for_paper(paper_width)
    state = _PrinterState()
    out = Text()
    i = 0
    size = len(data)
    while i < size:
        byte = data[i]
        if byte == ESC and i + 1 < size:
            command = data[i + 1]
            arg = data[i + 2] if i + 2 < size else 0
            if command == 0x40:
                state = _PrinterState(segments=state.segments)
                i += 2
                continue
            if command == 0x61:
                state.align = arg if arg in (0, 1, 2) else arg - 0x30
            elif command == 0x45:
                state.bold = bool(arg & 1)
            elif command == 0x64:
                if state.segments:
                    _flush(state, out, cols)
                out.append("\n" * arg)
            i += 3
        elif byte == GS and i + 1 < size:
            command = data[i + 1]
            arg = data[i + 2] if i + 2 < size else 0
            if command == 0x2D:
                state.underline = bool(arg)
                i += 3
            elif command == 0x21:
                state.double_width = bool(arg & 0xF0)
                state.double_height = bool(arg & 0x0F)
                i += 3
            elif command == 0x56:
                if state.segments:
                    _flush(state, out, cols)
                out.append(CUT_RULE_CHAR + "-" * (cols - 1) + "\n", style="dim")
                i += 4 if arg in (0x41, 0x42) else 3
            elif command == 0x76 and i + 7 < size:
                # GS v 0 m xL xH yL yH d1...dk
                width_bytes = data[i + 4] + data[i + 5] * 256
                height = data[i + 6] + data[i + 7] * 256
                state.add(f"[imagen {width_bytes * 8}x{height}]")
                i += 8 + width_bytes * height
            else:
                i += 2
        elif byte == LF:
            _flush(state, out, cols)
            i += 1
        elif data.startswith(_PREFIX, i):
            end = data.find(_SUFFIX, i + len(_PREFIX))
            if end < 0:
                state.add(data[i:].decode("latin-1"))
                break
            state.add(image_placeholder(data[i + len(_PREFIX) : end].decode("latin-1")))
            i = end + len(_SUFFIX)
        else:
            next_stop = i + 1
            while next_stop < size and data[next_stop] not in (ESC, GS, LF):
                if data.startswith(_PREFIX, next_stop):
                    break
                next_stop += 1
            state.add(data[i:next_stop].decode("latin-1"))
            i = next_stop
    if state.segments:
        _flush(state, out, cols)
    return out


def preview_panel(data: bytes, paper_width: int | None = 80, title: str | None = None) -> Panel:
    cols = columns_for_paper(paper_width)
    return Panel(render_preview(data, paper_width), title=title, width=cols + 4, expand=False)
