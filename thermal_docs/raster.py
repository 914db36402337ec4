"""Print-bridge side: turn bitmap markers into ESC/POS raster images."""

from __future__ import annotations

import base64
import binascii
import io
import logging

from thermal_docs.builder import BITMAP_MARKER_PREFIX, BITMAP_MARKER_SUFFIX
from thermal_docs.config import ESCPOS_PROFILE, raster_width_for_paper

logger = logging.getLogger(__name__)

_PREFIX = BITMAP_MARKER_PREFIX.encode("ascii")
_SUFFIX = BITMAP_MARKER_SUFFIX.encode("ascii")


def find_bitmap_markers(data: bytes) -> list[tuple[int, int, str]]:
    """Return ``(start, end, base64)`` for every complete marker in ``data``."""
    markers = []
    pos = 0
    while True:
        start = data.find(_PREFIX, pos)
        if start < 0:
            break
        end = data.find(_SUFFIX, start + len(_PREFIX))
        if end < 0:
            break
        payload = data[start + len(_PREFIX) : end].decode("latin-1")
        markers.append((start, end + len(_SUFFIX), payload))
        pos = end + len(_SUFFIX)
    return markers


def load_png(base64_png: str) -> object:
    """Decode a base64 PNG into a 1-bit PIL image on a white background."""
    from PIL import Image

    try:
        raw = base64.b64decode(base64_png, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"bitmap payload is not base64: {exc}") from exc
    img = Image.open(io.BytesIO(raw))
    img.load()
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        background = Image.new("RGBA", img.size, (255, 255, 255, 255))
        img = Image.alpha_composite(background, img)
    return img.convert("1")


def raster_bytes(base64_png: str, max_width_px: int) -> bytes:
    """ESC/POS raster commands for one PNG, scaled down to ``max_width_px``."""
    from escpos.printer import Dummy
    from PIL import Image

    img = load_png(base64_png)
    if img.width > max_width_px:
        height = max(1, round(img.height * max_width_px / img.width))
        img = img.resize((max_width_px, height), Image.NEAREST)

    printer = Dummy(profile=ESCPOS_PROFILE)
    printer.image(img)
    return printer.output


def expand_bitmap_markers(data: bytes, paper_width: int | None = 80) -> bytes:
    """Replace every bitmap marker with raster image commands.

    A marker whose image cannot be decoded or rasterized stays in the stream
    as text and the rest of the document is expanded normally.
    """
    max_width_px = raster_width_for_paper(paper_width)
    out = bytearray()
    pos = 0
    for start, end, payload in find_bitmap_markers(data):
        out += data[pos:start]
        try:
            out += raster_bytes(payload, max_width_px)
        except Exception:
            logger.warning("Could not rasterize bitmap at byte %d; leaving marker as text", start, exc_info=True)
            out += data[start:end]
        pos = end
    out += data[pos:]
    return bytes(out)
