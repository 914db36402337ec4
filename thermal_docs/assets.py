"""Static bitmap assets embedded in printed documents."""

from __future__ import annotations

import base64
import io
import logging
from functools import lru_cache
from pathlib import Path

from thermal_docs.config import LOGO_PATH

logger = logging.getLogger(__name__)


def png_to_thermal_base64(source: bytes | str | Path, max_width_px: int | None = None) -> str:
    """Re-encode an image as a 1-bit PNG (black strokes on white) in base64."""
    from PIL import Image

    if isinstance(source, bytes):
        source = io.BytesIO(source)
    with Image.open(source) as img:
        img.load()
        if img.mode in ("RGBA", "LA", "P"):
            # Transparent pixels print as paper, not as ink.
            background = Image.new("RGBA", img.size, (255, 255, 255, 255))
            background.alpha_composite(img.convert("RGBA"))
            img = background
        if max_width_px is not None and img.width > max_width_px:
            height = max(1, round(img.height * max_width_px / img.width))
            img = img.resize((max_width_px, height))
        mono = img.convert("L").convert("1")

    out = io.BytesIO()
    mono.save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("ascii")


@lru_cache(maxsize=1)
def logo_base64() -> str | None:
    """Brand logo as base64 PNG, loaded once per process; None if unavailable."""
    path = Path(LOGO_PATH)
    if not path.is_file():
        logger.warning("Logo asset not found at %s; headers will print the brand name", path)
        return None
    try:
        return png_to_thermal_base64(path)
    except (OSError, ValueError) as exc:
        logger.warning("Logo asset %s could not be read: %s", path, exc)
        return None
