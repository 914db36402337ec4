"""Runtime configuration defaults for document encoding."""

from __future__ import annotations

import os
from pathlib import Path

# Paper width (mm) -> printable columns in font A.
PAPER_COLUMNS: dict[int, int] = {
    80: 42,
    58: 32,
}
# Anything we do not recognize prints on the narrow layout.
FALLBACK_COLUMNS = 32

BRAND_NAME = "HOPPINESS CLUB"
FOOTER_THANKS = "Gracias por elegirnos!"
FOOTER_WEBSITE = "www.hoppinessclub.com"
ITEM_PLACEHOLDER = "Producto"

_LOGO_PATH_ENV = "THERMAL_DOCS_LOGO_PATH"
_TIMEZONE_ENV = "THERMAL_DOCS_TIMEZONE"
_TRACKING_URL_ENV = "THERMAL_DOCS_TRACKING_URL"
_QR_SIZE_ENV = "THERMAL_DOCS_QR_SIZE_PX"

DEFAULT_LOGO_PATH = str(Path(__file__).resolve().parent / "assets" / "logo.png")
LOGO_PATH = os.environ.get(_LOGO_PATH_ENV, "").strip() or DEFAULT_LOGO_PATH

LOCAL_TIMEZONE = os.environ.get(_TIMEZONE_ENV, "").strip() or "America/Argentina/Buenos_Aires"

ARCA_QR_URL_TEMPLATE = "https://www.afip.gob.ar/fe/qr/?p={payload}"
TRACKING_URL_TEMPLATE = (
    os.environ.get(_TRACKING_URL_ENV, "").strip() or "https://www.hoppinessclub.com/pedido/{token}"
)


def _parse_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


# Rendered QR bitmaps are square; 200px prints ~25mm wide on a 203dpi head.
QR_SIZE_PX = max(64, _parse_int(os.environ.get(_QR_SIZE_ENV), 200))
QR_BORDER_MODULES = 1
QR_ERROR_CORRECTION = "M"


def columns_for_paper(paper_width: int | None) -> int:
    """Map a paper width in millimeters to its column count."""
    if paper_width is None:
        return FALLBACK_COLUMNS
    return PAPER_COLUMNS.get(paper_width, FALLBACK_COLUMNS)


# Raster images are scaled down to the printable dot width of the paper.
RASTER_WIDTH_PX: dict[int, int] = {
    80: 512,
    58: 384,
}
FALLBACK_RASTER_WIDTH_PX = 384
# python-escpos capability profile used when expanding bitmap markers.
ESCPOS_PROFILE = "TM-T88V"


def raster_width_for_paper(paper_width: int | None) -> int:
    if paper_width is None:
        return FALLBACK_RASTER_WIDTH_PX
    return RASTER_WIDTH_PX.get(paper_width, FALLBACK_RASTER_WIDTH_PX)
