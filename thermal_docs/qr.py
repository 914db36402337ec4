"""QR code rendering for printed documents.

Rendering goes through ``qrcode`` + Pillow and returns a PNG data URL,
the same contract as a browser-side QR renderer. Callers embed the bare
base64 (see ``strip_data_url``) through ``EscPosBuilder.print_bitmap``.
"""

from __future__ import annotations

import asyncio
import base64
import io

from thermal_docs.config import QR_BORDER_MODULES, QR_ERROR_CORRECTION, QR_SIZE_PX, TRACKING_URL_TEMPLATE

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


class QrRenderError(RuntimeError):
    """The QR image could not be produced."""


def _error_correction(level: str) -> int:
    from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

    levels = {
        "L": ERROR_CORRECT_L,
        "M": ERROR_CORRECT_M,
        "Q": ERROR_CORRECT_Q,
        "H": ERROR_CORRECT_H,
    }
    return levels.get(level.upper(), ERROR_CORRECT_M)


def render_qr_data_url(
    text: str,
    size_px: int = QR_SIZE_PX,
    error_correction: str = QR_ERROR_CORRECTION,
) -> str:
    """Render ``text`` as a square black-on-white PNG data URL of ``size_px``."""
    try:
        import qrcode
        from PIL import Image

        qr = qrcode.QRCode(error_correction=_error_correction(error_correction), border=QR_BORDER_MODULES)
        qr.add_data(text)
        qr.make(fit=True)
        matrix = qr.get_matrix()

        modules = len(matrix)
        img = Image.new("1", (modules, modules), color=1)
        img.putdata([0 if dark else 255 for row in matrix for dark in row])
        img = img.resize((size_px, size_px), Image.NEAREST)

        out = io.BytesIO()
        img.save(out, format="PNG")
    except Exception as exc:
        raise QrRenderError(f"QR render failed: {exc}") from exc
    return PNG_DATA_URL_PREFIX + base64.b64encode(out.getvalue()).decode("ascii")


def strip_data_url(data_url: str) -> str:
    """Drop a ``data:...;base64,`` prefix, leaving bare base64."""
    if data_url.startswith("data:") and "," in data_url:
        return data_url.split(",", 1)[1]
    return data_url


async def render_qr_base64(text: str, size_px: int = QR_SIZE_PX) -> str:
    """Render off the event loop and return bare base64 PNG.

    Raises ``QrRenderError``; calls are independent and may run concurrently.
    """
    data_url = await asyncio.to_thread(render_qr_data_url, text, size_px)
    return strip_data_url(data_url)


def tracking_url(token: str) -> str:
    return TRACKING_URL_TEMPLATE.format(token=token)


async def generate_tracking_qr_bitmap(token: str) -> str:
    """QR bitmap for a delivery tracking link (plain URL, no fixed schema)."""
    return await render_qr_base64(tracking_url(token))
