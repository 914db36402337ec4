"""ARCA (ex AFIP) electronic invoice QR payload.

The verification app decodes ``https://www.afip.gob.ar/fe/qr/?p=<base64(JSON)>``
and checks every field against the authorization. Key names, key order and
the int-vs-string typing below are fixed by the authority.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import replace
from decimal import Decimal
from typing import Any

from thermal_docs.catalog import DEFAULT_RECIPIENT_DOC_CODE, RECIPIENT_DOC_CODES
from thermal_docs.config import ARCA_QR_URL_TEMPLATE
from thermal_docs.formatting import iso_date
from thermal_docs.models import ClientReceipt, FiscalInvoice
from thermal_docs.qr import QrRenderError, render_qr_base64

logger = logging.getLogger(__name__)

QR_PAYLOAD_VERSION = 1
CURRENCY_CODE = "PES"
EXCHANGE_RATE = 1
AUTHORIZATION_TYPE = "E"  # CAE; "A" would be CAEA

_COMPOSITE_NUMBER = re.compile(r"^\s*(\d{1,5})\s*-\s*(\d{1,8})\s*$")


def _digits(text: str | None) -> str:
    if not text:
        return ""
    return re.sub(r"\D", "", str(text))


def _int_digits(text: str | None) -> int:
    digits = _digits(text)
    return int(digits) if digits else 0


def split_document_number(composite: str | None) -> tuple[int, int]:
    """``"00001-00000042"`` -> ``(1, 42)``; malformed input -> ``(0, 0)``."""
    match = _COMPOSITE_NUMBER.match(composite or "")
    if match is None:
        logger.warning("Malformed invoice number %r; QR payload uses 0-0", composite)
        return (0, 0)
    return (int(match.group(1)), int(match.group(2)))


def recipient_doc_code(document_type: str | None) -> int:
    return RECIPIENT_DOC_CODES.get((document_type or "").strip().upper(), DEFAULT_RECIPIENT_DOC_CODE)


def _json_amount(amount: Decimal) -> int | float:
    # JSON number as a JS client would write it: 2500 rather than 2500.0.
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def build_qr_payload(invoice: FiscalInvoice) -> dict[str, Any]:
    """Assemble the payload fields in the authority's order."""
    point_of_sale, number = split_document_number(invoice.number)

    issued = iso_date(invoice.issue_date)
    if issued is None:
        logger.warning("Unparseable invoice date %r; QR payload keeps it verbatim", invoice.issue_date)
        issued = str(invoice.issue_date or "")

    return {
        "ver": QR_PAYLOAD_VERSION,
        "fecha": issued,
        "cuit": _int_digits(invoice.issuer.tax_id),
        "ptoVta": point_of_sale,
        "tipoCmp": invoice.document_code,
        "nroCmp": number,
        "importe": _json_amount(invoice.total()),
        "moneda": CURRENCY_CODE,
        "ctz": EXCHANGE_RATE,
        "tipoDocRec": recipient_doc_code(invoice.recipient.document_type),
        "nroDocRec": _int_digits(invoice.recipient.document_number),
        "tipoCodAut": AUTHORIZATION_TYPE,
        "codAut": _int_digits(invoice.cae),
    }


def encode_qr_payload(payload: dict[str, Any]) -> str:
    raw = json.dumps(payload, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def build_qr_url(invoice: FiscalInvoice) -> str:
    return ARCA_QR_URL_TEMPLATE.format(payload=encode_qr_payload(build_qr_payload(invoice)))


async def generate_arca_qr_bitmap(invoice: FiscalInvoice) -> str:
    """Base64 PNG of the invoice QR. Raises ``QrRenderError``."""
    return await render_qr_base64(build_qr_url(invoice))


async def attach_arca_qr(receipt: ClientReceipt) -> ClientReceipt:
    """Return ``receipt`` with its invoice QR rendered.

    A render failure is logged and the receipt comes back unchanged, so the
    ticket still prints (without QR).
    """
    invoice = receipt.invoice
    if invoice is None or invoice.qr_bitmap:
        return receipt
    try:
        bitmap = await generate_arca_qr_bitmap(invoice)
    except QrRenderError as exc:
        logger.warning("ARCA QR unavailable for invoice %s: %s", invoice.number, exc)
        return receipt
    return replace(receipt, invoice=invoice.with_qr(bitmap))
