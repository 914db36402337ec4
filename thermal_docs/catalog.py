"""Editable static label tables printed on tickets."""

from __future__ import annotations

SERVICE_LABELS: dict[str, str] = {
    "comer_aca": "SALON",
    "delivery": "DELIVERY",
    "takeaway": "TAKEAWAY",
}
DEFAULT_SERVICE_LABEL = "TAKEAWAY"

# `mostrador` (counter) has no entry and falls back to the service label.
CHANNEL_LABELS: dict[str, str] = {
    "rappi": "RAPPI",
    "pedidosya": "PEDIDOSYA",
    "masdelivery": "MASDELIVERY",
    "webapp": "WEBAPP",
}

MODIFIER_PREFIXES: dict[str, str] = {
    "sin": "SIN ",
    "extra": "+ ",
    "cambio": "> ",
}

MODIFIER_KIND_ALIASES: dict[str, str] = {
    "removal": "sin",
    "addition": "extra",
    "substitution": "cambio",
    "other": "otro",
}

PAYMENT_METHOD_LABELS: dict[str, str] = {
    "efectivo": "Efectivo",
    "tarjeta_debito": "Tarjeta debito",
    "tarjeta_credito": "Tarjeta credito",
    "mercadopago_qr": "QR Mercado Pago",
    "transferencia": "Transferencia",
}

# ARCA document type codes by letter.
INVOICE_CODES: dict[str, int] = {
    "A": 1,
    "B": 6,
    "C": 11,
}
CREDIT_NOTE_CODES: dict[str, int] = {
    "A": 3,
    "B": 8,
    "C": 13,
}

# Recipient document types accepted by the ARCA QR payload.
RECIPIENT_DOC_CODES: dict[str, int] = {
    "CUIT": 80,
}
DEFAULT_RECIPIENT_DOC_CODE = 99

CONSUMER_FINAL = "consumidor final"
