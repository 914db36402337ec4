from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import replace
from decimal import Decimal

import pytest

import thermal_docs.arca as arca
from thermal_docs.arca import (
    attach_arca_qr,
    build_qr_payload,
    build_qr_url,
    encode_qr_payload,
    recipient_doc_code,
    split_document_number,
)
from thermal_docs.models import ClientReceipt, FiscalInvoice, Order, Recipient
from thermal_docs.qr import QrRenderError

EXPECTED_KEYS = [
    "ver",
    "fecha",
    "cuit",
    "ptoVta",
    "tipoCmp",
    "nroCmp",
    "importe",
    "moneda",
    "ctz",
    "tipoDocRec",
    "nroDocRec",
    "tipoCodAut",
    "codAut",
]


def test_payload_for_invoice_b(invoice_b: FiscalInvoice) -> None:
    payload = build_qr_payload(invoice_b)
    assert list(payload) == EXPECTED_KEYS
    assert payload == {
        "ver": 1,
        "fecha": "2024-03-05",
        "cuit": 30712345678,
        "ptoVta": 1,
        "tipoCmp": 6,
        "nroCmp": 42,
        "importe": 2500,
        "moneda": "PES",
        "ctz": 1,
        "tipoDocRec": 99,
        "nroDocRec": 0,
        "tipoCodAut": "E",
        "codAut": 12345678901234,
    }


def test_payload_types_for_invoice_a(invoice_a: FiscalInvoice) -> None:
    payload = build_qr_payload(replace(invoice_a, vat=Decimal("210.555")))
    assert payload["tipoCmp"] == 1
    assert payload["ptoVta"] == 2
    assert payload["nroCmp"] == 100
    assert payload["tipoDocRec"] == 80
    assert payload["nroDocRec"] == 30700000001
    assert payload["importe"] == 1210.56
    assert isinstance(payload["importe"], float)


def test_credit_note_code(invoice_b: FiscalInvoice) -> None:
    assert build_qr_payload(replace(invoice_b, credit_note=True))["tipoCmp"] == 8
    assert build_qr_payload(replace(invoice_b, code="013"))["tipoCmp"] == 13


def test_printed_total_and_qr_amount_agree(invoice_b: FiscalInvoice) -> None:
    invoice = replace(invoice_b, taxable_base=Decimal("826.45"), vat=Decimal("173.555"), other_taxes=0)
    assert invoice.total() == Decimal("1000.01")
    assert build_qr_payload(invoice)["importe"] == 1000.01


def test_malformed_number_falls_back_to_zero(caplog: pytest.LogCaptureFixture, invoice_b: FiscalInvoice) -> None:
    with caplog.at_level(logging.WARNING, logger="thermal_docs.arca"):
        payload = build_qr_payload(replace(invoice_b, number="A-42"))
    assert (payload["ptoVta"], payload["nroCmp"]) == (0, 0)
    assert "A-42" in caplog.text


def test_unparseable_date_is_kept_verbatim(invoice_b: FiscalInvoice) -> None:
    assert build_qr_payload(replace(invoice_b, issue_date="ayer"))["fecha"] == "ayer"


@pytest.mark.parametrize(
    ("composite", "expected"),
    [
        ("00001-00000042", (1, 42)),
        (" 0003 - 12 ", (3, 12)),
        ("", (0, 0)),
        (None, (0, 0)),
        ("00001-0000004x", (0, 0)),
    ],
)
def test_split_document_number(composite: str | None, expected: tuple[int, int]) -> None:
    assert split_document_number(composite) == expected


def test_recipient_doc_code() -> None:
    assert recipient_doc_code("CUIT") == 80
    assert recipient_doc_code("cuit") == 80
    assert recipient_doc_code("DNI") == 99
    assert recipient_doc_code(None) == 99


def test_url_embeds_compact_base64_json(invoice_b: FiscalInvoice) -> None:
    url = build_qr_url(invoice_b)
    prefix = "https://www.afip.gob.ar/fe/qr/?p="
    assert url.startswith(prefix)
    encoded = url[len(prefix) :]
    raw = base64.b64decode(encoded).decode("utf-8")
    assert " " not in raw
    assert json.loads(raw) == build_qr_payload(invoice_b)
    assert encoded == encode_qr_payload(build_qr_payload(invoice_b))


def test_attach_arca_qr_renders_bitmap(invoice_b: FiscalInvoice) -> None:
    receipt = ClientReceipt(order=Order(number=1), invoice=invoice_b)
    attached = asyncio.run(attach_arca_qr(receipt))
    assert attached.invoice is not None
    png = base64.b64decode(attached.invoice.qr_bitmap)
    assert png.startswith(b"\x89PNG")
    assert receipt.invoice.qr_bitmap is None


def test_attach_arca_qr_degrades_on_failure(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture, invoice_b: FiscalInvoice
) -> None:
    async def broken(text: str, size_px: int = 200) -> str:
        raise QrRenderError("renderer offline")

    monkeypatch.setattr(arca, "render_qr_base64", broken)
    receipt = ClientReceipt(order=Order(number=1), invoice=invoice_b)
    with caplog.at_level(logging.WARNING, logger="thermal_docs.arca"):
        result = asyncio.run(attach_arca_qr(receipt))
    assert result is receipt
    assert "renderer offline" in caplog.text


def test_attach_arca_qr_skips_receipts_without_invoice() -> None:
    receipt = ClientReceipt(order=Order(number=1))
    assert asyncio.run(attach_arca_qr(receipt)) is receipt


def test_attach_arca_qr_keeps_existing_bitmap(invoice_b: FiscalInvoice) -> None:
    receipt = ClientReceipt(order=Order(number=1), invoice=invoice_b.with_qr("UVJR"))
    assert asyncio.run(attach_arca_qr(receipt)) is receipt


def test_recipient_document_number_digits_only(invoice_b: FiscalInvoice) -> None:
    invoice = replace(invoice_b, recipient=Recipient(document_type="DNI", document_number="30.111.222"))
    assert build_qr_payload(invoice)["nroDocRec"] == 30111222
