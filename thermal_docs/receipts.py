"""Customer-facing documents: receipts, void tickets, vouchers, test page."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import partial
from typing import Sequence

from thermal_docs.builder import EscPosBuilder
from thermal_docs.formatting import (
    DateLike,
    channel_label,
    format_amount,
    format_date,
    format_date_only,
    format_money,
    format_percent,
    format_time,
    payment_method_label,
    round_money,
    spaced,
    to_decimal,
)
from thermal_docs.layout import header, priced_items, render_document, thanks_footer
from thermal_docs.models import ClientReceipt, FiscalInvoice, Order, Payment, VoidReceipt, Voucher

NOT_AN_INVOICE = "*** NO VALIDO COMO FACTURA ***"


def _order_block(b: EscPosBuilder, cols: int, order: Order) -> None:
    b.align_left().separator("-", cols)
    b.columns(f"Pedido #{order.number}", format_date(order.created_at), cols)
    channel = channel_label(order.channel, order.service_type)
    if order.caller_number:
        b.columns(channel, f"Llamador: #{order.caller_number}", cols)
    else:
        b.line(channel)
    if order.customer_name:
        b.line(f"Cliente: {order.customer_name}")
    b.separator("-", cols).feed(1)


def _items(b: EscPosBuilder, cols: int, order: Order) -> None:
    priced_items(b, cols, order.items)
    b.separator("=", cols)


def _totals(b: EscPosBuilder, cols: int, order: Order) -> None:
    discount = round_money(order.discount)
    if discount > 0:
        b.columns("Subtotal", format_amount(order.subtotal_before_discount()), cols)
        if order.discount_percent is not None and to_decimal(order.discount_percent) > 0:
            label = f"Desc. {format_percent(order.discount_percent)}%"
        else:
            label = "Descuento"
        b.columns(label, format_amount(-discount), cols)

    total = order.grand_total()
    if total is not None:
        b.feed(1).align_center().bold_on().line(spaced("total"))
        b.double_size().line(f"$ {format_money(total)}").normal_size().bold_off().align_left()
    b.feed(1)


def _payments(b: EscPosBuilder, cols: int, payments: Sequence[Payment]) -> None:
    if len(payments) == 1:
        payment = payments[0]
        b.columns(f"Pago: {payment_method_label(payment.method)}", payment.card_brand or "", cols)
        if payment.amount_received is not None and payment.change is not None:
            b.columns(
                f"Recibido: {format_amount(payment.amount_received)}",
                f"Vuelto: {format_amount(payment.change)}",
                cols,
            )
    elif payments:
        labels = " + ".join(payment_method_label(payment.method) for payment in payments)
        b.columns(f"Pago: Mixto: {labels}", "", cols)
        for payment in payments:
            amount = format_amount(payment.amount) if payment.amount is not None else ""
            b.columns(f"  {payment_method_label(payment.method)}", amount, cols)
    b.separator("-", cols)


def _not_an_invoice(b: EscPosBuilder, cols: int) -> None:
    b.feed(1).align_center().bold_on().line(NOT_AN_INVOICE).bold_off()


def _issuer_block(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    issuer = invoice.issuer
    b.separator("=", cols).align_center()
    b.bold_on().line(spaced("original")).bold_off().feed(1)
    b.bold_on().line(issuer.legal_name).bold_off()
    b.line(f"CUIT: {issuer.tax_id}")
    b.line(f"IIBB: {issuer.gross_revenue_id or issuer.tax_id}")
    b.line(issuer.tax_regime)
    if issuer.address:
        b.line(issuer.address)
    if issuer.activity_start:
        b.line(f"Inicio Act.: {format_date_only(issuer.activity_start)}")
    b.separator("-", cols)


def _document_banner(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    kind = "NOTA DE CREDITO" if invoice.is_credit_note else "FACTURA"
    b.align_center()
    b.double_size().bold_on().line(invoice.letter.upper()).normal_size().bold_off()
    b.bold_on().line(f"{kind} (Cod. {invoice.document_code:02d})").bold_off()
    b.bold_on().line(f"N° {invoice.number}").bold_off()
    b.line(f"Fecha: {format_date_only(invoice.issue_date)}")
    b.separator("-", cols)


def _recipient_block(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    recipient = invoice.recipient
    b.align_left()
    if recipient.is_consumer_final:
        b.bold_on().line("A CONSUMIDOR FINAL").bold_off()
    else:
        b.bold_on().line(recipient.tax_regime.upper()).bold_off()
    if recipient.name:
        b.line(f"Apellido y Nombre: {recipient.name}")
    if recipient.document_number:
        b.line(f"{recipient.document_type or 'DNI'}: {recipient.document_number}")
    b.separator("-", cols)


def _fiscal_totals(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    # VAT is discriminated only on class A documents.
    if invoice.letter.upper() == "A":
        b.columns("Neto gravado:", format_amount(invoice.taxable_base), cols)
        b.columns("IVA:", format_amount(invoice.vat), cols)
    else:
        b.columns("Subtotal:", format_amount(to_decimal(invoice.taxable_base) + to_decimal(invoice.vat)), cols)
    if round_money(invoice.other_taxes) > 0:
        b.columns("Otros tributos:", format_amount(invoice.other_taxes), cols)
    b.bold_on().columns("Total:", format_amount(invoice.total()), cols).bold_off()
    b.separator("-", cols)


def _transparency_block(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    """Consumer tax transparency disclosure (Ley 27.743)."""
    b.align_center().line("Reg. Transparencia Fiscal").line("al Consumidor (Ley 27.743)").align_left()
    b.columns("IVA Contenido:", format_amount(invoice.vat_disclosed), cols)
    b.columns("Otros Imp. Nac.:", format_amount(invoice.other_national_taxes), cols)
    b.separator("=", cols)


def _authorization_block(b: EscPosBuilder, cols: int, invoice: FiscalInvoice) -> None:
    b.align_center()
    if invoice.qr_bitmap:
        b.print_bitmap(invoice.qr_bitmap)
    b.feed(1).bold_on().line("Comprobante Autorizado").bold_off()
    cae = f"CAE: {invoice.cae}"
    expiry = f"Vto: {format_date_only(invoice.cae_expiry)}"
    # The CAE must never be truncated.
    if len(cae) + len(expiry) + 1 <= cols:
        b.columns(cae, expiry, cols)
    else:
        b.line(cae).line(expiry)


def _fiscal_sections(invoice: FiscalInvoice) -> list:
    return [
        partial(_issuer_block, invoice=invoice),
        partial(_document_banner, invoice=invoice),
        partial(_recipient_block, invoice=invoice),
        partial(_fiscal_totals, invoice=invoice),
        partial(_transparency_block, invoice=invoice),
        partial(_authorization_block, invoice=invoice),
    ]


def client_receipt(receipt: ClientReceipt, branch_name: str, paper_width: int = 80) -> str:
    """Client receipt with prices and payment.

    With an invoice attached the fiscal blocks are printed; without one the
    ticket carries the not-an-invoice banner instead.
    """
    order = receipt.order
    sections = [
        header(branch_name),
        partial(_order_block, order=order),
        partial(_items, order=order),
        partial(_totals, order=order),
        partial(_payments, payments=receipt.payments),
    ]
    if receipt.invoice is None:
        sections.append(_not_an_invoice)
    else:
        sections.extend(_fiscal_sections(receipt.invoice))
    sections.append(thanks_footer)
    return render_document("client_receipt", sections, paper_width)


def _delivery_customer(b: EscPosBuilder, cols: int, order: Order) -> None:
    b.align_center().double_height().bold_on().line(spaced("delivery")).normal_size().bold_off()
    if order.external_ref:
        b.line(order.external_ref)
    b.align_left()
    if order.customer_address:
        b.line(order.customer_address)
    if order.customer_phone:
        b.line(f"Tel: {order.customer_phone}")
    if order.delivery_time:
        b.bold_on().line(f"Entrega: {order.delivery_time}").bold_off()
    b.separator("-", cols)


def delivery_client_receipt(order: Order, branch_name: str, paper_width: int = 80) -> str:
    """Receipt packed with a delivery when the order is marked ready."""
    return render_document(
        "delivery_client_receipt",
        [
            header(branch_name),
            partial(_order_block, order=order),
            partial(_delivery_customer, order=order),
            partial(_items, order=order),
            partial(_totals, order=order),
            _not_an_invoice,
            thanks_footer,
        ],
        paper_width,
    )


def _void_banner(b: EscPosBuilder, cols: int) -> None:
    b.align_center().feed(1)
    b.double_size().bold_on().line(spaced("anulado")).normal_size().bold_off()
    b.feed(1)


def _void_details(b: EscPosBuilder, cols: int, void: VoidReceipt) -> None:
    total = void.order.grand_total()
    b.align_left()
    b.bold_on().columns("Total original:", format_amount(total) if total is not None else "-", cols).bold_off()
    b.separator("-", cols)
    if void.reason:
        b.line(f"Motivo: {void.reason}")
    if void.voided_at is not None:
        b.line(f"Anulado: {format_date(void.voided_at)}")
    if void.voided_by:
        b.line(f"Por: {void.voided_by}")
    b.feed(1).align_center().bold_on().line(f"*** PEDIDO #{void.order.number} ANULADO ***").bold_off().feed(2)


def void_receipt(void: VoidReceipt, branch_name: str, paper_width: int = 80) -> str:
    """Cancellation ticket: reprints the order and its original total under a void banner."""
    return render_document(
        "void_receipt",
        [
            header(branch_name),
            _void_banner,
            partial(_order_block, order=void.order),
            partial(_items, order=void.order),
            partial(_void_details, void=void),
        ],
        paper_width,
    )


def _voucher_body(b: EscPosBuilder, cols: int, voucher: Voucher) -> None:
    b.separator("=", cols).align_center().feed(1)
    b.double_size().bold_on().line(spaced("vale")).normal_size().bold_off().feed(1)
    b.double_size().bold_on().line(voucher.product_name).normal_size().bold_off().feed(1)
    b.separator("=", cols)
    b.line(f"Pedido #{voucher.order_number} - {format_time(voucher.order_time)}")
    if voucher.channel:
        b.line(channel_label(voucher.channel, voucher.service_type))
    if voucher.caller_number:
        b.line(f"Llamador #{voucher.caller_number}")
    b.feed(1)


def redemption_voucher(voucher: Voucher, paper_width: int = 80) -> str:
    """Voucher for one unit of a product; no logo so it never passes for a receipt."""
    return render_document("redemption_voucher", [partial(_voucher_body, voucher=voucher)], paper_width)


def _test_body(b: EscPosBuilder, cols: int, printer_name: str, paper_width: int, printed_at: DateLike) -> None:
    b.separator("=", cols).align_center()
    b.bold_on().line("TEST DE IMPRESORA").bold_off()
    b.separator("-", cols)
    b.line(f"Impresora: {printer_name}")
    b.line(f"Ancho: {paper_width}mm ({cols} columnas)")
    b.line(f"Fecha: {format_date(printed_at)}")
    b.separator("-", cols)

    b.align_left()
    b.bold_on().line("Texto en negrita").bold_off()
    b.underline_on().line("Texto subrayado").underline_off()
    b.double_height().line("Texto doble alto").normal_size()
    b.double_width().line("Texto doble ancho").normal_size()
    b.double_size().line("Texto grande").normal_size()
    b.align_center().line("Centrado")
    b.align_right().line("Derecha")
    b.align_left().line("Acentos: áéíóú ÁÉÍÓÚ ñÑ ü ¿¡")
    b.columns("Columnas", f"${format_money(1234.56)}", cols)
    b.separator("=", cols)

    b.align_center().line("Si ves esto, funciona OK!").line("Logo + texto = impresora lista").feed(2)


def test_page(
    printer_name: str,
    branch_name: str,
    paper_width: int = 80,
    printed_at: DateLike = None,
) -> str:
    """Hardware check page exercising every text style once."""
    if printed_at is None:
        printed_at = datetime.now(timezone.utc)
    return render_document(
        "test_page",
        [
            header(branch_name),
            partial(_test_body, printer_name=printer_name, paper_width=paper_width, printed_at=printed_at),
        ],
        paper_width,
    )

