"""Fiscal period reports: Informe X, Cierre Z and the Z audit.

Totals arrive already aggregated. Every report prints its figures in the
same order: document counts, VAT breakdown, totals, payment methods.
"""

from __future__ import annotations

from functools import partial

from thermal_docs.builder import EscPosBuilder
from thermal_docs.formatting import DateLike, format_amount, format_date, format_date_only, zero_pad
from thermal_docs.layout import render_document
from thermal_docs.models import AuditReport, FiscalBranch, PeriodTotals, XReport, ZClosing

Z_NUMBER_WIDTH = 4


def z_label(z_number: int | None) -> str:
    return f"Z {zero_pad(z_number, Z_NUMBER_WIDTH)}"


def _branch_block(b: EscPosBuilder, cols: int, branch: FiscalBranch) -> None:
    b.align_center().bold_on().line(branch.legal_name or branch.name).bold_off()
    if branch.legal_name and branch.name:
        b.line(branch.name)
    if branch.tax_id:
        b.line(f"CUIT: {branch.tax_id}")
    if branch.address:
        b.line(branch.address)
    if branch.point_of_sale is not None:
        b.line(f"Punto de venta: {zero_pad(branch.point_of_sale, 5)}")
    b.separator("=", cols)


def _report_banner(b: EscPosBuilder, cols: int, title: str, subtitle: str | None = None) -> None:
    b.align_center().double_size().bold_on().line(title).normal_size().bold_off()
    if subtitle:
        b.bold_on().line(subtitle).bold_off()
    b.separator("=", cols)


def _report_dates(b: EscPosBuilder, cols: int, business_date: DateLike, generated_at: DateLike) -> None:
    b.align_left()
    b.columns("Fecha operativa:", format_date_only(business_date), cols)
    b.columns("Emitido:", format_date(generated_at), cols)
    b.separator("-", cols)


def _counts(b: EscPosBuilder, cols: int, totals: PeriodTotals) -> None:
    counts = totals.counts
    b.align_left().bold_on().columns("Comprobantes:", str(counts.total), cols).bold_off()
    b.columns("Facturas A", str(counts.invoices_a), cols)
    b.columns("Facturas B", str(counts.invoices_b), cols)
    b.columns("Facturas C", str(counts.invoices_c), cols)
    b.columns("NC A", str(counts.credit_notes_a), cols)
    b.columns("NC B", str(counts.credit_notes_b), cols)
    b.columns("NC C", str(counts.credit_notes_c), cols)
    b.separator("-", cols)


def _vat_breakdown(b: EscPosBuilder, cols: int, totals: PeriodTotals) -> None:
    vat = totals.vat
    b.bold_on().line("IVA por alicuota").bold_off()
    b.columns("Neto gravado 21%", format_amount(vat.taxable_21), cols)
    b.columns("IVA 21%", format_amount(vat.vat_21), cols)
    b.columns("Neto gravado 10,5%", format_amount(vat.taxable_105), cols)
    b.columns("IVA 10,5%", format_amount(vat.vat_105), cols)
    b.columns("Exento", format_amount(vat.exempt), cols)
    b.columns("No gravado", format_amount(vat.non_taxable), cols)
    b.separator("-", cols)


def _totals(b: EscPosBuilder, cols: int, totals: PeriodTotals) -> None:
    b.columns("Subtotal neto", format_amount(totals.subtotal_net), cols)
    b.columns("Total IVA", format_amount(totals.total_vat), cols)
    b.bold_on().columns("TOTAL VENTAS", format_amount(totals.total_sales), cols).bold_off()
    b.columns("Notas de Credito", format_amount(-abs(totals.credit_notes_amount)), cols)
    b.bold_on().columns("NETO", format_amount(totals.net_total), cols).bold_off()
    b.separator("-", cols)


def _payment_breakdown(b: EscPosBuilder, cols: int, totals: PeriodTotals) -> None:
    payments = totals.payments
    b.bold_on().line("Medios de pago").bold_off()
    b.columns("Efectivo", format_amount(payments.cash), cols)
    b.columns("Debito", format_amount(payments.debit), cols)
    b.columns("Credito", format_amount(payments.credit), cols)
    b.columns("MP / QR", format_amount(payments.qr), cols)
    b.columns("Transferencia", format_amount(payments.transfer), cols)
    b.separator("=", cols)


def _period_sections(totals: PeriodTotals) -> list:
    return [
        partial(_counts, totals=totals),
        partial(_vat_breakdown, totals=totals),
        partial(_totals, totals=totals),
        partial(_payment_breakdown, totals=totals),
    ]


def _closing_footer(b: EscPosBuilder, cols: int, notice: str) -> None:
    b.align_center().bold_on().line(notice).bold_off().feed(2)


# ---------------------------------------------------------------------------
# Informe X


def _last_document(b: EscPosBuilder, cols: int, report: XReport) -> None:
    if report.last_document:
        b.align_left().columns("Ultimo comprobante:", report.last_document, cols)
        b.separator("-", cols)


def informe_x(report: XReport, branch: FiscalBranch, paper_width: int = 80) -> str:
    """Non-closing snapshot; the banner says so in print."""
    sections = [
        partial(_branch_block, branch=branch),
        partial(_report_banner, title="INFORME X", subtitle="NO CIERRA JORNADA"),
        partial(_report_dates, business_date=report.business_date, generated_at=report.generated_at),
        partial(_last_document, report=report),
        *_period_sections(report.totals),
        partial(_closing_footer, notice="*** DOCUMENTO NO FISCAL ***"),
    ]
    return render_document("informe_x", sections, paper_width)


# ---------------------------------------------------------------------------
# Cierre Z


def _document_range(b: EscPosBuilder, cols: int, closing: ZClosing) -> None:
    b.align_left()
    b.columns("Primer comprobante:", closing.first_document or "-", cols)
    b.columns("Ultimo comprobante:", closing.last_document or "-", cols)
    b.separator("-", cols)


def cierre_z(closing: ZClosing, branch: FiscalBranch, paper_width: int = 80) -> str:
    """Terminal closing of one business day, labelled with its Z number.

    Output depends only on the arguments: the Z number is assigned upstream.
    """
    title = f"CIERRE Z N° {zero_pad(closing.z_number, Z_NUMBER_WIDTH)}"
    sections = [
        partial(_branch_block, branch=branch),
        partial(_report_banner, title=title, subtitle="CIERRE DE JORNADA"),
        partial(_report_dates, business_date=closing.business_date, generated_at=closing.generated_at),
        partial(_document_range, closing=closing),
        *_period_sections(closing.totals),
        partial(_closing_footer, notice="*** JORNADA CERRADA ***"),
    ]
    return render_document("cierre_z", sections, paper_width)


# ---------------------------------------------------------------------------
# Auditoria


def _audit_range(b: EscPosBuilder, cols: int, report: AuditReport) -> None:
    b.align_left()
    if report.from_z is not None or report.to_z is not None:
        b.columns("Rango:", f"{z_label(report.from_z)} a {z_label(report.to_z)}", cols)
    else:
        b.columns("Desde:", format_date_only(report.from_date), cols)
        b.columns("Hasta:", format_date_only(report.to_date), cols)
    b.columns("Emitido:", format_date(report.generated_at), cols)
    b.columns("Cierres:", str(len(report.closings)), cols)
    b.separator("-", cols)


def _audit_days(b: EscPosBuilder, cols: int, report: AuditReport) -> None:
    b.bold_on().line("Detalle por jornada").bold_off()
    for closing in report.closings:
        day = f"{format_date_only(closing.business_date)} | {z_label(closing.z_number)}"
        b.columns(day, format_amount(closing.totals.total_sales), cols)
    b.separator("-", cols)


def informe_auditoria(report: AuditReport, branch: FiscalBranch, paper_width: int = 80) -> str:
    """One line per closed day followed by the totals for the whole range."""
    sections = [
        partial(_branch_block, branch=branch),
        partial(_report_banner, title="AUDITORIA", subtitle="INFORME DE CIERRES Z"),
        partial(_audit_range, report=report),
        partial(_audit_days, report=report),
        *_period_sections(report.period_totals()),
        partial(_closing_footer, notice="*** FIN DEL INFORME ***"),
    ]
    return render_document("informe_auditoria", sections, paper_width)
