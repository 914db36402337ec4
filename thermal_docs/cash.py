"""Cash-register closing report."""

from __future__ import annotations

from functools import partial

from thermal_docs.builder import EscPosBuilder
from thermal_docs.formatting import format_amount, format_date, format_time, spaced
from thermal_docs.layout import header, render_document
from thermal_docs.models import CashClosing


def _banner(b: EscPosBuilder, cols: int, closing: CashClosing) -> None:
    b.separator("=", cols).align_center()
    b.bold_on().line(spaced("cierre de caja")).bold_off()
    b.double_height().line(closing.register_name).normal_size()
    b.separator("=", cols)


def _shift(b: EscPosBuilder, cols: int, closing: CashClosing) -> None:
    b.align_left()
    if closing.shift_name:
        b.line(f"Turno: {closing.shift_name}")
    if closing.cashier:
        b.line(f"Cajero: {closing.cashier}")
    b.columns("Apertura:", format_date(closing.opened_at), cols)
    b.columns("Cierre:", format_date(closing.closed_at), cols)
    b.separator("-", cols)


def _movements(b: EscPosBuilder, cols: int, closing: CashClosing) -> None:
    """Signed movement list; the sign shows income versus expense."""
    b.bold_on().line("Movimientos").bold_off()
    if not closing.movements:
        b.line("  (sin movimientos)")
    for movement in closing.movements:
        left = f"{format_time(movement.at)} {movement.concept}"
        b.columns(left, format_amount(movement.amount, signed=True), cols)
    b.separator("-", cols)


def _summary(b: EscPosBuilder, cols: int, closing: CashClosing) -> None:
    b.columns("Monto inicial", format_amount(closing.opening_amount), cols)
    b.columns("Ingresos", format_amount(closing.income(), signed=True), cols)
    b.columns("Egresos", format_amount(-closing.expenses()), cols)
    b.bold_on().columns("Esperado en caja", format_amount(closing.expected_amount()), cols).bold_off()
    b.columns("Contado al cierre", format_amount(closing.closing_amount), cols)
    b.separator("-", cols)

    difference = closing.difference()
    label = "Sobrante" if difference > 0 else "Faltante" if difference < 0 else "Diferencia"
    b.bold_on().columns(label, format_amount(difference, signed=True), cols).bold_off()
    b.separator("=", cols)


def _signature(b: EscPosBuilder, cols: int) -> None:
    b.feed(2).align_center().line("_" * min(cols, 28)).line("Firma responsable").feed(2)


def cash_closing_report(closing: CashClosing, branch_name: str, paper_width: int = 80) -> str:
    return render_document(
        "cash_closing_report",
        [
            header(branch_name, with_logo=False),
            partial(_banner, closing=closing),
            partial(_shift, closing=closing),
            partial(_movements, closing=closing),
            partial(_summary, closing=closing),
            _signature,
        ],
        paper_width,
    )
