from __future__ import annotations

import base64
from datetime import date, datetime
from decimal import Decimal

from thermal_docs.builder import CUT_PAPER, fit_columns
from thermal_docs.fiscal_reports import cierre_z, informe_auditoria, informe_x, z_label
from thermal_docs.models import (
    AuditReport,
    DocumentCounts,
    FiscalBranch,
    PaymentTotals,
    PeriodTotals,
    XReport,
    ZClosing,
)


def _decode(encoded: str) -> bytes:
    return base64.b64decode(encoded)


def _row(left: str, right: str, cols: int = 42) -> bytes:
    return fit_columns(left, right, cols).encode("latin-1") + b"\n"


def _closing(period_totals: PeriodTotals, generated_at: datetime) -> ZClosing:
    return ZClosing(
        z_number=17,
        business_date=date(2024, 3, 5),
        generated_at=generated_at,
        totals=period_totals,
        first_document="00001-00000100",
        last_document="00001-00000112",
    )


def test_informe_x_banner_says_it_does_not_close(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    report = XReport(business_date="2024-03-05", generated_at=datetime(2024, 3, 5, 15, 30), totals=period_totals)
    data = _decode(informe_x(report, fiscal_branch, 80))
    assert b"INFORME X\n" in data
    assert b"NO CIERRA JORNADA\n" in data
    assert b"CIERRE Z" not in data
    assert _row("Fecha operativa:", "05/03/2024") in data
    assert data.endswith(CUT_PAPER)


def test_sections_print_in_fixed_order(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    report = XReport(business_date="2024-03-05", generated_at="2024-03-05T18:00:00Z", totals=period_totals)
    data = _decode(informe_x(report, fiscal_branch, 80))
    counts = data.index(b"Comprobantes:")
    vat = data.index(b"IVA por alicuota")
    totals = data.index(b"TOTAL VENTAS")
    payments = data.index(b"Medios de pago")
    assert counts < vat < totals < payments


def test_report_figures(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    report = XReport(business_date="2024-03-05", generated_at=None, totals=period_totals)
    data = _decode(informe_x(report, fiscal_branch, 58))
    assert _row("Comprobantes:", "13", 32) in data
    assert _row("Facturas B", "10", 32) in data
    assert _row("NC B", "1", 32) in data
    assert _row("Neto gravado 21%", "$10.000", 32) in data
    assert _row("IVA 21%", "$2.100", 32) in data
    assert _row("TOTAL VENTAS", "$12.100", 32) in data
    assert _row("Notas de Credito", "-$500", 32) in data
    assert _row("NETO", "$11.600", 32) in data
    assert _row("Efectivo", "$7.000", 32) in data
    assert _row("MP / QR", "$1.500", 32) in data
    assert b"=" * 32 + b"\n" in data
    assert b"=" * 33 not in data


def test_branch_block(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    report = XReport(business_date="2024-03-05", generated_at=None, totals=period_totals)
    data = _decode(informe_x(report, fiscal_branch))
    assert b"HOPPINESS SRL\n" in data
    assert b"Centro\n" in data
    assert b"CUIT: 30-71234567-8\n" in data
    assert b"Punto de venta: 00001\n" in data


def test_cierre_z_banner_and_document_range(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    data = _decode(cierre_z(_closing(period_totals, datetime(2024, 3, 5, 23, 59)), fiscal_branch, 80))
    assert "CIERRE Z N° 0017\n".encode("latin-1") in data
    assert b"INFORME X" not in data
    assert b"NO CIERRA" not in data
    assert _row("Primer comprobante:", "00001-00000100") in data
    assert _row("Ultimo comprobante:", "00001-00000112") in data
    assert data.endswith(CUT_PAPER)


def test_cierre_z_is_deterministic(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    stamp = datetime(2024, 3, 5, 23, 59)
    first = cierre_z(_closing(period_totals, stamp), fiscal_branch, 80)
    second = cierre_z(_closing(period_totals, stamp), fiscal_branch, 80)
    assert first == second


def test_cierre_z_differs_only_in_timestamp(period_totals: PeriodTotals, fiscal_branch: FiscalBranch) -> None:
    first = _decode(cierre_z(_closing(period_totals, datetime(2024, 3, 5, 23, 59)), fiscal_branch))
    second = _decode(cierre_z(_closing(period_totals, datetime(2024, 3, 6, 0, 5)), fiscal_branch))
    assert first != second
    assert first.replace(b"05/03/2024 23:59", b"X") == second.replace(b"06/03/2024 00:05", b"X")


def test_audit_prints_one_line_per_day_and_period_totals(fiscal_branch: FiscalBranch) -> None:
    day_one = PeriodTotals(
        counts=DocumentCounts(invoices_b=3),
        payments=PaymentTotals(cash=Decimal("1000")),
        total_sales=Decimal("1000"),
        net_total=Decimal("1000"),
    )
    day_two = PeriodTotals(
        counts=DocumentCounts(invoices_b=2, credit_notes_b=1),
        payments=PaymentTotals(cash=Decimal("250.50"), debit=Decimal("500")),
        total_sales=Decimal("750.50"),
        credit_notes_amount=Decimal("100"),
        net_total=Decimal("650.50"),
    )
    report = AuditReport(
        closings=(
            ZClosing(z_number=1, business_date="2024-03-01", generated_at=None, totals=day_one),
            ZClosing(z_number=2, business_date="2024-03-02", generated_at=None, totals=day_two),
        ),
        from_z=1,
        to_z=2,
    )
    data = _decode(informe_auditoria(report, fiscal_branch, 80))
    assert b"AUDITORIA\n" in data
    assert _row("Rango:", "Z 0001 a Z 0002") in data
    assert _row("Cierres:", "2") in data
    assert _row("01/03/2024 | Z 0001", "$1.000") in data
    assert _row("02/03/2024 | Z 0002", "$750,50") in data
    assert _row("Comprobantes:", "6") in data
    assert _row("TOTAL VENTAS", "$1.750,50") in data
    assert _row("Efectivo", "$1.250,50") in data
    assert _row("Notas de Credito", "-$100") in data
    assert _row("NETO", "$1.650,50") in data
    assert data.index(b"Detalle por jornada") < data.index(b"Comprobantes:")


def test_audit_by_date_range(fiscal_branch: FiscalBranch) -> None:
    report = AuditReport(closings=(), from_date="2024-03-01", to_date="2024-03-31")
    data = _decode(informe_auditoria(report, fiscal_branch, 58))
    assert _row("Desde:", "01/03/2024", 32) in data
    assert _row("Hasta:", "31/03/2024", 32) in data
    assert _row("Comprobantes:", "0", 32) in data
    assert data.endswith(CUT_PAPER)


def test_period_totals_combine() -> None:
    combined = PeriodTotals.combine(
        [
            PeriodTotals(counts=DocumentCounts(invoices_a=1), total_sales=Decimal("10.10")),
            PeriodTotals(counts=DocumentCounts(invoices_a=2, invoices_c=1), total_sales=Decimal("5.05")),
        ]
    )
    assert combined.counts.invoices_a == 3
    assert combined.counts.total == 4
    assert combined.total_sales == Decimal("15.15")


def test_z_label() -> None:
    assert z_label(7) == "Z 0007"
    assert z_label(None) == "Z 0000"
