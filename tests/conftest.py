from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from thermal_docs.models import (
    DocumentCounts,
    FiscalBranch,
    FiscalInvoice,
    Issuer,
    LineItem,
    Modifier,
    ModifierKind,
    Order,
    PaymentTotals,
    PeriodTotals,
    Recipient,
    VatBreakdown,
)

ARGENTINA = timezone(timedelta(hours=-3))

# base64 of b"LOGO"; keeps headers short and free of random base64 text.
STUB_LOGO = "TE9HTw=="


@pytest.fixture(autouse=True)
def stub_logo(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr("thermal_docs.layout.logo_base64", lambda: STUB_LOGO)
    return STUB_LOGO


@pytest.fixture(autouse=True)
def fixed_local_tz(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("thermal_docs.formatting._local_tz", lambda: ARGENTINA)


@pytest.fixture
def burger_order() -> Order:
    return Order(
        number=42,
        service_type="comer_aca",
        channel="mostrador",
        caller_number=7,
        customer_name="Lucia",
        created_at=datetime(2024, 3, 5, 20, 15, tzinfo=ARGENTINA),
        items=(
            LineItem(
                name="Burger",
                quantity=2,
                unit_price=1000,
                modifiers=(Modifier("cebolla", ModifierKind.REMOVAL),),
                station="parrilla",
            ),
            LineItem(name="Papas", quantity=1, unit_price=500, station="freidora"),
        ),
    )


@pytest.fixture
def issuer() -> Issuer:
    return Issuer(
        legal_name="HOPPINESS SRL",
        tax_id="30-71234567-8",
        gross_revenue_id="901-123456-7",
        address="Av. Colon 1234, Cordoba",
        activity_start="2020-01-15",
    )


@pytest.fixture
def invoice_b(issuer: Issuer) -> FiscalInvoice:
    return FiscalInvoice(
        letter="B",
        number="00001-00000042",
        issue_date="20240305",
        issuer=issuer,
        taxable_base=Decimal("2066.12"),
        vat=Decimal("433.88"),
        vat_disclosed=Decimal("433.88"),
        cae="12345678901234",
        cae_expiry="2024-03-15",
    )


@pytest.fixture
def invoice_a(issuer: Issuer) -> FiscalInvoice:
    return FiscalInvoice(
        letter="A",
        number="00002-00000100",
        issue_date="2024-03-05",
        issuer=issuer,
        recipient=Recipient(
            tax_regime="Responsable Inscripto",
            name="Proveedora SA",
            document_type="CUIT",
            document_number="30-70000000-1",
        ),
        taxable_base=1000,
        vat=210,
        cae="98765432109876",
        cae_expiry="2024-03-15",
    )


@pytest.fixture
def period_totals() -> PeriodTotals:
    return PeriodTotals(
        counts=DocumentCounts(invoices_b=10, invoices_c=2, credit_notes_b=1),
        vat=VatBreakdown(taxable_21=Decimal("10000"), vat_21=Decimal("2100")),
        payments=PaymentTotals(cash=Decimal("7000"), debit=Decimal("3100"), qr=Decimal("1500")),
        subtotal_net=Decimal("10000"),
        total_vat=Decimal("2100"),
        total_sales=Decimal("12100"),
        credit_notes_amount=Decimal("500"),
        net_total=Decimal("11600"),
    )


@pytest.fixture
def fiscal_branch() -> FiscalBranch:
    return FiscalBranch(
        name="Centro",
        legal_name="HOPPINESS SRL",
        tax_id="30-71234567-8",
        address="Av. Colon 1234",
        point_of_sale=1,
    )
