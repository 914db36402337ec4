"""Value records passed into document generators."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from enum import Enum
from typing import Iterable

from thermal_docs.catalog import CONSUMER_FINAL, CREDIT_NOTE_CODES, INVOICE_CODES
from thermal_docs.formatting import DateLike, Money, modifier_kind, round_money, to_decimal


class ModifierKind(str, Enum):
    """Kinds of item modifiers; values match the catalog codes."""

    REMOVAL = "sin"
    ADDITION = "extra"
    SUBSTITUTION = "cambio"
    OTHER = "otro"


@dataclass(frozen=True)
class Modifier:
    """A change requested on a line item (``SIN cebolla``, ``+ cheddar``...)."""

    description: str
    kind: str = ModifierKind.OTHER

    @property
    def is_removal(self) -> bool:
        return modifier_kind(self.kind) == ModifierKind.REMOVAL.value


@dataclass(frozen=True)
class LineItem:
    """A product line on an order."""

    name: str | None
    quantity: int = 1
    note: str | None = None
    modifiers: tuple[Modifier, ...] = ()
    unit_price: Money | None = None
    subtotal: Money | None = None
    station: str | None = None
    category_id: str | None = None

    def line_total(self) -> Decimal | None:
        """Explicit subtotal, else unit price times quantity, else None."""
        if self.subtotal is not None:
            return round_money(self.subtotal)
        if self.unit_price is not None:
            return round_money(to_decimal(self.unit_price) * self.quantity)
        return None


@dataclass(frozen=True)
class Order:
    """An order as printed on kitchen tickets and receipts."""

    number: int
    service_type: str | None = None
    channel: str | None = None
    caller_number: int | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    external_ref: str | None = None
    delivery_time: str | None = None
    created_at: DateLike = None
    items: tuple[LineItem, ...] = ()
    subtotal: Money | None = None
    discount: Money | None = None
    discount_percent: Money | None = None
    total: Money | None = None

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def items_total(self) -> Decimal | None:
        """Sum of line totals, or None when no line carries a price."""
        totals = [item.line_total() for item in self.items]
        priced = [value for value in totals if value is not None]
        if not priced:
            return None
        return round_money(sum(priced, Decimal("0")))

    def grand_total(self) -> Decimal | None:
        """Explicit total, else the item sum minus discount."""
        if self.total is not None:
            return round_money(self.total)
        items_total = self.items_total()
        if items_total is None:
            return None
        return round_money(items_total - to_decimal(self.discount))

    def subtotal_before_discount(self) -> Decimal:
        if self.subtotal is not None:
            return round_money(self.subtotal)
        if self.total is not None:
            return round_money(to_decimal(self.total) + to_decimal(self.discount))
        return self.items_total() or Decimal("0")


@dataclass(frozen=True)
class Issuer:
    """Invoice issuer as registered with the tax authority."""

    legal_name: str
    tax_id: str
    gross_revenue_id: str = ""
    tax_regime: str = "Responsable Inscripto"
    address: str = ""
    activity_start: str = ""


@dataclass(frozen=True)
class Recipient:
    tax_regime: str = "Consumidor Final"
    name: str | None = None
    document_type: str | None = None
    document_number: str | None = None

    @property
    def is_consumer_final(self) -> bool:
        return self.tax_regime.strip().lower() == CONSUMER_FINAL


@dataclass(frozen=True)
class FiscalInvoice:
    """An authorized electronic invoice or credit note.

    ``number`` is the composite ``PPPPP-NNNNNNNN`` representation (point of
    sale, document number). ``code`` is the legal document type code as
    printed (``"06"`` for Factura B); when empty it is derived from the letter.
    """

    letter: str
    number: str
    issue_date: DateLike
    issuer: Issuer
    recipient: Recipient = field(default_factory=Recipient)
    code: str = ""
    taxable_base: Money = 0
    vat: Money = 0
    other_taxes: Money = 0
    vat_disclosed: Money = 0
    other_national_taxes: Money = 0
    cae: str = ""
    cae_expiry: DateLike = None
    credit_note: bool = False
    qr_bitmap: str | None = None

    @property
    def document_code(self) -> int:
        digits = "".join(ch for ch in self.code if ch.isdigit())
        if digits:
            return int(digits)
        table = CREDIT_NOTE_CODES if self.credit_note else INVOICE_CODES
        return table.get(self.letter.upper(), INVOICE_CODES["B"])

    @property
    def is_credit_note(self) -> bool:
        return self.credit_note or self.document_code in CREDIT_NOTE_CODES.values()

    def total(self) -> Decimal:
        """Taxable base + VAT + other taxes, rounded to cents.

        Both the printed total and the QR payload read this value.
        """
        return round_money(to_decimal(self.taxable_base) + to_decimal(self.vat) + to_decimal(self.other_taxes))

    def with_qr(self, bitmap: str) -> FiscalInvoice:
        return replace(self, qr_bitmap=bitmap)


@dataclass(frozen=True)
class Payment:
    """A payment against an order."""

    method: str
    amount: Money | None = None
    card_brand: str | None = None
    amount_received: Money | None = None
    change: Money | None = None


@dataclass(frozen=True)
class ClientReceipt:
    """Data for the client receipt; ``invoice`` switches to the fiscal layout."""

    order: Order
    payments: tuple[Payment, ...] = ()
    invoice: FiscalInvoice | None = None


@dataclass(frozen=True)
class VoidReceipt:
    order: Order
    reason: str | None = None
    voided_at: DateLike = None
    voided_by: str | None = None


@dataclass(frozen=True)
class Voucher:
    """A redemption voucher for one unit of a product."""

    product_name: str
    order_number: int
    order_time: DateLike = None
    channel: str | None = None
    service_type: str | None = None
    caller_number: int | None = None


# ---------------------------------------------------------------------------
# Fiscal period totals


def _sum_records(cls: type, records: list) -> object:
    values = {}
    for record_field in fields(cls):
        parts = [getattr(record, record_field.name) for record in records]
        if record_field.type in ("int", int):
            values[record_field.name] = sum(int(part or 0) for part in parts)
        else:
            values[record_field.name] = round_money(sum((to_decimal(part) for part in parts), Decimal("0")))
    return cls(**values)


@dataclass(frozen=True)
class DocumentCounts:
    invoices_a: int = 0
    invoices_b: int = 0
    invoices_c: int = 0
    credit_notes_a: int = 0
    credit_notes_b: int = 0
    credit_notes_c: int = 0

    @property
    def total(self) -> int:
        return sum(getattr(self, item.name) for item in fields(self))


@dataclass(frozen=True)
class VatBreakdown:
    taxable_21: Money = 0
    vat_21: Money = 0
    taxable_105: Money = 0
    vat_105: Money = 0
    exempt: Money = 0
    non_taxable: Money = 0


@dataclass(frozen=True)
class PaymentTotals:
    cash: Money = 0
    debit: Money = 0
    credit: Money = 0
    qr: Money = 0
    transfer: Money = 0


@dataclass(frozen=True)
class PeriodTotals:
    """Aggregated fiscal totals for a period (computed upstream)."""

    counts: DocumentCounts = field(default_factory=DocumentCounts)
    vat: VatBreakdown = field(default_factory=VatBreakdown)
    payments: PaymentTotals = field(default_factory=PaymentTotals)
    subtotal_net: Money = 0
    total_vat: Money = 0
    total_sales: Money = 0
    credit_notes_amount: Money = 0
    net_total: Money = 0

    @classmethod
    def combine(cls, totals: Iterable[PeriodTotals]) -> PeriodTotals:
        """Add several period totals field by field."""
        items = list(totals)
        return cls(
            counts=_sum_records(DocumentCounts, [item.counts for item in items]),
            vat=_sum_records(VatBreakdown, [item.vat for item in items]),
            payments=_sum_records(PaymentTotals, [item.payments for item in items]),
            subtotal_net=round_money(sum((to_decimal(item.subtotal_net) for item in items), Decimal("0"))),
            total_vat=round_money(sum((to_decimal(item.total_vat) for item in items), Decimal("0"))),
            total_sales=round_money(sum((to_decimal(item.total_sales) for item in items), Decimal("0"))),
            credit_notes_amount=round_money(
                sum((to_decimal(item.credit_notes_amount) for item in items), Decimal("0"))
            ),
            net_total=round_money(sum((to_decimal(item.net_total) for item in items), Decimal("0"))),
        )


@dataclass(frozen=True)
class FiscalBranch:
    """Branch identity printed on fiscal reports."""

    name: str
    legal_name: str = ""
    tax_id: str = ""
    address: str = ""
    point_of_sale: int | None = None


@dataclass(frozen=True)
class XReport:
    """Informe X: a non-closing snapshot, printable any number of times."""

    business_date: DateLike
    generated_at: DateLike
    totals: PeriodTotals = field(default_factory=PeriodTotals)
    last_document: str | None = None


@dataclass(frozen=True)
class ZClosing:
    """Cierre Z: the sequence-numbered closing of one business day."""

    z_number: int
    business_date: DateLike
    generated_at: DateLike
    totals: PeriodTotals = field(default_factory=PeriodTotals)
    first_document: str | None = None
    last_document: str | None = None


@dataclass(frozen=True)
class AuditReport:
    """A range of Z closings, selected by date or by Z number."""

    closings: tuple[ZClosing, ...]
    generated_at: DateLike = None
    from_date: DateLike = None
    to_date: DateLike = None
    from_z: int | None = None
    to_z: int | None = None

    def period_totals(self) -> PeriodTotals:
        return PeriodTotals.combine(closing.totals for closing in self.closings)


# ---------------------------------------------------------------------------
# Cash register


@dataclass(frozen=True)
class CashMovement:
    """A signed cash movement: positive is income, negative is an expense."""

    concept: str
    amount: Money
    at: DateLike = None


@dataclass(frozen=True)
class CashClosing:
    register_name: str
    opened_at: DateLike
    closed_at: DateLike
    opening_amount: Money = 0
    closing_amount: Money = 0
    shift_name: str | None = None
    cashier: str | None = None
    movements: tuple[CashMovement, ...] = ()
    income_total: Money | None = None
    expense_total: Money | None = None

    def income(self) -> Decimal:
        if self.income_total is not None:
            return round_money(self.income_total)
        return round_money(
            sum((to_decimal(m.amount) for m in self.movements if to_decimal(m.amount) > 0), Decimal("0"))
        )

    def expenses(self) -> Decimal:
        """Expense total as a positive amount."""
        if self.expense_total is not None:
            return round_money(abs(to_decimal(self.expense_total)))
        return round_money(
            -sum((to_decimal(m.amount) for m in self.movements if to_decimal(m.amount) < 0), Decimal("0"))
        )

    def expected_amount(self) -> Decimal:
        return round_money(to_decimal(self.opening_amount) + self.income() - self.expenses())

    def difference(self) -> Decimal:
        return round_money(to_decimal(self.closing_amount) - self.expected_amount())
