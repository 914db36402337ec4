"""Decide which documents a sale prints, and on which printer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from thermal_docs.arca import attach_arca_qr
from thermal_docs.kitchen import delivery_kitchen_ticket, kitchen_ticket, station_items_for, station_ticket
from thermal_docs.layout import item_label, item_name
from thermal_docs.models import ClientReceipt, FiscalInvoice, LineItem, Order, Payment, Voucher
from thermal_docs.qr import QrRenderError, generate_tracking_qr_bitmap
from thermal_docs.receipts import client_receipt, redemption_voucher

logger = logging.getLogger(__name__)

PRINT_AS_KITCHEN = "comanda"
PRINT_AS_VOUCHER = "vale"
PRINT_NOTHING = "no_imprimir"
SALON_SERVICE = "comer_aca"


@dataclass(frozen=True)
class Printer:
    id: str
    name: str
    paper_width: int = 80
    active: bool = True


@dataclass(frozen=True)
class Category:
    """Menu category; ``print_type`` is ``comanda``, ``vale`` or ``no_imprimir``."""

    id: str
    name: str = ""
    print_type: str = PRINT_AS_KITCHEN


@dataclass(frozen=True)
class PrintConfig:
    """Per-branch printer assignment.

    ``station_printers`` maps a prep station name to its printer id. When it
    is empty the whole order goes to ``kitchen_printer_id``.
    """

    ticket_enabled: bool = False
    ticket_printer_id: str | None = None
    kitchen_printer_id: str | None = None
    delivery_enabled: bool = False
    delivery_printer_id: str | None = None
    voucher_printer_id: str | None = None
    salon_vouchers_enabled: bool = True
    station_printers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PrintJob:
    type: str
    printer_id: str
    label: str
    data_base64: str


class _Printers:
    def __init__(self, printers: Iterable[Printer]) -> None:
        self._by_id = {printer.id: printer for printer in printers}

    def get(self, printer_id: str | None) -> Printer | None:
        if not printer_id:
            return None
        printer = self._by_id.get(printer_id)
        if printer is None:
            logger.warning("Printer %s is not configured for this branch; skipping", printer_id)
            return None
        if not printer.active:
            logger.info("Printer %s (%s) is inactive; skipping", printer.name, printer.id)
            return None
        return printer


def _print_type(item: LineItem, categories: dict[str, Category]) -> str:
    category = categories.get(item.category_id or "")
    return category.print_type if category is not None else PRINT_AS_KITCHEN


def _split_items(
    order: Order,
    categories: dict[str, Category],
    vouchers_enabled: bool,
) -> tuple[tuple[LineItem, ...], tuple[LineItem, ...]]:
    """Split items into (kitchen, voucher) lines; ``no_imprimir`` lines go nowhere."""
    kitchen: list[LineItem] = []
    vouchers: list[LineItem] = []
    for item in order.items:
        print_type = _print_type(item, categories)
        if print_type == PRINT_NOTHING:
            continue
        if print_type == PRINT_AS_VOUCHER and vouchers_enabled:
            vouchers.append(item)
        else:
            kitchen.append(item)
    return tuple(kitchen), tuple(vouchers)


def _warn_unprinted(order: Order, items: Sequence[LineItem]) -> None:
    names = ", ".join(item_label(item) for item in items)
    logger.warning("Order #%s: no kitchen printer available, not printed: %s", order.number, names)


def _kitchen_jobs(
    order: Order,
    config: PrintConfig,
    printers: _Printers,
    branch_name: str,
    tracking_qr: str | None,
) -> list[PrintJob]:
    if not order.items:
        return []

    if order.service_type == "delivery":
        printer = printers.get(config.delivery_printer_id) if config.delivery_enabled else None
        printer = printer or printers.get(config.kitchen_printer_id)
        if printer is None:
            _warn_unprinted(order, order.items)
            return []
        data = delivery_kitchen_ticket(order, branch_name, printer.paper_width, tracking_qr=tracking_qr)
        return [PrintJob("delivery", printer.id, f"Comanda delivery #{order.number}", data)]

    jobs: list[PrintJob] = []
    assigned: set[int] = set()
    for station, printer_id in config.station_printers.items():
        items = station_items_for(order, station)
        printer = printers.get(printer_id)
        if not items or printer is None:
            continue
        assigned.update(id(item) for item in items)
        data = station_ticket(order, station, branch_name, printer.paper_width, station_items=items)
        jobs.append(PrintJob("comanda_estacion", printer.id, f"Comanda {station}", data))

    leftover = tuple(item for item in order.items if id(item) not in assigned)
    printer = printers.get(config.kitchen_printer_id)
    if leftover and printer is None:
        _warn_unprinted(order, leftover)
    elif leftover:
        data = kitchen_ticket(replace(order, items=leftover), branch_name, printer.paper_width)
        jobs.append(PrintJob("comanda_completa", printer.id, f"Comanda #{order.number}", data))
    return jobs


def _voucher_jobs(order: Order, items: Sequence[LineItem], config: PrintConfig, printers: _Printers) -> list[PrintJob]:
    printer = printers.get(config.voucher_printer_id) or printers.get(config.kitchen_printer_id)
    if printer is None or not items:
        return []
    jobs = []
    for item in items:
        voucher = Voucher(
            product_name=item_name(item),
            order_number=order.number,
            order_time=order.created_at,
            channel=order.channel,
            service_type=order.service_type,
            caller_number=order.caller_number,
        )
        data = redemption_voucher(voucher, printer.paper_width)
        # One voucher per unit.
        jobs.extend(PrintJob("vale", printer.id, f"Vale {voucher.product_name}", data) for _ in range(item.quantity))
    return jobs


def build_print_jobs(
    order: Order,
    config: PrintConfig,
    printers: Iterable[Printer],
    categories: Iterable[Category],
    branch_name: str,
    is_salon: bool | None = None,
    payments: Sequence[Payment] = (),
    invoice: FiscalInvoice | None = None,
    tracking_qr: str | None = None,
) -> list[PrintJob]:
    """Encode every document a sale prints, in printing order.

    Client receipt first (when enabled), then kitchen tickets, then vouchers.
    ``is_salon`` defaults to whether the order is served in the dining room.
    Any QR bitmap must already be rendered; see ``prepare_print_jobs``.
    """
    available = _Printers(printers)
    by_id = {category.id: category for category in categories}
    if is_salon is None:
        is_salon = order.service_type == SALON_SERVICE
    kitchen_items, voucher_items = _split_items(order, by_id, is_salon and config.salon_vouchers_enabled)

    jobs: list[PrintJob] = []
    if config.ticket_enabled:
        printer = available.get(config.ticket_printer_id)
        if printer is not None:
            receipt = ClientReceipt(order=order, payments=tuple(payments), invoice=invoice)
            data = client_receipt(receipt, branch_name, printer.paper_width)
            jobs.append(PrintJob("ticket", printer.id, f"Ticket #{order.number}", data))

    kitchen_order = replace(order, items=kitchen_items)
    jobs.extend(_kitchen_jobs(kitchen_order, config, available, branch_name, tracking_qr))
    jobs.extend(_voucher_jobs(order, voucher_items, config, available))
    logger.debug("Order #%s: %d print jobs", order.number, len(jobs))
    return jobs


async def _with_arca_qr(
    order: Order, payments: Sequence[Payment], invoice: FiscalInvoice | None
) -> FiscalInvoice | None:
    if invoice is None:
        return None
    receipt = await attach_arca_qr(ClientReceipt(order=order, payments=tuple(payments), invoice=invoice))
    return receipt.invoice


async def _tracking_qr(order: Order, token: str | None) -> str | None:
    if not token or order.service_type != "delivery":
        return None
    try:
        return await generate_tracking_qr_bitmap(token)
    except QrRenderError as exc:
        logger.warning("Tracking QR unavailable for order #%s: %s", order.number, exc)
        return None


async def prepare_print_jobs(
    order: Order,
    config: PrintConfig,
    printers: Iterable[Printer],
    categories: Iterable[Category],
    branch_name: str,
    is_salon: bool | None = None,
    payments: Sequence[Payment] = (),
    invoice: FiscalInvoice | None = None,
    tracking_token: str | None = None,
) -> list[PrintJob]:
    """Render the invoice and tracking QR codes, then build the jobs.

    Both QR codes render concurrently. Failures are logged and the documents
    print without them.
    """
    invoice, tracking_qr = await asyncio.gather(
        _with_arca_qr(order, payments, invoice),
        _tracking_qr(order, tracking_token),
    )

    return build_print_jobs(
        order,
        config,
        printers,
        categories,
        branch_name,
        is_salon=is_salon,
        payments=payments,
        invoice=invoice,
        tracking_qr=tracking_qr,
    )
