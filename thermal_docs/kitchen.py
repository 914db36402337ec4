"""Kitchen tickets (comandas): no prices, big order numbers."""

from __future__ import annotations

from functools import partial
from typing import Sequence

from thermal_docs.builder import EscPosBuilder
from thermal_docs.formatting import channel_label, format_time, spaced
from thermal_docs.layout import header, kitchen_items, render_document
from thermal_docs.models import LineItem, Order


def _banner(b: EscPosBuilder, cols: int, station: str | None = None) -> None:
    b.align_center().feed(1).bold_on().line(spaced("comanda")).bold_off()
    if station:
        b.bold_on().line(f"--- {station.upper()} ---").bold_off()
    b.feed(1)


def _order_ident(b: EscPosBuilder, cols: int, order: Order, show_customer: bool = True) -> None:
    """Order number, channel and caller, enlarged to be read from across a kitchen."""
    b.align_center()
    b.double_size().bold_on().line(f"# {order.number}").normal_size().bold_off()
    b.bold_on().line(channel_label(order.channel, order.service_type)).bold_off()
    if order.caller_number:
        b.double_height().bold_on().line(f"LLAMADOR #{order.caller_number}").normal_size().bold_off()
    if show_customer and order.customer_name:
        b.line(order.customer_name)


def _time_rule(b: EscPosBuilder, cols: int, order: Order) -> None:
    b.feed(1).align_left()
    b.columns(format_time(order.created_at), "", cols)
    b.separator("=", cols)


def _item_count(b: EscPosBuilder, cols: int, items: Sequence[LineItem], label: str = "Items") -> None:
    b.align_center().line(f"{label}: {sum(item.quantity for item in items)}").feed(1)


def _delivery_block(b: EscPosBuilder, cols: int, order: Order) -> None:
    if order.external_ref:
        b.align_center().line(order.external_ref)
    b.align_left().separator("=", cols)
    if order.customer_name:
        b.bold_on().line(order.customer_name).bold_off()
    if order.customer_address:
        b.line(order.customer_address)
    if order.customer_phone:
        b.line(f"Tel: {order.customer_phone}")
    if order.delivery_time:
        b.bold_on().line(f"Entrega: {order.delivery_time}").bold_off()
    b.separator("=", cols)


def _tracking_qr(b: EscPosBuilder, cols: int, bitmap: str) -> None:
    b.align_center().line("Segui tu pedido").print_bitmap(bitmap).feed(1)


def kitchen_ticket(order: Order, branch_name: str, paper_width: int = 80) -> str:
    """Full kitchen ticket with every item of the order."""
    return render_document(
        "kitchen_ticket",
        [
            header(branch_name),
            _banner,
            partial(_order_ident, order=order),
            partial(_time_rule, order=order),
            partial(kitchen_items, items=order.items),
            partial(_item_count, items=order.items),
        ],
        paper_width,
    )


def station_items_for(order: Order, station_name: str) -> tuple[LineItem, ...]:
    wanted = station_name.strip().casefold()
    return tuple(item for item in order.items if (item.station or "").strip().casefold() == wanted)


def station_ticket(
    order: Order,
    station_name: str,
    branch_name: str,
    paper_width: int = 80,
    station_items: Sequence[LineItem] | None = None,
) -> str:
    """Kitchen ticket for one prep station.

    Without ``station_items`` the order's items are filtered by their
    ``station`` field.
    """
    items = tuple(station_items) if station_items is not None else station_items_for(order, station_name)
    return render_document(
        "station_ticket",
        [
            header(branch_name),
            partial(_banner, station=station_name),
            partial(_order_ident, order=order),
            partial(_time_rule, order=order),
            partial(kitchen_items, items=items),
            partial(_item_count, items=items, label="Items estacion"),
        ],
        paper_width,
    )


def delivery_kitchen_ticket(
    order: Order,
    branch_name: str,
    paper_width: int = 80,
    tracking_qr: str | None = None,
) -> str:
    """Kitchen ticket for delivery: adds who/where/when and the tracking QR."""
    sections = [
        header(branch_name),
        _banner,
        partial(_order_ident, order=order, show_customer=False),
        partial(_delivery_block, order=order),
        partial(_time_rule, order=order),
        partial(kitchen_items, items=order.items),
        partial(_item_count, items=order.items),
    ]
    if tracking_qr:
        sections.append(partial(_tracking_qr, bitmap=tracking_qr))
    return render_document("delivery_kitchen_ticket", sections, paper_width)
