"""Document skeleton and the sections shared by every generator.

A document is an ordered list of sections. Each section receives the
builder and the column count for the current paper, so no section ever
picks a width on its own.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Iterable, Sequence

from thermal_docs.assets import logo_base64
from thermal_docs.builder import EscPosBuilder
from thermal_docs.config import BRAND_NAME, FOOTER_THANKS, FOOTER_WEBSITE, ITEM_PLACEHOLDER, columns_for_paper
from thermal_docs.formatting import format_amount, modifier_prefix, spaced
from thermal_docs.models import LineItem, Modifier

logger = logging.getLogger(__name__)

Section = Callable[[EscPosBuilder, int], None]

FAILED_SECTION_NOTICE = "[seccion no disponible]"


def section_name(section: Section) -> str:
    func = section.func if isinstance(section, partial) else section
    return getattr(func, "__name__", repr(func))


def render_document(name: str, sections: Iterable[Section], paper_width: int | None) -> str:
    """Run ``sections`` in order and return the cut document as base64.

    A failing section is logged and replaced by a one-line notice; the rest
    of the document, including the cut, is always emitted.
    """
    cols = columns_for_paper(paper_width)
    builder = EscPosBuilder().init()
    for section in sections:
        try:
            section(builder, cols)
        except Exception:
            logger.warning(
                "Section %s failed while encoding %s; printing without it",
                section_name(section),
                name,
                exc_info=True,
            )
            builder.reset_style().line(FAILED_SECTION_NOTICE)
    builder.cut()
    return builder.to_base64()


# ---------------------------------------------------------------------------
# Shared sections


def brand_header(b: EscPosBuilder, cols: int, branch_name: str, with_logo: bool = True) -> None:
    """Logo (which already carries the brand wordmark) and the spaced-out branch name."""
    b.align_center()
    logo = logo_base64() if with_logo else None
    if logo:
        b.print_bitmap(logo).feed(1)
    else:
        b.double_size().bold_on().line(BRAND_NAME).normal_size().bold_off()
    if branch_name:
        b.line(spaced(branch_name))


def header(branch_name: str, with_logo: bool = True) -> Section:
    return partial(brand_header, branch_name=branch_name, with_logo=with_logo)


def thanks_footer(b: EscPosBuilder, cols: int) -> None:
    b.feed(1).align_center().line(FOOTER_THANKS).line(FOOTER_WEBSITE).feed(2)


# ---------------------------------------------------------------------------
# Item helpers


def item_name(item: LineItem) -> str:
    return item.name or ITEM_PLACEHOLDER


def item_label(item: LineItem) -> str:
    return f"{item.quantity}x {item_name(item)}"


def modifier_text(modifier: Modifier) -> str:
    """Prefixed description; removals are upper-cased."""
    prefix = modifier_prefix(modifier.kind)
    description = modifier.description.strip()
    if modifier.is_removal:
        description = description.upper()
    if prefix and description.upper().startswith(prefix.upper()):
        # Already written with its prefix ("SIN cebolla").
        prefix = ""
    return f"{prefix}{description}"


def print_modifiers(b: EscPosBuilder, item: LineItem) -> None:
    for modifier in item.modifiers:
        text = f"   {modifier_text(modifier)}"
        if modifier.is_removal:
            b.bold_on().line(text).bold_off()
        else:
            b.line(text)
    if item.note:
        b.line(f"   * {item.note}")


def kitchen_items(b: EscPosBuilder, cols: int, items: Sequence[LineItem]) -> None:
    """Large item lines without prices, each followed by its modifiers."""
    for item in items:
        b.bold_on().double_height().line(item_label(item)).normal_size().bold_off()
        print_modifiers(b, item)
        b.separator("-", cols)


def priced_items(b: EscPosBuilder, cols: int, items: Sequence[LineItem]) -> None:
    for item in items:
        total = item.line_total()
        price = format_amount(total) if total is not None else ""
        b.columns(item_label(item), price, cols)
        print_modifiers(b, item)
