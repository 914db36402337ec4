"""Money, date and label formatting for printed documents.

Every helper here is total: bad input yields a placeholder, never an
exception.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import lru_cache
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from thermal_docs.catalog import (
    CHANNEL_LABELS,
    DEFAULT_SERVICE_LABEL,
    MODIFIER_KIND_ALIASES,
    MODIFIER_PREFIXES,
    PAYMENT_METHOD_LABELS,
    SERVICE_LABELS,
)
from thermal_docs.config import LOCAL_TIMEZONE

Money = Union[Decimal, float, int]
DateLike = Union[datetime, date, str, None]

TIME_PLACEHOLDER = "--:--"
DATE_PLACEHOLDER = "--/--/----"
DATETIME_PLACEHOLDER = f"{DATE_PLACEHOLDER} {TIME_PLACEHOLDER}"

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


@lru_cache(maxsize=1)
def _local_tz() -> tzinfo:
    try:
        return ZoneInfo(LOCAL_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def to_decimal(value: Money | None) -> Decimal:
    """Coerce a money-ish value to Decimal; unusable input becomes zero."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            # str() first so floats keep their shortest repr (1050.005, not 1050.00499...).
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError):
            return _ZERO
    if not amount.is_finite():
        return _ZERO
    return amount


def round_money(value: Money | None) -> Decimal:
    """Round to cents, half-up."""
    try:
        return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return _ZERO


def format_money(value: Money | None) -> str:
    """Format as es-AR: ``1.050,01``; integral amounts print without decimals."""
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    integral = int(amount)
    cents = int((amount - integral) * 100)
    body = f"{integral:,}".replace(",", ".")
    if cents:
        return f"{sign}{body},{cents:02d}"
    return f"{sign}{body}"


def format_percent(value: Money | None) -> str:
    """Percentage without trailing zeros: ``10``, ``12,5``."""
    amount = round_money(value)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount.normalize():f}".replace(".", ",")


def format_amount(value: Money | None, signed: bool = False) -> str:
    """Format with a currency sign: ``$1.000``, ``-$1.000`` (``+$1.000`` when signed)."""
    amount = round_money(value)
    if amount < 0:
        return f"-${format_money(-amount)}"
    if signed and amount > 0:
        return f"+${format_money(amount)}"
    return f"${format_money(amount)}"


def parse_datetime(value: DateLike) -> datetime | None:
    """Parse timestamps and dates, converting aware values to local time."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = _parse_text(value)
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(_local_tz())
        except (OverflowError, ValueError, OSError):
            return None
    return parsed


def _parse_text(raw: str) -> datetime | None:
    text = raw.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if len(text) == 8 and text.isdigit():
        text = f"{text[:4]}-{text[4:6]}-{text[6:]}"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for pattern in ("%d/%m/%Y %H:%M", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, pattern)
        except ValueError:
            continue
    return None


def format_time(value: DateLike) -> str:
    """``HH:MM`` in local time."""
    parsed = parse_datetime(value)
    if parsed is None:
        return TIME_PLACEHOLDER
    return parsed.strftime("%H:%M")


def format_date(value: DateLike) -> str:
    """``DD/MM/YYYY HH:MM`` in local time."""
    parsed = parse_datetime(value)
    if parsed is None:
        return DATETIME_PLACEHOLDER
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d} {parsed.strftime('%H:%M')}"


def format_date_only(value: DateLike) -> str:
    """``DD/MM/YYYY``."""
    parsed = parse_datetime(value)
    if parsed is None:
        return DATE_PLACEHOLDER
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def iso_date(value: DateLike) -> str | None:
    """``YYYY-MM-DD`` or None when the value cannot be read as a date."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def service_label(service_type: str | None) -> str:
    if service_type is None:
        return DEFAULT_SERVICE_LABEL
    return SERVICE_LABELS.get(service_type, DEFAULT_SERVICE_LABEL)


def channel_label(channel: str | None, service_type: str | None) -> str:
    """Sales channel label; counter and unknown channels show the service type."""
    if channel is not None and channel in CHANNEL_LABELS:
        return CHANNEL_LABELS[channel]
    return service_label(service_type)


def modifier_kind(kind: str | None) -> str:
    """Normalize a modifier kind to its catalog code (``sin``/``extra``/``cambio``/``otro``)."""
    if kind is None:
        return "otro"
    code = str(getattr(kind, "value", kind)).strip().lower()
    return MODIFIER_KIND_ALIASES.get(code, code)


def modifier_prefix(kind: str | None) -> str:
    return MODIFIER_PREFIXES.get(modifier_kind(kind), "")


def payment_method_label(method: str | None) -> str:
    if not method:
        return ""
    return PAYMENT_METHOD_LABELS.get(method, method)


def spaced(text: str) -> str:
    """Letter-space a heading: ``Centro`` -> ``C E N T R O``."""
    return " ".join(text.upper())


def zero_pad(number: int | None, width: int) -> str:
    if number is None:
        return "0" * width
    return str(number).zfill(width)
