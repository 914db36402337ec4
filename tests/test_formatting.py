from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from thermal_docs.formatting import (
    DATE_PLACEHOLDER,
    DATETIME_PLACEHOLDER,
    TIME_PLACEHOLDER,
    channel_label,
    format_amount,
    format_date,
    format_date_only,
    format_money,
    format_percent,
    format_time,
    iso_date,
    modifier_prefix,
    payment_method_label,
    round_money,
    spaced,
    zero_pad,
)
from thermal_docs.models import ModifierKind


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1050.005, "1.050,01"),
        (1050.004, "1.050"),
        (Decimal("0.125"), "0,13"),
        (Decimal("2.675"), "2,68"),
        (2500, "2.500"),
        (1234567.5, "1.234.567,50"),
        (-1234.5, "-1.234,50"),
        (0, "0"),
    ],
)
def test_format_money_rounds_half_up(value: object, expected: str) -> None:
    assert format_money(value) == expected


def test_format_money_is_idempotent_on_rounded_values() -> None:
    once = round_money(1050.005)
    assert format_money(once) == format_money(round_money(once)) == "1.050,01"


@pytest.mark.parametrize("value", [None, float("nan"), float("inf"), "no es plata", True])
def test_format_money_bad_input_prints_zero(value: object) -> None:
    assert format_money(value) == "0"


def test_format_amount_signs() -> None:
    assert format_amount(1000) == "$1.000"
    assert format_amount(-1000) == "-$1.000"
    assert format_amount(1000, signed=True) == "+$1.000"
    assert format_amount(0, signed=True) == "$0"


@pytest.mark.parametrize(("value", "expected"), [(10, "10"), (12.5, "12,5"), (Decimal("7.25"), "7,25"), (None, "0")])
def test_format_percent_drops_trailing_zeros(value: object, expected: str) -> None:
    assert format_percent(value) == expected


def test_time_and_date_from_utc_timestamp() -> None:
    # Local time is pinned to UTC-3 in conftest.
    assert format_time("2024-03-05T17:07:00Z") == "14:07"
    assert format_date("2024-03-05T17:07:00Z") == "05/03/2024 14:07"


def test_naive_values_are_taken_as_local() -> None:
    assert format_time(datetime(2024, 3, 5, 9, 5)) == "09:05"
    assert format_date_only(date(2024, 12, 31)) == "31/12/2024"


@pytest.mark.parametrize("value", ["20240305", "2024-03-05", "2024-03-05T10:00:00", "05/03/2024"])
def test_fiscal_dates_print_day_first(value: str) -> None:
    assert format_date_only(value) == "05/03/2024"
    assert iso_date(value) == "2024-03-05"


@pytest.mark.parametrize("value", [None, "", "mañana", "2024-13-45"])
def test_unparseable_dates_use_placeholders(value: object) -> None:
    assert format_time(value) == TIME_PLACEHOLDER
    assert format_date(value) == DATETIME_PLACEHOLDER
    assert format_date_only(value) == DATE_PLACEHOLDER
    assert iso_date(value) is None


def test_channel_label_prefers_known_channel() -> None:
    assert channel_label("rappi", "delivery") == "RAPPI"
    assert channel_label("pedidosya", None) == "PEDIDOSYA"


def test_channel_label_falls_back_to_service_type() -> None:
    assert channel_label("mostrador", "comer_aca") == "SALON"
    assert channel_label("desconocido", "delivery") == "DELIVERY"
    assert channel_label(None, None) == "TAKEAWAY"
    assert channel_label(None, "algo_raro") == "TAKEAWAY"


def test_modifier_prefixes() -> None:
    assert modifier_prefix("sin") == "SIN "
    assert modifier_prefix("removal") == "SIN "
    assert modifier_prefix(ModifierKind.ADDITION) == "+ "
    assert modifier_prefix("cambio") == "> "
    assert modifier_prefix("otro") == ""
    assert modifier_prefix(None) == ""


def test_payment_method_label_passes_unknown_through() -> None:
    assert payment_method_label("mercadopago_qr") == "QR Mercado Pago"
    assert payment_method_label("cheque") == "cheque"
    assert payment_method_label(None) == ""


def test_spaced_and_zero_pad() -> None:
    assert spaced("Centro") == "C E N T R O"
    assert zero_pad(7, 4) == "0007"
    assert zero_pad(None, 4) == "0000"
