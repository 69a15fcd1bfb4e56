from datetime import date

import pytest

from app.services import pricing


def test_reference_quote():
    """2 adults at R$ 2.500,00 split in 4 installments after 10% down."""
    total = pricing.total_price(250000, adults=2, children=0)
    down = pricing.default_down_payment(total)

    assert total == 500000
    assert down == 50000
    assert pricing.installment_value(total, down, 4) == 112500


def test_trip_length_counts_departure_day():
    assert pricing.trip_length(date(2024, 10, 15), date(2024, 10, 22)) == (8, 7)
    assert pricing.trip_length(date(2024, 10, 15), date(2024, 10, 15)) == (1, 0)


def test_children_count_towards_total():
    assert pricing.total_price(100000, adults=2, children=1) == 300000


def test_rounding_is_half_up():
    # 1005 * 0.10 = 100.5 -> 101, banker's rounding would give 100
    assert pricing.default_down_payment(1005) == 101
    # (1000 - 0) / 3 = 333.33 -> 333
    assert pricing.installment_value(1000, 0, 3) == 333
    # (1000 - 1) / 2 = 499.5 -> 500
    assert pricing.installment_value(1000, 1, 2) == 500


def test_installment_value_rejects_zero_count():
    with pytest.raises(ValueError):
        pricing.installment_value(1000, 0, 0)


def test_installment_dates_monthly():
    dates = pricing.installment_dates(date(2024, 11, 10), 4)
    assert dates == ["10/11/2024", "10/12/2024", "10/01/2025", "10/02/2025"]


def test_installment_dates_clamp_to_month_end():
    dates = pricing.installment_dates(date(2024, 1, 31), 3)
    assert dates == ["31/01/2024", "29/02/2024", "31/03/2024"]


def test_installment_dates_default_to_today():
    dates = pricing.installment_dates(None, 2, today=date(2024, 10, 1))
    assert dates == ["01/10/2024", "01/11/2024"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-10-15", date(2024, 10, 15)),
        ("15/10/2024", date(2024, 10, 15)),
        ("15-10-2024", date(2024, 10, 15)),
        ("  2024-10-15 ", date(2024, 10, 15)),
        ("not a date", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_day(raw, expected):
    assert pricing.parse_day(raw) == expected


def test_derive_quote_keeps_manual_overrides():
    """Values typed by the operator win over the formula."""
    quote = pricing.derive_quote(
        price_per_person=250000,
        adults=2,
        children=0,
        installments=3,
        total=450000,
        down_payment=90000,
        today=date(2024, 10, 1),
    )
    assert quote["total_price"] == 450000
    assert quote["down_payment"] == 90000
    assert quote["installment_value"] == 120000
    assert quote["days"] is None


def test_derive_quote_manual_total_rederives_down_payment():
    quote = pricing.derive_quote(
        price_per_person=250000,
        adults=2,
        children=0,
        installments=1,
        total=400000,
        departure=date(2024, 10, 15),
        return_=date(2024, 10, 22),
        today=date(2024, 10, 1),
    )
    assert quote["down_payment"] == 40000
    assert quote["installment_value"] == 360000
    assert (quote["days"], quote["nights"]) == (8, 7)


def test_format_brl():
    assert pricing.format_brl(112500) == "R$ 1.125,00"
    assert pricing.format_brl(5) == "R$ 0,05"
