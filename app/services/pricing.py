"""
Derived money and date fields for a proposal.

All amounts are integer cents. Rounding is half-up to the nearest cent and
nothing redistributes the remainder, so down payment plus the installments can
differ from the total by a few cents.
"""
import calendar
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple, Union

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y")
INSTALLMENT_DATE_FORMAT = "%d/%m/%Y"
DOWN_PAYMENT_RATE = Decimal("0.10")
MAX_INSTALLMENTS = 12


def parse_day(value: Union[str, date, None]) -> Optional[date]:
    """Parses YYYY-MM-DD, DD/MM/YYYY or DD-MM-YYYY. Returns None when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def round_cents(value: Decimal) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def trip_length(departure: date, return_: date) -> Tuple[int, int]:
    """Returns (days, nights). The departure day counts as a day."""
    nights = (return_ - departure).days
    return nights + 1, nights


def total_price(price_per_person: int, adults: int, children: int) -> int:
    return round_cents(Decimal(price_per_person) * (adults + children))


def default_down_payment(total: int) -> int:
    return round_cents(Decimal(total) * DOWN_PAYMENT_RATE)


def installment_value(total: int, down_payment: int, count: int) -> int:
    if count <= 0:
        raise ValueError("installment count must be positive")
    return round_cents(Decimal(total - down_payment) / Decimal(count))


def add_months(base: date, months: int) -> date:
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    # 31/01 + 1 month lands on the last day of February
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def installment_dates(
    first_date: Optional[date], count: int, today: Optional[date] = None
) -> List[str]:
    base = first_date or today or date.today()
    return [
        add_months(base, i).strftime(INSTALLMENT_DATE_FORMAT) for i in range(count)
    ]


def derive_quote(
    price_per_person: int,
    adults: int,
    children: int,
    installments: int,
    total: Optional[int] = None,
    down_payment: Optional[int] = None,
    value: Optional[int] = None,
    first_installment_date: Optional[date] = None,
    departure: Optional[date] = None,
    return_: Optional[date] = None,
    today: Optional[date] = None,
) -> dict:
    """
    Fills in whatever the operator did not type.

    An explicitly supplied total, down payment or installment value wins over
    the formula (the form lets the operator overwrite each of them).
    """
    if total is None:
        total = total_price(price_per_person, adults, children)
    if down_payment is None:
        down_payment = default_down_payment(total)
    if value is None:
        value = installment_value(total, down_payment, installments)

    quote = {
        "total_price": total,
        "down_payment": down_payment,
        "installments": installments,
        "installment_value": value,
        "installment_dates": installment_dates(
            first_installment_date, installments, today
        ),
        "days": None,
        "nights": None,
    }
    if departure and return_:
        quote["days"], quote["nights"] = trip_length(departure, return_)
    return quote


def format_brl(cents: int) -> str:
    """12345 -> 'R$ 123,45'"""
    v = Decimal(cents) / 100
    return f"R$ {v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
