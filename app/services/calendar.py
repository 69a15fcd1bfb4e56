from datetime import datetime
from ics import Calendar, Event

from app.models.encoding import decode_list
from app.models.sql import Proposal
from app.services.pricing import format_brl, parse_day


def generate_installment_ics(proposal: Proposal) -> bytes:
    """
    One all-day event per installment due date.
    Dates that cannot be parsed are skipped.
    """
    cal = Calendar()
    dates = decode_list(proposal.installment_dates)
    title = proposal.package_name or proposal.client_name

    for number, raw_date in enumerate(dates, start=1):
        due = parse_day(raw_date) if isinstance(raw_date, str) else None
        if due is None:
            continue

        event = Event()
        event.name = f"Installment {number}/{len(dates)}: {title}"
        event.begin = datetime.combine(due, datetime.min.time())
        event.make_all_day()
        event.description = (
            f"Client: {proposal.client_name}\n"
            f"Amount: {format_brl(proposal.installment_value)}"
        )
        cal.events.add(event)

    return cal.serialize().encode("utf-8")
