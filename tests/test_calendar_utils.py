import pytest

from app.models.domain import ProposalInput
from app.services.calendar import generate_installment_ics


@pytest.fixture
def proposal(lifecycle, proposal_payload):
    return lifecycle.create(ProposalInput(**proposal_payload()))


def test_one_event_per_installment(proposal):
    ics_str = generate_installment_ics(proposal).decode("utf-8")

    assert "BEGIN:VCALENDAR" in ics_str
    assert ics_str.count("BEGIN:VEVENT") == 4
    assert "SUMMARY:Installment 1/4: Porto Seguro - Primavera" in ics_str
    assert "DTSTART;VALUE=DATE:20241110" in ics_str
    assert "DTSTART;VALUE=DATE:20250210" in ics_str
    assert "R$ 1.125\\,00" in ics_str or "R$ 1.125,00" in ics_str


def test_unparseable_dates_are_skipped(proposal, store):
    store.update(
        proposal.id, {"installment_dates": '["10/11/2024", "someday", 5]'}
    )
    ics_str = generate_installment_ics(store.select_by_id(proposal.id)).decode("utf-8")
    assert ics_str.count("BEGIN:VEVENT") == 1


def test_falls_back_to_client_name(lifecycle, proposal_payload):
    proposal = lifecycle.create(
        ProposalInput(**proposal_payload(packageName=None, installments=1))
    )
    ics_str = generate_installment_ics(proposal).decode("utf-8")
    assert "SUMMARY:Installment 1/1: Maria Souza" in ics_str
