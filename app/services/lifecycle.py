import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from app.core import config
from app.core.errors import NotFoundError, ValidationError
from app.models.domain import ProposalInput
from app.models.encoding import encode_list
from app.models.sql import PROPOSAL_STATUSES, Proposal, as_utc, utcnow
from app.services import pricing
from app.services.store import RecordStore

logger = logging.getLogger("proposal_server.lifecycle")

COPY_SUFFIX = " (Cópia)"

# Columns copied verbatim by duplicate()
CONTENT_FIELDS = (
    "package_name",
    "departure_date",
    "return_date",
    "adults",
    "children",
    "children_ages",
    "days",
    "nights",
    "cover_image_url",
    "hotel_name",
    "hotel_photos",
    "included_items",
    "price_per_person",
    "total_price",
    "down_payment",
    "installments",
    "installment_value",
    "first_installment_date",
    "installment_dates",
    "phone_number",
    "email",
    "instagram_url",
)


class ProposalLifecycle:
    """
    Status transitions and derived fields of travel proposals.

    Works against an injected RecordStore; nothing here holds state between
    calls.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = utcnow,
        validity_days: Optional[int] = None,
    ):
        self.store = store
        self.clock = clock
        self.validity_days = (
            config.PROPOSAL_VALIDITY_DAYS if validity_days is None else validity_days
        )

    # Reads

    def get(self, proposal_id: int) -> Proposal:
        proposal = self.store.select_by_id(proposal_id)
        if proposal is None:
            raise NotFoundError("Proposal", proposal_id)
        return proposal

    def list(
        self, status: Optional[str] = None, search: Optional[str] = None
    ) -> List[Proposal]:
        proposals = self.store.select_all()
        if status:
            proposals = [p for p in proposals if p.status == status]
        if search:
            needle = search.lower()
            proposals = [
                p
                for p in proposals
                if needle in p.client_name.lower()
                or (p.package_name and needle in p.package_name.lower())
            ]
        return proposals

    def get_stats(self) -> dict:
        stats = {status: 0 for status in PROPOSAL_STATUSES}
        proposals = self.store.select_all()
        for p in proposals:
            if p.status in stats:
                stats[p.status] += 1
        stats["total"] = len(proposals)
        return stats

    # Writes

    def create(self, data: ProposalInput, owner_id: Optional[int] = None) -> Proposal:
        fields = self._editable_fields(data)
        now = self.clock()
        expires_at = as_utc(data.expires_at) or self._default_expiry(now)

        proposal = Proposal(
            **fields,
            created_by=owner_id if owner_id is not None else config.DEFAULT_OWNER_ID,
            created_at=now,
            updated_at=now,
            status="pending",
            view_count=0,
            expires_at=expires_at,
        )
        proposal = self.store.insert(proposal)
        logger.info(
            f"Created proposal {proposal.id} for '{proposal.client_name}' "
            f"({proposal.total_price} cents, {proposal.installments}x)"
        )
        return proposal

    def update(self, proposal_id: int, data: ProposalInput) -> Proposal:
        fields = self._editable_fields(data)
        if data.expires_at is not None:
            fields["expires_at"] = as_utc(data.expires_at)
        fields["updated_at"] = self.clock()
        proposal = self.store.update(proposal_id, fields)
        logger.info(f"Updated proposal {proposal_id}")
        return proposal

    def duplicate(self, proposal_id: int, owner_id: Optional[int] = None) -> Proposal:
        original = self.get(proposal_id)
        now = self.clock()
        copy = Proposal(
            **{name: getattr(original, name) for name in CONTENT_FIELDS},
            client_name=f"{original.client_name}{COPY_SUFFIX}",
            created_by=owner_id if owner_id is not None else config.DEFAULT_OWNER_ID,
            created_at=now,
            updated_at=now,
            status="pending",
            view_count=0,
            viewed_at=None,
            approved_at=None,
            expires_at=self._default_expiry(now),
        )
        copy = self.store.insert(copy)
        logger.info(f"Duplicated proposal {proposal_id} as {copy.id}")
        return copy

    def mark_as_viewed(self, proposal_id: int) -> None:
        if self.store.record_view(proposal_id, self.clock()) == 0:
            logger.debug(f"View recorded for unknown proposal {proposal_id}, ignoring")

    def mark_as_approved(self, proposal_id: int) -> Proposal:
        # Also overrides expired: the operator may still close a late deal.
        now = self.clock()
        proposal = self.store.update(
            proposal_id, {"status": "approved", "approved_at": now, "updated_at": now}
        )
        logger.info(f"Proposal {proposal_id} approved")
        return proposal

    def delete(self, proposal_id: int) -> None:
        if self.store.delete(proposal_id) == 0:
            raise NotFoundError("Proposal", proposal_id)
        logger.info(f"Deleted proposal {proposal_id}")

    def expire_stale(self, now: Optional[datetime] = None) -> int:
        now = as_utc(now or self.clock())
        expired = 0
        for proposal in self.store.select_all():
            expires_at = as_utc(proposal.expires_at)
            # approved and expired are terminal for automatic transitions
            if (
                expires_at
                and expires_at < now
                and proposal.status not in ("approved", "expired")
            ):
                self.store.update(
                    proposal.id, {"status": "expired", "updated_at": now}
                )
                expired += 1
        if expired:
            logger.info(f"Expired {expired} stale proposal(s)")
        return expired

    def _default_expiry(self, now: datetime) -> Optional[datetime]:
        if self.validity_days > 0:
            return now + timedelta(days=self.validity_days)
        return None

    # Validation and derivation

    def _editable_fields(self, data: ProposalInput) -> dict:
        departure, return_, first_installment = self.validate(data)
        quote = pricing.derive_quote(
            price_per_person=data.price_per_person,
            adults=data.adults,
            children=data.children,
            installments=data.installments,
            total=data.total_price,
            down_payment=data.down_payment,
            value=data.installment_value,
            first_installment_date=first_installment,
            departure=departure,
            return_=return_,
            today=self.clock().date(),
        )
        if quote["down_payment"] > quote["total_price"]:
            raise ValidationError(
                "downPayment", "Down payment cannot exceed the total price"
            )

        installment_dates = data.installment_dates or quote["installment_dates"]

        return {
            "package_name": data.package_name or None,
            "client_name": data.client_name.strip(),
            "departure_date": data.departure_date.strip(),
            "return_date": data.return_date.strip(),
            "adults": data.adults,
            "children": data.children,
            "children_ages": encode_list(data.children_ages),
            "days": quote["days"],
            "nights": quote["nights"],
            "cover_image_url": data.cover_image_url or None,
            "hotel_name": data.hotel_name or None,
            "hotel_photos": encode_list(data.hotel_photos),
            "included_items": encode_list(data.included_items),
            "price_per_person": data.price_per_person,
            "total_price": quote["total_price"],
            "down_payment": quote["down_payment"],
            "installments": data.installments,
            "installment_value": quote["installment_value"],
            "first_installment_date": data.first_installment_date or None,
            "installment_dates": encode_list(installment_dates),
            "phone_number": data.phone_number or config.CONTACT_PHONE,
            "email": data.email or config.CONTACT_EMAIL,
            "instagram_url": data.instagram_url or config.CONTACT_INSTAGRAM,
        }

    def validate(self, data: ProposalInput):
        """Returns the parsed (departure, return, first installment) dates."""
        if not data.client_name or not data.client_name.strip():
            raise ValidationError("clientName", "Client name is required")

        if not data.departure_date or not data.return_date:
            raise ValidationError(
                "departureDate", "Departure and return dates are required"
            )
        departure = pricing.parse_day(data.departure_date)
        if departure is None:
            raise ValidationError(
                "departureDate", f"Invalid date: {data.departure_date}"
            )
        return_ = pricing.parse_day(data.return_date)
        if return_ is None:
            raise ValidationError("returnDate", f"Invalid date: {data.return_date}")
        if return_ < departure:
            raise ValidationError(
                "returnDate", "Return date cannot be before the departure date"
            )

        if data.price_per_person <= 0:
            raise ValidationError("pricePerPerson", "Price per person is required")

        if data.adults < 1:
            raise ValidationError("adults", "At least one adult is required")
        if data.children < 0:
            raise ValidationError("children", "Children cannot be negative")
        if len(data.children_ages) != data.children:
            raise ValidationError(
                "childrenAges",
                f"Expected {data.children} children ages, got {len(data.children_ages)}",
            )
        if any(age < 0 for age in data.children_ages):
            raise ValidationError("childrenAges", "Ages cannot be negative")

        if not data.included_items or not any(i.strip() for i in data.included_items):
            raise ValidationError("includedItems", "List at least one included item")

        if not 1 <= data.installments <= pricing.MAX_INSTALLMENTS:
            raise ValidationError(
                "installments",
                f"Installments must be between 1 and {pricing.MAX_INSTALLMENTS}",
            )
        if data.installment_dates and len(data.installment_dates) != data.installments:
            raise ValidationError(
                "installmentDates",
                f"Expected {data.installments} installment dates, "
                f"got {len(data.installment_dates)}",
            )

        for field, value in (
            ("totalPrice", data.total_price),
            ("downPayment", data.down_payment),
            ("installmentValue", data.installment_value),
        ):
            if value is not None and value < 0:
                raise ValidationError(field, "Amounts cannot be negative")

        first_installment = None
        if data.first_installment_date:
            first_installment = pricing.parse_day(data.first_installment_date)
            if first_installment is None:
                raise ValidationError(
                    "firstInstallmentDate",
                    f"Invalid date: {data.first_installment_date}",
                )

        return departure, return_, first_installment
