from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.api.deps import (
    get_file_store,
    get_lifecycle,
    owner_id_for,
    proposal_access,
)
from app.core.errors import ValidationError
from app.models.domain import (
    ActionResult,
    BatchImageUpload,
    BatchUploadResult,
    ExpireResult,
    FailedUpload,
    ImageUpload,
    ProposalInput,
    ProposalOut,
    ProposalStats,
    Quote,
    QuoteRequest,
    StoredImage,
)
from app.models.sql import PROPOSAL_STATUSES
from app.services import pricing
from app.services.calendar import generate_installment_ics
from app.services.files import LocalFileStore, upload_image, upload_many
from app.services.lifecycle import ProposalLifecycle

router = APIRouter(
    prefix="/proposals", tags=["Proposals"], dependencies=[Depends(proposal_access)]
)


@router.get("/", response_model=List[ProposalOut])
def list_proposals(
    status: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    lifecycle: ProposalLifecycle = Depends(get_lifecycle),
):
    if status and status not in PROPOSAL_STATUSES:
        raise ValidationError("status", f"Unknown status: {status}")
    return [ProposalOut.from_row(p) for p in lifecycle.list(status, search)]


@router.get("/stats", response_model=ProposalStats)
def get_stats(lifecycle: ProposalLifecycle = Depends(get_lifecycle)):
    return ProposalStats(**lifecycle.get_stats())


@router.post("/quote", response_model=Quote)
def quote(request: QuoteRequest):
    """Recomputes the derived price fields the way the proposal form does."""
    first_date = pricing.parse_day(request.first_installment_date)
    if request.first_installment_date and first_date is None:
        raise ValidationError(
            "firstInstallmentDate", f"Invalid date: {request.first_installment_date}"
        )
    departure = pricing.parse_day(request.departure_date)
    return_ = pricing.parse_day(request.return_date)
    if departure and return_ and return_ < departure:
        raise ValidationError(
            "returnDate", "Return date cannot be before the departure date"
        )
    return Quote(
        **pricing.derive_quote(
            price_per_person=request.price_per_person,
            adults=request.adults,
            children=request.children,
            installments=request.installments,
            total=request.total_price,
            down_payment=request.down_payment,
            first_installment_date=first_date,
            departure=departure,
            return_=return_,
        )
    )


@router.post("/expire-stale", response_model=ExpireResult)
def expire_stale(lifecycle: ProposalLifecycle = Depends(get_lifecycle)):
    return ExpireResult(expired=lifecycle.expire_stale())


@router.post("/upload-image", response_model=StoredImage)
def upload_single_image(
    upload: ImageUpload,
    files: LocalFileStore = Depends(get_file_store),
    user=Depends(proposal_access),
):
    stored = upload_image(
        files, upload.file_name, upload.file_data, upload.mime_type, owner_id_for(user)
    )
    return StoredImage(key=stored.key, url=stored.url)


@router.post("/upload-images", response_model=BatchUploadResult)
def upload_images(
    batch: BatchImageUpload,
    files: LocalFileStore = Depends(get_file_store),
    user=Depends(proposal_access),
):
    stored, failed = upload_many(files, batch.files, owner_id_for(user))
    return BatchUploadResult(
        uploaded=[StoredImage(key=s.key, url=s.url) for s in stored],
        failed=[FailedUpload(file_name=e.file_name, error=e.message) for e in failed],
    )


@router.get("/{proposal_id}", response_model=ProposalOut)
def get_proposal(
    proposal_id: int, lifecycle: ProposalLifecycle = Depends(get_lifecycle)
):
    return ProposalOut.from_row(lifecycle.get(proposal_id))


@router.post("/", response_model=ProposalOut)
def create_proposal(
    data: ProposalInput,
    lifecycle: ProposalLifecycle = Depends(get_lifecycle),
    user=Depends(proposal_access),
):
    return ProposalOut.from_row(lifecycle.create(data, owner_id=owner_id_for(user)))


@router.put("/{proposal_id}", response_model=ProposalOut)
def update_proposal(
    proposal_id: int,
    data: ProposalInput,
    lifecycle: ProposalLifecycle = Depends(get_lifecycle),
):
    return ProposalOut.from_row(lifecycle.update(proposal_id, data))


@router.delete("/{proposal_id}", response_model=ActionResult)
def delete_proposal(
    proposal_id: int, lifecycle: ProposalLifecycle = Depends(get_lifecycle)
):
    lifecycle.delete(proposal_id)
    return ActionResult()


@router.post("/{proposal_id}/duplicate", response_model=ProposalOut)
def duplicate_proposal(
    proposal_id: int,
    lifecycle: ProposalLifecycle = Depends(get_lifecycle),
    user=Depends(proposal_access),
):
    return ProposalOut.from_row(
        lifecycle.duplicate(proposal_id, owner_id=owner_id_for(user))
    )


@router.post("/{proposal_id}/view", response_model=ActionResult)
def mark_as_viewed(
    proposal_id: int, lifecycle: ProposalLifecycle = Depends(get_lifecycle)
):
    lifecycle.mark_as_viewed(proposal_id)
    return ActionResult()


@router.post("/{proposal_id}/approve", response_model=ActionResult)
def mark_as_approved(
    proposal_id: int, lifecycle: ProposalLifecycle = Depends(get_lifecycle)
):
    lifecycle.mark_as_approved(proposal_id)
    return ActionResult()


@router.get("/{proposal_id}/calendar")
def installment_calendar(
    proposal_id: int, lifecycle: ProposalLifecycle = Depends(get_lifecycle)
):
    proposal = lifecycle.get(proposal_id)
    filename = f"installments_{proposal.id}.ics"
    return Response(
        content=generate_installment_ics(proposal),
        media_type="text/calendar",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
