from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.encoding import decode_list
from app.models.sql import as_utc


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProposalInput(CamelModel):
    """
    Editable proposal fields as sent by the form.

    Required-field checks live in the lifecycle validator so that every
    failure is reported with its field name. Derived values left as None
    are computed on save.
    """

    package_name: Optional[str] = None
    client_name: str = ""
    departure_date: Optional[str] = None
    return_date: Optional[str] = None
    adults: int = 2
    children: int = 0
    children_ages: List[int] = Field(default_factory=list)
    cover_image_url: Optional[str] = None
    hotel_name: Optional[str] = None
    hotel_photos: List[str] = Field(default_factory=list)
    included_items: List[str] = Field(default_factory=list)
    price_per_person: int = 0
    total_price: Optional[int] = None
    down_payment: Optional[int] = None
    installments: int = 1
    installment_value: Optional[int] = None
    first_installment_date: Optional[str] = None
    installment_dates: Optional[List[str]] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    instagram_url: Optional[str] = None
    expires_at: Optional[datetime] = None

    # Older form builds send these lists already stringified.
    @field_validator("children_ages", "hotel_photos", mode="before")
    @classmethod
    def _parse_stringified_list(cls, value):
        if isinstance(value, str):
            return decode_list(value)
        if value is None:
            return []
        return value


class ProposalOut(CamelModel):
    id: int
    package_name: Optional[str] = None
    client_name: str
    departure_date: str
    return_date: str
    adults: int
    children: int
    children_ages: List[int]
    days: Optional[int] = None
    nights: Optional[int] = None
    cover_image_url: Optional[str] = None
    hotel_name: Optional[str] = None
    hotel_photos: List[str]
    included_items: List[str]
    price_per_person: int
    total_price: int
    down_payment: int
    installments: int
    installment_value: int
    first_installment_date: Optional[str] = None
    installment_dates: List[str]
    phone_number: Optional[str] = None
    email: Optional[str] = None
    instagram_url: Optional[str] = None
    created_by: int
    created_at: datetime
    updated_at: datetime
    status: str
    viewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    view_count: int

    @classmethod
    def from_row(cls, row) -> "ProposalOut":
        return cls(
            id=row.id,
            package_name=row.package_name,
            client_name=row.client_name,
            departure_date=row.departure_date,
            return_date=row.return_date,
            adults=row.adults,
            children=row.children,
            children_ages=decode_list(row.children_ages),
            days=row.days,
            nights=row.nights,
            cover_image_url=row.cover_image_url,
            hotel_name=row.hotel_name,
            hotel_photos=decode_list(row.hotel_photos),
            included_items=decode_list(row.included_items),
            price_per_person=row.price_per_person,
            total_price=row.total_price,
            down_payment=row.down_payment,
            installments=row.installments,
            installment_value=row.installment_value,
            first_installment_date=row.first_installment_date,
            installment_dates=decode_list(row.installment_dates),
            phone_number=row.phone_number,
            email=row.email,
            instagram_url=row.instagram_url,
            created_by=row.created_by,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
            status=row.status,
            viewed_at=as_utc(row.viewed_at),
            approved_at=as_utc(row.approved_at),
            expires_at=as_utc(row.expires_at),
            view_count=row.view_count or 0,
        )


class ProposalStats(CamelModel):
    total: int = 0
    pending: int = 0
    viewed: int = 0
    approved: int = 0
    expired: int = 0


class QuoteRequest(CamelModel):
    price_per_person: int = Field(ge=0)
    adults: int = Field(default=2, ge=1)
    children: int = Field(default=0, ge=0)
    total_price: Optional[int] = Field(default=None, ge=0)
    down_payment: Optional[int] = Field(default=None, ge=0)
    installments: int = Field(default=1, ge=1, le=12)
    first_installment_date: Optional[str] = None
    departure_date: Optional[str] = None
    return_date: Optional[str] = None


class Quote(CamelModel):
    total_price: int
    down_payment: int
    installments: int
    installment_value: int
    installment_dates: List[str]
    days: Optional[int] = None
    nights: Optional[int] = None


class ImageUpload(CamelModel):
    file_name: str
    file_data: str  # base64
    mime_type: str


class BatchImageUpload(CamelModel):
    files: List[ImageUpload]


class StoredImage(CamelModel):
    key: str
    url: str


class FailedUpload(CamelModel):
    file_name: str
    error: str


class BatchUploadResult(CamelModel):
    uploaded: List[StoredImage] = Field(default_factory=list)
    failed: List[FailedUpload] = Field(default_factory=list)


class ActionResult(CamelModel):
    success: bool = True


class ExpireResult(CamelModel):
    expired: int


class UserOut(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    open_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    login_method: Optional[str] = None
    role: str
    last_signed_in: Optional[datetime] = None
