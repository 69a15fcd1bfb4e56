from sqlalchemy import Column, Integer, String, DateTime, Text
from app.core.database import Base
import datetime
from datetime import timezone

PROPOSAL_STATUSES = ("pending", "viewed", "approved", "expired")


def utcnow():
    return datetime.datetime.now(timezone.utc)


def as_utc(value):
    """Naive values are UTC (SQLite drops tzinfo); aware ones are converted."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    open_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    login_method = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_signed_in = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Proposal(Base):
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, index=True)
    package_name = Column(String, nullable=True)

    client_name = Column(String, nullable=False)
    departure_date = Column(String, nullable=False)
    return_date = Column(String, nullable=False)

    adults = Column(Integer, nullable=False, default=2)
    children = Column(Integer, nullable=False, default=0)
    children_ages = Column(Text, nullable=False, default="[]")  # JSON array

    days = Column(Integer, nullable=True)
    nights = Column(Integer, nullable=True)

    cover_image_url = Column(String, nullable=True)
    hotel_name = Column(String, nullable=True)
    hotel_photos = Column(Text, nullable=False, default="[]")  # JSON array

    included_items = Column(Text, nullable=False)  # JSON array

    # Money in cents
    price_per_person = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)
    down_payment = Column(Integer, nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    installment_value = Column(Integer, nullable=False)
    first_installment_date = Column(String, nullable=True)
    installment_dates = Column(Text, nullable=False)  # JSON array

    phone_number = Column(String, nullable=True)
    email = Column(String, nullable=True)
    instagram_url = Column(String, nullable=True)

    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    status = Column(String, nullable=False, default="pending", index=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
