"""Pydantic models for reservations and lifecycle events."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from direct_booking.models.pricing import PricingResult
from direct_booking.models.reservation_status import ReservationStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_link_token() -> str:
    """Generate a fresh single-reservation link token (uuid4, hex)."""
    return uuid.uuid4().hex


class ReservationInput(BaseModel):
    """Guest submission."""

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: EmailStr
    phone: str
    arrival_date: date = Field(alias="arrivalDate")
    departure_date: date = Field(alias="departureDate")
    guests: int
    message: Optional[str] = None
    locale: str = "fr"
    promo_code: Optional[str] = Field(None, alias="promoCode")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class Reservation(BaseModel):
    """A guest reservation request and its workflow state.

    The store owns this entity; services re-fetch it before every mutation
    and never keep it beyond a single call.
    """

    # Identity
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    token: str = Field(default_factory=generate_link_token)

    # Stay
    arrival_date: date = Field(alias="arrivalDate")
    departure_date: date = Field(alias="departureDate")
    nights: int
    guests: int

    # Contact
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    phone: str
    message: Optional[str] = None

    # Pricing snapshot
    nightly_rate: Decimal = Field(alias="nightlyRate")
    subtotal: Decimal
    discount: Decimal = Decimal("0")
    discount_percent: Decimal = Field(Decimal("0"), alias="discountPercent")
    cleaning_fee: Decimal = Field(alias="cleaningFee")
    tourist_tax: Decimal = Field(alias="touristTax")
    total: Decimal
    promo_code: Optional[str] = Field(None, alias="promoCode")
    promo_discount: Decimal = Field(Decimal("0"), alias="promoDiscount")
    deposit_amount: Decimal = Field(alias="depositAmount")
    deposit_paid: bool = Field(False, alias="depositPaid")

    # Workflow
    status: ReservationStatus = ReservationStatus.PENDING
    rejection_reason: Optional[str] = Field(None, alias="rejectionReason")
    admin_notes: Optional[str] = Field(None, alias="adminNotes")
    stripe_payment_link_id: Optional[str] = Field(None, alias="stripePaymentLinkId")
    stripe_payment_link_url: Optional[str] = Field(None, alias="stripePaymentLinkUrl")
    stripe_payment_intent_id: Optional[str] = Field(None, alias="stripePaymentIntentId")
    smoobu_reservation_id: Optional[int] = Field(None, alias="smoobuReservationId")

    # Meta
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")
    locale: str = "fr"

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    @classmethod
    def from_submission(
        cls,
        submission: ReservationInput,
        pricing: PricingResult,
    ) -> "Reservation":
        """Create a pending reservation from a guest submission and its price.

        Args:
            submission: Validated guest input
            pricing: Price computed for the submitted stay

        Returns:
            New reservation with a fresh id and link token
        """
        return cls(
            arrival_date=submission.arrival_date,
            departure_date=submission.departure_date,
            nights=pricing.nights,
            guests=submission.guests,
            first_name=submission.first_name,
            last_name=submission.last_name,
            email=submission.email,
            phone=submission.phone,
            message=submission.message,
            nightly_rate=pricing.nightly_rate,
            subtotal=pricing.subtotal,
            discount=pricing.discount_amount,
            discount_percent=pricing.discount_percent,
            cleaning_fee=pricing.cleaning_fee,
            tourist_tax=pricing.tourist_tax,
            total=pricing.total,
            promo_code=pricing.promo_code,
            promo_discount=pricing.promo_discount_amount,
            deposit_amount=pricing.deposit_suggested,
            locale=submission.locale,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def amount_due(self) -> Decimal:
        return self.total - self.promo_discount

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "Reservation":
        return cls.model_validate_json(raw)


class ReservationEventType(str, Enum):
    CREATED = "created"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class ReservationEvent(BaseModel):
    """Lifecycle event carrying the full reservation snapshot."""

    type: ReservationEventType
    reservation: Reservation
    occurred_at: datetime = Field(default_factory=_utcnow, alias="occurredAt")

    model_config = ConfigDict(populate_by_name=True)
