"""Offering, slot and booking data models exchanged with scheduling providers."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class Offering(BaseModel):
    """A bookable appointment type from the provider catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    duration: int
    slug: str


class Slot(BaseModel):
    """Single candidate start/end interval for an offering."""

    model_config = ConfigDict(frozen=True)

    start_time: datetime
    end_time: datetime
    status: Literal["available", "busy"] = "available"


class BookingRequest(BaseModel):
    """Validated appointment creation request."""

    offering_id: str
    start_time: datetime
    name: str
    email: str
    reason: str = "Booked via AI Agent"


class BookingConfirmation(BaseModel):
    """Appointment creation result.

    ``link`` confirmations carry a single-use booking URL the patient must
    complete; ``direct`` confirmations carry the final appointment details.
    """

    method: Literal["link", "direct"]
    booking_url: Optional[str] = None
    start_time: Optional[datetime] = None
    offering_name: Optional[str] = None
    location: Optional[str] = None
    reference: Optional[str] = None
