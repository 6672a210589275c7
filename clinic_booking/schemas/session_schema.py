"""Per-session conversation state and accumulated booking data."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from clinic_booking.schemas.booking_schema import Offering, Slot


class SessionState(str, Enum):
    """Steps of the booking conversation."""
    INIT = "INIT"
    AWAITING_REASON = "AWAITING_REASON"
    AWAITING_DATE = "AWAITING_DATE"
    SELECTING_SLOT = "SELECTING_SLOT"
    AWAITING_NAME = "AWAITING_NAME"
    AWAITING_EMAIL = "AWAITING_EMAIL"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class TimeRange:
    """Half-open hour interval, e.g. morning is [9, 12)."""
    start_hour: int
    end_hour: int

    def contains(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour


@dataclass(frozen=True)
class SessionData:
    """
    Booking details collected so far.

    Immutable: every committed transition replaces the whole value via
    ``with_updates`` so a failed turn can never leave it half-written.
    """
    reason: Optional[str] = None
    appointment_type: Optional[Offering] = None
    preferred_date: Optional[date] = None
    preferred_time_range: Optional[TimeRange] = None
    available_slots: tuple[Slot, ...] = ()
    selected_slot: Optional[Slot] = None
    name: Optional[str] = None
    email: Optional[str] = None

    def with_updates(self, **changes) -> "SessionData":
        return replace(self, **changes)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Session:
    """One conversation, keyed by its opaque id."""
    id: str
    state: SessionState = SessionState.INIT
    data: SessionData = field(default_factory=SessionData)
    last_active: datetime = field(default_factory=_utcnow)
