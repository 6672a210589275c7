"""
Offline scheduling provider.

Used for demos, the console, and MOCK_MODE deployments. In production the
Calendly provider talks to the real scheduling API instead.
"""

import logging
import random
import uuid
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, TypedDict

from clinic_booking.schemas.booking_schema import (
    BookingConfirmation,
    BookingRequest,
    Offering,
    Slot,
)
from clinic_booking.tools.provider import SchedulingProvider

logger = logging.getLogger(__name__)


class BookingRecord(TypedDict):
    """Booking stored by the mock provider."""

    reference: str
    offering_id: str
    offering_name: str
    start_time: str
    name: str
    email: str
    reason: str
    created_at: str


MOCK_CATALOG: list[Offering] = [
    Offering(id="urn:calendly:event_type:1", name="General Consultation", duration=30, slug="general-30"),
    Offering(id="urn:calendly:event_type:2", name="Follow-up", duration=15, slug="followup-15"),
    Offering(id="urn:calendly:event_type:3", name="Physical Exam", duration=45, slug="physical-45"),
    Offering(id="urn:calendly:event_type:4", name="Specialist Consultation", duration=60, slug="specialist-60"),
]

# Schedule generation parameters
BUSY_PROBABILITY = 0.3
SCHEDULE_SEED = 42


class MockSchedulingProvider(SchedulingProvider):
    """In-memory catalog, seeded availability and booking ledger."""

    def __init__(
        self,
        tz: tzinfo = timezone.utc,
        work_start_hour: int = 9,
        work_end_hour: int = 17,
        location: str = "Clinic Room 1",
        seed: int = SCHEDULE_SEED,
    ) -> None:
        self._tz = tz
        self._work_start_hour = work_start_hour
        self._work_end_hour = work_end_hour
        self._location = location
        self._seed = seed
        self._bookings: dict[str, BookingRecord] = {}

    async def list_offerings(self) -> list[Offering]:
        return list(MOCK_CATALOG)

    async def get_availability(self, day: date, duration_minutes: int) -> list[Slot]:
        """Hourly starts across working hours with ~30% marked busy.

        The busy pattern is seeded per date, so asking twice for the same
        day gives the same answer.
        """
        rng = random.Random(f"{self._seed}-{day.isoformat()}")
        slots: list[Slot] = []
        for hour in range(self._work_start_hour, self._work_end_hour):
            start = datetime.combine(day, time(hour), tzinfo=self._tz)
            busy = rng.random() < BUSY_PROBABILITY
            slots.append(Slot(
                start_time=start,
                end_time=start + timedelta(minutes=duration_minutes),
                status="busy" if busy else "available",
            ))
        return [s for s in slots if s.status == "available"]

    async def create_appointment(self, request: BookingRequest) -> BookingConfirmation:
        offering_name = next(
            (o.name for o in MOCK_CATALOG if o.id == request.offering_id), request.offering_id
        )
        ref = f"BK-{uuid.uuid4().hex[:6].upper()}"
        self._bookings[ref] = {
            "reference": ref,
            "offering_id": request.offering_id,
            "offering_name": offering_name,
            "start_time": request.start_time.isoformat(),
            "name": request.name,
            "email": request.email,
            "reason": request.reason,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("Booking created: %s for %s at %s", ref, request.name, request.start_time)

        return BookingConfirmation(
            method="direct",
            start_time=request.start_time,
            offering_name=offering_name,
            location=self._location,
            reference=ref,
        )

    def get_booking(self, reference: str) -> Optional[BookingRecord]:
        """Retrieve a booking by reference number."""
        return self._bookings.get(reference)

    def list_bookings(self) -> list[BookingRecord]:
        return list(self._bookings.values())

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        self._bookings.clear()
