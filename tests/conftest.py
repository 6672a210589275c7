"""Shared test fixtures and helpers."""

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from clinic_booking.conversation.session_store import InMemorySessionStore
from clinic_booking.conversation.workflow import WorkflowEngine
from clinic_booking.schemas.booking_schema import (
    BookingConfirmation,
    BookingRequest,
    Offering,
    Slot,
)
from clinic_booking.schemas.session_schema import SessionData, SessionState
from clinic_booking.tools.mock_provider import MOCK_CATALOG
from clinic_booking.tools.provider import ProviderError, SchedulingProvider

SLOT_DAY = date(2030, 1, 7)  # a Monday


def make_slot(hour: int, minutes: int = 30, day: date = SLOT_DAY) -> Slot:
    start = datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)
    return Slot(start_time=start, end_time=start + timedelta(minutes=minutes))


def offering(slug_prefix: str) -> Offering:
    return next(o for o in MOCK_CATALOG if o.slug.startswith(slug_prefix))


class FakeProvider(SchedulingProvider):
    """Scriptable provider that records every call."""

    def __init__(
        self,
        offerings: Optional[list[Offering]] = None,
        slots: Optional[list[Slot]] = None,
        confirmation: Optional[BookingConfirmation] = None,
    ) -> None:
        self.offerings = list(MOCK_CATALOG) if offerings is None else offerings
        self.slots = [make_slot(h) for h in (9, 10, 11, 13, 14)] if slots is None else slots
        self.confirmation = confirmation or BookingConfirmation(
            method="direct",
            offering_name="Follow-up",
            location="Clinic Room 1",
            reference="BK-TEST01",
        )
        self.catalog_error: Optional[Exception] = None
        self.availability_error: Optional[Exception] = None
        self.booking_error: Optional[Exception] = None
        self.latency = 0.0
        self.availability_calls: list[tuple[date, int]] = []
        self.booking_requests: list[BookingRequest] = []
        self.closed = False

    async def list_offerings(self) -> list[Offering]:
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.catalog_error:
            raise self.catalog_error
        return list(self.offerings)

    async def get_availability(self, day: date, duration_minutes: int) -> list[Slot]:
        self.availability_calls.append((day, duration_minutes))
        if self.availability_error:
            raise self.availability_error
        return list(self.slots)

    async def create_appointment(self, request: BookingRequest) -> BookingConfirmation:
        self.booking_requests.append(request)
        if self.booking_error:
            raise self.booking_error
        return self.confirmation

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def engine(provider, store):
    return WorkflowEngine(provider=provider, store=store, tz=timezone.utc, max_suggestions=3)


def seed_session(store: InMemorySessionStore, session_id: str, state: SessionState, **data) -> None:
    """Create a session already sitting in ``state`` with the given data."""
    store.create(session_id)
    store.update(session_id, state=state, data=SessionData(**data))


def booking_ready_data() -> dict:
    """Session data as it stands once the email has been accepted."""
    slots = (make_slot(9, 15), make_slot(10, 15), make_slot(11, 15))
    return {
        "reason": "I need a follow-up",
        "appointment_type": offering("followup"),
        "preferred_date": SLOT_DAY,
        "available_slots": slots,
        "selected_slot": slots[1],
        "name": "Jane Doe",
        "email": "jane@example.com",
    }


