"""Scheduling provider contract used by the workflow engine."""

from abc import ABC, abstractmethod
from datetime import date

from clinic_booking.schemas.booking_schema import (
    BookingConfirmation,
    BookingRequest,
    Offering,
    Slot,
)


class ProviderError(Exception):
    """Any failure talking to the scheduling provider (network, auth, payload)."""


class SchedulingProvider(ABC):
    """
    Remote owner of the offering catalog, availability and bookings.

    Implementations raise ProviderError for every failure so the engine
    has a single exception type to recover from.
    """

    @abstractmethod
    async def list_offerings(self) -> list[Offering]:
        """Return the bookable appointment types."""

    @abstractmethod
    async def get_availability(self, day: date, duration_minutes: int) -> list[Slot]:
        """Return bookable slots on ``day``, earliest first."""

    @abstractmethod
    async def create_appointment(self, request: BookingRequest) -> BookingConfirmation:
        """Book the slot, or raise ProviderError."""

    async def aclose(self) -> None:
        """Release network resources. Nothing to do by default."""
