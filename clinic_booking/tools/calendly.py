"""
Calendly-backed scheduling provider.

Availability is derived rather than fetched: Calendly only reports the
owner's busy intervals, so candidate slots across working hours are
generated locally and any that overlap a busy interval are dropped.
Bookings are made by issuing a single-use scheduling link that the
patient completes themselves.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional

import httpx

from clinic_booking.schemas.booking_schema import (
    BookingConfirmation,
    BookingRequest,
    Offering,
    Slot,
)
from clinic_booking.tools.provider import ProviderError, SchedulingProvider

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class CalendlyProvider(SchedulingProvider):
    """Talks to the Calendly v2 REST API with a personal access token."""

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.calendly.com",
        timeout_sec: float = 10.0,
        tz: tzinfo = timezone.utc,
        work_start_hour: int = 9,
        work_end_hour: int = 17,
        slot_interval_minutes: int = 30,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._tz = tz
        self._work_start_hour = work_start_hour
        self._work_end_hour = work_end_hour
        self._slot_interval = timedelta(minutes=slot_interval_minutes)
        self._client = client or httpx.AsyncClient(base_url=api_base, timeout=timeout_sec)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._user_uri: Optional[str] = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        try:
            response = await self._client.request(method, path, headers=self._headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Calendly {method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Calendly {method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"Calendly {method} {path} returned invalid JSON") from exc

    async def _current_user_uri(self) -> str:
        if self._user_uri is None:
            payload = await self._request("GET", "/users/me")
            try:
                self._user_uri = payload["resource"]["uri"]
            except (KeyError, TypeError) as exc:
                raise ProviderError("Calendly /users/me response missing resource.uri") from exc
        return self._user_uri

    async def list_offerings(self) -> list[Offering]:
        user = await self._current_user_uri()
        payload = await self._request("GET", "/event_types", params={"user": user})
        try:
            return [
                Offering(id=et["uri"], name=et["name"], duration=et["duration"], slug=et["slug"])
                for et in payload["collection"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError("Malformed Calendly event type payload") from exc

    async def get_availability(self, day: date, duration_minutes: int) -> list[Slot]:
        user = await self._current_user_uri()
        day_start = datetime.combine(day, time.min, tzinfo=self._tz)
        day_end = datetime.combine(day, time.max, tzinfo=self._tz)
        payload = await self._request(
            "GET",
            "/user_busy_times",
            params={
                "user": user,
                "start_time": day_start.astimezone(timezone.utc).isoformat(),
                "end_time": day_end.astimezone(timezone.utc).isoformat(),
            },
        )
        try:
            busy = [
                (_parse_timestamp(b["start_time"]), _parse_timestamp(b["end_time"]))
                for b in payload["collection"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError("Malformed Calendly busy time payload") from exc

        duration = timedelta(minutes=duration_minutes)
        work_end = datetime.combine(day, time(self._work_end_hour % 24), tzinfo=self._tz)
        if self._work_end_hour == 24:
            work_end += timedelta(days=1)

        slots: list[Slot] = []
        current = datetime.combine(day, time(self._work_start_hour), tzinfo=self._tz)
        while current + duration <= work_end:
            slot_end = current + duration
            overlaps = any(current < busy_end and slot_end > busy_start for busy_start, busy_end in busy)
            if not overlaps:
                slots.append(Slot(start_time=current, end_time=slot_end))
            current += self._slot_interval

        logger.debug("Calendly availability for %s: %d free of %d busy", day, len(slots), len(busy))
        return slots

    async def create_appointment(self, request: BookingRequest) -> BookingConfirmation:
        user = await self._current_user_uri()
        payload = await self._request(
            "POST",
            "/scheduling_links",
            json={"max_event_count": 1, "owner": user, "owner_type": "User"},
        )
        try:
            url = payload["resource"]["booking_url"]
        except (KeyError, TypeError) as exc:
            raise ProviderError("Calendly scheduling link response missing booking_url") from exc

        logger.info("Scheduling link issued for %s (%s)", request.name, request.offering_id)
        return BookingConfirmation(method="link", booking_url=url)

    async def aclose(self) -> None:
        await self._client.aclose()
