from zoneinfo import ZoneInfo

from clinic_booking.config import AppConfig
from clinic_booking.tools.calendly import CalendlyProvider
from clinic_booking.tools.mock_provider import MockSchedulingProvider
from clinic_booking.tools.provider import ProviderError, SchedulingProvider

__all__ = [
    "SchedulingProvider",
    "ProviderError",
    "MockSchedulingProvider",
    "CalendlyProvider",
    "build_provider",
]


def build_provider(config: AppConfig) -> SchedulingProvider:
    """Offline provider in mock mode, Calendly otherwise."""
    tz = ZoneInfo(config.clinic.timezone)
    if config.provider.mock_mode:
        return MockSchedulingProvider(
            tz=tz,
            work_start_hour=config.clinic.work_start_hour,
            work_end_hour=config.clinic.work_end_hour,
            location=config.clinic.location,
        )
    return CalendlyProvider(
        token=config.provider.calendly_token,
        api_base=config.provider.calendly_api_base,
        timeout_sec=config.provider.timeout_sec,
        tz=tz,
        work_start_hour=config.clinic.work_start_hour,
        work_end_hour=config.clinic.work_end_hour,
        slot_interval_minutes=config.clinic.slot_interval_minutes,
    )
