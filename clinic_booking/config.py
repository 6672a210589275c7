"""
Centralized configuration with environment variable overrides.

Provider credentials, clinic hours, session expiry and server settings
are configurable here. Nothing is hardcoded in the workflow or provider logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from clinic_booking.logging_context import SessionIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Only the literal 'true' (any case) enables a flag."""
    return os.getenv(env_var, default).strip().lower() == "true"


@dataclass(frozen=True)
class ProviderConfig:
    """Scheduling provider connection settings."""

    calendly_token: str = os.getenv("CALENDLY_TOKEN", "")
    calendly_api_base: str = os.getenv("CALENDLY_API_BASE", "https://api.calendly.com")
    mock_mode: bool = _safe_bool("MOCK_MODE", "false")
    timeout_sec: float = _safe_float("PROVIDER_TIMEOUT_SEC", "10.0")


@dataclass(frozen=True)
class ClinicConfig:
    """Clinic-specific settings used when offering and describing slots."""

    name: str = os.getenv("CLINIC_NAME", "Riverside Family Clinic")
    location: str = os.getenv("CLINIC_LOCATION", "Clinic Room 1")
    timezone: str = os.getenv("CLINIC_TIMEZONE", "UTC")
    work_start_hour: int = _safe_int("WORK_START_HOUR", "9")
    work_end_hour: int = _safe_int("WORK_END_HOUR", "17")
    slot_interval_minutes: int = _safe_int("SLOT_INTERVAL_MINUTES", "30")
    max_slot_suggestions: int = _safe_int("MAX_SLOT_SUGGESTIONS", "3")


@dataclass(frozen=True)
class SessionConfig:
    """In-memory session lifetime. A TTL of 0 keeps sessions forever."""

    ttl_minutes: int = _safe_int("SESSION_TTL_MINUTES", "60")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP transport settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "3000")
    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "*")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    clinic: ClinicConfig = field(default_factory=ClinicConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    clinic = config.clinic
    if not 0 <= clinic.work_start_hour < clinic.work_end_hour <= 24:
        raise ValueError(
            "WORK_START_HOUR and WORK_END_HOUR must satisfy 0 <= start < end <= 24, "
            f"got {clinic.work_start_hour} and {clinic.work_end_hour}"
        )
    if clinic.slot_interval_minutes < 1:
        raise ValueError(
            f"SLOT_INTERVAL_MINUTES must be >= 1, got {clinic.slot_interval_minutes}"
        )
    if clinic.max_slot_suggestions < 1:
        raise ValueError(
            f"MAX_SLOT_SUGGESTIONS must be >= 1, got {clinic.max_slot_suggestions}"
        )
    try:
        ZoneInfo(clinic.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"CLINIC_TIMEZONE is not a known zone: {clinic.timezone!r}") from None

    if config.provider.timeout_sec <= 0:
        raise ValueError(
            f"PROVIDER_TIMEOUT_SEC must be > 0, got {config.provider.timeout_sec}"
        )
    if config.session.ttl_minutes < 0:
        raise ValueError(
            f"SESSION_TTL_MINUTES must be >= 0, got {config.session.ttl_minutes}"
        )
    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    _configure_logging(config.log_level)
    if not config.provider.mock_mode and not config.provider.calendly_token:
        logger.warning("CALENDLY_TOKEN is empty; live provider calls will be rejected")
    logger.info(
        "Configuration loaded for '%s' (%s mode)",
        config.clinic.name,
        "MOCK" if config.provider.mock_mode else "LIVE",
    )
    return config


# Singleton instance
settings = load_config()
