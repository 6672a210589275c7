"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from clinic_booking.config import (
    AppConfig,
    ClinicConfig,
    ProviderConfig,
    ServerConfig,
    SessionConfig,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_work_hours_must_be_ordered(self):
        config = AppConfig(clinic=replace(ClinicConfig(), work_start_hour=17, work_end_hour=9))
        with pytest.raises(ValueError, match="WORK_START_HOUR"):
            _validate_config(config)

    def test_work_end_beyond_midnight(self):
        config = AppConfig(clinic=replace(ClinicConfig(), work_start_hour=9, work_end_hour=25))
        with pytest.raises(ValueError, match="WORK_END_HOUR"):
            _validate_config(config)

    def test_invalid_slot_interval(self):
        config = AppConfig(clinic=replace(ClinicConfig(), slot_interval_minutes=0))
        with pytest.raises(ValueError, match="SLOT_INTERVAL_MINUTES"):
            _validate_config(config)

    def test_invalid_suggestion_count(self):
        config = AppConfig(clinic=replace(ClinicConfig(), max_slot_suggestions=0))
        with pytest.raises(ValueError, match="MAX_SLOT_SUGGESTIONS"):
            _validate_config(config)

    def test_unknown_timezone(self):
        config = AppConfig(clinic=replace(ClinicConfig(), timezone="Mars/Olympus_Mons"))
        with pytest.raises(ValueError, match="CLINIC_TIMEZONE"):
            _validate_config(config)

    def test_invalid_provider_timeout(self):
        config = AppConfig(provider=replace(ProviderConfig(), timeout_sec=0.0))
        with pytest.raises(ValueError, match="PROVIDER_TIMEOUT_SEC"):
            _validate_config(config)

    def test_negative_session_ttl(self):
        config = AppConfig(session=SessionConfig(ttl_minutes=-1))
        with pytest.raises(ValueError, match="SESSION_TTL_MINUTES"):
            _validate_config(config)

    def test_zero_session_ttl_allowed(self):
        _validate_config(AppConfig(session=SessionConfig(ttl_minutes=0)))

    def test_invalid_port(self):
        config = AppConfig(server=replace(ServerConfig(), port=70000))
        with pytest.raises(ValueError, match="PORT"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_parsing(self):
        from clinic_booking.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from clinic_booking.config import _safe_int

        monkeypatch.setenv("CLINIC_TEST_INT", "nine")
        with pytest.raises(ValueError, match="CLINIC_TEST_INT"):
            _safe_int("CLINIC_TEST_INT", "9")

    def test_safe_float_parsing(self):
        from clinic_booking.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)

    @pytest.mark.parametrize("raw, expected", [("true", True), ("TRUE", True), ("1", False), ("", False)])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        from clinic_booking.config import _safe_bool

        monkeypatch.setenv("CLINIC_TEST_FLAG", raw)
        assert _safe_bool("CLINIC_TEST_FLAG", "false") is expected
