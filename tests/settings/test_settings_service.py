import pytest

from time_tracking.core.exceptions import ValidationError
from time_tracking.settings.model import SettingsOverride, TrackingSettings
from time_tracking.settings.repository import InMemorySettingsRepository
from time_tracking.settings.service import SettingsService


@pytest.fixture
def service():
    return SettingsService(InMemorySettingsRepository(), defaults=TrackingSettings(timezone="Europe/Warsaw"))


def test_defaults_apply_without_stored_rows(service):
    settings = service.get_effective("u1")

    assert settings == TrackingSettings(timezone="Europe/Warsaw")
    assert service.get_override("u1") == SettingsOverride()


def test_global_update_is_partial(service):
    service.update({"rounding_minutes": 15})
    settings = service.update({"max_break_minutes": 30})

    assert settings.rounding_minutes == 15
    assert settings.max_break_minutes == 30
    assert settings.timezone == "Europe/Warsaw"


def test_user_override_wins_over_global(service):
    service.update({"rounding_minutes": 15, "timezone": "UTC"})
    service.update({"timezone": "America/New_York"}, user_id="u1")

    assert service.get_effective("u1").timezone == "America/New_York"
    assert service.get_effective("u1").rounding_minutes == 15
    assert service.get_effective("u2").timezone == "UTC"
    assert service.get_global().timezone == "UTC"


def test_none_clears_an_override(service):
    service.update({"rounding_minutes": 5}, user_id="u1")
    service.update({"rounding_minutes": None}, user_id="u1")

    assert service.get_effective("u1").rounding_minutes == 0
    assert service.get_override("u1").rounding_minutes is None


@pytest.mark.parametrize(
    "values",
    [
        {},
        {"colour": "blue"},
        {"rounding_minutes": -1},
        {"rounding_minutes": 61},
        {"max_break_minutes": "lots"},
        {"max_report_days": 0},
        {"max_report_days": 400},
        {"enforce_max_break": "yes"},
        {"timezone": "Mars/Olympus_Mons"},
        {"timezone": ""},
    ],
)
def test_invalid_updates_are_rejected(service, values):
    with pytest.raises(ValidationError):
        service.update(values)

    assert service.get_override("*") == SettingsOverride()


@pytest.mark.parametrize(
    "rounding, seconds, expected",
    [
        (0, 6001, 6001),
        (15, 6000, 6300),
        (15, 449, 0),
        (15, 450, 900),
        (5, 3600, 3600),
    ],
)
def test_round_seconds_to_nearest_step(rounding, seconds, expected):
    assert TrackingSettings(rounding_minutes=rounding).round_seconds(seconds) == expected
