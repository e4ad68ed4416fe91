"""Settings and engine config tests."""
from datetime import time

import pytest

from plantcare.core.config import EngineConfig, Settings, parse_local_time


def test_parse_local_time():
    assert parse_local_time("08:00") == time(8, 0)
    assert parse_local_time(" 21:45 ") == time(21, 45)
    assert parse_local_time("7") == time(7, 0)


@pytest.mark.parametrize("value", ["24:00", "08:60", "eight", ""])
def test_parse_local_time_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_local_time(value)


def test_engine_config_from_settings():
    settings = Settings(
        SOON_THRESHOLD_DAYS=2,
        SCHEDULING_LOOKAHEAD_DAYS=14,
        DEFAULT_ALERT_LOCAL_TIME="07:30",
        STREAK_GRACE_DAYS=0,
        REFERENCE_TIMEZONE="Europe/Berlin",
    )

    config = EngineConfig.from_settings(settings)

    assert config.soon_threshold_days == 2
    assert config.lookahead_days == 14
    assert config.alert_local_time == time(7, 30)
    assert config.streak_grace_days == 0
    assert config.tz.zone == "Europe/Berlin"


def test_defaults():
    config = EngineConfig()

    assert config.soon_threshold_days == 1
    assert config.upcoming_window_days == 3
    assert config.lookahead_days == 30
    assert config.overdue_alert_delay_seconds == 5
    assert config.urgent_overdue_days == 2
