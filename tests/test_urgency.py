"""Watering urgency classifier tests."""
from datetime import date, datetime, timedelta, timezone

import pytest
import pytz

from plantcare.core.config import EngineConfig
from plantcare.plants.urgency import (
    UrgencyStatus,
    classify_plant,
    classify_urgency,
    group_plants_by_status,
    needs_water,
    status_text,
)

from conftest import NOW, make_plant

LAST_WATERED = date(2024, 1, 1)


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("frequency", [1, 2, 7, 30])
def test_due_on_the_due_date(frequency):
    state = classify_urgency(date(2024, 1, 8) - timedelta(days=frequency), frequency, now=at(8))

    assert state.status is UrgencyStatus.DUE_SOON
    assert state.next_due == date(2024, 1, 8)
    assert state.days_until == 0
    assert needs_water(state)


@pytest.mark.parametrize("frequency", [1, 2, 7, 30])
def test_overdue_the_day_after(frequency):
    state = classify_urgency(date(2024, 1, 8) - timedelta(days=frequency), frequency, now=at(9))

    assert state.status is UrgencyStatus.OVERDUE
    assert state.days_until == -1
    assert state.days_overdue == 1


def test_soon_threshold_boundary():
    ok = classify_urgency(LAST_WATERED, 7, now=at(6))
    soon = classify_urgency(LAST_WATERED, 7, now=at(7))

    assert ok.status is UrgencyStatus.OK
    assert ok.days_until == 2
    assert soon.status is UrgencyStatus.DUE_SOON
    assert soon.days_until == 1
    # Due tomorrow is "soon" but not yet a reason to water
    assert not needs_water(soon)


def test_wider_soon_threshold():
    state = classify_urgency(LAST_WATERED, 7, now=at(6), soon_threshold_days=3)
    assert state.status is UrgencyStatus.DUE_SOON


def test_active_snooze_wins_over_overdue():
    state = classify_urgency(LAST_WATERED, 7, snoozed_until=at(12), now=at(10))

    assert state.status is UrgencyStatus.SNOOZED
    assert state.snoozed_until == at(12)
    # Due information is still reported while snoozed
    assert state.days_until == -2
    assert state.days_overdue == 0
    assert not needs_water(state)


def test_snooze_ending_now_is_not_active():
    state = classify_urgency(LAST_WATERED, 7, snoozed_until=at(10), now=at(10))

    assert state.status is UrgencyStatus.OVERDUE
    assert state.snoozed_until is None


def test_expired_snooze_recomputes_from_last_care_date():
    # Snoozing never touches the last care date, so the plant is still overdue afterwards
    state = classify_urgency(LAST_WATERED, 7, snoozed_until=at(10, 0), now=at(11))

    assert state.status is UrgencyStatus.OVERDUE
    assert state.days_overdue == 3


def test_date_only_snooze_means_midnight():
    assert classify_urgency(LAST_WATERED, 7, snoozed_until=date(2024, 1, 9), now=at(8, 23)).status \
        is UrgencyStatus.SNOOZED
    assert classify_urgency(LAST_WATERED, 7, snoozed_until=date(2024, 1, 9), now=at(9, 0)).status \
        is UrgencyStatus.OVERDUE


def test_unparseable_snooze_is_ignored():
    state = classify_urgency(LAST_WATERED, 7, snoozed_until="someday", now=at(9))
    assert state.status is UrgencyStatus.OVERDUE


def test_missing_last_care_date_falls_back_to_now():
    state = classify_urgency(None, 7, now=NOW)

    assert state.used_fallback
    assert state.next_due == date(2024, 1, 15)
    assert state.status is UrgencyStatus.OK


def test_garbage_last_care_date_falls_back_to_now():
    state = classify_urgency("not-a-date", 3, now=NOW)

    assert state.used_fallback
    assert state.days_until == 3


def test_iso_string_with_z_suffix():
    state = classify_urgency("2024-01-01T09:00:00Z", 7, now=at(9))

    assert not state.used_fallback
    assert state.status is UrgencyStatus.OVERDUE


def test_frequency_below_one_is_clamped():
    state = classify_urgency(date(2024, 1, 8), 0, now=NOW)

    assert state.next_due == date(2024, 1, 9)
    assert state.status is UrgencyStatus.DUE_SOON


def test_naive_now_is_treated_as_utc():
    aware = classify_urgency(LAST_WATERED, 7, now=at(9))
    naive = classify_urgency(LAST_WATERED, 7, now=datetime(2024, 1, 9, 12, 0))
    assert aware == naive


def test_calendar_dates_follow_reference_timezone():
    # 23:30 UTC on Jan 1 is already Jan 2 in Tokyo
    plant = make_plant(last_care_date=datetime(2024, 1, 1, 23, 30, tzinfo=timezone.utc))

    utc_state = classify_plant(plant, now=NOW, config=EngineConfig())
    tokyo_state = classify_plant(plant, now=NOW, config=EngineConfig(timezone="Asia/Tokyo"))

    assert utc_state.next_due == date(2024, 1, 8)
    assert tokyo_state.next_due == date(2024, 1, 9)


def test_pytz_zone_can_be_passed_directly():
    state = classify_urgency(LAST_WATERED, 7, now=at(8), tz=pytz.timezone("America/New_York"))
    assert state.days_until == 0


def test_status_text():
    assert status_text(classify_urgency(LAST_WATERED, 7, now=at(8))) == "Due today"
    assert status_text(classify_urgency(LAST_WATERED, 7, now=at(7))) == "Due tomorrow"
    assert status_text(classify_urgency(LAST_WATERED, 7, now=at(4))) == "Due in 4 days"
    assert status_text(classify_urgency(LAST_WATERED, 7, now=at(9))) == "Overdue 1 day"
    assert status_text(classify_urgency(LAST_WATERED, 7, now=at(11))) == "Overdue 3 days"
    assert status_text(
        classify_urgency(LAST_WATERED, 7, snoozed_until=at(20), now=at(11))
    ) == "Snoozed until Jan 20"


def test_group_plants_by_status(config):
    plants = [
        make_plant("overdue", last_care_date=date(2023, 12, 28)),
        make_plant("today", last_care_date=date(2024, 1, 1)),
        make_plant("tomorrow", last_care_date=date(2024, 1, 2)),
        make_plant("in-three", last_care_date=date(2024, 1, 4)),
        make_plant("later", last_care_date=date(2024, 1, 7)),
        make_plant("snoozed", last_care_date=date(2023, 12, 1), snoozed_until=at(20)),
    ]

    groups = group_plants_by_status(plants, now=NOW, config=config)
    ids = {name: [plant.id for plant, _ in pairs] for name, pairs in groups.items()}

    assert ids == {
        "to_water_today": ["overdue", "today"],
        "upcoming": ["tomorrow", "in-three"],
        "snoozed": ["snoozed"],
        "ok": ["later"],
    }


def test_upcoming_window_is_configurable():
    plants = [make_plant("in-three", last_care_date=date(2024, 1, 4))]

    groups = group_plants_by_status(plants, now=NOW, config=EngineConfig(upcoming_window_days=1))

    assert groups["upcoming"] == []
    assert [p.id for p, _ in groups["ok"]] == ["in-three"]
