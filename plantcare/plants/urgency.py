"""Watering urgency classifier.

This is the single deterministic rule set (no I/O) used by:
- UI guidance (badge / status text / dashboard buckets)
- ReminderScheduler (on-device alerts)
- DispatchSweep (server reminders) and CareStatsAggregator

All arithmetic is done on calendar dates in the reference timezone, so a plant
watered late at night does not drift a day early or late.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from plantcare.core.config import EngineConfig

logger = logging.getLogger(__name__)


class UrgencyStatus(str, Enum):
    OK = "ok"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    SNOOZED = "snoozed"


@dataclass(frozen=True)
class UrgencyState:
    status: UrgencyStatus
    days_until: int  # next_due - today, negative when overdue
    next_due: date
    snoozed_until: Optional[datetime] = None
    used_fallback: bool = False  # last care date was missing/unparseable

    @property
    def days_overdue(self) -> int:
        if self.status is UrgencyStatus.OVERDUE:
            return -self.days_until
        return 0


def utc_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.utcnow().replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _localize(value: datetime, tz) -> datetime:
    # pytz zones need localize(); stdlib tzinfo can be attached directly
    if hasattr(tz, "localize"):
        return tz.localize(value)
    return value.replace(tzinfo=tz)


def _parse_moment(value: Any) -> Optional[Any]:
    """Return a datetime or date for anything date-like, None otherwise."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None


def _local_date(moment: Any, tz) -> date:
    if isinstance(moment, datetime):
        return utc_now(moment).astimezone(tz).date()
    return moment


def _as_instant(moment: Any, tz) -> datetime:
    """Date-only values mean midnight of that day in the reference timezone."""
    if isinstance(moment, datetime):
        return utc_now(moment)
    return _localize(datetime.combine(moment, time()), tz).astimezone(timezone.utc)


def _frequency(frequency_days: Any) -> int:
    try:
        days = int(frequency_days)
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(days, 1)


def classify_urgency(
    last_care_date: Any,
    frequency_days: Any,
    snoozed_until: Any = None,
    *,
    now: Optional[datetime] = None,
    soon_threshold_days: int = 1,
    tz=None,
) -> UrgencyState:
    """
    Classify a plant's watering urgency.

    Rules:
    - An active snooze (strictly after now) always wins -> SNOOZED.
    - next_due = last care date + frequency days.
    - days_until < 0 -> OVERDUE, 0..soon_threshold_days -> DUE_SOON, else OK.

    Never raises on bad dates: a missing/unreadable last care date is replaced
    by now and flagged via used_fallback; an unreadable snooze is ignored.
    """
    tz = tz or timezone.utc
    now_utc = utc_now(now)
    today = now_utc.astimezone(tz).date()

    last_care = _parse_moment(last_care_date)
    used_fallback = last_care is None
    if used_fallback:
        logger.debug(f"Unusable last care date {last_care_date!r}, falling back to now")
        last_care = now_utc

    next_due = _local_date(last_care, tz) + timedelta(days=_frequency(frequency_days))
    days_until = (next_due - today).days

    snooze = _parse_moment(snoozed_until)
    snooze_instant = _as_instant(snooze, tz) if snooze is not None else None

    if snooze_instant is not None and snooze_instant > now_utc:
        status = UrgencyStatus.SNOOZED
    elif days_until < 0:
        status = UrgencyStatus.OVERDUE
    elif days_until <= soon_threshold_days:
        status = UrgencyStatus.DUE_SOON
    else:
        status = UrgencyStatus.OK

    return UrgencyState(
        status=status,
        days_until=days_until,
        next_due=next_due,
        snoozed_until=snooze_instant if status is UrgencyStatus.SNOOZED else None,
        used_fallback=used_fallback,
    )


def classify_plant(plant, *, now: Optional[datetime] = None, config: Optional[EngineConfig] = None) -> UrgencyState:
    """Classify a Plant model using engine config."""
    config = config or EngineConfig()
    return classify_urgency(
        plant.last_care_date,
        plant.watering_frequency_days,
        plant.snoozed_until,
        now=now,
        soon_threshold_days=config.soon_threshold_days,
        tz=config.tz,
    )


def needs_water(state: UrgencyState) -> bool:
    """Due today or already overdue. Narrower than the DUE_SOON bucket."""
    if state.status is UrgencyStatus.OVERDUE:
        return True
    return state.status is UrgencyStatus.DUE_SOON and state.days_until <= 0


def status_text(state: UrgencyState) -> str:
    """Short human copy for a badge or list row."""
    if state.status is UrgencyStatus.SNOOZED:
        return f"Snoozed until {state.snoozed_until:%b %d}"
    if state.status is UrgencyStatus.OVERDUE:
        days = state.days_overdue
        return f"Overdue {days} {'day' if days == 1 else 'days'}"
    if state.days_until == 0:
        return "Due today"
    if state.days_until == 1:
        return "Due tomorrow"
    return f"Due in {state.days_until} days"


def group_plants_by_status(
    plants: Iterable,
    *,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, List[tuple]]:
    """
    Bucket plants for the dashboard.

    "upcoming" uses config.upcoming_window_days, a display window that is
    deliberately separate from the DUE_SOON threshold used for reminders.
    Each bucket holds (plant, state) pairs.
    """
    config = config or EngineConfig()
    groups: Dict[str, List[tuple]] = {"to_water_today": [], "upcoming": [], "snoozed": [], "ok": []}

    for plant in plants:
        state = classify_plant(plant, now=now, config=config)
        if state.status is UrgencyStatus.SNOOZED:
            groups["snoozed"].append((plant, state))
        elif needs_water(state):
            groups["to_water_today"].append((plant, state))
        elif 0 < state.days_until <= config.upcoming_window_days:
            groups["upcoming"].append((plant, state))
        else:
            groups["ok"].append((plant, state))

    return groups
