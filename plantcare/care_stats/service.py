"""Care stats service - household streak, monthly breakdowns and leaderboard."""

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import Dict, Iterable, Optional, Set

from plantcare.care_stats.models import CareStats, MemberStats, TypeStats
from plantcare.core.config import EngineConfig
from plantcare.plants.urgency import classify_plant, needs_water, utc_now

logger = logging.getLogger(__name__)


class StreakPolicy(IntEnum):
    """
    How many trailing empty days a streak survives.

    GRACE_YESTERDAY: today is not over yet, so a run ending yesterday still
    counts. STRICT_TODAY: the run must include today.
    """
    STRICT_TODAY = 0
    GRACE_YESTERDAY = 1


def compute_streak(active_days: Set[date], today: date, grace_days: int = StreakPolicy.GRACE_YESTERDAY) -> int:
    """Length of the run of consecutive active days ending within grace_days of today."""
    anchor = None
    for offset in range(max(grace_days, 0) + 1):
        day = today - timedelta(days=offset)
        if day in active_days:
            anchor = day
            break

    if anchor is None:
        return 0

    streak = 0
    day = anchor
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_care_stats(
    plants: Iterable,
    activities: Iterable,
    usernames: Dict[str, str],
    *,
    now: Optional[datetime] = None,
    config: Optional[EngineConfig] = None,
) -> CareStats:
    """
    Aggregate one household's care history.

    Calendar days and months are taken in config.timezone for every caller,
    so web and mobile agree on what "this month" and "today" mean.
    """
    config = config or EngineConfig()
    tz = config.tz
    now_utc = utc_now(now)
    today = now_utc.astimezone(tz).date()

    plants = list(plants)
    plants_needing_water = sum(
        1 for plant in plants if needs_water(classify_plant(plant, now=now_utc, config=config))
    )

    active_days: Set[date] = set()
    by_type: Counter = Counter()
    by_member: Counter = Counter()
    for activity in activities:
        day = utc_now(activity.performed_at).astimezone(tz).date()
        active_days.add(day)
        if (day.year, day.month) == (today.year, today.month):
            by_type[activity.activity_type] += 1
            by_member[activity.user_id] += 1

    monthly_by_type = [
        TypeStats(type=activity_type, count=count)
        for activity_type, count in sorted(by_type.items(), key=lambda kv: (-kv[1], kv[0]))
    ]
    monthly_by_member = [
        MemberStats(user_id=user_id, username=usernames.get(user_id, "Unknown"), count=count)
        for user_id, count in sorted(by_member.items(), key=lambda kv: (-kv[1], kv[0]))
    ]

    return CareStats(
        streak=compute_streak(active_days, today, config.streak_grace_days),
        total_plants=len(plants),
        monthly_total=sum(by_type.values()),
        monthly_by_type=monthly_by_type,
        monthly_by_member=monthly_by_member,
        plants_needing_water=plants_needing_water,
    )


class CareStatsAggregator:
    """Read-only household stats over injected plant, activity and member sources."""

    def __init__(self, plant_store, activity_log, member_directory, config: Optional[EngineConfig] = None):
        self.plant_store = plant_store
        self.activity_log = activity_log
        self.member_directory = member_directory
        self.config = config or EngineConfig()

    async def get_stats(self, household_id: str, now: Optional[datetime] = None) -> CareStats:
        plants = await self.plant_store.list(household_id)
        activities = await self.activity_log.list_for_household(household_id)
        usernames = await self.member_directory.usernames(a.user_id for a in activities)

        stats = compute_care_stats(plants, activities, usernames, now=now, config=self.config)
        logger.debug(f"Household {household_id} stats: streak={stats.streak}, month={stats.monthly_total}")
        return stats
