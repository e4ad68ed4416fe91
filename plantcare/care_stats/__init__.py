"""Care stats module - household streak, monthly breakdowns and leaderboard."""

from plantcare.care_stats.models import CareStats, MemberStats, TypeStats
from plantcare.care_stats.service import (
    CareStatsAggregator,
    StreakPolicy,
    compute_care_stats,
    compute_streak,
)

__all__ = [
    "CareStats",
    "MemberStats",
    "TypeStats",
    "CareStatsAggregator",
    "StreakPolicy",
    "compute_care_stats",
    "compute_streak",
]
