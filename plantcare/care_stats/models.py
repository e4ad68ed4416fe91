"""Care stats models - streak, monthly breakdowns and leaderboard."""

from typing import List
from pydantic import BaseModel, Field


class TypeStats(BaseModel):
    """Monthly activity count for one activity type."""
    type: str
    count: int


class MemberStats(BaseModel):
    """Monthly activity count for one household member (leaderboard row)."""
    user_id: str
    username: str
    count: int


class CareStats(BaseModel):
    """Household care statistics, recomputed on every query."""
    streak: int = 0
    total_plants: int = 0
    monthly_total: int = 0
    monthly_by_type: List[TypeStats] = Field(default_factory=list)
    monthly_by_member: List[MemberStats] = Field(default_factory=list)  # count desc, user_id asc
    plants_needing_water: int = 0
