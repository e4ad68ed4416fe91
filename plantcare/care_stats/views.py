"""Care stats API endpoints."""

from fastapi import APIRouter, Depends

from plantcare.care_stats.models import CareStats
from plantcare.care_stats.service import CareStatsAggregator
from plantcare.core.dependencies import get_current_user
from plantcare.engine import get_stats_aggregator

router = APIRouter(prefix="/care-stats", tags=["Care Stats"])


@router.get("", response_model=CareStats)
async def get_care_stats(
    current_user: dict = Depends(get_current_user),
    aggregator: CareStatsAggregator = Depends(get_stats_aggregator),
):
    """
    Household streak, this month's activity by type and by member, and the
    number of plants due today or overdue.
    """
    return await aggregator.get_stats(current_user["household_id"])
