"""On-device reminder plan API routes.

Plans are keyed by (household_id, device_id); the household always comes
from the caller's token, never from the request.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from plantcare.core.dependencies import get_current_user
from plantcare.engine import get_plant_store, get_scheduler_factory
from plantcare.plants.repository import PlantRepository, PlantStore

router = APIRouter(prefix="/reminders", tags=["Reminders"])


class DeviceRequest(BaseModel):
    device_id: str = Field(..., min_length=1)


class PendingAlertsResponse(BaseModel):
    device_id: str
    alerts: List[dict]


class AlertIdResponse(BaseModel):
    alert_id: str


@router.post("/rebuild", response_model=Dict[str, int])
async def rebuild_reminders(
    data: DeviceRequest,
    current_user: dict = Depends(get_current_user),
    store: PlantStore = Depends(get_plant_store),
    scheduler_for=Depends(get_scheduler_factory),
):
    """
    Rebuild the device's alert plan from the household's current plants.

    Called by the app after water/snooze/edit/delete and on resume.
    """
    household_id = current_user["household_id"]
    repository = PlantRepository(store, household_id)
    plants = await repository.refresh()
    return await scheduler_for(household_id, data.device_id).rebuild(plants)


@router.get("/pending", response_model=PendingAlertsResponse)
async def get_pending_alerts(
    device_id: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
    scheduler_for=Depends(get_scheduler_factory),
):
    """Alert plan the device should mirror into its notification center."""
    alerts = scheduler_for(current_user["household_id"], device_id).alerts
    if hasattr(alerts, "list_plan"):
        plan = await alerts.list_plan()
    else:
        plan = [{"alert_id": alert_id} for alert_id in await alerts.list_pending()]
    return PendingAlertsResponse(device_id=device_id, alerts=plan)


@router.delete("/plants/{plant_id}", status_code=204)
async def remove_plant_reminder(
    plant_id: str,
    device_id: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
    scheduler_for=Depends(get_scheduler_factory),
):
    """Drop a deleted plant's alert without a full rebuild."""
    await scheduler_for(current_user["household_id"], device_id).remove_plant(plant_id)


@router.post("/test", response_model=AlertIdResponse)
async def send_test_alert(
    data: DeviceRequest,
    current_user: dict = Depends(get_current_user),
    scheduler_for=Depends(get_scheduler_factory),
):
    """One-off alert a second from now, to check notification permissions."""
    alert_id = await scheduler_for(current_user["household_id"], data.device_id).send_test_alert()
    return AlertIdResponse(alert_id=alert_id)
