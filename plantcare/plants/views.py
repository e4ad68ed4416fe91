"""Plant urgency and snooze API routes."""

from typing import List

from fastapi import APIRouter, Depends

from plantcare.core.config import EngineConfig
from plantcare.core.dependencies import get_current_user
from plantcare.core.exceptions import NotFoundException
from plantcare.engine import get_engine_config, get_plant_store
from plantcare.plants.models import (
    Plant,
    PlantStatusGroupsResponse,
    PlantUrgencyResponse,
    SnoozeRequest,
)
from plantcare.plants.repository import PlantRepository, PlantStore
from plantcare.plants.urgency import (
    UrgencyState,
    classify_plant,
    group_plants_by_status,
    needs_water,
    status_text,
)

router = APIRouter(prefix="/plants", tags=["Plants"])


def _to_response(plant: Plant, state: UrgencyState) -> PlantUrgencyResponse:
    return PlantUrgencyResponse(
        plant_id=plant.id,
        name=plant.name,
        location=plant.location,
        status=state.status.value,
        days_until=state.days_until,
        days_overdue=state.days_overdue,
        next_due=state.next_due,
        snoozed_until=state.snoozed_until,
        status_text=status_text(state),
        needs_water=needs_water(state),
        needs_correction=state.used_fallback,
    )


async def _household_plant(store: PlantStore, plant_id: str, household_id: str) -> Plant:
    plant = await store.get(plant_id)
    if plant.household_id != household_id:
        raise NotFoundException("Plant not found")
    return plant


@router.get("/urgency", response_model=List[PlantUrgencyResponse])
async def list_plant_urgency(
    current_user: dict = Depends(get_current_user),
    store: PlantStore = Depends(get_plant_store),
    config: EngineConfig = Depends(get_engine_config),
):
    """Current urgency of every plant in the caller's household."""
    repository = PlantRepository(store, current_user["household_id"])
    plants = await repository.refresh()
    return [_to_response(plant, classify_plant(plant, config=config)) for plant in plants]


@router.get("/status-groups", response_model=PlantStatusGroupsResponse)
async def get_status_groups(
    current_user: dict = Depends(get_current_user),
    store: PlantStore = Depends(get_plant_store),
    config: EngineConfig = Depends(get_engine_config),
):
    """Dashboard buckets: to water today, upcoming, snoozed, ok."""
    repository = PlantRepository(store, current_user["household_id"])
    groups = group_plants_by_status(await repository.refresh(), config=config)
    return PlantStatusGroupsResponse(**{
        name: [_to_response(plant, state) for plant, state in pairs]
        for name, pairs in groups.items()
    })


@router.post("/{plant_id}/snooze", response_model=PlantUrgencyResponse)
async def snooze_plant(
    plant_id: str,
    data: SnoozeRequest,
    current_user: dict = Depends(get_current_user),
    store: PlantStore = Depends(get_plant_store),
    config: EngineConfig = Depends(get_engine_config),
):
    """Suppress reminders until `snoozed_until`. Watering history is untouched."""
    await _household_plant(store, plant_id, current_user["household_id"])
    plant = await store.set_snooze(plant_id, data.snoozed_until)
    return _to_response(plant, classify_plant(plant, config=config))


@router.delete("/{plant_id}/snooze", response_model=PlantUrgencyResponse)
async def clear_snooze(
    plant_id: str,
    current_user: dict = Depends(get_current_user),
    store: PlantStore = Depends(get_plant_store),
    config: EngineConfig = Depends(get_engine_config),
):
    """Resume normal reminders."""
    await _household_plant(store, plant_id, current_user["household_id"])
    plant = await store.set_snooze(plant_id, None)
    return _to_response(plant, classify_plant(plant, config=config))
