from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends

from vita.core.tokens import Identity
from vita.routers.deps import get_habit_service
from vita.schemas import HabitCreate, HabitLogCreate, HabitUpdate
from vita.services import HabitService
from vita.services.session_service import current_identity

router = APIRouter(prefix="/habits", tags=["habits"])


@router.get("")
def list_habits(identity: Identity = Depends(current_identity), svc: HabitService = Depends(get_habit_service)):
    return {"habits": svc.list(identity.id)}


@router.post("", status_code=201)
def create_habit(
    payload: HabitCreate,
    identity: Identity = Depends(current_identity),
    svc: HabitService = Depends(get_habit_service),
):
    return svc.create(identity.id, payload.model_dump())


@router.get("/{habit_id}")
def get_habit(habit_id: str, identity: Identity = Depends(current_identity), svc: HabitService = Depends(get_habit_service)):
    return svc.get(identity.id, habit_id)


@router.put("/{habit_id}")
def update_habit(
    habit_id: str,
    payload: HabitUpdate,
    identity: Identity = Depends(current_identity),
    svc: HabitService = Depends(get_habit_service),
):
    return svc.update(identity.id, habit_id, payload.model_dump(exclude_unset=True))


@router.delete("/{habit_id}")
def delete_habit(habit_id: str, identity: Identity = Depends(current_identity), svc: HabitService = Depends(get_habit_service)):
    svc.delete(identity.id, habit_id)
    return {"success": True}


@router.post("/{habit_id}/log", status_code=201)
def log_habit(
    habit_id: str,
    payload: Optional[HabitLogCreate] = Body(default=None),
    identity: Identity = Depends(current_identity),
    svc: HabitService = Depends(get_habit_service),
):
    count = payload.count if payload is not None else 1
    log = svc.log(identity.id, habit_id, count)
    return {"log": {key: log[key] for key in ("id", "habit_id", "date", "count")}}
