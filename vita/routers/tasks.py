from __future__ import annotations

from fastapi import APIRouter, Depends

from vita.core.tokens import Identity
from vita.routers.deps import get_task_service
from vita.schemas import TaskCreate, TaskUpdate
from vita.services import TaskService
from vita.services.session_service import current_identity

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("")
def list_tasks(identity: Identity = Depends(current_identity), svc: TaskService = Depends(get_task_service)):
    return {"tasks": svc.list(identity.id)}


@router.post("", status_code=201)
def create_task(
    payload: TaskCreate,
    identity: Identity = Depends(current_identity),
    svc: TaskService = Depends(get_task_service),
):
    return svc.create(identity.id, payload.model_dump())


@router.get("/{task_id}")
def get_task(task_id: str, identity: Identity = Depends(current_identity), svc: TaskService = Depends(get_task_service)):
    return svc.get(identity.id, task_id)


@router.put("/{task_id}")
def update_task(
    task_id: str,
    payload: TaskUpdate,
    identity: Identity = Depends(current_identity),
    svc: TaskService = Depends(get_task_service),
):
    return svc.update(identity.id, task_id, payload.model_dump(exclude_unset=True))


@router.delete("/{task_id}")
def delete_task(task_id: str, identity: Identity = Depends(current_identity), svc: TaskService = Depends(get_task_service)):
    svc.delete(identity.id, task_id)
    return {"success": True}
