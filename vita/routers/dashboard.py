from __future__ import annotations

from fastapi import APIRouter, Depends

from vita.core.tokens import Identity
from vita.routers.deps import get_dashboard_service
from vita.services import DashboardService
from vita.services.session_service import current_identity

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard(identity: Identity = Depends(current_identity), svc: DashboardService = Depends(get_dashboard_service)):
    return svc.summary(identity.id)
