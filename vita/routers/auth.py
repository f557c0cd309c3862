from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vita.core.rate_limiter import rate_limit_ip
from vita.routers.deps import get_auth_service
from vita.schemas import LoginRequest, RegisterRequest
from vita.services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    rate_limit_ip(request, "auth:register")
    result = auth_service.register(payload.email, payload.password, payload.name)
    # no token here: the client logs in separately
    return {"id": result.id, "email": result.email}


@router.post("/login")
def login(payload: LoginRequest, request: Request, auth_service: AuthService = Depends(get_auth_service)):
    rate_limit_ip(request, "auth:login")
    result = auth_service.login(payload.email, payload.password)
    return {"token": result.token}
