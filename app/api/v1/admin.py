from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_auth_service, require_roles
from app.core.config import settings
from app.db.models import Role
from app.schemas.auth import (
    AdminCreateRequest,
    AdminCreateResponse,
    AdminLoginRequest,
    AdminLoginResponse,
    AdminUnlockRequest,
    SuccessResponse,
)
from app.services.auth_service import AuthService

router = APIRouter()

@router.post("/login", response_model=AdminLoginResponse)
async def login(
    login_data: AdminLoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service)
):
    result = await service.login(login_data)
    # Browser sessions keep the token out of script-accessible storage
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=result.token,
        max_age=settings.ADMIN_TOKEN_EXPIRE_HOURS * 3600,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return result

@router.post(
    "/create",
    response_model=AdminCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(Role.ADMIN))],
)
async def create_admin(
    payload: AdminCreateRequest,
    service: AuthService = Depends(get_auth_service)
):
    return await service.create_admin(payload)

@router.post(
    "/unlock",
    response_model=SuccessResponse,
    dependencies=[Depends(require_roles(Role.ADMIN))],
)
async def unlock_account(
    payload: AdminUnlockRequest,
    service: AuthService = Depends(get_auth_service)
):
    return await service.unlock(payload)
