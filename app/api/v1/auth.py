from fastapi import APIRouter, Depends, Response

from app.api.deps import enforce_send_otp_rate_limit, get_otp_service, require_roles
from app.core.config import settings
from app.db.models import Role
from app.schemas.account import AuthContext, CurrentAccountResponse
from app.schemas.auth import (
    SendOtpRequest,
    SignupRequest,
    SignupResponse,
    SuccessResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.services.otp_service import OtpService

router = APIRouter()

@router.post(
    "/send-otp",
    response_model=SuccessResponse,
    dependencies=[Depends(enforce_send_otp_rate_limit)],
)
async def send_otp(
    payload: SendOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    return await service.send_otp(payload)

@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    return await service.verify_otp(payload)

@router.post("/signup", response_model=SignupResponse)
async def signup(
    payload: SignupRequest,
    context: AuthContext = Depends(require_roles()),
    service: OtpService = Depends(get_otp_service)
):
    return await service.complete_signup(context, payload)

@router.get("/current", response_model=CurrentAccountResponse)
async def current(context: AuthContext = Depends(require_roles())):
    return CurrentAccountResponse(user=context.info)

@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    context: AuthContext = Depends(require_roles(Role.ADMIN, Role.USER)),
):
    response.delete_cookie(
        settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return SuccessResponse()
