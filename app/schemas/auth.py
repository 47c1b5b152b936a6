from pydantic import BaseModel, EmailStr, Field
from datetime import date

from app.schemas.account import AccountInfo, AdminInfo, CamelModel

class SendOtpRequest(BaseModel):
    mobile: str = Field(min_length=1)

class VerifyOtpRequest(BaseModel):
    mobile: str = Field(min_length=1)
    otp: str = Field(min_length=1, max_length=12)

class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    dob: date

class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class AdminCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=8)
    mobile: str = Field(min_length=1)

class AdminUnlockRequest(BaseModel):
    mobile: str = Field(min_length=1)

class SuccessResponse(CamelModel):
    success: bool = True

class VerifyOtpResponse(CamelModel):
    success: bool = True
    is_new: bool
    token: str

class SignupResponse(CamelModel):
    success: bool = True
    token: str
    user: AccountInfo

class AdminLoginResponse(CamelModel):
    success: bool = True
    token: str
    admin: AdminInfo

class AdminCreateResponse(CamelModel):
    success: bool = True
    admin: AdminInfo
