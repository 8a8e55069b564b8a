from typing import Optional

from pydantic import BaseModel


class OTPInitiateRequest(BaseModel):
    nationalId: Optional[str] = None
    email: Optional[str] = None


class OTPVerifyRequest(BaseModel):
    nationalId: Optional[str] = None
    otp: Optional[str] = None
    transactionId: Optional[str] = None


class SignupRequest(BaseModel):
    fullName: Optional[str] = None
    email: Optional[str] = None
    nationalId: Optional[str] = None
    phoneNumber: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    emailOrPhone: Optional[str] = None
    password: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    userId: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    password: Optional[str] = None
