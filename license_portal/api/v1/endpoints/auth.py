import logging
import re
import secrets
from datetime import date, datetime, timedelta
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.core.config import settings
from license_portal.core.errors import (
    bad_request,
    conflict,
    not_found,
    too_many_requests,
    unauthorized,
)
from license_portal.core.security import (
    create_session,
    get_current_active_user,
    get_password_hash,
)
from license_portal.models.auth_session import AuthSession, AuthSessionStatus
from license_portal.models.citizen import Citizen, CitizenStatus
from license_portal.models.user import User, UserRole
from license_portal.schemas.auth import (
    LoginRequest,
    OTPInitiateRequest,
    OTPVerifyRequest,
    ResetPasswordRequest,
    SignupRequest,
    UpdateProfileRequest,
)
from license_portal.schemas.user import User as UserSchema
from license_portal.services.license_generator import epoch_millis, random_base36

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NATIONAL_ID_PATTERN = re.compile(r"^[0-9]{13,16}$")
PHONE_PATTERN = re.compile(r"^\+257 [0-9]{2} [0-9]{3} [0-9]{3}$")
OTP_PATTERN = re.compile(r"^\d{6}$")

MIN_PASSWORD_LENGTH = 6

# Signup defaults for the citizen record until the citizen completes a profile
DEFAULT_DATE_OF_BIRTH = date(2000, 1, 1)
DEFAULT_ADDRESS = "Burundi, Bujumbura"


def generate_otp() -> str:
    return str(100000 + secrets.randbelow(900000))


def generate_otp_transaction_id() -> str:
    return f"txn_{epoch_millis()}_{random_base36(9)}"


def normalize_phone_number(value: str) -> str:
    """
    Bring a phone number into the stored ``+257 XX XXX XXX`` form.
    Numbers that do not have eight local digits are returned as typed.
    """
    phone = value.strip()
    if not phone.startswith("+257"):
        phone = f"+257 {phone}"
    local_digits = re.sub(r"\D", "", phone)[3:]
    if len(local_digits) == 8:
        phone = f"+257 {local_digits[:2]} {local_digits[2:5]} {local_digits[5:]}"
    return phone


def _citizen_data(citizen: Citizen) -> Dict[str, Any]:
    return {
        "id": citizen.id,
        "nationalId": citizen.national_id,
        "fullName": citizen.full_name,
        "dateOfBirth": citizen.date_of_birth,
        "address": citizen.address,
        "phoneNumber": citizen.phone_number,
        "email": citizen.email,
        "status": citizen.status,
    }


def _account(user: User) -> Dict[str, Any]:
    return {"id": user.id, "email": user.email, "role": user.role}


@router.post("/initiate")
def initiate_otp(
    *,
    db: Session = Depends(get_db),
    payload: OTPInitiateRequest,
) -> Any:
    """
    Start national-ID authentication: find the active citizen and issue a
    one-time password for the returned transaction.
    """
    if not payload.nationalId and not payload.email:
        raise bad_request("National ID or email is required", key="message")

    citizen = crud.citizen.resolve(
        db, national_id=payload.nationalId, email=payload.email, active_only=True
    )
    if not citizen:
        raise not_found("Citizen not found with this national ID or email", key="message")

    otp = generate_otp()
    transaction_id = generate_otp_transaction_id()
    crud.auth_session.create(
        db,
        obj_in={
            "citizen_id": citizen.id,
            "transaction_id": transaction_id,
            "otp_code": otp,
            "otp_expires_at": datetime.utcnow() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
            "status": AuthSessionStatus.PENDING.value,
            "attempts": 0,
        },
    )
    logger.info(f"OTP session {transaction_id} created for citizen {citizen.id}")

    response = {
        "success": True,
        "message": f"OTP sent to {citizen.phone_number}",
        "transactionId": transaction_id,
    }
    if settings.EXPOSE_OTP_IN_RESPONSE:
        response["otp"] = otp
    return response


def _otp_matches(session: AuthSession, otp: str) -> bool:
    if otp == session.otp_code:
        return True
    return settings.PERMISSIVE_OTP and bool(OTP_PATTERN.match(otp))


@router.post("/verifyotp")
def verify_otp(
    *,
    db: Session = Depends(get_db),
    payload: OTPVerifyRequest,
) -> Any:
    """
    Check the one-time password for a PENDING session.

    Each wrong code uses up an attempt; the session fails once
    OTP_MAX_ATTEMPTS is reached. A verified session cannot be used again.
    """
    if not payload.nationalId or not payload.otp or not payload.transactionId:
        raise bad_request("National ID, OTP, and transaction ID are required", key="message")

    session = crud.auth_session.get_pending(db, transaction_id=payload.transactionId)
    if not session:
        raise bad_request("Invalid or expired session. Please try again.", key="message")

    if datetime.utcnow() > session.otp_expires_at:
        crud.auth_session.set_status(db, db_obj=session, status=AuthSessionStatus.EXPIRED)
        raise bad_request("OTP has expired. Please request a new one.", key="message")

    if not _otp_matches(session, payload.otp):
        attempts = (session.attempts or 0) + 1
        update_data = {"attempts": attempts}
        if attempts >= settings.OTP_MAX_ATTEMPTS:
            update_data["status"] = AuthSessionStatus.FAILED.value
        crud.auth_session.update(db, db_obj=session, obj_in=update_data)
        logger.warning(f"Wrong OTP for session {session.transaction_id} ({attempts} attempts)")

        if attempts >= settings.OTP_MAX_ATTEMPTS:
            raise bad_request("Too many failed attempts. Please try again later.", key="message")
        raise bad_request(
            f"Invalid OTP. {settings.OTP_MAX_ATTEMPTS - attempts} attempts remaining.", key="message"
        )

    crud.auth_session.set_status(db, db_obj=session, status=AuthSessionStatus.VERIFIED)
    citizen = crud.citizen.get(db, id=session.citizen_id)
    logger.info(f"OTP session {session.transaction_id} verified")

    return {
        "success": True,
        "message": "Authentication successful",
        "citizenData": _citizen_data(citizen),
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    *,
    db: Session = Depends(get_db),
    payload: SignupRequest,
) -> Any:
    """
    Create an account together with its citizen record and default
    data-sharing permissions.
    """
    if not all([payload.fullName, payload.email, payload.nationalId, payload.phoneNumber, payload.password]):
        raise bad_request("All fields are required")

    email = payload.email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise bad_request("Please enter a valid email address")
    if not NATIONAL_ID_PATTERN.match(payload.nationalId):
        raise bad_request("National ID must be 13-16 digits")
    if not PHONE_PATTERN.match(payload.phoneNumber):
        raise bad_request("Phone number must be in format +257 XX XXX XXX")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise bad_request("Password must be at least 6 characters long")

    if crud.user.get_by_email(db, email=email):
        raise conflict("An account with this email already exists")
    if crud.user.get_by_national_id(db, national_id=payload.nationalId):
        raise conflict("User with this National ID already exists")
    if crud.user.get_by_phone(db, phone_number=payload.phoneNumber):
        raise conflict("User with this phone number already exists")
    if crud.citizen.get_by_national_id(db, national_id=payload.nationalId):
        raise conflict("Citizen with this National ID already exists")

    user = crud.user.create(
        db,
        obj_in={
            "full_name": payload.fullName,
            "email": email,
            "national_id": payload.nationalId,
            "phone_number": payload.phoneNumber,
            "hashed_password": get_password_hash(payload.password),
            "role": UserRole.USER.value,
            "is_active": True,
        },
    )
    logger.info(f"User {user.id} created for {email}")

    try:
        citizen = crud.citizen.create(
            db,
            obj_in={
                "national_id": payload.nationalId,
                "full_name": payload.fullName,
                "date_of_birth": DEFAULT_DATE_OF_BIRTH,
                "address": DEFAULT_ADDRESS,
                "phone_number": payload.phoneNumber,
                "email": email,
                "status": CitizenStatus.ACTIVE.value,
            },
        )
        crud.user_permission.create_default(db, citizen=citizen)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Citizen or permissions insert failed for user {user.id}: {str(e)}")

    return {
        "message": "User created successfully!",
        "user": _account(user),
        "session": create_session(user),
    }


@router.post("/login")
def login(
    *,
    db: Session = Depends(get_db),
    payload: LoginRequest,
) -> Any:
    """
    Password login with an email address or a Burundi phone number.
    Repeated wrong passwords lock the account for a while.
    """
    if not payload.emailOrPhone or not payload.password:
        raise bad_request("Email/phone and password are required")

    is_email = "@" in payload.emailOrPhone
    if is_email:
        user = crud.user.get_by_email(db, email=payload.emailOrPhone.strip().lower())
        if not user:
            raise not_found("No account found with this email address")
    else:
        user = crud.user.get_by_phone(db, phone_number=normalize_phone_number(payload.emailOrPhone))
        if not user:
            raise not_found("No account found with this phone number")

    if crud.user.is_locked(user):
        raise too_many_requests("Too many login attempts. Please wait a moment and try again")

    if not crud.user.check_password(db, user=user, password=payload.password):
        logger.warning(f"Wrong password for user {user.id}")
        raise unauthorized("Password incorrect. Please try again")

    if not user.is_active:
        raise unauthorized("This account has been deactivated")

    logger.info(f"User {user.id} logged in")

    return {
        "message": "Login successful",
        "user": _account(user),
        "profile": UserSchema.model_validate(user).model_dump(),
        "session": create_session(user),
    }


@router.post("/logout")
def logout() -> Any:
    """
    Access tokens are stateless; the client discards its token.
    """
    return {"message": "Logged out successfully"}


@router.get("/me")
def read_current_user(current_user: User = Depends(get_current_active_user)) -> Any:
    return {"user": _account(current_user), "profile": UserSchema.model_validate(current_user).model_dump()}


@router.post("/update-profile")
def update_profile(
    *,
    db: Session = Depends(get_db),
    payload: UpdateProfileRequest,
) -> Any:
    if not payload.userId or not payload.name or not payload.email:
        raise bad_request("Missing required fields: userId, name, email")

    email = payload.email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise bad_request("Invalid email format")

    owner = crud.user.get_by_email(db, email=email)
    if owner and owner.id != payload.userId:
        raise conflict("Email already exists")

    user = crud.user.get(db, id=payload.userId)
    if not user:
        raise not_found("User not found")

    user = crud.user.update(db, db_obj=user, obj_in={"full_name": payload.name.strip(), "email": email})

    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {"id": user.id, "full_name": user.full_name, "email": user.email},
    }


@router.post("/reset-password")
def reset_password(
    *,
    db: Session = Depends(get_db),
    payload: ResetPasswordRequest,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Set a new password for the account behind the bearer token.
    """
    if not payload.password:
        raise bad_request("Password is required")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise bad_request("Password must be at least 6 characters long")

    crud.user.set_password(db, db_obj=current_user, password=payload.password)
    logger.info(f"Password updated for user {current_user.id}")

    return {"message": "Password updated successfully!"}
