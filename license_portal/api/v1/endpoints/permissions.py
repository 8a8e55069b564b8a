import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.core.errors import bad_request, not_found, server_error
from license_portal.models.citizen import Citizen
from license_portal.models.permission import PERMISSION_FIELDS, UserPermission
from license_portal.schemas.permission import PermissionsRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CITIZEN_NOT_FOUND = "Citizen not found with this national ID or email"


def _citizen_summary(citizen: Citizen) -> Dict[str, Any]:
    return {
        "id": citizen.id,
        "nationalId": citizen.national_id,
        "fullName": citizen.full_name,
        "phoneNumber": citizen.phone_number,
        "email": citizen.email,
    }


def _permission_data(row: UserPermission) -> Dict[str, Any]:
    return {
        "id": row.id,
        "citizenId": row.citizen_id,
        "nationalId": row.national_id,
        "permissions": crud.user_permission.to_flags(row),
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    }


@router.post("/profile")
def save_permissions(
    *,
    db: Session = Depends(get_db),
    payload: PermissionsRequest,
) -> Any:
    """
    Record which profile fields the citizen agrees to share.
    Saving consent also marks the citizen as verified.
    """
    if not payload.nationalId or not payload.permissions:
        raise bad_request(
            "National ID and permissions are required", key="message", extra={"error": "VALIDATION_ERROR"}
        )

    permissions = payload.permissions
    if not all(isinstance(permissions.get(name), bool) for name in PERMISSION_FIELDS):
        raise bad_request(
            "Invalid permissions format. Required: "
            f"{', '.join(PERMISSION_FIELDS)} (all boolean)",
            key="message",
            extra={"error": "INVALID_PERMISSIONS_FORMAT"},
        )

    citizen = crud.citizen.resolve(db, national_id=payload.nationalId, email=payload.email)
    if not citizen:
        raise not_found(CITIZEN_NOT_FOUND, key="message", extra={"error": "CITIZEN_NOT_FOUND"})

    try:
        row, is_update = crud.user_permission.save(
            db, citizen=citizen, permissions=permissions, email=payload.email
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving permissions for citizen {citizen.id}: {str(e)}")
        raise server_error(
            "Failed to save permissions", key="message", extra={"error": "PERMISSIONS_SAVE_FAILED"}
        )

    logger.info(f"Permissions {'updated' if is_update else 'saved'} for citizen {citizen.id}")

    return {
        "success": True,
        "message": f"Permissions {'updated' if is_update else 'saved'} successfully",
        "isUpdate": is_update,
        "data": _permission_data(row),
        "citizen": _citizen_summary(citizen),
    }


@router.get("/profile")
def read_permissions(
    db: Session = Depends(get_db),
    nationalId: Optional[str] = None,
    email: Optional[str] = None,
) -> Any:
    if not nationalId and not email:
        raise bad_request(
            "National ID or email is required", key="message", extra={"error": "VALIDATION_ERROR"}
        )

    citizen = crud.citizen.resolve(db, national_id=nationalId, email=email)
    if not citizen:
        raise not_found(CITIZEN_NOT_FOUND, key="message", extra={"error": "CITIZEN_NOT_FOUND"})

    row = crud.user_permission.get_by_citizen(db, citizen_id=citizen.id)
    if not row:
        raise not_found(
            "No permissions found for this citizen", key="message", extra={"error": "PERMISSIONS_NOT_FOUND"}
        )

    return {
        "success": True,
        "message": "Permissions retrieved successfully",
        "data": _permission_data(row),
        "citizen": _citizen_summary(citizen),
    }


@router.get("/check-verified")
def check_verified(
    db: Session = Depends(get_db),
    email: Optional[str] = None,
) -> Any:
    """
    Whether the account behind an email address has completed national-ID
    verification.
    """
    if not email:
        raise bad_request("Email is required")

    row = crud.user_permission.get_by_email(db, email=email)
    if not row:
        logger.info(f"No permissions row for {email}")
        return {"isVerified": False}

    return {"isVerified": bool(row.is_verified), "nationalId": row.national_id}
