import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.core.config import settings
from license_portal.core.errors import bad_request, not_found
from license_portal.crud.crud_citizen import LEGACY_NATIONAL_ID_LENGTH
from license_portal.models.license import ApplicationStatus
from license_portal.schemas.application import LicenseApplicationRequest
from license_portal.services.license_generator import generate_derived_application_id

logger = logging.getLogger(__name__)

router = APIRouter()

LICENSE_TYPE_MAPPING = {
    "car": "CAR",
    "motorcycle": "MOTORCYCLE",
    "commercial": "COMMERCIAL",
    "cdl": "CDL",
}

DEFAULT_EMERGENCY_CONTACT = {
    "name": "Emergency Contact",
    "relationship": "Friend",
    "phone": "+257 00 000 000",
    "email": "emergency@example.com",
}


def _unused_application_id(db: Session, national_id: str) -> str:
    application_id = generate_derived_application_id(national_id)
    while crud.license_application.get(db, id=application_id):
        application_id = generate_derived_application_id(national_id)
    return application_id


@router.post("")
def submit_license_application(
    *,
    db: Session = Depends(get_db),
    payload: LicenseApplicationRequest,
) -> Any:
    """
    Submit a complete application in one request.

    Re-submitting refreshes the citizen's existing application in place and
    leaves its review status alone.
    """
    personal_info = payload.personalInfo or {}
    national_id = personal_info.get("nationalId")
    if not national_id:
        raise bad_request("National ID is required")
    national_id = str(national_id).strip()

    citizen = crud.citizen.resolve(db, national_id=national_id)
    if not citizen:
        debug = None
        if settings.DEBUG:
            debug = {
                "searchedNationalId": national_id,
                "searchedNationalIdLength": len(national_id),
                "truncatedNationalId": (
                    national_id[:LEGACY_NATIONAL_ID_LENGTH]
                    if len(national_id) > LEGACY_NATIONAL_ID_LENGTH
                    else None
                ),
            }
        raise not_found(
            "Citizen not found. Please ensure your national ID is registered in the system.",
            extra={"debug": debug} if debug else None,
        )

    license_type = payload.licenseType or ""
    documents = payload.documents or {}
    photo = payload.photo if isinstance(payload.photo, dict) else {}
    now = datetime.utcnow()

    application_data = {
        "license_type": LICENSE_TYPE_MAPPING.get(license_type, license_type.upper()),
        "personal_info": personal_info,
        "documents": {
            "identityDocument": documents.get("nationalId"),
            "proofOfResidence": documents.get("proofOfResidence"),
            "medicalCertificate": documents.get("medicalCertificate"),
            "drivingSchoolCertificate": documents.get("drivingSchoolCertificate"),
            "profilePhoto": photo.get("profilePhoto"),
            "signature": photo.get("signature"),
        },
        "emergency_contact": payload.emergencyContact or DEFAULT_EMERGENCY_CONTACT,
        "submitted_at": now,
        "updated_at": now,
    }

    existing = crud.license_application.get_by_citizen(db, citizen_id=citizen.id)
    if existing:
        application = crud.license_application.update(db, db_obj=existing, obj_in=application_data)
        operation_type = "updated"
    else:
        application_data.update(
            id=_unused_application_id(db, national_id),
            citizen_id=citizen.id,
            status=ApplicationStatus.DRAFT.value,
        )
        application = crud.license_application.create(db, obj_in=application_data)
        operation_type = "created"
    logger.info(f"License application {application.id} {operation_type} for citizen {citizen.id}")

    return {
        "success": True,
        "data": {
            "applicationId": application.id,
            "status": application.status,
            "createdAt": application.created_at,
            "citizenName": citizen.full_name,
            "operationType": operation_type,
        },
    }
