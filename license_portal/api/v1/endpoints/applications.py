import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.api.v1.serializers import application_details, transform_application
from license_portal.core.errors import bad_request, not_found
from license_portal.schemas.application import ApplicationDetailsRequest, ApplicationListRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
def list_citizen_applications(
    *,
    db: Session = Depends(get_db),
    payload: ApplicationListRequest,
) -> Any:
    """
    Applications belonging to a citizen, newest first. ``citizenId`` is the
    citizen's national ID.
    """
    if not payload.citizenId:
        raise bad_request("Citizen ID is required")

    national_id = str(payload.citizenId).strip()
    citizen = crud.citizen.resolve(db, national_id=national_id)
    applications = crud.license_application.get_multi_for_citizen(
        db, national_id=national_id, citizen_id=citizen.id if citizen else None
    )
    logger.info(f"Found {len(applications)} applications for {national_id}")

    return {
        "success": True,
        "data": [transform_application(application) for application in applications],
    }


@router.post("/details")
def read_application_details(
    *,
    db: Session = Depends(get_db),
    payload: ApplicationDetailsRequest,
) -> Any:
    """
    Full application with documents, photos, pickup state and issued QR code.
    """
    if not payload.applicationId or not payload.citizenId:
        raise bad_request("Application ID and Citizen ID are required")

    application = crud.license_application.get(db, id=payload.applicationId)
    if not application or not crud.license_application.belongs_to(application, payload.citizenId):
        raise not_found("Application not found or you do not have permission to view it")

    qr_code = crud.qr_code.get_by_application_id(db, application_id=application.id)

    return {
        "success": True,
        "data": application_details(application, qr_code),
    }
