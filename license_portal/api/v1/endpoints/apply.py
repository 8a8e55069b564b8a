import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import FormData, UploadFile

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.api.v1.serializers import application_row
from license_portal.core.errors import bad_request, not_found, server_error
from license_portal.models.citizen import Citizen
from license_portal.models.license import ApplicationStatus, LicenseApplication
from license_portal.schemas.application import PersonalInfoRequest
from license_portal.services.file_manager import DOCUMENT_TYPES, PHOTO_TYPES, file_manager
from license_portal.services.license_generator import generate_application_id

logger = logging.getLogger(__name__)

router = APIRouter()


def _form_text(form: FormData, key: str) -> Optional[str]:
    for value in form.getlist(key):
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _form_file(form: FormData, key: str) -> Optional[UploadFile]:
    for value in form.getlist(key):
        if isinstance(value, UploadFile):
            return value
    return None


def _load_upload_target(db: Session, form: FormData) -> Tuple[Citizen, LicenseApplication]:
    """
    Citizen and application an upload form refers to.
    """
    national_id = _form_text(form, "nationalId")
    license_type = _form_text(form, "licenseType")
    if not national_id or not license_type:
        raise bad_request("Missing required fields")

    citizen = crud.citizen.resolve(db, national_id=national_id)
    if not citizen:
        raise not_found("User not found with this national ID")

    application = crud.license_application.get_by_citizen(db, citizen_id=citizen.id)
    if not application:
        raise not_found("Application not found. Please complete personal information first.")

    return citizen, application


async def _store_files(form: FormData, kinds: List[str], save, citizen: Citizen) -> Dict[str, Any]:
    saved: Dict[str, Any] = {}
    for kind in kinds:
        upload = _form_file(form, kind)
        if upload is None:
            continue
        try:
            content = await upload.read()
            saved[kind] = save(kind, citizen.id, upload.filename, content)
        except OSError as e:
            logger.error(f"Error saving {kind} for citizen {citizen.id}: {str(e)}")
            raise server_error(f"Failed to save {kind}")
    return saved


@router.post("/personalInfo")
def submit_personal_info(
    *,
    db: Session = Depends(get_db),
    payload: PersonalInfoRequest,
) -> Any:
    """
    Create the citizen's application, or refresh the existing one.
    """
    if not payload.personalInfo or not payload.nationalId:
        raise bad_request("Missing required fields")

    citizen = crud.citizen.resolve(db, national_id=payload.nationalId)
    if not citizen:
        raise not_found("User not found with this national ID")

    existing = crud.license_application.get_by_citizen(db, citizen_id=citizen.id)
    if existing:
        application = crud.license_application.update(
            db,
            db_obj=existing,
            obj_in={
                "license_type": payload.licenseType,
                "personal_info": payload.personalInfo,
                "updated_at": datetime.utcnow(),
            },
        )
        logger.info(f"Updated existing application {application.id}")
    else:
        application = crud.license_application.create(
            db,
            obj_in={
                "id": generate_application_id(),
                "citizen_id": citizen.id,
                "license_type": payload.licenseType,
                "status": ApplicationStatus.DRAFT.value,
                "personal_info": payload.personalInfo,
                "documents": {},
                "emergency_contact": payload.personalInfo.get("emergencyContact") or {},
            },
        )
        logger.info(f"Created new application {application.id} for citizen {citizen.id}")

    return {
        "success": True,
        "applicationId": application.id,
        "message": "Application updated successfully" if existing else "Application created successfully",
        "data": application_row(application),
    }


@router.post("/documents")
async def upload_documents(
    request: Request,
    db: Session = Depends(get_db),
) -> Any:
    """
    Store supporting documents for the citizen's application.
    Documents present in the form replace the stored set.
    """
    form = await request.form()
    citizen, application = _load_upload_target(db, form)

    documents = await _store_files(form, list(DOCUMENT_TYPES), file_manager.save_document, citizen)

    crud.license_application.update(
        db,
        db_obj=application,
        obj_in={"documents": documents, "updated_at": datetime.utcnow()},
    )

    return {
        "success": True,
        "message": "Documents uploaded successfully",
        "documents": documents,
        "applicationId": application.id,
    }


@router.post("/photos")
async def upload_photos(
    request: Request,
    db: Session = Depends(get_db),
) -> Any:
    """
    Store the profile photo and signature, then submit the application for review.
    """
    form = await request.form()
    citizen, application = _load_upload_target(db, form)

    photos = await _store_files(form, list(PHOTO_TYPES), file_manager.save_photo, citizen)

    now = datetime.utcnow()
    crud.license_application.update(
        db,
        db_obj=application,
        obj_in={
            "photos": photos,
            "status": ApplicationStatus.PENDING.value,
            "submitted_at": now,
            "updated_at": now,
        },
    )
    logger.info(f"Application {application.id} submitted with photos")

    return {
        "success": True,
        "message": "Photos uploaded successfully and application submitted",
        "photos": photos,
        "applicationId": application.id,
        "status": "submitted",
        "data": {
            "applicationId": application.id,
            "nationalId": citizen.national_id,
        },
    }
