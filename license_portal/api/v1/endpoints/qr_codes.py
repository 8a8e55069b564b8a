import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.api.v1.serializers import application_row
from license_portal.core.config import settings
from license_portal.core.errors import bad_request, not_found, server_error
from license_portal.models.license import ApplicationStatus, QRCode
from license_portal.schemas.qr_code import QRGenerateRequest, QRVerifyRequest
from license_portal.services.license_generator import (
    calculate_expiry_date,
    generate_license_number,
    generate_license_qr_code,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Application statuses under which an issued license counts as valid
VALID_LICENSE_STATUSES = {"approved", "completed"}


def _qr_data(qr_code: QRCode) -> Dict[str, Any]:
    data = qr_code.qr_code_data
    if isinstance(data, str):
        data = json.loads(data)
    return data or {}


def _issued_response(qr_code: QRCode) -> Dict[str, Any]:
    data = _qr_data(qr_code)
    issue_date = data.get("issued_date") or qr_code.created_at
    return {
        "license_number": qr_code.license_number,
        "qr_code_image": qr_code.qr_code_image,
        "issue_date": issue_date,
        "expiry_date": data.get("expiry_date"),
        "created_at": qr_code.created_at,
        "qr_data": {
            "holderName": data.get("holder_name"),
            "nationalId": data.get("national_id"),
            "licenseType": data.get("license_type"),
            "issueDate": issue_date,
            "expiryDate": data.get("expiry_date"),
        },
    }


@router.get("/generate")
def read_application_for_qr(
    db: Session = Depends(get_db),
    id: Optional[str] = None,
) -> Any:
    """
    Fetch the application record a QR code is (or will be) issued for.
    """
    if not id:
        raise bad_request("Application ID is required")

    application = crud.license_application.get(db, id=id)
    if not application:
        raise not_found("Application not found")

    return {
        "success": True,
        "application": application_row(application),
        "message": "Application fetched successfully",
    }


@router.post("/generate")
def generate_qr_code(
    *,
    db: Session = Depends(get_db),
    payload: QRGenerateRequest,
) -> Any:
    """
    Issue the license QR code for an application.

    Issuance happens once: when a QR code already exists for the application
    it is returned unchanged. The license number is assigned here unless the
    application already carries one.
    """
    if not payload.applicationId:
        raise bad_request("Application ID is required")

    existing = crud.qr_code.get_by_application_id(db, application_id=payload.applicationId)
    if existing:
        return {
            "success": True,
            "data": _issued_response(existing),
            "message": "Existing QR code retrieved successfully",
        }

    application = crud.license_application.get(db, id=payload.applicationId)
    if not application:
        logger.error(f"Application not found for QR generation: {payload.applicationId}")
        raise not_found("Application not found")

    personal_info = application.personal_info or {}
    license_number = application.license_number or generate_license_number(application.license_type)
    issued = datetime.utcnow().date()

    qr_code_data = {
        "license_number": license_number,
        "application_id": application.id,
        "license_type": application.license_type,
        "holder_name": f"{personal_info.get('firstName') or ''} {personal_info.get('lastName') or ''}".strip(),
        "national_id": personal_info.get("nationalId") or "",
        "issued_date": issued.isoformat(),
        "expiry_date": calculate_expiry_date(application.license_type, issued).isoformat(),
        "status": application.status or ApplicationStatus.PENDING.value,
        "qr_generated_at": datetime.utcnow().isoformat(),
    }

    qr_content = {
        "licenseNumber": license_number,
        "nationalId": qr_code_data["national_id"],
        "holderName": qr_code_data["holder_name"],
        "licenseType": qr_code_data["license_type"],
        "issuedDate": qr_code_data["issued_date"],
        "expiryDate": qr_code_data["expiry_date"],
        "verificationUrl": f"{settings.APP_URL}/verify/{license_number}",
    }

    try:
        qr_code_image = generate_license_qr_code(qr_content)
    except Exception as e:
        logger.error(f"Error generating QR code image for {application.id}: {str(e)}")
        raise server_error("Failed to generate QR code image")

    try:
        qr_code = crud.qr_code.create(
            db,
            obj_in={
                "application_id": application.id,
                "license_number": license_number,
                "qr_code_data": qr_code_data,
                "qr_code_image": qr_code_image,
            },
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving QR code to database for {application.id}: {str(e)}")
        raise server_error("Failed to save QR code to database")

    if not application.license_number:
        try:
            crud.license_application.update(
                db,
                db_obj=application,
                obj_in={"license_number": license_number, "updated_at": datetime.utcnow()},
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error updating application {application.id} with license number: {str(e)}")

    logger.info(f"QR code generated for application {application.id}: {license_number}")

    return {
        "success": True,
        "data": _issued_response(qr_code),
        "message": "QR code generated successfully",
    }


@router.delete("/{application_id}")
def delete_qr_code(
    application_id: str,
    db: Session = Depends(get_db),
) -> Any:
    """
    Drop an application's issued QR code so the next generate call issues a
    fresh one. The license number stays on the application.
    """
    qr_code = crud.qr_code.get_by_application_id(db, application_id=application_id)
    if not qr_code:
        raise not_found("QR code not found")

    crud.qr_code.remove(db, id=qr_code.id)
    logger.info(f"QR code {qr_code.license_number} revoked for application {application_id}")

    return {"success": True, "message": "QR code deleted successfully"}


def _verify_license(db: Session, license_number: str) -> Dict[str, Any]:
    qr_code = crud.qr_code.get_by_license_number(db, license_number=license_number)
    if not qr_code:
        logger.warning(f"QR code not found: {license_number}")
        raise not_found("License not found", extra={"valid": False})

    application = crud.license_application.get(db, id=qr_code.application_id)
    if not application:
        logger.warning(f"Application not found for QR code: {license_number}")
        raise not_found("Application not found", extra={"valid": False})

    data = _qr_data(qr_code)
    expiry_date = date.fromisoformat(data["expiry_date"])
    expired = datetime.utcnow().date() > expiry_date
    valid = not expired and (application.status or "").lower() in VALID_LICENSE_STATUSES

    logger.info(f"License {license_number} verified: valid={valid} expired={expired} status={application.status}")

    if valid:
        message = "License is valid"
    elif expired:
        message = "License has expired"
    else:
        message = "License is not valid"

    return {
        "success": True,
        "valid": valid,
        "expired": expired,
        "license": {
            "license_number": qr_code.license_number,
            "holder_name": data.get("holder_name"),
            "national_id": data.get("national_id"),
            "license_type": data.get("license_type"),
            "issue_date": data.get("issued_date"),
            "expiry_date": data.get("expiry_date"),
            "status": application.status,
            "created_at": qr_code.created_at,
        },
        "message": message,
    }


@router.get("/verify")
def verify_license(
    db: Session = Depends(get_db),
    license: Optional[str] = None,
) -> Any:
    """
    Check a license number: valid while unexpired and approved.
    """
    if not license:
        raise bad_request("License number is required")
    return _verify_license(db, license)


@router.post("/verify")
def verify_qr_content(
    *,
    db: Session = Depends(get_db),
    payload: QRVerifyRequest,
) -> Any:
    """
    Verify the raw content scanned from a license QR code.
    """
    if not payload.qrContent:
        raise bad_request("QR code content is required")

    qr_content = payload.qrContent
    if isinstance(qr_content, str):
        try:
            qr_content = json.loads(qr_content)
        except json.JSONDecodeError:
            raise bad_request("Invalid QR code format", extra={"valid": False})
    if not isinstance(qr_content, dict):
        raise bad_request("Invalid QR code format", extra={"valid": False})

    license_number = qr_content.get("licenseNumber")
    if not license_number:
        raise bad_request("License number not found in QR code", extra={"valid": False})

    return _verify_license(db, str(license_number))
