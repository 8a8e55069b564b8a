from typing import Any, Dict, Optional

from license_portal.models.license import LicenseApplication, QRCode


def application_row(application: LicenseApplication) -> Dict[str, Any]:
    """
    Stored columns of an application, keyed by column name.
    """
    return {
        column: getattr(application, column)
        for column in LicenseApplication.__table__.columns.keys()
    }


def transform_application(application: LicenseApplication) -> Dict[str, Any]:
    """
    Summary shape used by the review and listing endpoints.
    """
    return {
        "id": application.id,
        "citizenId": application.citizen_id,
        "licenseType": application.license_type,
        "status": application.status,
        "submittedAt": application.submitted_at,
        "approvedAt": application.approved_at,
        "rejectedAt": application.rejected_at,
        "reviewNotes": application.review_notes,
        "createdAt": application.created_at,
        "updatedAt": application.updated_at,
    }


def transform_qr_code(qr_code: Optional[QRCode]) -> Optional[Dict[str, Any]]:
    if qr_code is None:
        return None
    data = qr_code.qr_code_data or {}
    issue_date = data.get("issued_date") or qr_code.created_at
    return {
        "licenseNumber": qr_code.license_number,
        "qrCodeImage": qr_code.qr_code_image,
        "issueDate": issue_date,
        "expiryDate": data.get("expiry_date"),
        "createdAt": qr_code.created_at,
        "updatedAt": qr_code.updated_at,
        "qrData": {
            "holderName": data.get("holder_name"),
            "nationalId": data.get("national_id"),
            "licenseType": data.get("license_type"),
            "issueDate": issue_date,
            "expiryDate": data.get("expiry_date"),
        },
    }


def application_details(application: LicenseApplication, qr_code: Optional[QRCode] = None) -> Dict[str, Any]:
    details = transform_application(application)
    details.update(
        personalInfo=application.personal_info or {},
        documents=application.documents or {},
        photos=application.photos or {},
        emergencyContact=application.emergency_contact or {},
        pickedUp=bool(application.picked_up),
        pickupTime=application.pickup_time,
        licenseNumber=application.license_number,
        qrCode=transform_qr_code(qr_code),
    )
    return details
