import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.api.v1.serializers import transform_application
from license_portal.core.config import settings
from license_portal.core.errors import bad_request, not_found, server_error
from license_portal.core.retry import retry_operation
from license_portal.models.license import (
    ApplicationStatus,
    LicenseApplication,
    REVIEW_ACTIONS,
    normalize_status,
)
from license_portal.schemas.application import (
    AdminApplicationRequest,
    BatchReviewRequest,
    PickupRequest,
    ReviewRequest,
)
from license_portal.services.email_service import (
    send_application_status_email,
    send_batch_application_status_emails,
)

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_ACTION = 'Invalid action. Must be "APPROVED" or "REJECTED"'


def _email_payload(application: LicenseApplication) -> Dict[str, Any]:
    return {
        "id": application.id,
        "licenseType": application.license_type,
        "status": application.status,
        "submittedAt": application.submitted_at,
        "reviewNotes": application.review_notes,
    }


def _applicant_email(application: LicenseApplication) -> Optional[str]:
    return (application.personal_info or {}).get("email")


def _log_review(db: Session, admin_id: Optional[int], action: str, application_ids, notes: Optional[str]) -> None:
    try:
        crud.admin_action.log_many(
            db, admin_id=admin_id, action_type=action, application_ids=application_ids, notes=notes
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to log admin action {action} for {application_ids}: {str(e)}")


@router.get("/applications")
def read_applications(
    db: Session = Depends(get_db),
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> Any:
    """
    Paginated applications for the review dashboard, newest first.
    ``status=all`` or no status lists every application.
    """
    status_filter = None
    if status and status.lower() != "all":
        try:
            status_filter = normalize_status(status)
        except ValueError as e:
            raise bad_request(str(e))

    applications, total = crud.license_application.get_multi_by_status(
        db, status=status_filter, skip=(page - 1) * limit, limit=limit
    )

    data = []
    for application in applications:
        item = transform_application(application)
        item["personalInfo"] = application.personal_info
        data.append(item)

    return {
        "success": True,
        "data": data,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
        },
    }


@router.post("/applications")
def read_application(
    *,
    db: Session = Depends(get_db),
    payload: AdminApplicationRequest,
) -> Any:
    """
    One application with its personal info and documents.
    """
    if not payload.applicationId:
        raise bad_request("Application ID is required")

    application = crud.license_application.get(db, id=payload.applicationId)
    if not application:
        raise not_found("Application not found")

    data = transform_application(application)
    data["personalInfo"] = application.personal_info
    data["documents"] = application.documents
    return {"success": True, "data": data}


@router.post("/applications/approve")
async def review_application(
    *,
    db: Session = Depends(get_db),
    payload: ReviewRequest,
) -> Any:
    """
    Approve or reject one application.

    Only DRAFT, PENDING and UNDER_REVIEW applications can be reviewed. The
    audit row and the applicant email are best-effort and never fail the
    request once the status change is committed.
    """
    if not payload.applicationId or not payload.action:
        raise bad_request("Application ID and action are required")
    if payload.action not in REVIEW_ACTIONS:
        raise bad_request(INVALID_ACTION)

    existing = crud.license_application.get(db, id=payload.applicationId)
    if not existing:
        raise not_found("Application not found")
    if existing.status in REVIEW_ACTIONS:
        raise bad_request(f"Application already {existing.status}")

    try:
        application = crud.license_application.review(
            db,
            application_id=payload.applicationId,
            action=payload.action,
            review_notes=payload.reviewNotes or None,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database update error for {payload.applicationId}: {str(e)}")
        raise server_error("Failed to update application status")

    if application is None:
        # Another reviewer got there first
        db.refresh(existing)
        raise bad_request(f"Application already {existing.status}")

    logger.info(f"Application {application.id} {payload.action} by admin {payload.adminId}")

    _log_review(db, payload.adminId, payload.action, [application.id], payload.reviewNotes)

    email = _applicant_email(application)
    if email:
        result = await send_application_status_email(email, payload.action, _email_payload(application))
        if not result["success"]:
            logger.error(f"Failed to send email for application {application.id}: {result.get('error')}")
    else:
        logger.warning(f"No email found for application {application.id}")

    return {
        "success": True,
        "message": f"Application {payload.action.lower()} successfully",
        "data": transform_application(application),
    }


@router.patch("/applications/approve")
async def review_applications(
    *,
    db: Session = Depends(get_db),
    payload: BatchReviewRequest,
) -> Any:
    """
    Approve or reject several applications at once. Applications that are
    already APPROVED or REJECTED are skipped.
    """
    if not isinstance(payload.applicationIds, list) or not payload.applicationIds:
        raise bad_request("Application IDs array is required")
    if payload.action not in REVIEW_ACTIONS:
        raise bad_request(INVALID_ACTION)

    try:
        applications = crud.license_application.review_many(
            db,
            application_ids=[str(application_id) for application_id in payload.applicationIds],
            action=payload.action,
            review_notes=payload.reviewNotes or None,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database batch update error: {str(e)}")
        raise server_error("Failed to update application statuses")

    logger.info(
        f"Batch {payload.action}: {len(applications)} of {len(payload.applicationIds)} applications updated"
    )

    if applications:
        _log_review(db, payload.adminId, payload.action, [a.id for a in applications], payload.reviewNotes)

    email_results = await send_batch_application_status_emails(
        [
            {"email": _applicant_email(application), "application_data": _email_payload(application)}
            for application in applications
        ],
        payload.action,
    )
    failed = [result for result in email_results if not result["success"]]
    if failed:
        logger.warning(f"Some emails failed to send: {failed}")

    return {
        "success": True,
        "message": f"{len(applications)} applications {payload.action.lower()} successfully",
        "data": [transform_application(application) for application in applications],
        "emailResults": {
            "sent": len(email_results) - len(failed),
            "failed": len(failed),
        },
    }


def _parse_pickup_time(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise bad_request("Invalid pickup time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@router.post("/applications/confirm-pickup")
async def confirm_pickup(
    *,
    db: Session = Depends(get_db),
    payload: PickupRequest,
) -> Any:
    """
    Record that an approved license was collected. A license can only be
    picked up once. Database reads and writes are retried with backoff.
    """
    if not payload.applicationId or not payload.citizenId or not payload.pickupTime:
        raise bad_request(
            "Missing required fields: applicationId, citizenId, and pickupTime are required"
        )
    pickup_time = _parse_pickup_time(payload.pickupTime)

    def fetch_application():
        try:
            return crud.license_application.get(db, id=payload.applicationId)
        except SQLAlchemyError:
            db.rollback()
            raise

    try:
        application = await retry_operation(
            fetch_application,
            max_retries=settings.PICKUP_RETRY_ATTEMPTS,
            delay_ms=settings.PICKUP_RETRY_BASE_DELAY_MS,
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching application {payload.applicationId}: {str(e)}")
        raise not_found("Application not found or access denied")

    if not application or not crud.license_application.belongs_to(application, payload.citizenId):
        raise not_found("Application not found or access denied")

    if (application.status or "").lower() != ApplicationStatus.APPROVED.value.lower():
        raise bad_request("Only approved applications can be marked as picked up")

    if application.picked_up:
        raise bad_request(
            "License has already been picked up",
            extra={"data": {"pickupTime": application.pickup_time}},
        )

    def mark_picked_up():
        try:
            return crud.license_application.mark_picked_up(db, db_obj=application, pickup_time=pickup_time)
        except SQLAlchemyError:
            db.rollback()
            raise

    try:
        application = await retry_operation(
            mark_picked_up,
            max_retries=settings.PICKUP_RETRY_ATTEMPTS,
            delay_ms=settings.PICKUP_RETRY_BASE_DELAY_MS,
        )
    except SQLAlchemyError as e:
        logger.error(f"Error updating pickup status for {payload.applicationId}: {str(e)}")
        raise server_error("Failed to confirm pickup")

    logger.info(f"License pickup confirmed for application {application.id}")

    return {
        "success": True,
        "message": "License pickup confirmed successfully",
        "data": {
            "id": application.id,
            "status": application.status,
            "personal_info": application.personal_info,
            "license_type": application.license_type,
            "submitted_at": application.submitted_at,
            "created_at": application.created_at,
            "picked_up": application.picked_up,
            "pickup_time": application.pickup_time,
        },
    }
