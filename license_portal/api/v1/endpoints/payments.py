import logging
from datetime import datetime, timedelta
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.api.v1.dependencies import get_db
from license_portal.core.errors import bad_request, server_error
from license_portal.models.license import PaymentMethod, PaymentStatus
from license_portal.schemas.payment import PaymentRequest
from license_portal.services.payment_service import (
    PROCESSORS,
    PaymentDeclined,
    generate_transaction_id,
    parse_amount,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CURRENCY = "FBU"
PAYMENT_DUE_DAYS = 30


def _record_failed_payment(
    db: Session, application_id: str, amount: int, method: str, details: Dict[str, Any], reason: str
) -> None:
    """
    Keep a trace of a declined attempt. A failure here is logged only.
    """
    try:
        crud.payment.create(
            db,
            obj_in={
                "application_id": application_id,
                "payment_info": {
                    "details": details,
                    "original_amount": amount,
                    "error_info": {
                        "error_message": reason,
                        "failed_at": datetime.utcnow().isoformat(),
                        "method": method,
                    },
                },
                "status": PaymentStatus.FAILED.value,
                "transaction_id": generate_transaction_id("FAILED"),
                "amount": amount,
                "currency": CURRENCY,
                "method": method,
                "processing_fee": 0,
                "failure_reason": reason,
                "refund_amount": 0,
            },
        )
        logger.info(f"Failed payment recorded for application {application_id}")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save failed payment record for {application_id}: {str(e)}")


@router.post("/payment")
async def process_payment(
    *,
    db: Session = Depends(get_db),
    payload: PaymentRequest,
) -> Any:
    """
    Charge an application fee through the mock provider for the chosen method
    and record the attempt. Application status is not affected.
    """
    try:
        amount = parse_amount(payload.amount)
    except ValueError as e:
        logger.warning(f"Amount parsing failed for {payload.amount!r}: {str(e)}")
        raise bad_request(f"Invalid amount format: {str(e)}")
    logger.info(f"Amount parsed: {payload.amount!r} -> {amount}")

    if not payload.applicationId or not amount or not payload.method:
        raise bad_request("Missing required payment information")

    if not isinstance(payload.details, dict):
        raise bad_request("Invalid payment details")

    try:
        processor = PROCESSORS[PaymentMethod(payload.method)]
    except ValueError:
        raise bad_request("Invalid payment method")

    try:
        result = await processor(amount, payload.details)
    except PaymentDeclined as e:
        logger.warning(f"{payload.method} payment for {payload.applicationId} declined: {str(e)}")
        _record_failed_payment(db, payload.applicationId, amount, payload.method, payload.details, str(e))
        raise bad_request(str(e))

    try:
        record = crud.payment.create(
            db,
            obj_in={
                "application_id": payload.applicationId,
                "payment_info": {
                    "details": payload.details,
                    "original_amount": amount,
                    "processing_info": {
                        "processed_at": result["timestamp"],
                        "method": result["method"],
                        "provider": result["provider"],
                    },
                },
                "status": result["status"],
                "transaction_id": result["transactionId"],
                "amount": amount,
                "currency": CURRENCY,
                "method": result["method"],
                "processing_fee": result["processingFee"],
                "provider": result["provider"],
                "provider_transaction_id": result["providerTransactionId"],
                "payment_date": datetime.utcnow(),
                "due_date": datetime.utcnow() + timedelta(days=PAYMENT_DUE_DAYS),
                "refund_amount": 0,
            },
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Payment record insertion error for {payload.applicationId}: {str(e)}")
        raise server_error(f"Failed to save payment record: {str(e)}")

    logger.info(f"Payment {record.transaction_id} completed for application {payload.applicationId}")

    return {
        "success": True,
        "transactionId": result["transactionId"],
        "amount": amount,
        "currency": CURRENCY,
        "method": result["method"],
        "provider": result["provider"],
        "processingFee": result["processingFee"],
        "status": result["status"],
        "timestamp": result["timestamp"],
        "paymentRecord": {
            column: getattr(record, column) for column in record.__table__.columns.keys()
        },
    }
