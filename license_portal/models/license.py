from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship
import enum
from typing import Optional

from license_portal.models.base import BaseModel


class ApplicationStatus(str, enum.Enum):
    """
    Lifecycle of a license application.

    DRAFT → PENDING once photos are submitted, then an admin moves it to
    APPROVED or REJECTED. APPROVED and REJECTED are terminal for review.
    """
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# States an admin may still approve or reject from
REVIEWABLE_STATUSES = (
    ApplicationStatus.DRAFT.value,
    ApplicationStatus.PENDING.value,
    ApplicationStatus.UNDER_REVIEW.value,
)

REVIEW_ACTIONS = (ApplicationStatus.APPROVED.value, ApplicationStatus.REJECTED.value)


def is_valid_status(value: Optional[str]) -> bool:
    if not value:
        return False
    return value.upper() in ApplicationStatus.__members__


def normalize_status(value: Optional[str]) -> Optional[str]:
    """
    Uppercase a status string and check it against ApplicationStatus.

    Returns None for empty input and raises ValueError for unknown values.
    """
    if not value:
        return None
    normalized = value.upper()
    if normalized not in ApplicationStatus.__members__:
        allowed = ", ".join(ApplicationStatus.__members__)
        raise ValueError(f"Invalid status: {value}. Allowed values: {allowed}")
    return normalized


class LicenseApplication(BaseModel):
    """
    A citizen's driver's license application, built up stage by stage
    (personal info, documents, photos) before review.
    """
    __tablename__ = "license_applications"

    id = Column(String(64), primary_key=True, index=True)
    citizen_id = Column(Integer, ForeignKey("citizens.id"), index=True, nullable=False)
    license_type = Column(String(50), nullable=True)
    status = Column(String(20), default=ApplicationStatus.DRAFT.value, index=True, nullable=False)

    personal_info = Column(JSON, nullable=True)
    documents = Column(JSON, nullable=True)
    photos = Column(JSON, nullable=True)
    emergency_contact = Column(JSON, nullable=True)

    # Review
    review_notes = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)

    # Collection
    picked_up = Column(Boolean, default=False, nullable=False)
    pickup_time = Column(DateTime, nullable=True)
    license_number = Column(String(64), index=True, nullable=True)

    citizen = relationship("Citizen", back_populates="applications")
    payments = relationship("Payment", back_populates="application")
    qr_code = relationship("QRCode", back_populates="application", uselist=False)

    def __repr__(self):
        return f"<LicenseApplication {self.id}: {self.status}>"


class PaymentStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    MOBILE = "mobile"
    BANK = "bank"


class Payment(BaseModel):
    """
    One payment attempt. Rows are never updated; a retry inserts a new row.
    """
    __tablename__ = "payments"

    application_id = Column(String(64), ForeignKey("license_applications.id"), index=True, nullable=False)
    payment_info = Column(JSON, nullable=True)
    status = Column(String(20), nullable=False)
    transaction_id = Column(String(64), unique=True, index=True, nullable=False)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), default="FBU", nullable=False)
    method = Column(String(20), nullable=False)
    processing_fee = Column(Integer, default=0, nullable=False)
    provider = Column(String, nullable=True)
    provider_transaction_id = Column(String(64), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)
    failure_reason = Column(Text, nullable=True)
    receipt_url = Column(String, nullable=True)
    refund_amount = Column(Integer, default=0, nullable=False)

    application = relationship("LicenseApplication", back_populates="payments")

    def __repr__(self):
        return f"<Payment {self.transaction_id}: {self.status}>"


class QRCode(BaseModel):
    """
    Issued QR code for an application. At most one per application; the
    first one generated is returned on every later request.
    """
    __tablename__ = "qr_codes"

    application_id = Column(String(64), ForeignKey("license_applications.id"), unique=True, index=True, nullable=False)
    license_number = Column(String(64), index=True, nullable=False)
    qr_code_data = Column(JSON, nullable=False)
    qr_code_image = Column(Text, nullable=False)

    application = relationship("LicenseApplication", back_populates="qr_code")

    def __repr__(self):
        return f"<QRCode {self.license_number}>"
