# Import all models to ensure they are registered with SQLAlchemy
# This prevents relationship resolution errors

from .base import BaseModel
from .user import User, UserRole
from .citizen import Citizen, CitizenStatus
from .license import (
    ApplicationStatus,
    LicenseApplication,
    Payment,
    PaymentMethod,
    PaymentStatus,
    QRCode,
    REVIEWABLE_STATUSES,
    REVIEW_ACTIONS,
    is_valid_status,
    normalize_status,
)
from .audit import AdminAction
from .auth_session import AuthSession, AuthSessionStatus
from .permission import UserPermission, PERMISSION_FIELDS

__all__ = [
    "BaseModel",
    "User",
    "UserRole",
    "Citizen",
    "CitizenStatus",
    "ApplicationStatus",
    "LicenseApplication",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "QRCode",
    "REVIEWABLE_STATUSES",
    "REVIEW_ACTIONS",
    "is_valid_status",
    "normalize_status",
    "AdminAction",
    "AuthSession",
    "AuthSessionStatus",
    "UserPermission",
    "PERMISSION_FIELDS",
]
