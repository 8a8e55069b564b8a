from typing import Any, Dict, Optional

from pydantic import BaseModel


class PersonalInfoRequest(BaseModel):
    """
    First intake stage: create or refresh the citizen's application.
    """
    licenseType: Optional[str] = None
    personalInfo: Optional[Dict[str, Any]] = None
    nationalId: Optional[str] = None


class LicenseApplicationRequest(BaseModel):
    """
    One-shot submission with every section filled in.
    """
    licenseType: Optional[str] = None
    personalInfo: Optional[Dict[str, Any]] = None
    documents: Optional[Dict[str, Any]] = None
    emergencyContact: Optional[Dict[str, Any]] = None
    photo: Optional[Any] = None


class ApplicationListRequest(BaseModel):
    citizenId: Optional[Any] = None


class ApplicationDetailsRequest(BaseModel):
    applicationId: Optional[str] = None
    citizenId: Optional[Any] = None


class ReviewRequest(BaseModel):
    applicationId: Optional[str] = None
    action: Optional[str] = None
    reviewNotes: Optional[str] = None
    adminId: Optional[int] = None


class BatchReviewRequest(BaseModel):
    applicationIds: Any = None
    action: Optional[str] = None
    reviewNotes: Optional[str] = None
    adminId: Optional[int] = None


class AdminApplicationRequest(BaseModel):
    applicationId: Optional[str] = None


class PickupRequest(BaseModel):
    applicationId: Optional[str] = None
    citizenId: Optional[Any] = None
    pickupTime: Optional[str] = None
