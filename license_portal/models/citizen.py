from sqlalchemy import Column, Date, String
from sqlalchemy.orm import relationship
import enum

from license_portal.models.base import BaseModel


class CitizenStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class Citizen(BaseModel):
    """
    Citizen identity record. Every application, OTP session and permission
    row hangs off one of these.
    """
    __tablename__ = "citizens"

    national_id = Column(String(16), unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    address = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    email = Column(String, index=True, nullable=True)
    photo_url = Column(String, nullable=True)
    status = Column(String(20), default=CitizenStatus.ACTIVE.value, nullable=False)

    applications = relationship("LicenseApplication", back_populates="citizen")

    def __repr__(self):
        return f"<Citizen {self.national_id}: {self.full_name}>"
