from datetime import date
from typing import Optional

from pydantic import BaseModel


class CitizenBase(BaseModel):
    """
    Base schema for citizen with common attributes.
    """
    national_id: Optional[str] = None
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    status: Optional[str] = None


class CitizenCreate(CitizenBase):
    national_id: str
    full_name: str
    status: str = "ACTIVE"


class CitizenUpdate(CitizenBase):
    pass


class Citizen(CitizenBase):
    id: int

    class Config:
        from_attributes = True
