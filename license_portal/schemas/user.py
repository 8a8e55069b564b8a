from typing import Optional
from pydantic import BaseModel


class UserBase(BaseModel):
    """
    Base schema for user with common attributes.
    """
    full_name: Optional[str] = None
    email: Optional[str] = None
    national_id: Optional[str] = None
    phone_number: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = True


class UserCreate(UserBase):
    """
    Schema for creating a new user. The password is hashed before storage.
    """
    email: str
    hashed_password: str


class UserUpdate(UserBase):
    pass


class User(UserBase):
    """
    Schema for returning user information.
    """
    id: int

    class Config:
        from_attributes = True
