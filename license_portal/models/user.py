from sqlalchemy import Boolean, Column, DateTime, Integer, String
import enum

from license_portal.models.base import BaseModel


class UserRole(str, enum.Enum):
    """
    Account roles. Admins review applications and confirm pickups.
    """
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """
    Login account for the portal.
    """
    __tablename__ = "users"

    full_name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    national_id = Column(String(16), index=True, nullable=True)
    phone_number = Column(String, index=True, nullable=True)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Throttling for repeated bad passwords
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email}: {self.role}>"

    @property
    def is_admin(self):
        """Check if user has admin privileges"""
        return self.role == UserRole.ADMIN.value
