from sqlalchemy import Boolean, Column, ForeignKey, Integer, String

from license_portal.models.base import BaseModel

# Profile fields a citizen can agree to share
PERMISSION_FIELDS = ("email", "birthdate", "gender", "name", "phoneNumber", "picture")


class UserPermission(BaseModel):
    """
    Data-sharing consent for a citizen, one row per citizen.
    """
    __tablename__ = "user_permissions"

    citizen_id = Column(Integer, ForeignKey("citizens.id"), unique=True, index=True, nullable=False)
    national_id = Column(String(16), index=True, nullable=True)
    email = Column(String, index=True, nullable=True)

    email_permission = Column(Boolean, default=False, nullable=False)
    birthdate_permission = Column(Boolean, default=False, nullable=False)
    gender_permission = Column(Boolean, default=False, nullable=False)
    name_permission = Column(Boolean, default=False, nullable=False)
    phone_number_permission = Column(Boolean, default=False, nullable=False)
    picture_permission = Column(Boolean, default=False, nullable=False)

    is_verified = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<UserPermission citizen={self.citizen_id} verified={self.is_verified}>"
