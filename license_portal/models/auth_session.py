from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
import enum

from license_portal.models.base import BaseModel


class AuthSessionStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


class AuthSession(BaseModel):
    """
    One-time-password challenge issued to a citizen. Only PENDING sessions
    can be verified; every other status is final.
    """
    __tablename__ = "auth_sessions"

    citizen_id = Column(Integer, ForeignKey("citizens.id"), index=True, nullable=False)
    transaction_id = Column(String(64), unique=True, index=True, nullable=False)
    otp_code = Column(String(6), nullable=False)
    otp_expires_at = Column(DateTime, nullable=False)
    status = Column(String(20), default=AuthSessionStatus.PENDING.value, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<AuthSession {self.transaction_id}: {self.status}>"
