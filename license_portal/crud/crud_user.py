from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from license_portal.core.config import settings
from license_portal.core.security import get_password_hash, verify_password
from license_portal.crud.base import CRUDBase
from license_portal.models.user import User
from license_portal.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    """
    CRUD operations for User model.
    """
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        """
        Get a user by email.
        """
        return db.query(User).filter(User.email == email).first()

    def get_by_phone(self, db: Session, *, phone_number: str) -> Optional[User]:
        return db.query(User).filter(User.phone_number == phone_number).first()

    def get_by_national_id(self, db: Session, *, national_id: str) -> Optional[User]:
        return db.query(User).filter(User.national_id == national_id).first()

    def set_password(self, db: Session, *, db_obj: User, password: str) -> User:
        return self.update(db, db_obj=db_obj, obj_in={"hashed_password": get_password_hash(password)})

    def is_locked(self, user: User) -> bool:
        return user.locked_until is not None and user.locked_until > datetime.utcnow()

    def check_password(self, db: Session, *, user: User, password: str) -> bool:
        """
        Verify a password and keep the failed-attempt counter in step.

        Reaching LOGIN_MAX_FAILED_ATTEMPTS locks the account for
        LOGIN_LOCKOUT_MINUTES. A correct password clears the counter.
        """
        if verify_password(password, user.hashed_password):
            if user.failed_login_attempts or user.locked_until:
                self.update(db, db_obj=user, obj_in={"failed_login_attempts": 0, "locked_until": None})
            return True

        attempts = (user.failed_login_attempts or 0) + 1
        update_data = {"failed_login_attempts": attempts}
        if attempts >= settings.LOGIN_MAX_FAILED_ATTEMPTS:
            update_data["failed_login_attempts"] = 0
            update_data["locked_until"] = datetime.utcnow() + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
        self.update(db, db_obj=user, obj_in=update_data)
        return False


user = CRUDUser(User)
