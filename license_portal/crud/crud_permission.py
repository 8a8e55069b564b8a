from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from license_portal.crud.base import CRUDBase
from license_portal.models.citizen import Citizen
from license_portal.models.permission import PERMISSION_FIELDS, UserPermission

# Request flag name -> column name
PERMISSION_COLUMNS = {
    "email": "email_permission",
    "birthdate": "birthdate_permission",
    "gender": "gender_permission",
    "name": "name_permission",
    "phoneNumber": "phone_number_permission",
    "picture": "picture_permission",
}


class CRUDUserPermission(CRUDBase[UserPermission, Any, Any]):
    """
    CRUD operations for UserPermission model.
    """
    def get_by_citizen(self, db: Session, *, citizen_id: int) -> Optional[UserPermission]:
        return db.query(UserPermission).filter(UserPermission.citizen_id == citizen_id).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[UserPermission]:
        return (
            db.query(UserPermission)
            .filter(UserPermission.email == email)
            .order_by(UserPermission.updated_at.desc())
            .first()
        )

    def create_default(self, db: Session, *, citizen: Citizen) -> UserPermission:
        """
        All sharing flags off and not yet verified.
        """
        data: Dict[str, Any] = {column: False for column in PERMISSION_COLUMNS.values()}
        data.update(
            citizen_id=citizen.id,
            national_id=citizen.national_id,
            email=citizen.email,
            is_verified=False,
        )
        return self.create(db, obj_in=data)

    def save(
        self,
        db: Session,
        *,
        citizen: Citizen,
        permissions: Dict[str, bool],
        email: Optional[str] = None,
    ) -> Tuple[UserPermission, bool]:
        """
        Upsert the citizen's consent and mark it verified.
        Returns the row and whether an existing row was updated.
        """
        data: Dict[str, Any] = {
            PERMISSION_COLUMNS[name]: bool(permissions[name]) for name in PERMISSION_FIELDS
        }
        data.update(
            national_id=citizen.national_id,
            email=email or citizen.email,
            is_verified=True,
        )

        existing = self.get_by_citizen(db, citizen_id=citizen.id)
        if existing:
            return self.update(db, db_obj=existing, obj_in=data), True
        data["citizen_id"] = citizen.id
        return self.create(db, obj_in=data), False

    def to_flags(self, row: UserPermission) -> Dict[str, bool]:
        return {name: bool(getattr(row, column)) for name, column in PERMISSION_COLUMNS.items()}


user_permission = CRUDUserPermission(UserPermission)
