from typing import Any, Optional

from sqlalchemy.orm import Session

from license_portal.crud.base import CRUDBase
from license_portal.models.auth_session import AuthSession, AuthSessionStatus


class CRUDAuthSession(CRUDBase[AuthSession, Any, Any]):
    """
    CRUD operations for AuthSession model.
    """
    def get_pending(self, db: Session, *, transaction_id: str) -> Optional[AuthSession]:
        """
        Get the PENDING session for a transaction, if there still is one.
        """
        return (
            db.query(AuthSession)
            .filter(
                AuthSession.transaction_id == transaction_id,
                AuthSession.status == AuthSessionStatus.PENDING.value,
            )
            .first()
        )

    def set_status(self, db: Session, *, db_obj: AuthSession, status: AuthSessionStatus) -> AuthSession:
        return self.update(db, db_obj=db_obj, obj_in={"status": status.value})


auth_session = CRUDAuthSession(AuthSession)
