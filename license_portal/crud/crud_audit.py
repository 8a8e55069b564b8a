from typing import Any, List, Optional

from sqlalchemy.orm import Session

from license_portal.crud.base import CRUDBase
from license_portal.models.audit import AdminAction


class CRUDAdminAction(CRUDBase[AdminAction, Any, Any]):
    """
    CRUD operations for AdminAction model.
    """
    def log_many(
        self,
        db: Session,
        *,
        admin_id: Optional[int],
        action_type: str,
        application_ids: List[str],
        notes: Optional[str] = None,
    ) -> List[AdminAction]:
        """
        Record one audit row per application in a single commit.
        """
        rows = [
            AdminAction(
                admin_id=admin_id,
                action_type=action_type,
                application_id=application_id,
                notes=notes,
            )
            for application_id in application_ids
        ]
        db.add_all(rows)
        db.commit()
        return rows

    def get_by_application_id(self, db: Session, *, application_id: str) -> List[AdminAction]:
        return (
            db.query(AdminAction)
            .filter(AdminAction.application_id == application_id)
            .order_by(AdminAction.created_at.asc())
            .all()
        )


admin_action = CRUDAdminAction(AdminAction)
