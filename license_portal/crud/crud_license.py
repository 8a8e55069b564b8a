from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from license_portal.crud.base import CRUDBase
from license_portal.models.license import (
    ApplicationStatus,
    LicenseApplication,
    Payment,
    QRCode,
    REVIEWABLE_STATUSES,
)


class CRUDLicenseApplication(CRUDBase[LicenseApplication, Any, Any]):
    """
    CRUD operations for LicenseApplication model.
    """
    def get_by_citizen(self, db: Session, *, citizen_id: int) -> Optional[LicenseApplication]:
        """
        Get the citizen's current application (most recently created).
        """
        return (
            db.query(LicenseApplication)
            .filter(LicenseApplication.citizen_id == citizen_id)
            .order_by(LicenseApplication.created_at.desc())
            .first()
        )

    def get_multi_for_citizen(
        self, db: Session, *, national_id: str, citizen_id: Optional[int] = None
    ) -> List[LicenseApplication]:
        """
        Applications whose personal info carries ``national_id``, plus any
        owned by ``citizen_id``. Newest first.
        """
        condition = LicenseApplication.personal_info["nationalId"].as_string() == national_id
        if citizen_id is not None:
            condition = condition | (LicenseApplication.citizen_id == citizen_id)
        return (
            db.query(LicenseApplication)
            .filter(condition)
            .order_by(LicenseApplication.created_at.desc())
            .all()
        )

    def get_multi_by_status(
        self, db: Session, *, status: Optional[str] = None, skip: int = 0, limit: int = 10
    ) -> Tuple[List[LicenseApplication], int]:
        """
        Page through applications newest first, optionally filtered by status.
        Returns the page and the total number of matching rows.
        """
        query = db.query(LicenseApplication)
        if status:
            query = query.filter(LicenseApplication.status == status)
        total = query.count()
        items = (
            query.order_by(LicenseApplication.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def belongs_to(self, application: LicenseApplication, citizen_key: Any) -> bool:
        """
        True when ``citizen_key`` identifies the application's owner, either as
        the citizen row id or as the national ID.
        """
        if citizen_key is None:
            return False
        key = str(citizen_key).strip()
        candidates = {str(application.citizen_id)}
        if application.personal_info and application.personal_info.get("nationalId"):
            candidates.add(str(application.personal_info["nationalId"]))
        if application.citizen is not None:
            candidates.add(application.citizen.national_id)
        return key in candidates

    def _review_values(self, action: str, review_notes: Optional[str], now: datetime) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "status": action,
            "review_notes": review_notes,
            "updated_at": now,
        }
        if action == ApplicationStatus.APPROVED.value:
            values["approved_at"] = now
        else:
            values["rejected_at"] = now
        return values

    def review(
        self, db: Session, *, application_id: str, action: str, review_notes: Optional[str] = None
    ) -> Optional[LicenseApplication]:
        """
        Move one application to APPROVED or REJECTED.

        The update only matches while the row is still reviewable, so of two
        concurrent reviewers exactly one wins. Returns None for the loser.
        """
        now = datetime.utcnow()
        updated = (
            db.query(LicenseApplication)
            .filter(
                LicenseApplication.id == application_id,
                LicenseApplication.status.in_(REVIEWABLE_STATUSES),
            )
            .update(self._review_values(action, review_notes, now), synchronize_session=False)
        )
        db.commit()
        if not updated:
            return None
        application = self.get(db, id=application_id)
        db.refresh(application)
        return application

    def review_many(
        self, db: Session, *, application_ids: List[str], action: str, review_notes: Optional[str] = None
    ) -> List[LicenseApplication]:
        """
        Apply one review decision to every still-reviewable application in
        ``application_ids``. Terminal ones are skipped. Returns the rows changed.
        """
        eligible = [
            row.id
            for row in db.query(LicenseApplication.id).filter(
                LicenseApplication.id.in_(application_ids),
                LicenseApplication.status.in_(REVIEWABLE_STATUSES),
            )
        ]
        if not eligible:
            return []

        now = datetime.utcnow()
        (
            db.query(LicenseApplication)
            .filter(
                LicenseApplication.id.in_(eligible),
                LicenseApplication.status.in_(REVIEWABLE_STATUSES),
            )
            .update(self._review_values(action, review_notes, now), synchronize_session=False)
        )
        db.commit()
        db.expire_all()

        return (
            db.query(LicenseApplication)
            .filter(
                LicenseApplication.id.in_(eligible),
                LicenseApplication.status == action,
                LicenseApplication.updated_at == now,
            )
            .all()
        )

    def mark_picked_up(
        self, db: Session, *, db_obj: LicenseApplication, pickup_time: datetime
    ) -> LicenseApplication:
        return self.update(
            db,
            db_obj=db_obj,
            obj_in={"picked_up": True, "pickup_time": pickup_time, "updated_at": datetime.utcnow()},
        )


class CRUDPayment(CRUDBase[Payment, Any, Any]):
    """
    CRUD operations for Payment model. Payments are insert-only.
    """
    def get_by_application_id(self, db: Session, *, application_id: str) -> List[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.application_id == application_id)
            .order_by(Payment.created_at.desc())
            .all()
        )


class CRUDQRCode(CRUDBase[QRCode, Any, Any]):
    """
    CRUD operations for QRCode model.
    """
    def get_by_application_id(self, db: Session, *, application_id: str) -> Optional[QRCode]:
        return db.query(QRCode).filter(QRCode.application_id == application_id).first()

    def get_by_license_number(self, db: Session, *, license_number: str) -> Optional[QRCode]:
        return db.query(QRCode).filter(QRCode.license_number == license_number).first()


license_application = CRUDLicenseApplication(LicenseApplication)
payment = CRUDPayment(Payment)
qr_code = CRUDQRCode(QRCode)
