import logging
from typing import Optional

from sqlalchemy.orm import Query, Session

from license_portal.crud.base import CRUDBase
from license_portal.models.citizen import Citizen, CitizenStatus
from license_portal.schemas.citizen import CitizenCreate, CitizenUpdate

logger = logging.getLogger(__name__)

# Citizen IDs were historically 13 digits; longer ones fall back to this prefix
LEGACY_NATIONAL_ID_LENGTH = 13


class CRUDCitizen(CRUDBase[Citizen, CitizenCreate, CitizenUpdate]):
    """
    CRUD operations for Citizen model.
    """
    def get_by_national_id(self, db: Session, *, national_id: str) -> Optional[Citizen]:
        """
        Get a citizen by national ID.
        """
        return db.query(Citizen).filter(Citizen.national_id == national_id).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[Citizen]:
        return db.query(Citizen).filter(Citizen.email == email).first()

    def _lookup(self, query: Query, label: str, **filters: str) -> Optional[Citizen]:
        for field, value in filters.items():
            query = query.filter(getattr(Citizen, field) == value)
        citizen = query.first()
        logger.info(f"Citizen lookup by {label}: {'found' if citizen else 'not found'}")
        return citizen

    def resolve(
        self,
        db: Session,
        *,
        national_id: Optional[str] = None,
        email: Optional[str] = None,
        active_only: bool = False,
    ) -> Optional[Citizen]:
        """
        Find the citizen a request refers to.

        With both keys the lookups run in order (email and national ID),
        (email), (national ID). A national ID longer than 13 characters is
        retried with its first 13 characters when nothing else matched.
        ``active_only`` limits every lookup to ACTIVE citizens.
        """
        base = db.query(Citizen)
        if active_only:
            base = base.filter(Citizen.status == CitizenStatus.ACTIVE.value)

        national_id = national_id.strip() if national_id else None
        email = email.strip() if email else None

        citizen = None
        if email and national_id:
            citizen = self._lookup(base, "email and national ID", email=email, national_id=national_id)
        if not citizen and email:
            citizen = self._lookup(base, "email", email=email)
        if not citizen and national_id:
            citizen = self._lookup(base, "national ID", national_id=national_id)
        if not citizen and national_id and len(national_id) > LEGACY_NATIONAL_ID_LENGTH:
            truncated = national_id[:LEGACY_NATIONAL_ID_LENGTH]
            citizen = self._lookup(base, f"truncated national ID {truncated}", national_id=truncated)

        return citizen


citizen = CRUDCitizen(Citizen)
