import logging
import os

import sqlalchemy
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from license_portal import crud
from license_portal.core.security import get_password_hash
from license_portal.db.session import Base, SessionLocal, engine
from license_portal.models.user import UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables_if_not_exist() -> bool:
    """
    Create tables if they don't exist
    """
    inspector = inspect(engine)
    if inspector.has_table("users"):
        return False
    logger.info("Tables don't exist. Creating tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created")
    return True


def init_db(db: Session) -> None:
    """
    Create the review admin account if it doesn't exist.
    """
    email = os.environ.get("ADMIN_EMAIL", "admin@example.com")
    try:
        if crud.user.get_by_email(db, email=email):
            return
        admin_password = os.environ.get("ADMIN_PASSWORD", "admin123")  # For development only
        crud.user.create(
            db,
            obj_in={
                "full_name": "Admin User",
                "email": email,
                "hashed_password": get_password_hash(admin_password),
                "role": UserRole.ADMIN.value,
                "is_active": True,
            },
        )
        logger.info(f"Admin user created: {email}")
    except sqlalchemy.exc.OperationalError as e:
        # Tables don't exist yet
        logger.warning(f"Could not initialize database: {str(e)}")
        logger.warning("Make sure to run migrations first: alembic upgrade head")


def main() -> None:
    logger.info("Creating initial data")
    create_tables_if_not_exist()

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("Initial data created")


if __name__ == "__main__":
    main()
