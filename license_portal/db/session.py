from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from license_portal.core.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Yield a database session and close it when the request is done.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
