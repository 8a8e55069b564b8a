from __future__ import annotations

from datetime import date

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import license_portal.models  # noqa: F401
from license_portal import crud
from license_portal.core.config import settings
from license_portal.db.session import Base, get_db
from license_portal.main import app
from license_portal.models.citizen import CitizenStatus
from license_portal.models.license import ApplicationStatus
from license_portal.services import email_service
from license_portal.services.license_generator import generate_application_id

fake = Faker()


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def portal_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setattr(settings, "SIMULATE_PAYMENT_LATENCY", False)
    monkeypatch.setattr(settings, "EMAIL_BATCH_DELAY_SECONDS", 0)
    monkeypatch.setattr(settings, "PICKUP_RETRY_BASE_DELAY_MS", 0)
    monkeypatch.setattr(settings, "MAIL_ENABLED", True)
    monkeypatch.setattr(settings, "EXPOSE_OTP_IN_RESPONSE", True)
    monkeypatch.setattr(settings, "PERMISSIVE_OTP", False)
    return settings


@pytest.fixture()
def sent_emails(monkeypatch):
    outbox = []

    async def fake_send(message, **kwargs):
        outbox.append(message)
        return {}, "OK"

    monkeypatch.setattr(email_service.aiosmtplib, "send", fake_send)
    return outbox


@pytest.fixture()
def client(db_session, portal_settings, sent_emails):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_citizen(db_session):
    def _make(**overrides):
        data = {
            "national_id": fake.numerify("#############"),
            "full_name": fake.name(),
            "date_of_birth": date(1990, 5, 17),
            "address": fake.address(),
            "phone_number": f"+257 {fake.numerify('## ### ###')}",
            "email": fake.unique.email(),
            "status": CitizenStatus.ACTIVE.value,
        }
        data.update(overrides)
        return crud.citizen.create(db_session, obj_in=data)

    return _make


@pytest.fixture()
def make_application(db_session):
    def _make(citizen, **overrides):
        data = {
            "id": generate_application_id(),
            "citizen_id": citizen.id,
            "license_type": "car",
            "status": ApplicationStatus.PENDING.value,
            "personal_info": {
                "firstName": citizen.full_name.split()[0],
                "lastName": citizen.full_name.split()[-1],
                "nationalId": citizen.national_id,
                "email": citizen.email,
            },
            "documents": {},
        }
        data.update(overrides)
        return crud.license_application.create(db_session, obj_in=data)

    return _make
