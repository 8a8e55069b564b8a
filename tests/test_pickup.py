from __future__ import annotations

import asyncio
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from license_portal import crud
from license_portal.core.retry import retry_operation
from license_portal.models.license import ApplicationStatus


def _confirm(client, application_id, citizen_id, pickup_time="2026-03-01T10:30:00Z"):
    return client.post(
        "/api/admin/applications/confirm-pickup",
        json={"applicationId": application_id, "citizenId": citizen_id, "pickupTime": pickup_time},
    )


def test_confirm_pickup_marks_application(client, db_session, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, status=ApplicationStatus.APPROVED.value)

    response = _confirm(client, application.id, citizen.national_id)
    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "License pickup confirmed successfully"
    assert body["data"]["picked_up"] is True

    db_session.refresh(application)
    assert application.picked_up is True
    assert application.pickup_time == datetime(2026, 3, 1, 10, 30)


def test_confirm_pickup_accepts_citizen_row_id(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, status=ApplicationStatus.APPROVED.value)
    assert _confirm(client, application.id, citizen.id).status_code == 200


def test_pickup_happens_once(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, status=ApplicationStatus.APPROVED.value)
    _confirm(client, application.id, citizen.national_id)

    response = _confirm(client, application.id, citizen.national_id)
    body = response.json()
    assert response.status_code == 400
    assert body["error"] == "License has already been picked up"
    assert body["data"]["pickupTime"].startswith("2026-03-01T10:30:00")


def test_pickup_requires_approval(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen)
    response = _confirm(client, application.id, citizen.national_id)
    assert response.status_code == 400
    assert response.json()["error"] == "Only approved applications can be marked as picked up"


def test_pickup_by_another_citizen_is_hidden(client, make_citizen, make_application) -> None:
    owner = make_citizen()
    stranger = make_citizen()
    application = make_application(owner, status=ApplicationStatus.APPROVED.value)
    response = _confirm(client, application.id, stranger.national_id)
    assert response.status_code == 404
    assert response.json()["error"] == "Application not found or access denied"


def test_pickup_rejects_bad_time(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, status=ApplicationStatus.APPROVED.value)
    response = _confirm(client, application.id, citizen.national_id, pickup_time="tomorrow")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid pickup time"


def test_pickup_requires_all_fields(client) -> None:
    response = client.post("/api/admin/applications/confirm-pickup", json={"applicationId": "LIC-1"})
    assert response.status_code == 400


def test_pickup_update_failure_after_retries(client, monkeypatch, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, status=ApplicationStatus.APPROVED.value)
    calls = []

    def broken(db, *, db_obj, pickup_time):
        calls.append(pickup_time)
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    monkeypatch.setattr(crud.license_application, "mark_picked_up", broken)

    response = _confirm(client, application.id, citizen.national_id)
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to confirm pickup"
    assert len(calls) == 3


def test_retry_operation_recovers_after_transient_failures() -> None:
    attempts = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("transient")
        return "done"

    assert asyncio.run(retry_operation(flaky, max_retries=3, delay_ms=0)) == "done"
    assert len(attempts) == 3


def test_retry_operation_awaits_coroutines() -> None:
    async def fetch():
        return 42

    assert asyncio.run(retry_operation(fetch, delay_ms=0)) == 42


def test_retry_operation_reraises_last_error() -> None:
    def always_fails():
        raise ValueError("still broken")

    with pytest.raises(ValueError, match="still broken"):
        asyncio.run(retry_operation(always_fails, max_retries=2, delay_ms=0))
