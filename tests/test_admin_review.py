from __future__ import annotations

from license_portal import crud
from license_portal.models.license import ApplicationStatus


def test_list_applications_paginates_newest_first(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    for _ in range(3):
        make_application(citizen)
    make_application(citizen, status=ApplicationStatus.APPROVED.value)

    body = client.get("/api/admin/applications", params={"status": "pending", "page": 1, "limit": 2}).json()
    assert body["success"] is True
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
    assert all(item["status"] == "PENDING" for item in body["data"])

    everything = client.get("/api/admin/applications", params={"status": "all"}).json()
    assert everything["pagination"]["total"] == 4


def test_list_applications_rejects_unknown_status(client) -> None:
    response = client.get("/api/admin/applications", params={"status": "shipped"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid status: shipped. Allowed values:")


def test_read_single_application(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen(), documents={"nationalId": {"fileName": "id.pdf"}})
    body = client.post("/api/admin/applications", json={"applicationId": application.id}).json()
    assert body["data"]["id"] == application.id
    assert body["data"]["documents"] == {"nationalId": {"fileName": "id.pdf"}}


def test_approve_application_sends_email_and_logs(client, db_session, make_citizen, make_application, sent_emails) -> None:
    citizen = make_citizen()
    application = make_application(citizen)

    response = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": application.id, "action": "APPROVED", "reviewNotes": "All good", "adminId": 7},
    )
    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "Application approved successfully"
    assert body["data"]["status"] == "APPROVED"
    assert body["data"]["approvedAt"] is not None
    assert body["data"]["reviewNotes"] == "All good"

    assert len(sent_emails) == 1
    assert sent_emails[0]["To"] == citizen.email
    assert sent_emails[0]["Subject"] == "License Application Approved - car"

    actions = crud.admin_action.get_by_application_id(db_session, application_id=application.id)
    assert [(a.admin_id, a.action_type) for a in actions] == [(7, "APPROVED")]


def test_reject_sets_rejected_at(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    body = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": application.id, "action": "REJECTED"},
    ).json()
    assert body["message"] == "Application rejected successfully"
    assert body["data"]["rejectedAt"] is not None
    assert body["data"]["approvedAt"] is None


def test_review_is_final(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen(), status=ApplicationStatus.APPROVED.value)
    response = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": application.id, "action": "REJECTED"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Application already APPROVED"


def test_review_validates_action(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    response = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": application.id, "action": "MAYBE"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == 'Invalid action. Must be "APPROVED" or "REJECTED"'


def test_review_unknown_application(client) -> None:
    response = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": "LIC-NOPE", "action": "APPROVED"},
    )
    assert response.status_code == 404


def test_conditional_review_has_one_winner(db_session, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    first = crud.license_application.review(db_session, application_id=application.id, action="APPROVED")
    second = crud.license_application.review(db_session, application_id=application.id, action="REJECTED")
    assert first is not None and first.status == "APPROVED"
    assert second is None


def test_batch_review_skips_terminal_applications(client, db_session, make_citizen, make_application, sent_emails) -> None:
    citizen = make_citizen()
    pending = [make_application(citizen) for _ in range(2)]
    done = make_application(citizen, status=ApplicationStatus.REJECTED.value)

    response = client.patch(
        "/api/admin/applications/approve",
        json={
            "applicationIds": [a.id for a in pending] + [done.id, "LIC-MISSING"],
            "action": "APPROVED",
            "adminId": 3,
        },
    )
    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "2 applications approved successfully"
    assert sorted(item["id"] for item in body["data"]) == sorted(a.id for a in pending)
    assert body["emailResults"] == {"sent": 2, "failed": 0}
    assert len(sent_emails) == 2

    db_session.refresh(done)
    assert done.status == ApplicationStatus.REJECTED.value


def test_batch_review_counts_missing_emails_as_failed(client, make_citizen, make_application) -> None:
    citizen = make_citizen()
    application = make_application(citizen, personal_info={"nationalId": citizen.national_id})
    body = client.patch(
        "/api/admin/applications/approve",
        json={"applicationIds": [application.id], "action": "REJECTED"},
    ).json()
    assert body["emailResults"] == {"sent": 0, "failed": 1}


def test_batch_review_requires_id_list(client) -> None:
    response = client.patch(
        "/api/admin/applications/approve",
        json={"applicationIds": "LIC-1", "action": "APPROVED"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Application IDs array is required"


def test_mail_disabled_does_not_fail_review(client, make_citizen, make_application, portal_settings, sent_emails) -> None:
    portal_settings.MAIL_ENABLED = False
    application = make_application(make_citizen())
    response = client.post(
        "/api/admin/applications/approve",
        json={"applicationId": application.id, "action": "APPROVED"},
    )
    assert response.status_code == 200
    assert sent_emails == []
