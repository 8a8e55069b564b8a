from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from license_portal import crud
from license_portal.api.v1.endpoints.auth import normalize_phone_number
from license_portal.models.auth_session import AuthSessionStatus

SIGNUP = {
    "fullName": "Aline Niyonzima",
    "email": "  Aline@Example.com ",
    "nationalId": "1234567890123",
    "phoneNumber": "+257 79 123 456",
    "password": "secret123",
}


def _signup(client, **overrides):
    return client.post("/api/auth/signup", json={**SIGNUP, **overrides})


def test_signup_creates_user_citizen_and_permissions(client, db_session) -> None:
    response = _signup(client)
    body = response.json()
    assert response.status_code == 201
    assert body["message"] == "User created successfully!"
    assert body["user"]["email"] == "aline@example.com"
    assert body["session"]["token_type"] == "bearer"

    citizen = crud.citizen.get_by_national_id(db_session, national_id="1234567890123")
    assert citizen.status == "ACTIVE"
    assert citizen.address == "Burundi, Bujumbura"

    permissions = crud.user_permission.get_by_citizen(db_session, citizen_id=citizen.id)
    assert permissions.is_verified is False
    assert not any(crud.user_permission.to_flags(permissions).values())


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"email": "not-an-email"}, "Please enter a valid email address"),
        ({"nationalId": "12345"}, "National ID must be 13-16 digits"),
        ({"phoneNumber": "79123456"}, "Phone number must be in format +257 XX XXX XXX"),
        ({"password": "abc"}, "Password must be at least 6 characters long"),
        ({"fullName": ""}, "All fields are required"),
    ],
)
def test_signup_validation(client, overrides, message) -> None:
    response = _signup(client, **overrides)
    assert response.status_code == 400
    assert response.json()["error"] == message


def test_signup_conflicts(client, make_citizen) -> None:
    _signup(client)
    assert _signup(client).json()["error"] == "An account with this email already exists"
    assert _signup(client, email="other@example.com").json()["error"] == "User with this National ID already exists"
    assert _signup(client, email="other@example.com", nationalId="1234567890999").json()["error"] == (
        "User with this phone number already exists"
    )

    make_citizen(national_id="5555555555555")
    response = _signup(client, email="third@example.com", nationalId="5555555555555", phoneNumber="+257 70 000 001")
    assert response.status_code == 409
    assert response.json()["error"] == "Citizen with this National ID already exists"


def test_login_with_email_and_phone(client) -> None:
    _signup(client)
    by_email = client.post("/api/auth/login", json={"emailOrPhone": "ALINE@example.com", "password": "secret123"})
    assert by_email.status_code == 200
    assert by_email.json()["message"] == "Login successful"
    assert by_email.json()["profile"]["national_id"] == "1234567890123"

    by_phone = client.post("/api/auth/login", json={"emailOrPhone": "79123456", "password": "secret123"})
    assert by_phone.status_code == 200


def test_login_errors(client) -> None:
    _signup(client)
    assert client.post("/api/auth/login", json={"emailOrPhone": "x@example.com", "password": "p"}).status_code == 404
    assert client.post("/api/auth/login", json={"emailOrPhone": "71000000", "password": "p"}).json()["error"] == (
        "No account found with this phone number"
    )
    wrong = client.post("/api/auth/login", json={"emailOrPhone": "aline@example.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "Password incorrect. Please try again"
    assert client.post("/api/auth/login", json={}).status_code == 400


def test_login_locks_after_repeated_failures(client, portal_settings, monkeypatch) -> None:
    monkeypatch.setattr(portal_settings, "LOGIN_MAX_FAILED_ATTEMPTS", 2)
    _signup(client)
    for _ in range(2):
        client.post("/api/auth/login", json={"emailOrPhone": "aline@example.com", "password": "nope"})

    locked = client.post("/api/auth/login", json={"emailOrPhone": "aline@example.com", "password": "secret123"})
    assert locked.status_code == 429
    assert locked.json()["error"] == "Too many login attempts. Please wait a moment and try again"


def test_me_and_reset_password(client) -> None:
    token = _signup(client).json()["session"]["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.get("/api/auth/me", headers=headers).json()["user"]["email"] == "aline@example.com"
    assert client.get("/api/auth/me").status_code == 401

    assert client.post("/api/auth/reset-password", json={"password": "abc"}, headers=headers).status_code == 400
    reset = client.post("/api/auth/reset-password", json={"password": "newsecret"}, headers=headers)
    assert reset.json() == {"message": "Password updated successfully!"}

    login = client.post("/api/auth/login", json={"emailOrPhone": "aline@example.com", "password": "newsecret"})
    assert login.status_code == 200


def test_update_profile(client) -> None:
    user_id = _signup(client).json()["user"]["id"]
    _signup(client, email="taken@example.com", nationalId="9999999999999", phoneNumber="+257 71 111 111")

    body = client.post(
        "/api/auth/update-profile", json={"userId": user_id, "name": " Aline N. ", "email": "new@example.com"}
    ).json()
    assert body["data"] == {"id": user_id, "full_name": "Aline N.", "email": "new@example.com"}

    conflict = client.post(
        "/api/auth/update-profile", json={"userId": user_id, "name": "A", "email": "taken@example.com"}
    )
    assert conflict.status_code == 409
    assert client.post(
        "/api/auth/update-profile", json={"userId": 999, "name": "A", "email": "a@b.co"}
    ).status_code == 404


def test_logout(client) -> None:
    assert client.post("/api/auth/logout").json() == {"message": "Logged out successfully"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("79123456", "+257 79 123 456"),
        ("+25779123456", "+257 79 123 456"),
        ("+257 79 123 456", "+257 79 123 456"),
        ("123", "+257 123"),
    ],
)
def test_normalize_phone_number(raw, expected) -> None:
    assert normalize_phone_number(raw) == expected


def _initiate(client, citizen):
    body = client.post("/api/auth/initiate", json={"nationalId": citizen.national_id}).json()
    return body["transactionId"], body["otp"]


def test_otp_flow(client, db_session, make_citizen) -> None:
    citizen = make_citizen()
    response = client.post("/api/auth/initiate", json={"nationalId": citizen.national_id})
    body = response.json()
    assert body["message"] == f"OTP sent to {citizen.phone_number}"
    assert body["transactionId"].startswith("txn_")
    assert len(body["otp"]) == 6

    verified = client.post(
        "/api/auth/verifyotp",
        json={"nationalId": citizen.national_id, "otp": body["otp"], "transactionId": body["transactionId"]},
    ).json()
    assert verified["message"] == "Authentication successful"
    assert verified["citizenData"]["nationalId"] == citizen.national_id
    assert verified["citizenData"]["dateOfBirth"] == "1990-05-17"

    reused = client.post(
        "/api/auth/verifyotp",
        json={"nationalId": citizen.national_id, "otp": body["otp"], "transactionId": body["transactionId"]},
    )
    assert reused.status_code == 400
    assert reused.json()["message"] == "Invalid or expired session. Please try again."


def test_otp_initiate_by_email_and_inactive_citizen(client, make_citizen) -> None:
    citizen = make_citizen()
    assert client.post("/api/auth/initiate", json={"email": citizen.email}).status_code == 200

    suspended = make_citizen(status="SUSPENDED")
    response = client.post("/api/auth/initiate", json={"nationalId": suspended.national_id})
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Citizen not found with this national ID or email"}

    assert client.post("/api/auth/initiate", json={}).status_code == 400


def test_otp_attempts_run_out(client, db_session, make_citizen) -> None:
    citizen = make_citizen()
    transaction_id, otp = _initiate(client, citizen)
    wrong = "000000" if otp != "000000" else "111111"

    messages = [
        client.post(
            "/api/auth/verifyotp",
            json={"nationalId": citizen.national_id, "otp": wrong, "transactionId": transaction_id},
        ).json()["message"]
        for _ in range(3)
    ]
    assert messages == [
        "Invalid OTP. 2 attempts remaining.",
        "Invalid OTP. 1 attempts remaining.",
        "Too many failed attempts. Please try again later.",
    ]

    session = crud.auth_session.get_by_field(db_session, "transaction_id", transaction_id)
    assert session.status == AuthSessionStatus.FAILED.value


def test_otp_expires(client, db_session, make_citizen) -> None:
    citizen = make_citizen()
    transaction_id, otp = _initiate(client, citizen)
    session = crud.auth_session.get_pending(db_session, transaction_id=transaction_id)
    crud.auth_session.update(
        db_session, db_obj=session, obj_in={"otp_expires_at": datetime.utcnow() - timedelta(minutes=1)}
    )

    response = client.post(
        "/api/auth/verifyotp",
        json={"nationalId": citizen.national_id, "otp": otp, "transactionId": transaction_id},
    )
    assert response.json()["message"] == "OTP has expired. Please request a new one."
    db_session.refresh(session)
    assert session.status == AuthSessionStatus.EXPIRED.value


def test_permissive_otp_accepts_any_six_digits(client, make_citizen, portal_settings) -> None:
    portal_settings.PERMISSIVE_OTP = True
    citizen = make_citizen()
    transaction_id, otp = _initiate(client, citizen)
    wrong = "000000" if otp != "000000" else "111111"

    body = client.post(
        "/api/auth/verifyotp",
        json={"nationalId": citizen.national_id, "otp": wrong, "transactionId": transaction_id},
    ).json()
    assert body["success"] is True
