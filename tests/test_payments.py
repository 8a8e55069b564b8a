from __future__ import annotations

import asyncio

import pytest

from license_portal import crud
from license_portal.services.payment_service import (
    PaymentDeclined,
    parse_amount,
    process_bank_transfer,
    process_card_payment,
)

CARD = {
    "cardNumber": "4242 4242 4242 4242",
    "expiryDate": "12/30",
    "cvv": "123",
    "cardholderName": "Aline Niyonzima",
}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (50000, 50000),
        (12.6, 13),
        ("50,000 BIF", 50000),
        ("  7500 ", 7500),
        (2.5, 3),
        ("2.5", 3),
        ("50,000 BIF - fee", 50000),
        ("1.2.3", 1),
    ],
)
def test_parse_amount_accepts_numbers_and_formatted_strings(raw, expected) -> None:
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "0", "-5", "--5", -1, float("nan"), float("inf"), 10**400])
def test_parse_amount_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValueError, match="Invalid amount format"):
        parse_amount(raw)


@pytest.mark.parametrize("raw", [True, None, [1], {"a": 1}])
def test_parse_amount_rejects_other_types(raw) -> None:
    with pytest.raises(ValueError, match="Amount must be a number or string"):
        parse_amount(raw)


def test_card_processor_fee_and_decline(portal_settings) -> None:
    result = asyncio.run(process_card_payment(10000, CARD))
    assert result["processingFee"] == 290
    assert result["provider"] == "Visa"
    assert result["transactionId"].startswith("TXN_")

    with pytest.raises(PaymentDeclined, match="Card declined by bank"):
        asyncio.run(process_card_payment(10000, {**CARD, "cardNumber": "4000 0000 0000 0002"}))


@pytest.mark.parametrize(("amount", "fee"), [(500, 15), (2500, 73), (10500, 305)])
def test_card_fee_rounds_halves_up(portal_settings, amount, fee) -> None:
    assert asyncio.run(process_card_payment(amount, CARD))["processingFee"] == fee


def test_bank_processor_uses_bank_name_as_provider(portal_settings) -> None:
    result = asyncio.run(
        process_bank_transfer(5000, {"accountNumber": "12345", "bankName": "BCB", "accountHolder": "Eric"})
    )
    assert result["provider"] == "BCB"
    assert result["processingFee"] == 0
    assert result["providerTransactionId"].startswith("BCB_")


def test_card_payment_is_recorded(client, db_session, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    response = client.post(
        "/api/applications/payment",
        json={"applicationId": application.id, "amount": "10,000 FBU", "method": "card", "details": CARD},
    )
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["amount"] == 10000
    assert body["currency"] == "FBU"
    assert body["status"] == "completed"
    assert body["paymentRecord"]["transaction_id"] == body["transactionId"]

    payments = crud.payment.get_by_application_id(db_session, application_id=application.id)
    assert len(payments) == 1
    assert payments[0].processing_fee == 290
    assert payments[0].method == "card"


def test_mobile_payment_flat_fee(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    body = client.post(
        "/api/applications/payment",
        json={
            "applicationId": application.id,
            "amount": 20000,
            "method": "mobile",
            "details": {"phoneNumber": "+257 79 123 456", "pin": "1234"},
        },
    ).json()
    assert body["processingFee"] == 100
    assert body["provider"] == "MTN Mobile Money"


def test_declined_payment_records_failure(client, db_session, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    response = client.post(
        "/api/applications/payment",
        json={
            "applicationId": application.id,
            "amount": 20000,
            "method": "mobile",
            "details": {"phoneNumber": "+257 79 123 456", "pin": "0000"},
        },
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Insufficient balance in mobile money account"

    payments = crud.payment.get_by_application_id(db_session, application_id=application.id)
    assert [p.status for p in payments] == ["failed"]
    assert payments[0].transaction_id.startswith("FAILED_")
    assert payments[0].failure_reason == "Insufficient balance in mobile money account"


def test_payment_leaves_application_status_alone(client, db_session, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    client.post(
        "/api/applications/payment",
        json={"applicationId": application.id, "amount": 5000, "method": "card", "details": CARD},
    )
    db_session.refresh(application)
    assert application.status == "PENDING"


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"amount": "abc", "method": "card", "details": CARD}, "Invalid amount format: Invalid amount format"),
        ({"amount": 0, "method": "card", "details": CARD}, "Missing required payment information"),
        ({"amount": 100, "method": "cash", "details": {}}, "Invalid payment method"),
        ({"amount": 100, "method": "card", "details": "x"}, "Invalid payment details"),
    ],
)
def test_payment_validation(client, payload, message) -> None:
    response = client.post("/api/applications/payment", json={"applicationId": "LIC-1", **payload})
    assert response.status_code == 400
    assert response.json()["error"] == message


BANK = {"accountNumber": "12345678", "bankName": "BCB", "accountHolder": "Eric Ndayishimiye"}
MOBILE = {"phoneNumber": "+257 79 123 456", "pin": "1234"}


@pytest.mark.parametrize(
    ("method", "details", "message"),
    [
        ("card", {**CARD, "cardNumber": "4000000000000002"}, "Card declined by bank"),
        ("card", {**CARD, "cardNumber": "4000 0000 0000 0069"}, "Card declined by bank"),
        ("mobile", {**MOBILE, "pin": "0000"}, "Insufficient balance in mobile money account"),
        ("bank", {**BANK, "accountNumber": "0000000000"}, "Invalid account number"),
    ],
)
def test_declined_methods_record_failed_rows(
    client, db_session, make_citizen, make_application, method, details, message
) -> None:
    application = make_application(make_citizen())
    response = client.post(
        "/api/applications/payment",
        json={"applicationId": application.id, "amount": "15,000 FBU", "method": method, "details": details},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": message}

    payments = crud.payment.get_by_application_id(db_session, application_id=application.id)
    assert len(payments) == 1
    assert payments[0].status == "failed"
    assert payments[0].method == method
    assert payments[0].amount == 15000
    assert payments[0].failure_reason == message


def test_retry_after_decline_adds_a_row(client, db_session, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    payment = {"applicationId": application.id, "amount": 15000, "method": "bank"}

    declined = client.post(
        "/api/applications/payment", json={**payment, "details": {**BANK, "accountNumber": "0000000000"}}
    )
    assert declined.status_code == 400

    retried = client.post("/api/applications/payment", json={**payment, "details": BANK})
    assert retried.status_code == 200

    payments = crud.payment.get_by_application_id(db_session, application_id=application.id)
    assert sorted(p.status for p in payments) == ["completed", "failed"]
    completed = next(p for p in payments if p.status == "completed")
    assert completed.transaction_id == retried.json()["transactionId"]


def test_infinite_amount_is_rejected(client, make_citizen, make_application) -> None:
    application = make_application(make_citizen())
    response = client.post(
        "/api/applications/payment",
        content=f'{{"applicationId": "{application.id}", "amount": Infinity, "method": "card", "details": {{}}}}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid amount format: Invalid amount format"
