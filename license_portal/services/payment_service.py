"""
Mock payment processors for card, mobile money and bank transfer.

Each processor validates its method-specific details, waits to imitate
provider latency, and either declines with a PaymentDeclined carrying the
reason shown to the citizen or returns the processing result.
Declines are deterministic so they can be exercised with test data:

* card numbers 4000000000000002 and 4000000000000069 are declined
* mobile PIN 0000 has insufficient balance
* bank account 0000000000 is invalid
"""
import asyncio
import logging
import math
import re
from datetime import datetime
from typing import Any, Dict

from license_portal.core.config import settings
from license_portal.models.license import PaymentMethod
from license_portal.services.license_generator import epoch_millis, random_base36

logger = logging.getLogger(__name__)

DECLINED_CARDS = {"4000000000000002", "4000000000000069"}
EMPTY_MOBILE_PIN = "0000"
INVALID_BANK_ACCOUNT = "0000000000"

CARD_FEE_RATE = 0.029
MOBILE_FEE = 100

LEADING_NUMBER = re.compile(r"-?\d*\.?\d+")

# Simulated provider latency in seconds
PROCESSING_DELAYS = {
    "card": 2.0,
    "mobile": 1.5,
    "bank": 3.0,
}


class PaymentDeclined(Exception):
    """A payment the mock provider refused. The message is user-facing."""


def js_round(value: float) -> int:
    """Round halves up, the way browser-side totals are rounded."""
    return int(math.floor(value + 0.5))


def parse_amount(amount: Any) -> int:
    """
    Normalize an amount to an integer in the smallest currency unit.

    Numbers are taken as they are. Strings such as ``"50,000 BIF"`` keep only
    digits, dots and hyphens, and the leading number of what remains is used.
    Either way the result must be finite and positive.
    Raises ValueError with the reason.
    """
    if isinstance(amount, bool):
        raise ValueError("Amount must be a number or string")
    if isinstance(amount, (int, float)):
        try:
            value = float(amount)
        except OverflowError:
            raise ValueError("Invalid amount format")
        if not math.isfinite(value) or value < 0:
            raise ValueError("Invalid amount format")
        return js_round(value)
    if isinstance(amount, str):
        cleaned = re.sub(r"[^\d.-]", "", amount)
        match = LEADING_NUMBER.match(cleaned)
        if match is None:
            raise ValueError("Invalid amount format")
        parsed = float(match.group())
        if parsed <= 0:
            raise ValueError("Invalid amount format")
        return js_round(parsed)
    raise ValueError("Amount must be a number or string")


def generate_transaction_id(prefix: str, length: int = 9) -> str:
    return f"{prefix}_{epoch_millis()}_{random_base36(length)}"


async def _simulate_latency(method: str) -> None:
    if settings.SIMULATE_PAYMENT_LATENCY:
        await asyncio.sleep(PROCESSING_DELAYS[method])


def _result(method: str, amount: int, provider: str, fee: int, prefix: str, provider_prefix: str) -> Dict[str, Any]:
    return {
        "transactionId": generate_transaction_id(prefix),
        "providerTransactionId": generate_transaction_id(provider_prefix, 6),
        "status": "completed",
        "amount": amount,
        "method": method,
        "provider": provider,
        "processingFee": fee,
        "timestamp": datetime.utcnow().isoformat(),
    }


async def process_card_payment(amount: int, details: Dict[str, Any]) -> Dict[str, Any]:
    await _simulate_latency("card")

    required = ("cardNumber", "expiryDate", "cvv", "cardholderName")
    if not all(details.get(field) for field in required):
        raise PaymentDeclined("Invalid card details")

    card_number = re.sub(r"\s", "", str(details["cardNumber"]))
    if card_number in DECLINED_CARDS:
        logger.warning(f"Card declined: ****{card_number[-4:]}")
        raise PaymentDeclined("Card declined by bank")

    return _result("card", amount, "Visa", js_round(amount * CARD_FEE_RATE), "TXN", "VISA")


async def process_mobile_payment(amount: int, details: Dict[str, Any]) -> Dict[str, Any]:
    await _simulate_latency("mobile")

    if not details.get("phoneNumber") or not details.get("pin"):
        raise PaymentDeclined("Invalid mobile payment details")

    if str(details["pin"]) == EMPTY_MOBILE_PIN:
        raise PaymentDeclined("Insufficient balance in mobile money account")

    return _result("mobile", amount, "MTN Mobile Money", MOBILE_FEE, "MOB", "MTN")


async def process_bank_transfer(amount: int, details: Dict[str, Any]) -> Dict[str, Any]:
    await _simulate_latency("bank")

    if not details.get("accountNumber") or not details.get("bankName") or not details.get("accountHolder"):
        raise PaymentDeclined("Invalid bank transfer details")

    if str(details["accountNumber"]) == INVALID_BANK_ACCOUNT:
        raise PaymentDeclined("Invalid account number")

    bank_name = str(details["bankName"])
    return _result("bank", amount, bank_name, 0, "BANK", bank_name.upper())


PROCESSORS = {
    PaymentMethod.CARD: process_card_payment,
    PaymentMethod.MOBILE: process_mobile_payment,
    PaymentMethod.BANK: process_bank_transfer,
}
