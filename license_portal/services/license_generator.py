import base64
import io
import json
import random
import string
import time
from datetime import date
from typing import Any, Dict, Optional

import qrcode
from PIL import Image

BASE36_ALPHABET = string.digits + string.ascii_lowercase

# Years a license stays valid, by license type
LICENSE_VALIDITY_YEARS = {
    "car": 5,
    "motorcycle": 5,
    "commercial": 3,
}
DEFAULT_VALIDITY_YEARS = 5

QR_IMAGE_SIZE = 200
QR_BORDER = 2


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(random.choice(BASE36_ALPHABET) for _ in range(length))


def epoch_millis() -> int:
    return int(time.time() * 1000)


def generate_application_id() -> str:
    """Generate an application id like ``LIC-LZ1K2J3A-4F9QX``"""
    return f"LIC-{to_base36(epoch_millis())}-{random_base36(5)}".upper()


def generate_derived_application_id(national_id: str) -> str:
    """
    Application id derived from a national ID: the last five digits are
    replaced with random ones. Shorter IDs get five random digits appended.
    """
    suffix = "".join(random.choice(string.digits) for _ in range(5))
    if len(national_id) < 5:
        return f"{national_id}{suffix}"
    return f"{national_id[:-5]}{suffix}"


def generate_license_number(license_type: Optional[str]) -> str:
    """Generate a license number like ``CAR-1718000000000-X7K2PQ``"""
    prefix = (license_type or "license").upper()
    return f"{prefix}-{epoch_millis()}-{random_base36(6).upper()}"


def calculate_expiry_date(license_type: Optional[str], issued: date) -> date:
    """
    Issue date plus the validity term for the license type.
    A 29 February anniversary that does not exist falls back to 28 February.
    """
    years = LICENSE_VALIDITY_YEARS.get((license_type or "").lower(), DEFAULT_VALIDITY_YEARS)
    try:
        return issued.replace(year=issued.year + years)
    except ValueError:
        return issued.replace(year=issued.year + years, day=28)


def generate_license_qr_code(content: Dict[str, Any]) -> str:
    """
    Encode ``content`` as JSON into a 200x200 black-on-white PNG QR code and
    return it as a ``data:image/png;base64,...`` URL.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=QR_BORDER,
    )
    qr.add_data(json.dumps(content))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white").get_image()
    img = img.convert("RGB").resize((QR_IMAGE_SIZE, QR_IMAGE_SIZE), Image.NEAREST)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    img_str = base64.b64encode(buffer.getvalue()).decode("utf-8")

    return f"data:image/png;base64,{img_str}"
