from typing import Any, Dict, Optional

from pydantic import BaseModel


class QRGenerateRequest(BaseModel):
    applicationId: Optional[str] = None
    personalInfo: Optional[Dict[str, Any]] = None


class QRVerifyRequest(BaseModel):
    """
    Raw content scanned from a license QR code, as a JSON string or object.
    """
    qrContent: Any = None
