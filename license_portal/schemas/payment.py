from typing import Any, Optional

from pydantic import BaseModel


class PaymentRequest(BaseModel):
    """
    Payment attempt for an application. ``amount`` may be a number or a
    formatted string such as ``"5,000 FBU"``; ``details`` depends on the method.
    """
    applicationId: Optional[str] = None
    amount: Any = None
    method: Optional[str] = None
    details: Any = None
