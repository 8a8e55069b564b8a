from typing import Optional
from pydantic import BaseModel


class TokenPayload(BaseModel):
    """
    Schema for JWT token payload.
    """
    sub: Optional[str] = None
    exp: Optional[int] = None
