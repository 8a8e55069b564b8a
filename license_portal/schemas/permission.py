from typing import Any, Dict, Optional

from pydantic import BaseModel


class PermissionsRequest(BaseModel):
    """
    Data-sharing consent. ``permissions`` must carry all six boolean flags.
    """
    nationalId: Optional[str] = None
    email: Optional[str] = None
    permissions: Optional[Dict[str, Any]] = None
