from typing import Any, Dict, Optional

from fastapi import status


class PortalError(Exception):
    """
    An error that is rendered to the client as
    ``{"success": false, <key>: message, **extra}``.

    Most handlers report failures under ``error``; the auth handlers use
    ``message`` to match what their clients read.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        key: str = "error",
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.key = key
        self.extra = extra or {}

    def to_content(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {"success": False, self.key: self.message}
        content.update(self.extra)
        return content


def bad_request(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_400_BAD_REQUEST, message, **kwargs)


def unauthorized(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_401_UNAUTHORIZED, message, **kwargs)


def not_found(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_404_NOT_FOUND, message, **kwargs)


def conflict(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_409_CONFLICT, message, **kwargs)


def too_many_requests(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_429_TOO_MANY_REQUESTS, message, **kwargs)


def server_error(message: str, **kwargs: Any) -> PortalError:
    return PortalError(status.HTTP_500_INTERNAL_SERVER_ERROR, message, **kwargs)
