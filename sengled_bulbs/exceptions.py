"""Errors raised by the Sengled cloud client and light handlers."""

from typing import Any, Dict, Optional


class SengledError(Exception):
    """Base class for Sengled errors."""


class AuthError(SengledError):
    """The cloud rejected the username or password."""


class SessionExpiredError(SengledError):
    """The cloud session is no longer valid."""


class RemoteWriteError(SengledError):
    """The cloud answered a request with a non-success code."""

    def __init__(
        self, message: str, code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None
    ) -> None:
        self.code = code
        self.payload = payload
        text = f"{message} (ret={code})" if code is not None else message
        super().__init__(text)


class NotFoundError(SengledError):
    """The device is no longer part of the cloud roster."""

    def __init__(self, device_id: str) -> None:
        self.device_id = device_id
        super().__init__(f"{device_id}: device not found")
