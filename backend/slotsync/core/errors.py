"""
Error taxonomy shared by the remote client, the coordinator and the HTTP layer.

Services raise RemoteError with a classified kind. The command boundary turns
every failure into a CommandResult carrying the kind, so nothing raises past
the Command API.
"""

from enum import Enum
from typing import Optional

import httpx
from pydantic import ValidationError


class ErrorKind(str, Enum):
    OFFLINE = "offline"
    NETWORK = "network"
    AUTH = "auth"
    SERVER = "server"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class SyncError(Exception):
    """Base for classified failures."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value


class RemoteError(SyncError):
    """A failed call against the remote store."""

    def __init__(self, kind: ErrorKind, message: str = "", status_code: Optional[int] = None):
        super().__init__(kind, message)
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"<RemoteError(kind={self.kind.value}, status={self.status_code}, message={self.message!r})>"


class CommandRejected(SyncError):
    """A command refused locally before reaching the remote store."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.VALIDATION):
        super().__init__(kind, message)


def kind_for_status(status_code: int) -> ErrorKind:
    if status_code in (401, 403):
        return ErrorKind.AUTH
    if status_code >= 500:
        return ErrorKind.SERVER
    if 400 <= status_code < 500:
        return ErrorKind.VALIDATION
    return ErrorKind.UNKNOWN


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any exception raised during a sync operation onto an ErrorKind."""
    if isinstance(exc, SyncError):
        return exc.kind
    if isinstance(exc, ValidationError):
        return ErrorKind.VALIDATION
    if isinstance(exc, httpx.HTTPStatusError):
        return kind_for_status(exc.response.status_code)
    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError)):
        return ErrorKind.NETWORK

    message = str(exc)
    if "Failed to fetch" in message or "Network" in message:
        return ErrorKind.NETWORK
    if "JWT" in message:
        return ErrorKind.AUTH
    return ErrorKind.UNKNOWN
