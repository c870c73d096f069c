"""
Request dependencies and command result helpers.
"""

from fastapi import Request, Response, status

from slotsync.core.errors import ErrorKind
from slotsync.schemas.command import CommandResult
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

_ERROR_STATUS = {
    ErrorKind.OFFLINE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.VALIDATION: 422,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NETWORK: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SERVER: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_coordinator(request: Request) -> SyncCoordinator:
    return request.app.state.coordinator


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def command_response(
    result: CommandResult,
    response: Response,
    success_status: int = status.HTTP_200_OK,
) -> CommandResult:
    """Set the HTTP status from the result; the body is always the CommandResult."""
    if result.success:
        response.status_code = success_status
    else:
        response.status_code = _ERROR_STATUS[result.error]
    return result
