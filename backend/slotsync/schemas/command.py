"""
Result shapes returned across the Command API.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from slotsync.core.errors import ErrorKind


class CommandResult(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "CommandResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: Optional[str] = None) -> "CommandResult":
        return cls(success=False, error=kind, message=message)


class DataSource(str, Enum):
    REMOTE = "remote"
    CACHE = "cache"
    NONE = "none"


class BootstrapResult(BaseModel):
    source: DataSource
    error: Optional[ErrorKind] = None

    @property
    def has_data(self) -> bool:
        return self.source != DataSource.NONE
