"""
Pydantic schemas for change events delivered on the live channel.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, model_validator


class ChangeType(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class EntityType(str, Enum):
    CUSTOMER = "customer"
    BOOKING = "booking"


class ChannelStatus(str, Enum):
    SUBSCRIBED = "subscribed"
    CLOSED = "closed"
    ERRORED = "errored"


class ChangeEvent(BaseModel):
    """
    One row mutation. `record` holds the new row for insert/update;
    delete carries only `old_id`.
    """

    type: ChangeType
    entity: EntityType
    record: Optional[dict[str, Any]] = None
    old_id: Optional[str] = None

    model_config = {"coerce_numbers_to_str": True}

    @model_validator(mode="after")
    def _check_payload(self) -> "ChangeEvent":
        if self.type == ChangeType.DELETE:
            if self.old_id is None:
                raise ValueError("delete events need old_id")
        elif self.record is None:
            raise ValueError(f"{self.type.value} events need a record")
        return self
