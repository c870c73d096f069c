"""
Pydantic schemas for booking commands.
"""

from datetime import date as Date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from slotsync.models.slot import parse_time, time_sort_key


class BookingCreate(BaseModel):
    customer_id: str = Field(..., min_length=1)
    customer_name: Optional[str] = Field(None, max_length=255)
    date: Date
    slots: list[str] = Field(..., min_length=1, max_length=24)

    model_config = {"coerce_numbers_to_str": True}

    @field_validator("slots")
    @classmethod
    def _check_slots(cls, value: list[str]) -> list[str]:
        for time in value:
            parse_time(time)
        if len(set(value)) != len(value):
            raise ValueError("Duplicate time slots")
        return sorted(value, key=time_sort_key)


class CancelSlotsRequest(BaseModel):
    slots: list[str] = Field(..., min_length=1, max_length=24)

    @field_validator("slots")
    @classmethod
    def _check_slots(cls, value: list[str]) -> list[str]:
        for time in value:
            parse_time(time)
        return value
