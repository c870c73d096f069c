"""
Pydantic schemas for customer commands.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Field is required")
    return value


class CustomerCreate(BaseModel):
    name: str = Field(..., max_length=255)
    mobile: str = Field(..., max_length=32)
    city: str = Field(..., max_length=255)

    @field_validator("name", "mobile", "city")
    @classmethod
    def _required(cls, value: str) -> str:
        return _strip_required(value)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    mobile: Optional[str] = Field(None, max_length=32)
    city: Optional[str] = Field(None, max_length=255)

    @field_validator("name", "mobile", "city")
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _strip_required(value)

    def patch(self) -> dict:
        return self.model_dump(exclude_none=True)
