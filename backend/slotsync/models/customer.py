"""
Customer entity.

Counters are adjusted only by the statistics maintainer and are re-synced from
the remote or cached snapshot on reload. They are never recomputed from local
bookings, since the local copy may hold partial history.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Customer(BaseModel):
    id: str
    name: str
    mobile: str = ""
    city: str = ""
    total_bookings: int = Field(default=0, ge=0)
    total_cancellations: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True, "coerce_numbers_to_str": True}

    @field_validator("total_bookings", "total_cancellations", mode="before")
    @classmethod
    def _missing_counter_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("mobile", "city", mode="before")
    @classmethod
    def _missing_text_is_empty(cls, value):
        return "" if value is None else value

    def matches(self, query: str) -> bool:
        """Case-insensitive name/city match, substring match on mobile."""
        needle = query.strip().lower()
        if not needle:
            return True
        return (
            needle in self.name.lower()
            or needle in self.mobile
            or needle in self.city.lower()
        )

    def __repr__(self) -> str:
        return (
            f"<Customer(id={self.id}, name={self.name}, "
            f"bookings={self.total_bookings}, cancellations={self.total_cancellations})>"
        )
