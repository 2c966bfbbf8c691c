from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, Field, model_validator

from models.booking import BOOKING_STATUSES
from schemas import RequestSchema

BookingStatus = Literal[BOOKING_STATUSES]


def _not_in_past(value):
    if value is not None and value < date.today():
        raise ValueError("preferredDate cannot be in the past")
    return value


PreferredDate = Annotated[date, AfterValidator(_not_in_past)]


class BookingCreate(RequestSchema):
    hostel_id: str = Field(min_length=1)
    preferred_date: PreferredDate
    preferred_time: str = Field(min_length=1, max_length=20)
    message: Optional[str] = Field(default=None, max_length=2000)


class BookingPatch(RequestSchema):
    status: Optional[BookingStatus] = None
    preferred_date: Optional[PreferredDate] = None
    preferred_time: Optional[str] = Field(default=None, min_length=1, max_length=20)
    message: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("status cannot be null")
        return self

    @property
    def reschedule_fields(self) -> dict:
        return {
            name: getattr(self, name)
            for name in ("preferred_date", "preferred_time", "message")
            if name in self.model_fields_set
        }


class BookingListQuery(RequestSchema):
    status: Optional[BookingStatus] = None
