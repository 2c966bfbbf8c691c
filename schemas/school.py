from decimal import Decimal
from typing import Optional

from pydantic import Field

from schemas import RequestSchema


class SchoolCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=120)
    state: str = Field(min_length=1, max_length=120)


class LocationCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=200)
    latitude: Optional[Decimal] = Field(default=None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(default=None, ge=-180, le=180)
