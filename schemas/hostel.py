from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, ConfigDict, Field, field_validator, model_validator

from models.hostel import PRICE_TYPES, ROOM_TYPES
from schemas import RequestSchema, normalize_amenities

PriceType = Literal[PRICE_TYPES]
RoomType = Literal[ROOM_TYPES]
Amenities = Annotated[List[str], AfterValidator(normalize_amenities)]


class HostelCreate(RequestSchema):
    location_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    price: int = Field(ge=0)
    price_type: PriceType = "semester"
    room_type: RoomType
    images: List[str] = Field(default_factory=list)
    amenities: Amenities = Field(default_factory=list)
    availability: bool = True


class HostelUpdate(RequestSchema):
    location_id: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    price_type: Optional[PriceType] = None
    room_type: Optional[RoomType] = None
    images: Optional[List[str]] = None
    amenities: Optional[Amenities] = None
    availability: Optional[bool] = None

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self


class HostelFilters(RequestSchema):
    # unknown query parameters are ignored rather than rejected
    model_config = ConfigDict(extra="ignore")

    school_id: Optional[str] = None
    location_id: Optional[str] = None
    price_min: Optional[int] = Field(default=None, ge=0)
    price_max: Optional[int] = Field(default=None, ge=0)
    room_type: Optional[RoomType] = None
    amenities: List[str] = Field(default_factory=list)

    @field_validator("amenities", mode="before")
    @classmethod
    def _split(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return normalize_amenities(value)

    @model_validator(mode="after")
    def _range(self):
        if self.price_min is not None and self.price_max is not None and self.price_min > self.price_max:
            raise ValueError("priceMin must not exceed priceMax")
        return self
