from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carservice.utils.validation_helpers import require_text


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_type: str = Field(alias="serviceType")
    vehicle_type: str = Field(alias="vehicleType")
    vehicle_model: str = Field(alias="vehicleModel")
    preferred_date: date = Field(alias="preferredDate")
    preferred_time: str = Field(alias="preferredTime")
    description: Optional[str] = ""

    @field_validator("service_type", "vehicle_type", "vehicle_model", "preferred_time")
    @classmethod
    def check_not_blank(cls, value):
        return require_text(value)


class BookingStatusUpdate(BaseModel):
    status: str


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_type: str = Field(serialization_alias="serviceType")
    vehicle_type: str = Field(serialization_alias="vehicleType")
    vehicle_model: str = Field(serialization_alias="vehicleModel")
    preferred_date: date = Field(serialization_alias="preferredDate")
    preferred_time: str = Field(serialization_alias="preferredTime")
    description: str
    status: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class BookingStats(BaseModel):
    total: int
    confirmed: int
    pending: int
    in_progress: int = Field(serialization_alias="inProgress")
    completed: int
    cancelled: int
