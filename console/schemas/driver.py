"""Driver API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DriverCreate(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class DriverUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None


class DriverStatusUpdate(BaseModel):
    """Operator override; ``busy`` follows the delivery load and is not accepted."""

    status: Literal["available", "offline"]


class DriverRead(BaseModel):
    """Serialized driver with its effective status."""

    id: int
    name: str
    phone: str
    status: str = Field(validation_alias="effective_status")
    manually_offline: bool
    active_deliveries: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
