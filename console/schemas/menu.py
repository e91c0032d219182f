"""Menu catalog API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MenuItemCreate(BaseModel):
    """Payload for creating a catalog item."""

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    is_active: bool = True


class MenuItemRead(BaseModel):
    """Serialized catalog item."""

    id: int
    name: str
    category: str
    price: Decimal
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
