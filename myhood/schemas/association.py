import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from myhood.schemas.common import Address, Name, Region, reject_null


class AssociationCreate(BaseModel):
    id: Optional[uuid.UUID] = None
    name: Name = Field(..., examples=["Associação Vila Nova"])
    neighborhood: Name
    country: Region
    state: Region
    address: Address
    identity: Optional[str] = Field(default=None, max_length=80)


class AssociationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[Name] = None
    neighborhood: Optional[Name] = None
    country: Optional[Region] = None
    state: Optional[Region] = None
    address: Optional[Address] = None
    identity: Optional[str] = Field(default=None, max_length=80)

    @field_validator("name", "neighborhood", "country", "state", "address", mode="before")
    @classmethod
    def required_not_null(cls, value):
        return reject_null(value)


class AssociationResponse(BaseModel):
    id: uuid.UUID
    name: str
    neighborhood: str
    country: str
    state: str
    address: str
    identity: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
