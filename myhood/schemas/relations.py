import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MemberLinkRequest(BaseModel):
    user_id: uuid.UUID


class AdminAssignRequest(BaseModel):
    user_id: uuid.UUID


class TreasurerAssignRequest(BaseModel):
    user_id: uuid.UUID
    start_date: date = Field(..., examples=["2024-01-01"])
    end_date: Optional[date] = None


class TreasurerCloseRequest(BaseModel):
    end_date: date


class MembershipResponse(BaseModel):
    user_id: uuid.UUID
    association_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminResponse(MembershipResponse):
    pass


class TreasurerTermResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    association_id: uuid.UUID
    start_date: date
    end_date: Optional[date]
    is_open: bool

    model_config = ConfigDict(from_attributes=True)
