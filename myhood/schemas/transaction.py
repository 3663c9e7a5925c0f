import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionCreate(BaseModel):
    details: str = Field(..., min_length=1, examples=["Dues"])
    # 수입은 양수, 지출은 음수. 범위/자릿수 검증은 서비스에서 수행
    amount: Decimal = Field(..., allow_inf_nan=False, examples=["50.00"])
    reference_date: date = Field(..., examples=["2024-01-01"])


class TransactionResponse(BaseModel):
    id: uuid.UUID
    association_id: uuid.UUID
    creator_id: uuid.UUID
    details: str
    amount: Decimal
    reference_date: date
    deleted: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BalanceResponse(BaseModel):
    association_id: uuid.UUID
    as_of: Optional[date]
    balance: Decimal
